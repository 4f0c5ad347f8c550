# -*- coding: utf-8 -*-
"""
예외 정의

- ArchiveError: 유효하지 않은 패키지, 없는 파트, 세션 상태 오류, 저장 실패
- ConfigError: 잘못된 YAML 설정

파일 읽기/복사 실패는 내장 OSError(FileNotFoundError 등)를 그대로 전달합니다.
"""


class ArchiveError(Exception):
    """ZIP 패키지 처리 오류"""


class ConfigError(ValueError):
    """설정 파일 오류"""
