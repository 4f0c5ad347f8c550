# -*- coding: utf-8 -*-
"""
프로젝트 설정 및 상수

작업 디렉토리, XLSX 파트 이름, 플레이스홀더 구분자, 로깅 설정을 관리합니다.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union


# ============================================================
# 작업 디렉토리
# ============================================================

def get_work_dir(work_dir: Optional[Union[str, Path]] = None) -> Path:
    """작업 사본을 만들 디렉토리 (None이면 시스템 임시 디렉토리)"""
    if work_dir:
        return Path(work_dir)
    return Path(tempfile.gettempdir())


# ============================================================
# XLSX 패키지 상수
# ============================================================

# 공유 문자열 테이블
SHARED_STRINGS_PART = 'xl/sharedStrings.xml'

# 편집 대상 파트 확장자
XML_SUFFIX = '.xml'

# 작업 사본 파일명 접미사
TEMP_SUFFIX = '.temp'

# 대상 파트 선택 모드
MODE_ALL = 'all'
MODE_SHARED_STRINGS = 'shared_strings'
MODES = (MODE_ALL, MODE_SHARED_STRINGS)

# XML 텍스트 인코딩
DEFAULT_ENCODING = 'utf-8'


# ============================================================
# 플레이스홀더 구분자
# ============================================================

class Placeholder:
    """플레이스홀더 구분자 상수"""
    OPEN = '${'
    CLOSE = '}'

    # 태그 구분자 (파트 분할 기준)
    TAG_OPEN = '<'


# ============================================================
# 로깅 설정
# ============================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """로깅 설정"""
    logger = logging.getLogger('xlsxml')

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger
