# -*- coding: utf-8 -*-
"""
xlsxml 패키지

XLSX 템플릿의 ${TAG} 플레이스홀더 치환 도구

모듈:
- archive_session: 작업 사본 관리
- text_part_store: XML 파트 텍스트 조각 저장소
- substitutor: 플레이스홀더 치환
- package_writer: 패키지 저장
- xlsx: 라이브러리 진입점 (XLSx)
- check_output: 저장 결과 검증 (openpyxl)
"""

from .config import (
    MODE_ALL,
    MODE_SHARED_STRINGS,
    SHARED_STRINGS_PART,
    setup_logging,
)
from .errors import ArchiveError, ConfigError
from .models import Package, Fragment, PartEntry, CommitResult, SubstitutionMap
from .archive_session import ArchiveSession
from .text_part_store import TextPartStore, split_fragments
from .substitutor import PlaceholderSubstitutor, normalize_key
from .package_writer import PackageWriter
from .config_loader import (
    ConfigLoader,
    TemplateConfig,
    load_config,
    create_default_config,
)
from .xlsx import XLSx, fill_template

__version__ = '0.1.0'

__all__ = [
    # 설정
    'MODE_ALL',
    'MODE_SHARED_STRINGS',
    'SHARED_STRINGS_PART',
    'setup_logging',
    'ConfigLoader',
    'TemplateConfig',
    'load_config',
    'create_default_config',

    # 예외
    'ArchiveError',
    'ConfigError',

    # 데이터 모델
    'Package',
    'Fragment',
    'PartEntry',
    'CommitResult',
    'SubstitutionMap',

    # 구성 요소
    'ArchiveSession',
    'TextPartStore',
    'split_fragments',
    'PlaceholderSubstitutor',
    'normalize_key',
    'PackageWriter',

    # 진입점
    'XLSx',
    'fill_template',
]
