# -*- coding: utf-8 -*-
"""
YAML 설정 로더 유틸리티

치환 작업 설정(대상 파트, 옵션, 치환 값)을 YAML 파일에서 로드하고 저장합니다.

설정 예:
    mode: shared_strings
    treat_as_placeholders: true
    escape_values: false
    keep_working_copy: true
    values:
      USER: Ada
      DATE: 2024-01-01
"""

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_ENCODING, MODE_ALL, MODES
from .errors import ConfigError


@dataclass
class TemplateConfig:
    """치환 작업 설정"""
    # 대상 파트 선택: all, shared_strings
    mode: str = MODE_ALL

    # 명시한 파트만 편집 (mode보다 우선)
    parts: Optional[List[str]] = None

    # 키를 ${key} 형태로 정규화할지
    treat_as_placeholders: bool = True

    # 값을 XML 이스케이프할지 (&, <, >)
    escape_values: bool = False

    encoding: str = DEFAULT_ENCODING

    # 작업 사본 디렉토리 (None이면 시스템 임시 디렉토리)
    work_dir: Optional[str] = None

    # 다른 경로로 저장한 뒤 작업 사본 유지 여부
    keep_working_copy: bool = True

    # 치환 값 (순서 유지)
    values: Dict[str, str] = field(default_factory=dict)


class ConfigLoader:
    """YAML 설정 로더"""

    DEFAULT_CONFIG_NAME = "xlsxml_config.yaml"

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[TemplateConfig] = None

    def load(self, config_path: Optional[str] = None) -> TemplateConfig:
        """YAML 설정 파일 로드 (파일이 없으면 기본 설정)"""
        path = Path(config_path) if config_path else self.config_path

        if path and path.exists():
            with open(path, 'r', encoding='utf-8') as f:
                data = self._safe_load(f)
            self._config = self._parse_config(data)
        else:
            self._config = TemplateConfig()

        return self._config

    def load_from_string(self, yaml_string: str) -> TemplateConfig:
        """YAML 문자열에서 설정 로드"""
        data = self._safe_load(yaml_string)
        self._config = self._parse_config(data)
        return self._config

    def load_from_dict(self, data: Dict[str, Any]) -> TemplateConfig:
        """딕셔너리에서 설정 로드"""
        self._config = self._parse_config(data)
        return self._config

    @staticmethod
    def _safe_load(stream) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(stream) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML 파싱 실패: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("설정 최상위는 매핑이어야 합니다.")
        return data

    def _parse_config(self, data: Dict[str, Any]) -> TemplateConfig:
        """설정 데이터 파싱"""
        config = TemplateConfig()

        if 'mode' in data:
            mode = str(data['mode']).lower()
            if mode not in MODES:
                raise ConfigError(f"알 수 없는 mode: {data['mode']} (가능: {', '.join(MODES)})")
            config.mode = mode
        if data.get('parts') is not None:
            parts = data['parts']
            if isinstance(parts, str):
                parts = [parts]
            if not isinstance(parts, list):
                raise ConfigError("parts는 목록이어야 합니다.")
            config.parts = [str(p) for p in parts]
        if 'treat_as_placeholders' in data:
            config.treat_as_placeholders = self._parse_flag(data, 'treat_as_placeholders')
        if 'escape_values' in data:
            config.escape_values = self._parse_flag(data, 'escape_values')
        if 'encoding' in data:
            config.encoding = str(data['encoding'])
        if data.get('work_dir'):
            config.work_dir = str(data['work_dir'])
        if 'keep_working_copy' in data:
            config.keep_working_copy = self._parse_flag(data, 'keep_working_copy')

        values = data.get('values') or {}
        if not isinstance(values, dict):
            raise ConfigError("values는 매핑이어야 합니다.")
        config.values = {
            str(key): '' if value is None else str(value)
            for key, value in values.items()
        }

        return config

    @staticmethod
    def _parse_flag(data: Dict[str, Any], key: str) -> bool:
        """true/false 값 검사 (문자열 "false" 등은 거부)"""
        value = data[key]
        if not isinstance(value, bool):
            raise ConfigError(f"{key}는 true 또는 false여야 합니다: {value!r}")
        return value

    def save(self, config: TemplateConfig, path: Optional[str] = None) -> str:
        """설정을 YAML 파일로 저장"""
        save_path = Path(path) if path else self.config_path
        if not save_path:
            save_path = Path(self.DEFAULT_CONFIG_NAME)

        data = self._config_to_dict(config)

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

        return str(save_path)

    def _config_to_dict(self, config: TemplateConfig) -> Dict[str, Any]:
        """TemplateConfig를 딕셔너리로 변환"""
        result = {
            'mode': config.mode,
            'treat_as_placeholders': config.treat_as_placeholders,
            'escape_values': config.escape_values,
            'encoding': config.encoding,
            'keep_working_copy': config.keep_working_copy,
        }
        if config.parts:
            result['parts'] = list(config.parts)
        if config.work_dir:
            result['work_dir'] = config.work_dir
        result['values'] = dict(config.values)
        return result

    def to_yaml_string(self, config: TemplateConfig) -> str:
        """설정을 YAML 문자열로 변환"""
        data = self._config_to_dict(config)
        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

    @property
    def config(self) -> TemplateConfig:
        """현재 로드된 설정 반환"""
        if self._config is None:
            self._config = self.load()
        return self._config


def load_config(config_path: Optional[str] = None) -> TemplateConfig:
    """YAML 설정 파일 로드 (편의 함수)"""
    loader = ConfigLoader()
    return loader.load(config_path)


def create_default_config() -> TemplateConfig:
    """기본 설정 생성"""
    return TemplateConfig()
