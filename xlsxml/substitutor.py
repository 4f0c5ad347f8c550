# -*- coding: utf-8 -*-
"""
플레이스홀더 치환 모듈

조각 텍스트에서 키를 찾아 값으로 바꿉니다 (대소문자 구분, 겹치지 않는 전역 치환).
조각 자체를 추가/삭제하지 않고 텍스트만 바꿉니다.

키 정규화 규칙:
- 길이가 1보다 크고 '${'로 시작하지 않으면 앞에 '${' 추가
- 그 뒤 길이가 1보다 크고 '}'로 끝나지 않으면 뒤에 '}' 추가
- 한 글자 키는 그대로 사용 ('A'는 '${A}'가 아니라 'A'를 치환)

일괄 치환:
- 모든 키를 원본 텍스트에 대해 한 번에 매칭 (같은 위치에서는 긴 키 우선)
- 치환된 값은 다시 검색하지 않음
  예: {"AA": "${BB}", "BB": "X"} 를 "${AA}${BB}"에 적용 -> "${BB}X"
  한 글자 키는 글자 그대로 매칭: {"A": "${B}", "B": "X"} -> "${${B}}${X}"
"""

import logging
import re
from typing import Dict, Iterable, Mapping, Optional

from .config import Placeholder
from .models import PartEntry

logger = logging.getLogger(__name__)


def normalize_key(key: str) -> str:
    """키를 ${key} 형태로 감싸기 (한 글자 키 제외)"""
    if len(key) > 1 and not key.startswith(Placeholder.OPEN):
        key = Placeholder.OPEN + key
    if len(key) > 1 and not key.endswith(Placeholder.CLOSE):
        key = key + Placeholder.CLOSE
    return key


def _to_text(value) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


class PlaceholderSubstitutor:
    """파트 조각 텍스트 치환"""

    def __init__(self, treat_as_placeholder: bool = True):
        self.treat_as_placeholder = treat_as_placeholder

    def _key(self, key, treat_as_placeholder: Optional[bool]) -> str:
        if treat_as_placeholder is None:
            treat_as_placeholder = self.treat_as_placeholder
        key = _to_text(key)
        return normalize_key(key) if treat_as_placeholder else key

    def prepare(self, mapping: Mapping, treat_as_placeholder: Optional[bool] = None) -> Dict[str, str]:
        """
        치환 맵 정규화

        빈 키는 제외하고, 정규화 결과가 같은 키는 뒤의 값이 앞의 값을 덮어씁니다.
        """
        prepared: Dict[str, str] = {}
        for key, value in mapping.items():
            search = self._key(key, treat_as_placeholder)
            if not search:
                logger.warning("빈 키는 치환하지 않습니다.")
                continue
            if search in prepared:
                logger.debug("중복 키: %s (나중 값 사용)", search)
            prepared[search] = _to_text(value)
        return prepared

    def apply(self, entry: PartEntry, key, value, treat_as_placeholder: Optional[bool] = None) -> int:
        """
        파트 하나에 단일 치환 적용

        Args:
            entry: 대상 파트
            key: 플레이스홀더 키
            value: 치환 값
            treat_as_placeholder: 키를 ${key}로 정규화할지 (None이면 기본값)

        Returns:
            치환 횟수
        """
        search = self._key(key, treat_as_placeholder)
        if not search:
            logger.warning("빈 키는 치환하지 않습니다.")
            return 0
        replacement = _to_text(value)

        count = 0
        for i in range(len(entry)):
            text = entry[i]
            found = text.count(search)
            if found:
                entry[i] = text.replace(search, replacement)
                count += found
        return count

    def apply_many(self, entry: PartEntry, mapping: Mapping,
                   treat_as_placeholder: Optional[bool] = None) -> Dict[str, int]:
        """
        파트 하나에 일괄 치환 적용 (원본 텍스트 기준 한 번에 매칭)

        Returns:
            {정규화된 키: 치환 횟수}
        """
        prepared = self.prepare(mapping, treat_as_placeholder)
        return self._apply_prepared(entry, prepared)

    def apply_across_parts(self, entries: Iterable[PartEntry], key, value,
                           treat_as_placeholder: Optional[bool] = None) -> int:
        """모든 파트에 단일 치환 적용 (파트 순서, 조각 순서)"""
        return sum(self.apply(entry, key, value, treat_as_placeholder) for entry in entries)

    def apply_many_across_parts(self, entries: Iterable[PartEntry], mapping: Mapping,
                                treat_as_placeholder: Optional[bool] = None) -> Dict[str, int]:
        """모든 파트에 일괄 치환 적용"""
        prepared = self.prepare(mapping, treat_as_placeholder)
        counts = {search: 0 for search in prepared}
        for entry in entries:
            for search, found in self._apply_prepared(entry, prepared).items():
                counts[search] += found
        return counts

    def _apply_prepared(self, entry: PartEntry, prepared: Dict[str, str]) -> Dict[str, int]:
        counts = {search: 0 for search in prepared}
        if not prepared:
            return counts

        pattern = self._compile(prepared)

        def substitute(match):
            matched = match.group(0)
            counts[matched] += 1
            return prepared[matched]

        for i in range(len(entry)):
            entry[i] = pattern.sub(substitute, entry[i])
        return counts

    @staticmethod
    def _compile(prepared: Dict[str, str]) -> re.Pattern:
        # 같은 위치에서 긴 키가 먼저 매칭되도록 정렬
        keys = sorted(prepared, key=len, reverse=True)
        return re.compile('|'.join(re.escape(key) for key in keys))
