# -*- coding: utf-8 -*-
"""
XML 파트 텍스트 저장소

XML을 DOM으로 파싱하지 않고 '<' 기준으로 분할한 텍스트 조각으로 보관합니다.

분할 규칙:
- 조각 0: 첫 번째 '<' 앞의 내용 (보통 빈 문자열)
- 조각 1~: '<' 하나 뒤에 오던 텍스트 (구분자는 저장하지 않음)

각 조각은 분할 시점에 앞에 '<'가 있었는지(delimited)를 기록하므로
렌더링은 어떤 입력에 대해서도 ingest의 정확한 역연산입니다.
텍스트에 '>'가 단독으로 들어 있어도 복원 결과가 달라지지 않습니다.
"""

import logging
from typing import Dict, Iterator, List, Optional

from .config import DEFAULT_ENCODING, Placeholder
from .errors import ArchiveError
from .models import Fragment, PartEntry

logger = logging.getLogger(__name__)


def split_fragments(text: str) -> List[Fragment]:
    """텍스트를 '<' 기준으로 분할"""
    pieces = text.split(Placeholder.TAG_OPEN)
    fragments = [Fragment(text=pieces[0], delimited=False)]
    fragments.extend(Fragment(text=piece, delimited=True) for piece in pieces[1:])
    return fragments


class TextPartStore:
    """편집 대상 XML 파트 저장소 (파트 이름 순서 유지)"""

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding
        self._entries: Dict[str, PartEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[PartEntry]:
        return iter(list(self._entries.values()))

    def ingest(self, name: str, raw_xml: bytes) -> PartEntry:
        """
        XML 바이트를 조각으로 분할하여 저장

        Args:
            name: 아카이브 내 멤버 이름 (예: xl/sharedStrings.xml)
            raw_xml: 압축 해제된 XML 바이트

        Returns:
            PartEntry
        """
        text = raw_xml.decode(self.encoding, errors='surrogateescape')
        entry = PartEntry(name=name, fragments=split_fragments(text), encoding=self.encoding)
        self._entries[name] = entry
        logger.debug("파트 로드: %s (%d 조각)", name, len(entry))
        return entry

    def names(self) -> List[str]:
        return list(self._entries.keys())

    def entries(self) -> List[PartEntry]:
        return list(self._entries.values())

    def get(self, name: str) -> Optional[PartEntry]:
        return self._entries.get(name)

    def _require(self, name: str) -> PartEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise ArchiveError(f"로드되지 않은 파트입니다: {name}")
        return entry

    def render(self, name: str) -> bytes:
        """파트를 XML 바이트로 복원"""
        return self._require(name).render()

    def text(self, name: str) -> str:
        """파트를 XML 문자열로 복원"""
        return self._require(name).render_text()

    def drain(self) -> List[PartEntry]:
        """저장된 파트를 모두 꺼내고 저장소 비우기"""
        entries = list(self._entries.values())
        self._entries.clear()
        return entries

    def clear(self):
        self._entries.clear()
