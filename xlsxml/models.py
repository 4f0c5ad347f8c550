# -*- coding: utf-8 -*-
"""
XLSX 치환용 데이터 모델

개요:
- Package: 열린 패키지 (원본/작업 사본 경로)
- Fragment: '<' 기준으로 분할된 텍스트 조각
- PartEntry: 편집 대상 XML 파트 (조각 목록)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .config import DEFAULT_ENCODING, Placeholder


# 플레이스홀더 키 -> 치환 값 (순서 유지)
SubstitutionMap = Dict[str, str]


@dataclass
class Package:
    """열린 패키지 정보"""
    source_path: Path
    working_path: Path
    filename: str = ""  # 원본 파일명 (경로 마지막 요소)
    is_open: bool = True


@dataclass
class Fragment:
    """텍스트 조각"""
    text: str = ""
    # 분할 시 앞에 '<'가 있었는지 (렌더링 시 복원)
    delimited: bool = True

    def render(self) -> str:
        if self.delimited:
            return Placeholder.TAG_OPEN + self.text
        return self.text


@dataclass
class PartEntry:
    """
    편집 대상 XML 파트

    조각의 순서는 XML 직렬화 순서이므로 바뀌지 않습니다.
    인덱스로 조각 텍스트를 읽고 쓸 수 있지만 조각을 추가/삭제할 수는 없습니다.
    """
    name: str
    fragments: List[Fragment] = field(default_factory=list)
    encoding: str = DEFAULT_ENCODING

    def __len__(self) -> int:
        return len(self.fragments)

    def __getitem__(self, index: int) -> str:
        return self.fragments[index].text

    def __setitem__(self, index: int, text: str):
        self.fragments[index].text = text

    def __iter__(self) -> Iterator[str]:
        for fragment in self.fragments:
            yield fragment.text

    def render_text(self) -> str:
        """조각을 이어붙인 XML 텍스트"""
        return ''.join(fragment.render() for fragment in self.fragments)

    def render(self) -> bytes:
        """조각을 이어붙인 XML 바이트"""
        return self.render_text().encode(self.encoding, errors='surrogateescape')


@dataclass
class CommitResult:
    """저장 결과"""
    path: Path
    working_path: Path
    parts_written: int = 0
    members: int = 0
    destination: Optional[Path] = None
