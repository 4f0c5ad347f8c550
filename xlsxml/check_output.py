# -*- coding: utf-8 -*-
"""
저장 결과 검증

- verify_package: ZIP 구조 확인 (CRC 검사, 멤버 누락 여부)
- check_workbook: openpyxl로 열어서 남은 플레이스홀더 확인
"""

import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .errors import ArchiveError

# ${NAME} 형태의 플레이스홀더
PLACEHOLDER_PATTERN = re.compile(r'\$\{([^{}<>]+)\}')


@dataclass
class PackageCheck:
    """ZIP 구조 검증 결과"""
    path: Path
    members: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    bad_member: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return not self.missing and self.bad_member is None


@dataclass
class WorkbookCheck:
    """통합 문서 검증 결과"""
    path: Path
    sheet_names: List[str] = field(default_factory=list)
    # (시트, 셀 좌표, 셀 값)
    placeholders: List[Tuple[str, str, str]] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """남은 플레이스홀더가 없는지"""
        return not self.placeholders


def find_placeholders(text: str) -> List[str]:
    """텍스트에 있는 플레이스홀더 이름 목록"""
    if not text:
        return []
    return PLACEHOLDER_PATTERN.findall(text)


def verify_package(path: Union[str, Path], expected_members: Optional[Iterable[str]] = None) -> PackageCheck:
    """
    저장된 패키지의 ZIP 구조 확인

    Args:
        path: 패키지 경로
        expected_members: 있어야 하는 멤버 이름들 (보통 원본의 멤버 목록)

    Raises:
        ArchiveError: ZIP 파일이 아닌 경우
    """
    path = Path(path)
    result = PackageCheck(path=path)

    try:
        with zipfile.ZipFile(path, 'r') as zf:
            result.members = zf.namelist()
            result.bad_member = zf.testzip()
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"유효한 패키지가 아닙니다: {path}") from exc

    if expected_members is not None:
        present = set(result.members)
        result.missing = [name for name in expected_members if name not in present]

    return result


def check_workbook(path: Union[str, Path]) -> WorkbookCheck:
    """openpyxl로 통합 문서를 열어 남은 플레이스홀더 수집"""
    path = Path(path)
    try:
        wb = load_workbook(path)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise ArchiveError(f"통합 문서를 열 수 없습니다: {path} ({exc})") from exc
    result = WorkbookCheck(path=path, sheet_names=list(wb.sheetnames))

    try:
        for ws in wb.worksheets:
            for row in ws.iter_rows():
                for cell in row:
                    if isinstance(cell.value, str) and find_placeholders(cell.value):
                        result.placeholders.append((ws.title, cell.coordinate, cell.value))
    finally:
        wb.close()

    return result


def print_check(package: PackageCheck, workbook: Optional[WorkbookCheck] = None):
    """검증 결과 출력"""
    print(f"=== {package.path.name} 검증 ===")
    print(f"멤버 수: {len(package.members)}")
    if package.bad_member:
        print(f"손상된 멤버: {package.bad_member}")
    if package.missing:
        print(f"누락된 멤버: {', '.join(package.missing)}")

    if workbook is not None:
        print(f"시트: {', '.join(workbook.sheet_names)}")
        if workbook.placeholders:
            print(f"남은 플레이스홀더 {len(workbook.placeholders)}개:")
            for sheet, coord, value in workbook.placeholders:
                print(f"  {sheet}!{coord}: {value}")
        else:
            print("남은 플레이스홀더 없음")
