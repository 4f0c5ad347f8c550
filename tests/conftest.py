# -*- coding: utf-8 -*-
"""
테스트 공용 fixture

- make_package: zipfile로 직접 만든 패키지 (멤버 내용을 바이트 단위로 제어)
- make_workbook: openpyxl로 만든 실제 통합 문서
"""

import zipfile
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pytest
from openpyxl import Workbook

from xlsxml import TemplateConfig


SHARED_STRINGS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<sst xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" count="2" uniqueCount="2">'
    '<si><t>Hello ${USER}</t></si>'
    '<si><t>${TITLE}</t></si>'
    '</sst>'
).encode('utf-8')

SHEET_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">'
    '<sheetData>'
    '<row r="1"><c r="A1" t="s"><v>0</v></c></row>'
    '<row r="2"><c r="A2" t="inlineStr"><is><t>Sheet ${USER}</t></is></c></row>'
    '</sheetData>'
    '</worksheet>'
).encode('utf-8')

# PNG 시그니처 + 임의 바이트
IMAGE_BYTES = b'\x89PNG\r\n\x1a\n' + bytes(range(256))

DEFAULT_MEMBERS: List[Tuple[str, bytes]] = [
    ('[Content_Types].xml', b'<?xml version="1.0"?><Types/>'),
    ('_rels/.rels', b'<?xml version="1.0"?><Relationships/>'),
    ('xl/workbook.xml', b'<?xml version="1.0"?><workbook/>'),
    ('xl/sharedStrings.xml', SHARED_STRINGS_XML),
    ('xl/worksheets/sheet1.xml', SHEET_XML),
    ('xl/media/image1.png', IMAGE_BYTES),
]


def write_package(path: Path, members: List[Tuple[str, bytes]], comment: bytes = b'') -> Path:
    """멤버 목록으로 ZIP 패키지 생성 (png는 압축 안 함)"""
    with zipfile.ZipFile(path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for name, content in members:
            if name.endswith('.png'):
                zf.writestr(name, content, compress_type=zipfile.ZIP_STORED)
            else:
                zf.writestr(name, content)
        zf.comment = comment
    return path


def write_corrupt_package(path: Path, name: str) -> Path:
    """name 멤버를 무압축으로 저장한 뒤 내용 1바이트를 바꿔 CRC 불일치 패키지 생성"""
    members = dict(DEFAULT_MEMBERS)
    with zipfile.ZipFile(path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for member, content in DEFAULT_MEMBERS:
            if member == name:
                zf.writestr(member, content, compress_type=zipfile.ZIP_STORED)
            else:
                zf.writestr(member, content)

    data = bytearray(path.read_bytes())
    offset = data.index(members[name]) + 10
    data[offset] ^= 0x01
    path.write_bytes(bytes(data))
    return path


def read_members(path: Union[str, Path]) -> Dict[str, bytes]:
    with zipfile.ZipFile(path, 'r') as zf:
        return {name: zf.read(name) for name in zf.namelist()}


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """작업 사본 디렉토리"""
    path = tmp_path / 'work'
    path.mkdir()
    return path


@pytest.fixture
def config(work_dir: Path) -> TemplateConfig:
    return TemplateConfig(work_dir=str(work_dir))


@pytest.fixture
def make_package(tmp_path: Path):
    """직접 만든 패키지 생성 함수"""
    def _make(name: str = 'template.xlsx', members=None, comment: bytes = b'') -> Path:
        return write_package(tmp_path / name, members if members is not None else DEFAULT_MEMBERS, comment)
    return _make


@pytest.fixture
def package_path(make_package) -> Path:
    return make_package()


@pytest.fixture
def make_workbook(tmp_path: Path):
    """openpyxl 통합 문서 생성 함수 {셀 좌표: 값}"""
    def _make(cells: Dict[str, str], name: str = 'book.xlsx', title: str = 'Sheet1') -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = title
        for coord, value in cells.items():
            ws[coord] = value
        path = tmp_path / name
        wb.save(path)
        return path
    return _make
