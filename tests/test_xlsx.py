# -*- coding: utf-8 -*-
"""XLSx 진입점 테스트 (로드 → 치환 → 저장)"""

import zipfile

import pytest
from openpyxl import load_workbook

from xlsxml import (
    MODE_SHARED_STRINGS,
    SHARED_STRINGS_PART,
    ArchiveError,
    TemplateConfig,
    XLSx,
    fill_template,
)
from tests.conftest import DEFAULT_MEMBERS, read_members, write_corrupt_package


def test_end_to_end_shared_strings(package_path, tmp_path, config):
    output = tmp_path / 'out.xlsx'

    with XLSx(package_path, config=config) as xlsx:
        assert xlsx.set_value('USER', 'Ada') == 2
        assert xlsx.save(output) == output

    shared = read_members(output)[SHARED_STRINGS_PART].decode('utf-8')
    assert '<t>Hello Ada</t>' in shared
    assert '${USER}' not in shared


def test_end_to_end_openpyxl_workbook(make_workbook, tmp_path, config):
    template = make_workbook({'A1': 'Hello ${USER}', 'B2': '${TITLE} report', 'C3': 42})
    output = tmp_path / 'filled.xlsx'

    with XLSx(template, config=config) as xlsx:
        xlsx.set_values({'USER': 'Ada', 'TITLE': 'Quarterly'})
        xlsx.save(output)

    wb = load_workbook(output)
    ws = wb['Sheet1']
    assert ws['A1'].value == 'Hello Ada'
    assert ws['B2'].value == 'Quarterly report'
    assert ws['C3'].value == 42


def test_source_file_is_never_modified(package_path, tmp_path, config):
    original = package_path.read_bytes()

    with XLSx(package_path, config=config) as xlsx:
        xlsx.set_value('USER', 'Ada')
        xlsx.save(tmp_path / 'out.xlsx')

    assert package_path.read_bytes() == original


def test_saved_package_keeps_every_member(package_path, tmp_path, config):
    output = tmp_path / 'out.xlsx'

    with XLSx(package_path, config=config) as xlsx:
        xlsx.set_values({'USER': 'Ada', 'TITLE': 'T'})
        xlsx.save(output)

    with zipfile.ZipFile(output) as zf:
        assert zf.testzip() is None
        assert zf.namelist() == [name for name, _ in DEFAULT_MEMBERS]

    before = dict(DEFAULT_MEMBERS)
    after = read_members(output)
    for name in ('[Content_Types].xml', '_rels/.rels', 'xl/workbook.xml', 'xl/media/image1.png'):
        assert after[name] == before[name]


def test_all_mode_targets_every_xml_part(package_path, config):
    with XLSx(package_path, config=config) as xlsx:
        assert xlsx.part_names == [
            '[Content_Types].xml',
            'xl/workbook.xml',
            SHARED_STRINGS_PART,
            'xl/worksheets/sheet1.xml',
        ]
        xlsx.set_value('USER', 'Ada')
        assert 'Sheet Ada' in xlsx.get_text('xl/worksheets/sheet1.xml')


def test_shared_strings_mode_targets_one_part(package_path, tmp_path, config):
    output = tmp_path / 'out.xlsx'

    with XLSx(package_path, mode=MODE_SHARED_STRINGS, config=config) as xlsx:
        assert xlsx.part_names == [SHARED_STRINGS_PART]
        assert xlsx.set_value('USER', 'Ada') == 1
        xlsx.save(output)

    after = read_members(output)
    assert b'Hello Ada' in after[SHARED_STRINGS_PART]
    # 워크시트의 인라인 문자열은 대상이 아님
    assert b'Sheet ${USER}' in after['xl/worksheets/sheet1.xml']


def test_shared_strings_mode_requires_part(make_package, work_dir, config):
    path = make_package(members=[('xl/workbook.xml', b'<workbook/>')])

    xlsx = XLSx(mode=MODE_SHARED_STRINGS, config=config)
    with pytest.raises(ArchiveError):
        xlsx.load(path)

    assert not xlsx.is_loaded
    assert list(work_dir.iterdir()) == []


def test_explicit_parts(package_path, config):
    with XLSx(package_path, parts=['xl/worksheets/sheet1.xml'], config=config) as xlsx:
        assert xlsx.part_names == ['xl/worksheets/sheet1.xml']

    with pytest.raises(ArchiveError):
        XLSx(package_path, parts=['xl/nothing.xml'], config=config)


def test_empty_xml_parts_are_skipped(make_package, config):
    path = make_package(members=[
        ('xl/empty.xml', b''),
        (SHARED_STRINGS_PART, b'<t>${A1}</t>'),
    ])
    with XLSx(path, config=config) as xlsx:
        assert xlsx.part_names == [SHARED_STRINGS_PART]


def test_key_auto_wrapping_matches_wrapped_key(package_path, config):
    with XLSx(package_path, config=config) as bare:
        bare.set_value('USER', 'Ada')
        bare_text = bare.get_text()

    with XLSx(package_path, config=config) as wrapped:
        wrapped.set_value('${USER}', 'Ada')
        wrapped_text = wrapped.get_text()

    assert bare_text == wrapped_text


def test_set_values_batch_is_not_chained(make_package, config):
    path = make_package(members=[(SHARED_STRINGS_PART, b'<si><t>${AA}</t></si><si><t>${BB}</t></si>')])

    with XLSx(path, config=config) as xlsx:
        xlsx.set_values({'AA': '${BB}', 'BB': 'X'})
        assert xlsx.get_text() == '<si><t>${BB}</t></si><si><t>X</t></si>'


def test_replace_uses_raw_keys_by_default(package_path, config):
    with XLSx(package_path, config=config) as xlsx:
        counts = xlsx.replace({'Hello': 'Bye', 'USER': 'nobody'})
        text = xlsx.get_text()

    assert counts == {'Hello': 1, 'USER': 2}
    assert '<t>Bye ${nobody}</t>' in text


def test_replace_treat_as_tags(package_path, config):
    with XLSx(package_path, config=config) as xlsx:
        xlsx.replace({'TITLE': 'Report'}, treat_as_tags=True)
        assert '<t>Report</t>' in xlsx.get_text()


def test_escape_values(package_path, work_dir):
    config = TemplateConfig(work_dir=str(work_dir), escape_values=True)
    with XLSx(package_path, config=config) as xlsx:
        xlsx.set_value('USER', 'Tom & <Jerry>')
        assert '<t>Hello Tom &amp; &lt;Jerry&gt;</t>' in xlsx.get_text()


def test_operations_require_loaded_file(config):
    xlsx = XLSx(config=config)
    with pytest.raises(ArchiveError):
        xlsx.set_value('USER', 'Ada')
    with pytest.raises(ArchiveError):
        xlsx.save()


def test_save_without_path_returns_working_copy(package_path, config, work_dir):
    xlsx = XLSx(package_path, config=config)
    temp_path = xlsx.temp_filepath
    result = xlsx.save()

    assert result == temp_path
    assert result.parent == work_dir
    with zipfile.ZipFile(result) as zf:
        assert b'Hello ${USER}' in zf.read(SHARED_STRINGS_PART)

    # 저장 후에는 다시 편집할 수 없음
    with pytest.raises(ArchiveError):
        xlsx.set_value('USER', 'Ada')

    xlsx.close()
    assert xlsx.filename is None
    # close()는 작업 사본을 지우지 않음
    assert result.exists()


def test_close_then_reload(package_path, make_package, config):
    other = make_package('other.xlsx')
    xlsx = XLSx(package_path, config=config)
    xlsx.close()
    assert not xlsx.is_loaded

    xlsx.load(other)
    assert xlsx.filename == 'other.xlsx'
    assert xlsx.filepath == other
    xlsx.discard()
    assert xlsx.temp_filepath is None


def test_discard_removes_working_copy(package_path, config, work_dir):
    xlsx = XLSx(package_path, config=config)
    xlsx.discard()
    assert list(work_dir.iterdir()) == []


def test_unknown_mode_rejected(config):
    with pytest.raises(ValueError):
        XLSx(mode='everything', config=config)


def test_fill_template(package_path, tmp_path, config):
    output = fill_template(package_path, {'USER': 'Ada', 'TITLE': 'Report'}, tmp_path / 'out.xlsx', config)

    shared = read_members(output)[SHARED_STRINGS_PART]
    assert b'<t>Hello Ada</t>' in shared
    assert b'<t>Report</t>' in shared


def test_load_corrupt_package_leaves_facade_unloaded(tmp_path, config, work_dir):
    path = write_corrupt_package(tmp_path / 'corrupt.xlsx', SHARED_STRINGS_PART)
    xlsx = XLSx(config=config)

    with pytest.raises(ArchiveError):
        xlsx.load(path)

    assert not xlsx.is_loaded
    assert not xlsx.session.is_open
    assert xlsx.part_names == []
    assert list(work_dir.iterdir()) == []
