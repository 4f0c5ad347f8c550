# -*- coding: utf-8 -*-
"""
XLSX 플레이스홀더 치환

.xlsx 파일은 XML 파트를 담은 ZIP 아카이브입니다.
템플릿의 ${TAG} 플레이스홀더를 실행 시점 값으로 바꾼 뒤 새 파일로 저장합니다.

기능:
- load: 작업 사본을 만들고 대상 XML 파트를 메모리에 로드
- set_value / set_values: 플레이스홀더 치환 (키 자동 정규화)
- replace: 일괄 치환 (treat_as_tags=False이면 키를 그대로 검색)
- save: 작업 사본에 기록하고 경로 반환
- close: 다음 작업을 위해 초기화

대상 파트:
- mode='all': 모든 .xml 파트 (워크시트 등 어디에 있든 치환)
- mode='shared_strings': xl/sharedStrings.xml 만
- parts=[...]: 지정한 파트만

사용:
    from xlsxml import XLSx

    with XLSx("template.xlsx") as xlsx:
        xlsx.set_value("USER", "Ada")
        xlsx.save("output.xlsx")
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union
from xml.sax.saxutils import escape

from .archive_session import ArchiveSession
from .config import MODE_SHARED_STRINGS, MODES, SHARED_STRINGS_PART
from .config_loader import TemplateConfig
from .errors import ArchiveError
from .models import CommitResult
from .package_writer import PackageWriter
from .substitutor import PlaceholderSubstitutor
from .text_part_store import TextPartStore

logger = logging.getLogger(__name__)


class XLSx:
    """XLSX 템플릿 치환"""

    def __init__(
        self,
        filepath: Optional[Union[str, Path]] = None,
        mode: Optional[str] = None,
        parts: Optional[Sequence[str]] = None,
        config: Optional[TemplateConfig] = None,
    ):
        self.config = config or TemplateConfig()
        self.mode = mode or self.config.mode
        if self.mode not in MODES:
            raise ValueError(f"알 수 없는 mode: {self.mode}")
        self.parts = list(parts) if parts is not None else self.config.parts

        self.session = ArchiveSession(work_dir=self.config.work_dir)
        self.store = TextPartStore(encoding=self.config.encoding)
        self.substitutor = PlaceholderSubstitutor(treat_as_placeholder=True)
        self.writer = PackageWriter()
        self.last_result: Optional[CommitResult] = None
        self._saved = False

        if filepath is not None:
            self.load(filepath)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ========================================
    # 상태
    # ========================================

    @property
    def is_loaded(self) -> bool:
        return self.session.package is not None and not self._saved

    @property
    def filename(self) -> Optional[str]:
        return self.session.package.filename if self.session.package else None

    @property
    def filepath(self) -> Optional[Path]:
        return self.session.package.source_path if self.session.package else None

    @property
    def temp_filepath(self) -> Optional[Path]:
        return self.session.package.working_path if self.session.package else None

    @property
    def part_names(self) -> List[str]:
        return self.store.names()

    def get_text(self, name: str = SHARED_STRINGS_PART) -> str:
        """파트의 현재 XML 텍스트"""
        self._require_loaded()
        return self.store.text(name)

    def _require_loaded(self):
        if self._saved:
            raise ArchiveError("이미 저장된 세션입니다. close() 후 다시 load() 하세요.")
        if self.session.package is None:
            raise ArchiveError("로드된 파일이 없습니다.")

    # ========================================
    # 로드
    # ========================================

    def load(self, filepath: Union[str, Path]):
        """
        파일을 작업 사본으로 열고 대상 파트 로드

        Raises:
            FileNotFoundError: 파일이 없는 경우
            ArchiveError: 유효한 패키지가 아니거나 대상 파트가 없는 경우
        """
        self.close()
        self.session.open(filepath)

        try:
            for name in self._target_parts():
                xml = self.session.read_member(name)
                # 빈 파트는 편집하지 않음
                if xml:
                    self.store.ingest(name, xml)
        except ArchiveError:
            self.session.discard()
            self.store.clear()
            raise

        logger.info("로드 완료: %s (대상 파트 %d개)", self.filename, len(self.store))

    def _target_parts(self) -> List[str]:
        """편집 대상 파트 이름 목록"""
        if self.parts:
            missing = [name for name in self.parts if not self.session.has_member(name)]
            if missing:
                raise ArchiveError(f"패키지에 파트가 없습니다: {', '.join(missing)}")
            return list(self.parts)

        if self.mode == MODE_SHARED_STRINGS:
            if not self.session.has_member(SHARED_STRINGS_PART):
                raise ArchiveError(f"패키지에 '{SHARED_STRINGS_PART}' 파트가 없습니다.")
            return [SHARED_STRINGS_PART]

        return self.session.list_xml_members()

    # ========================================
    # 치환
    # ========================================

    def _value(self, value) -> str:
        text = '' if value is None else str(value)
        return escape(text) if self.config.escape_values else text

    def set_value(self, key: str, value) -> int:
        """
        플레이스홀더 하나 치환

        Args:
            key: 플레이스홀더 이름 ('USER' 또는 '${USER}')
            value: 치환 값

        Returns:
            치환 횟수
        """
        self._require_loaded()
        count = self.substitutor.apply_across_parts(
            self.store, key, self._value(value), self.config.treat_as_placeholders
        )
        logger.debug("치환: %s -> %d회", key, count)
        return count

    def set_values(self, values: Mapping) -> Dict[str, int]:
        """여러 플레이스홀더를 한 번에 치환 (값은 다시 치환되지 않음)"""
        return self.replace(values, treat_as_tags=self.config.treat_as_placeholders)

    def replace(self, values: Mapping, treat_as_tags: bool = False) -> Dict[str, int]:
        """
        일괄 검색/치환

        Args:
            values: {검색어: 치환 값}
            treat_as_tags: 키를 ${key} 형태로 정규화할지

        Returns:
            {검색어: 치환 횟수}
        """
        self._require_loaded()
        if not values:
            return {}
        prepared = {key: self._value(value) for key, value in values.items()}
        counts = self.substitutor.apply_many_across_parts(self.store, prepared, treat_as_tags)
        logger.debug("일괄 치환: %s", counts)
        return counts

    # ========================================
    # 저장
    # ========================================

    def save(self, filepath: Optional[Union[str, Path]] = None) -> Path:
        """
        작업 사본에 기록하고 저장

        Args:
            filepath: 저장할 경로 (None이면 작업 사본 경로 사용)

        Returns:
            저장된 파일 경로
        """
        self._require_loaded()
        try:
            self.last_result = self.writer.commit(
                self.session,
                self.store,
                filepath,
                keep_working_copy=self.config.keep_working_copy,
            )
        finally:
            self._saved = True
        return self.last_result.path

    def close(self):
        """초기화 (작업 사본은 삭제하지 않음)"""
        self.session.close()
        self.store.clear()
        self._saved = False

    def discard(self):
        """초기화 후 작업 사본 삭제"""
        self.session.discard()
        self.store.clear()
        self._saved = False


def fill_template(
    template_path: Union[str, Path],
    values: Mapping,
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[TemplateConfig] = None,
) -> Path:
    """
    템플릿 파일의 플레이스홀더를 치환하여 저장

    Args:
        template_path: 템플릿 .xlsx 경로
        values: {플레이스홀더: 값}
        output_path: 출력 경로 (None이면 작업 사본 경로)
        config: 치환 설정

    Returns:
        저장된 파일 경로
    """
    with XLSx(template_path, config=config) as xlsx:
        xlsx.set_values(values)
        return xlsx.save(output_path)


def _parse_assignments(items: Sequence[str]) -> Dict[str, str]:
    """KEY=VALUE 목록 파싱"""
    values = {}
    for item in items:
        if '=' not in item:
            raise ValueError(f"KEY=VALUE 형식이 아닙니다: {item}")
        key, value = item.split('=', 1)
        values[key] = value
    return values


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    from .check_output import check_workbook, print_check, verify_package
    from .config import setup_logging
    from .config_loader import ConfigLoader

    parser = argparse.ArgumentParser(
        description="XLSX 템플릿 플레이스홀더 치환",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예제:
  # 값 직접 지정
  python -m xlsxml.xlsx template.xlsx -o out.xlsx --set USER=Ada --set DATE=2024-01-01

  # YAML 설정 파일 사용
  python -m xlsxml.xlsx template.xlsx -o out.xlsx --values job.yaml

  # 공유 문자열 테이블만 치환하고 결과 확인
  python -m xlsxml.xlsx template.xlsx -o out.xlsx --set USER=Ada --mode shared_strings --check
"""
    )

    parser.add_argument("input", help="템플릿 .xlsx 파일")
    parser.add_argument("-o", "--output", help="출력 파일 경로 (생략 시 작업 사본 경로)")
    parser.add_argument("--set", dest="assignments", action="append", default=[],
                        metavar="KEY=VALUE", help="치환 값 (복수 가능)")
    parser.add_argument("--values", help="YAML 설정 파일 (values 매핑 포함)")
    parser.add_argument("--mode", choices=MODES, help="대상 파트 선택")
    parser.add_argument("--part", dest="parts", action="append", help="대상 파트 이름 (복수 가능)")
    parser.add_argument("--raw", action="store_true", help="키를 ${key}로 감싸지 않음")
    parser.add_argument("--work-dir", help="작업 사본 디렉토리")
    parser.add_argument("--check", action="store_true", help="저장 후 결과 검증")
    parser.add_argument("-v", "--verbose", action="store_true", help="로그 출력")

    args = parser.parse_args(argv)

    if args.verbose:
        setup_logging(logging.DEBUG)

    if args.values and not Path(args.values).exists():
        print(f"설정 파일을 찾을 수 없습니다: {args.values}")
        return 1

    try:
        config = ConfigLoader(args.values).config if args.values else TemplateConfig()
        if args.raw:
            config.treat_as_placeholders = False
        if args.work_dir:
            config.work_dir = args.work_dir

        values = dict(config.values)
        values.update(_parse_assignments(args.assignments))

        xlsx = XLSx(args.input, mode=args.mode or config.mode, parts=args.parts, config=config)
        try:
            members = xlsx.session.list_members()
            counts = xlsx.set_values(values)
            result_path = xlsx.save(args.output)
        finally:
            xlsx.close()

        print(f"저장 완료: {result_path}")
        for key, count in counts.items():
            print(f"  {key}: {count}회")

        if args.check:
            package_check = verify_package(result_path, members)
            workbook_check = check_workbook(result_path)
            print_check(package_check, workbook_check)
            if not package_check.is_valid:
                return 1
    except (OSError, ArchiveError, ValueError) as e:
        print(f"오류 발생: {e}")
        return 1

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
