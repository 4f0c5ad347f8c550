# -*- coding: utf-8 -*-
"""
패키지 작업 사본 관리 모듈

원본 파일을 직접 수정하지 않도록 고유한 이름의 작업 사본을 만들고,
그 사본을 ZIP 아카이브로 엽니다. 저장 전까지 모든 편집은 작업 사본에만 반영됩니다.

사용:
    session = ArchiveSession()
    package = session.open("template.xlsx")
    for name in session.list_xml_members():
        xml = session.read_member(name)
    session.close()
"""

import itertools
import logging
import os
import shutil
import uuid
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional, Union

from .config import TEMP_SUFFIX, XML_SUFFIX, get_work_dir
from .errors import ArchiveError
from .models import Package

logger = logging.getLogger(__name__)

# 프로세스 내 작업 사본 번호
_copy_counter = itertools.count(1)


def _working_copy_name(source: Path) -> str:
    """작업 사본 파일명 생성 (pid + 순번 + 랜덤)"""
    suffix = source.suffix or '.xlsx'
    return f".{os.getpid()}-{next(_copy_counter)}-{uuid.uuid4().hex[:8]}{TEMP_SUFFIX}{suffix}"


class ArchiveSession:
    """작업 사본 기반 ZIP 세션"""

    def __init__(self, work_dir: Optional[Union[str, Path]] = None):
        self.work_dir = work_dir
        self.package: Optional[Package] = None
        self._zip: Optional[zipfile.ZipFile] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_open(self) -> bool:
        return self._zip is not None

    @property
    def archive(self) -> zipfile.ZipFile:
        """열린 아카이브 핸들"""
        if self._zip is None:
            raise ArchiveError("열린 패키지가 없습니다.")
        return self._zip

    def open(self, source_path: Union[str, Path]) -> Package:
        """
        원본을 작업 사본으로 복사한 뒤 아카이브로 열기

        Args:
            source_path: 원본 패키지 경로

        Returns:
            Package

        Raises:
            FileNotFoundError: 원본이 없는 경우
            OSError: 작업 사본을 만들 수 없는 경우
            ArchiveError: 유효한 ZIP 파일이 아닌 경우
        """
        if self.is_open:
            self.close()

        source_path = Path(source_path)
        if not source_path.is_file():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {source_path}")

        work_dir = get_work_dir(self.work_dir)
        working_path = work_dir / _working_copy_name(source_path)

        # 같은 이름이 이미 있으면 덮어쓰지 않고 실패
        with open(source_path, 'rb') as src:
            dst = open(working_path, 'xb')
            try:
                with dst:
                    shutil.copyfileobj(src, dst)
            except OSError:
                working_path.unlink()
                raise

        try:
            self._zip = zipfile.ZipFile(working_path, 'r')
        except zipfile.BadZipFile as exc:
            working_path.unlink()
            raise ArchiveError(f"유효한 패키지가 아닙니다: {source_path}") from exc

        self.package = Package(
            source_path=source_path,
            working_path=working_path,
            filename=source_path.name,
        )
        logger.debug("작업 사본 생성: %s -> %s", source_path, working_path)
        return self.package

    def list_members(self) -> List[str]:
        """모든 멤버 이름 (아카이브 순서)"""
        return self.archive.namelist()

    def list_xml_members(self) -> List[str]:
        """.xml로 끝나는 멤버 이름 (아카이브 순서)"""
        return [name for name in self.archive.namelist() if name.endswith(XML_SUFFIX)]

    def has_member(self, name: str) -> bool:
        return name in self.archive.namelist()

    def read_member(self, name: str) -> bytes:
        """멤버의 압축 해제된 내용"""
        archive = self.archive
        try:
            return archive.read(name)
        except KeyError as exc:
            raise ArchiveError(f"패키지에 '{name}' 파트가 없습니다.") from exc
        except (zipfile.BadZipFile, zlib.error, NotImplementedError) as exc:
            raise ArchiveError(f"'{name}' 파트를 읽을 수 없습니다: {exc}") from exc

    def release(self):
        """아카이브 핸들만 닫기 (경로 정보 유지)"""
        if self._zip is not None:
            self._zip.close()
            self._zip = None
        if self.package is not None:
            self.package.is_open = False

    def close(self):
        """세션 초기화 (작업 사본은 삭제하지 않음)"""
        self.release()
        self.package = None

    def discard(self):
        """세션을 닫고 작업 사본 삭제"""
        working_path = self.package.working_path if self.package else None
        self.close()
        if working_path is not None and working_path.exists():
            working_path.unlink()
            logger.debug("작업 사본 삭제: %s", working_path)
