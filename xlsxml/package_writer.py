# -*- coding: utf-8 -*-
"""
패키지 저장 모듈

저장소의 파트를 렌더링하여 작업 사본에 기록하고 최종 파일을 만듭니다.

규칙:
- 원본 멤버 순서와 ZipInfo(압축 방식, 날짜 등)를 그대로 유지
- 대상 파트는 렌더링 결과로 교체, 나머지 멤버는 원래 내용 그대로 복사
- 새 아카이브를 작업 사본 옆에 완성한 뒤 교체 (실패 시 작업 사본 유지)
"""

import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import Dict, Optional, Union

from .archive_session import ArchiveSession
from .errors import ArchiveError
from .models import CommitResult
from .text_part_store import TextPartStore

logger = logging.getLogger(__name__)


class PackageWriter:
    """작업 사본 저장"""

    def commit(
        self,
        session: ArchiveSession,
        store: TextPartStore,
        destination: Optional[Union[str, Path]] = None,
        keep_working_copy: bool = True,
    ) -> CommitResult:
        """
        파트를 아카이브에 기록하고 저장

        Args:
            session: 열린 세션
            store: 편집된 파트 저장소 (저장 후 비워짐)
            destination: 복사할 최종 경로 (None이면 작업 사본 경로 반환)
            keep_working_copy: destination 복사 후 작업 사본 유지 여부

        Returns:
            CommitResult

        Raises:
            ArchiveError: 세션이 닫혀 있거나 아카이브를 완성할 수 없는 경우
            OSError: destination 복사 실패
        """
        if not session.is_open or session.package is None:
            raise ArchiveError("열린 패키지가 없습니다.")

        package = session.package
        working_path = package.working_path

        rendered: Dict[str, bytes] = {}
        for entry in store.drain():
            rendered[entry.name] = entry.render()

        members = self._rebuild(session, rendered)

        result = CommitResult(
            path=working_path,
            working_path=working_path,
            parts_written=len(rendered),
            members=members,
        )
        logger.info("패키지 저장: %s (파트 %d개)", working_path, len(rendered))

        if destination is not None:
            destination = Path(destination)
            shutil.copyfile(working_path, destination)
            result.path = destination
            result.destination = destination
            logger.info("복사 완료: %s", destination)

            if not keep_working_copy:
                working_path.unlink()

        return result

    def _rebuild(self, session: ArchiveSession, rendered: Dict[str, bytes]) -> int:
        """새 아카이브 작성 후 작업 사본 교체"""
        working_path = session.package.working_path
        output_path = working_path.with_name(working_path.name + '.part')
        source = session.archive

        try:
            with zipfile.ZipFile(output_path, 'w') as out:
                written = set()
                for info in source.infolist():
                    if info.filename in rendered:
                        out.writestr(info, rendered[info.filename])
                        written.add(info.filename)
                    else:
                        out.writestr(info, source.read(info.filename))

                # 아카이브에 없던 파트는 뒤에 추가
                for name, content in rendered.items():
                    if name not in written:
                        out.writestr(name, content, compress_type=zipfile.ZIP_DEFLATED)

                out.comment = source.comment
                members = len(out.infolist())

            session.release()
            os.replace(output_path, working_path)
        except (OSError, zipfile.BadZipFile, zlib.error, NotImplementedError) as exc:
            if output_path.exists():
                output_path.unlink()
            raise ArchiveError(f"패키지를 저장할 수 없습니다: {working_path}") from exc

        return members
