"""Local packaging of the signed ASiC-E archive."""

from __future__ import annotations

import os
import zipfile
from collections.abc import Mapping
from pathlib import Path

import structlog

from aumai_sigaclient.exceptions import ArchiveMergeError, InvalidSigaParamError

logger = structlog.get_logger(__name__)

ARCHIVE_SUFFIX = ".asice"


class ArchiveMerger:
    """Merge the gateway's signed hashcode container with the original files.

    The gateway only holds file hashes, so the archive it returns lacks the
    data files themselves. :meth:`merge` writes that archive to disk and adds
    the local files under their logical names.
    """

    def __init__(self, output_dir: str | Path | None = None) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else None

    def archive_path(
        self, container_id: str, files: Mapping[str, str | Path]
    ) -> Path:
        """Return ``<output dir>/<container_id>.asice``.

        Without an explicit output directory the directory of the first entry
        in *files* is used.
        """
        if self.output_dir is not None:
            directory = self.output_dir
        else:
            if not files:
                raise InvalidSigaParamError(
                    "Cannot choose an archive directory without an output_dir or files"
                )
            directory = Path(next(iter(files.values()))).parent
        return directory / f"{container_id}{ARCHIVE_SUFFIX}"

    def merge(
        self,
        container_id: str,
        base_archive: bytes,
        files: Mapping[str, str | Path],
        target: Path | None = None,
    ) -> Path:
        """Write *base_archive* and add every ``logical name -> local path`` entry.

        Args:
            target: Archive location already chosen with :meth:`archive_path`;
                computed here when omitted.

        Returns:
            Path of the finished archive.

        Raises:
            InvalidSigaParamError: if a local path is not a string or path.
            ArchiveMergeError: if writing the base archive or adding any file
                fails, or a logical name is already an entry of the base
                archive. The partially written archive is removed.
        """
        bad_paths = sorted(
            name for name, local_path in files.items()
            if not isinstance(local_path, (str, os.PathLike))
        )
        if bad_paths:
            raise InvalidSigaParamError(
                "Local file paths must be strings or paths",
                details={"logical_names": bad_paths},
            )
        if target is None:
            target = self.archive_path(container_id, files)

        try:
            target.write_bytes(base_archive)
            # append mode would silently start a new archive after non-zip bytes
            if not zipfile.is_zipfile(target):
                raise zipfile.BadZipFile("gateway container is not a zip archive")
            with zipfile.ZipFile(target, mode="a", compression=zipfile.ZIP_DEFLATED) as zf:
                existing = set(zf.namelist())
                clashes = sorted(name for name in files if name in existing)
                if clashes:
                    raise ArchiveMergeError(
                        f"Logical names clash with signed container entries: {clashes}",
                        details={"container_id": container_id, "clashes": clashes},
                    )
                for logical_name, local_path in files.items():
                    zf.write(local_path, arcname=logical_name)
        except (OSError, zipfile.BadZipFile) as exc:
            target.unlink(missing_ok=True)
            logger.error(
                "siga.archive_merge_failed",
                container_id=container_id,
                archive=str(target),
                error=str(exc),
            )
            raise ArchiveMergeError(
                f"Failed to build signed archive {target}: {exc}",
                details={"container_id": container_id, "archive": str(target)},
            ) from exc
        except Exception as exc:
            target.unlink(missing_ok=True)
            logger.error(
                "siga.archive_merge_failed",
                container_id=container_id,
                archive=str(target),
                error=str(exc),
            )
            raise

        logger.info(
            "siga.archive_written",
            container_id=container_id,
            archive=str(target),
            added_files=len(files),
        )
        return target


__all__ = ["ARCHIVE_SUFFIX", "ArchiveMerger"]
