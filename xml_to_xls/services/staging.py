"""Staging files for uploads and their guaranteed removal."""
import logging
import re
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..config import config
from ..utils.audit import audit_logger
from ..utils.errors import CleanupFailure

log = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "upload.xml"


def sanitize_filename(filename: str) -> str:
    name = Path(filename or "").name
    return re.sub(r"[^a-zA-Z0-9.-]", "_", name) or DEFAULT_UPLOAD_NAME


def staging_path(filename: Optional[str], upload_dir: Optional[Path] = None) -> Path:
    """A collision-free path for one upload: epoch millis, random tag, sanitized name."""
    upload_dir = Path(upload_dir) if upload_dir else config.UPLOAD_DIR
    upload_dir.mkdir(parents=True, exist_ok=True)
    timestamp = int(time.time() * 1000)
    return upload_dir / f"{timestamp}-{uuid.uuid4().hex[:8]}-{sanitize_filename(filename)}"


def cleanup_files(paths: Iterable[Path], user_id: str = "system") -> None:
    """Delete staging files. Failures are logged and never raised."""
    for path in paths:
        path = Path(path)
        try:
            if not path.exists():
                continue
            path.unlink()
        except OSError as e:
            failure = CleanupFailure(f"Error deleting file {path}: {str(e)}")
            log.error(failure.message)
            audit_logger.log_error("delete", failure, user_id=user_id, path=str(path))
            continue
        audit_logger.log_staging("delete", path, user_id=user_id)


@contextmanager
def release_on_failure(*paths: Path) -> Iterator[None]:
    """Delete ``paths`` if the block raises; on success the caller owns them."""
    try:
        yield
    except BaseException:
        cleanup_files(paths)
        raise
