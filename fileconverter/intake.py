"""Upload intake: allow-list and size checks, then a collision-resistant save."""
import logging
import os
import re
import time
import uuid
from typing import NamedTuple

from werkzeug.utils import secure_filename

from .errors import FileTooLarge, NoFileError, UnsupportedFileType

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]+$")


class UploadRecord(NamedTuple):
    original_name: str
    mimetype: str
    path: str
    size: int


def timestamped(base):
    """``base`` plus a millisecond time suffix and a short random tag.

    Requests run on separate threads, so the time alone can repeat.
    """
    return f"{base}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def split_filename(filename):
    """(safe base name, lower-cased extension with dot) for a client supplied name."""
    stem, ext = os.path.splitext(filename or "")
    ext = ext.lower()
    if not _EXTENSION_RE.match(ext):
        ext = ""
    return secure_filename(stem) or "upload", ext


def _stream_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def validate_upload(file, allowed_mime_types, max_size):
    """Reject a missing, disallowed or oversized upload. Nothing is written to disk.

    Returns the upload's size in bytes.
    """
    if file is None or not file.filename:
        raise NoFileError()

    if file.mimetype not in allowed_mime_types:
        logger.warning("Unsupported file type attempted: %s (%s)", file.filename, file.mimetype)
        raise UnsupportedFileType()

    size = _stream_size(file)
    if size > max_size:
        logger.warning("File too large: %s (%d bytes)", file.filename, size)
        raise FileTooLarge(max_size)

    return size


def store_upload(file, upload_folder, size):
    """Persist a validated upload as ``<base>-<millis>-<tag><ext>`` in ``upload_folder``."""
    base, ext = split_filename(file.filename)
    os.makedirs(upload_folder, exist_ok=True)
    path = os.path.join(upload_folder, f"{timestamped(base)}{ext}")
    file.save(path)

    logger.info("Stored upload %s (%s, %d bytes) at %s", file.filename, file.mimetype, size, path)
    return UploadRecord(
        original_name=f"{base}{ext}",
        mimetype=file.mimetype,
        path=path,
        size=size,
    )
