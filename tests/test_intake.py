"""
Upload intake tests
"""
import io
import os
import re
import time

import pytest
from werkzeug.datastructures import FileStorage

from fileconverter.config import Config
from fileconverter.errors import FileTooLarge, NoFileError, UnsupportedFileType
from fileconverter.intake import split_filename, store_upload, validate_upload


def storage(data=b"x" * 10, filename="photo.png", mimetype="image/png"):
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=mimetype)


class TestValidateUpload:

    def test_accepts_allow_listed(self):
        assert validate_upload(storage(), Config.ALLOWED_MIME_TYPES, 1024) == 10

    def test_no_file(self):
        with pytest.raises(NoFileError):
            validate_upload(None, Config.ALLOWED_MIME_TYPES, 1024)
        with pytest.raises(NoFileError):
            validate_upload(storage(filename=""), Config.ALLOWED_MIME_TYPES, 1024)

    @pytest.mark.parametrize("mimetype", ["text/plain", "image/gif", "application/msword", ""])
    def test_disallowed_type(self, mimetype):
        with pytest.raises(UnsupportedFileType) as exc_info:
            validate_upload(storage(mimetype=mimetype), Config.ALLOWED_MIME_TYPES, 1024)
        assert exc_info.value.message == "File type not supported. Use DOCX, PPTX, XLSX, PDF, JPG, or PNG."

    def test_size_ceiling_is_inclusive(self):
        assert validate_upload(storage(b"x" * 1024), Config.ALLOWED_MIME_TYPES, 1024) == 1024
        with pytest.raises(FileTooLarge):
            validate_upload(storage(b"x" * 1025), Config.ALLOWED_MIME_TYPES, 1024)

    def test_size_message(self):
        assert FileTooLarge(Config.MAX_UPLOAD_SIZE).message == "File too large. Maximum size is 20MB."


class TestStoreUpload:

    def test_unique_name_keeps_extension(self, tmp_path):
        record = store_upload(storage(b"abc", "My Photo.PNG"), str(tmp_path / "uploads"), 3)

        name = os.path.basename(record.path)
        assert re.fullmatch(r"My_Photo-\d{13}-[0-9a-f]{8}\.png", name)
        assert record.original_name == "My_Photo.png"
        assert record.size == 3
        with open(record.path, "rb") as f:
            assert f.read() == b"abc"

    def test_same_name_same_millisecond_do_not_collide(self, tmp_path, monkeypatch):
        monkeypatch.setattr(time, "time", lambda: 1700000000.0)
        folder = str(tmp_path / "uploads")

        first = store_upload(storage(b"first", "a.png"), folder, 5)
        second = store_upload(storage(b"second", "a.png"), folder, 6)

        assert first.path != second.path
        assert os.path.basename(first.path).startswith("a-1700000000000-")
        with open(first.path, "rb") as f:
            assert f.read() == b"first"


class TestSplitFilename:

    @pytest.mark.parametrize("filename,expected", [
        ("report.DOCX", ("report", ".docx")),
        ("../../etc/passwd.pdf", ("etc_passwd", ".pdf")),
        ("отчёт.pdf", ("upload", ".pdf")),
        ("archive.tar.gz", ("archive.tar", ".gz")),
        ("noext", ("noext", "")),
        ("weird.p d f", ("weird", "")),
    ])
    def test_split(self, filename, expected):
        assert split_filename(filename) == expected
