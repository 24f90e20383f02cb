"""
Test Configuration and Fixtures
"""
import io
import os
import zipfile

import fitz  # PyMuPDF
import pytest
from PIL import Image

from fileconverter import create_app


def scratch_overrides(tmp_path):
    return {
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "OUTPUT_FOLDER": str(tmp_path / "outputs"),
    }


def scratch_contents(app):
    """Everything left in the upload and output folders."""
    leftovers = []
    for key in ("UPLOAD_FOLDER", "OUTPUT_FOLDER"):
        folder = app.config[key]
        leftovers.extend(os.listdir(folder) if os.path.isdir(folder) else [])
    return leftovers


def make_image(size=(40, 30), fmt="PNG", color="red"):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_mpo(size=(48, 32)):
    """Two-frame multi-picture JPEG, as phone cameras write them."""
    buf = io.BytesIO()
    first = Image.new("RGB", size, "green")
    second = Image.new("RGB", size, "yellow")
    first.save(buf, format="MPO", save_all=True, append_images=[second])
    return buf.getvalue()


def make_pdf(pages=1, size=(200, 100)):
    with fitz.open() as doc:
        for n in range(pages):
            page = doc.new_page(width=size[0], height=size[1])
            page.insert_text((20, 50), f"Page {n + 1}")
        return doc.tobytes()


def make_docx(text="Hello from the converter tests"):
    """Smallest DOCX LibreOffice will open."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as z:
        z.writestr("[Content_Types].xml", (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
            '<Default Extension="xml" ContentType="application/xml"/>'
            '<Override PartName="/word/document.xml" '
            'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
            '</Types>'
        ))
        z.writestr("_rels/.rels", (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            '<Relationship Id="rId1" '
            'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
            'Target="word/document.xml"/>'
            '</Relationships>'
        ))
        z.writestr("word/document.xml", (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
            f'<w:body><w:p><w:r><w:t>{text}</w:t></w:r></w:p></w:body>'
            '</w:document>'
        ))
    return buf.getvalue()


@pytest.fixture
def app(tmp_path):
    """Application with scratch folders under tmp_path"""
    return create_app("testing", overrides=scratch_overrides(tmp_path))


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def png_bytes():
    return make_image((40, 30), "PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image((64, 48), "JPEG", color="blue")


@pytest.fixture
def pdf_bytes():
    return make_pdf(pages=2)


@pytest.fixture
def recorded_calls():
    return []


@pytest.fixture
def fake_operations(recorded_calls):
    """Operations that only record their calls and write a stub output."""
    def file_op(name):
        def op(input_path, output_path):
            recorded_calls.append((name, input_path, output_path))
            with open(output_path, "wb") as f:
                f.write(b"converted")
            return output_path
        return op

    def dir_op(name, filename):
        def op(input_path, output_dir):
            recorded_calls.append((name, input_path, output_dir))
            path = os.path.join(output_dir, filename)
            with open(path, "wb") as f:
                f.write(b"converted")
            return path
        return op

    return {
        "office_to_pdf": file_op("office_to_pdf"),
        "pdf_to_jpg": dir_op("pdf_to_jpg", "page-1.jpg"),
        "pdf_to_docx": dir_op("pdf_to_docx", "out.docx"),
        "image_to_pdf": file_op("image_to_pdf"),
    }
