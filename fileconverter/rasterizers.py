"""First-page PDF rasterizers.

Two providers write the same file, ``<prefix>-1.jpg`` inside the output
directory, so callers never care which one is active:

* ``PdftoppmRasterizer`` shells out to poppler's ``pdftoppm`` (Linux hosts).
* ``PyMuPDFRasterizer`` renders in-process with PyMuPDF and encodes with Pillow.

``select_rasterizer`` picks one when the app starts.
"""
import logging
import os
import shutil
import sys

import fitz  # PyMuPDF
from PIL import Image

from .commands import run_command
from .errors import NoOutputProduced

logger = logging.getLogger(__name__)

DEFAULT_DPI = 150


def first_page_path(output_dir, prefix="page"):
    return os.path.join(output_dir, f"{prefix}-1.jpg")


class Rasterizer:
    name = "base"

    def __init__(self, dpi=DEFAULT_DPI):
        self.dpi = dpi

    def render_first_page(self, pdf_path, output_dir, prefix="page"):
        raise NotImplementedError


class PdftoppmRasterizer(Rasterizer):
    name = "pdftoppm"

    def __init__(self, dpi=DEFAULT_DPI, command="pdftoppm"):
        super().__init__(dpi)
        self.command = command

    def render_first_page(self, pdf_path, output_dir, prefix="page"):
        target = first_page_path(output_dir, prefix)
        # -singlefile drops the page number, so name the prefix after page 1
        run_command([
            self.command,
            "-jpeg",
            "-r", str(self.dpi),
            "-f", "1",
            "-l", "1",
            "-singlefile",
            pdf_path,
            os.path.splitext(target)[0],
        ])
        if not os.path.exists(target):
            raise NoOutputProduced("PDF to JPG conversion produced no output.")
        return target


class PyMuPDFRasterizer(Rasterizer):
    name = "pymupdf"

    def render_first_page(self, pdf_path, output_dir, prefix="page"):
        target = first_page_path(output_dir, prefix)

        # PyMuPDF uses 72 DPI as base, so zoom = desired_dpi / 72
        zoom = self.dpi / 72.0
        with fitz.open(pdf_path) as pdf_document:
            if pdf_document.page_count == 0:
                raise NoOutputProduced("PDF to JPG conversion produced no output.")
            pix = pdf_document[0].get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)

        img = Image.frombytes("RGB", [pix.width, pix.height], pix.samples)
        img.save(target, format="JPEG", quality=95)

        if not os.path.exists(target):
            raise NoOutputProduced("PDF to JPG conversion produced no output.")
        return target


RASTERIZERS = {
    PdftoppmRasterizer.name: PdftoppmRasterizer,
    PyMuPDFRasterizer.name: PyMuPDFRasterizer,
}


def select_rasterizer(name="auto", dpi=DEFAULT_DPI, platform=None):
    """Inspect the host once and return the rasterizer to use for every request."""
    platform = platform or sys.platform
    if name == "auto":
        if platform.startswith("linux") and shutil.which("pdftoppm"):
            name = PdftoppmRasterizer.name
        else:
            name = PyMuPDFRasterizer.name

    try:
        rasterizer = RASTERIZERS[name](dpi=dpi)
    except KeyError:
        raise ValueError(f"Unknown rasterizer {name!r}; expected auto, pdftoppm or pymupdf") from None

    logger.info("Using %s rasterizer at %s DPI", rasterizer.name, dpi)
    return rasterizer
