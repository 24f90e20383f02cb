"""The four conversion operations.

Each one turns an input path into an output file using an external engine
(LibreOffice, a PDF rasterizer, PyMuPDF) and either leaves a finished file
behind or raises a ``ConversionFailed`` subclass.
"""
import logging
import os
import pathlib
import shutil
import sys
import tempfile

import fitz  # PyMuPDF
from PIL import Image

from .commands import run_command
from .delivery import remove_path
from .errors import ConversionFailed, NoOutputProduced

logger = logging.getLogger(__name__)

OFFICE_EXTENSIONS = (".docx", ".pptx", ".xlsx")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")
# Pillow reports multi-picture camera JPEGs as MPO
JPEG_FORMATS = ("JPEG", "MPO")


def resolve_office_command(explicit=None, platform=None, environ=None):
    """Find the LibreOffice executable.

    Windows and macOS installs usually live outside PATH, so the standard
    install locations are checked before falling back to a bare command name.
    """
    if explicit:
        return explicit

    platform = platform or sys.platform
    environ = os.environ if environ is None else environ

    if platform == "win32":
        program_files = environ.get("PROGRAMFILES", r"C:\Program Files")
        program_files_x86 = environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")
        candidates = [
            os.path.join(program_files, "LibreOffice", "program", "soffice.exe"),
            os.path.join(program_files_x86, "LibreOffice", "program", "soffice.exe"),
        ]
        fallback = "soffice"
    elif platform == "darwin":
        candidates = ["/Applications/LibreOffice.app/Contents/MacOS/soffice"]
        fallback = "soffice"
    else:
        candidates = []
        fallback = "libreoffice"

    for path in candidates:
        if os.path.exists(path):
            logger.info("Found LibreOffice at: %s", path)
            return path

    return fallback


def office_env():
    """Environment for soffice: its bundled Python must not see ours."""
    env = dict(os.environ)
    env.pop("PYTHONHOME", None)
    env.pop("PYTHONPATH", None)
    return env


def _extension(path):
    return os.path.splitext(path)[1].lower()


class Converter:
    """Holds the engines chosen at startup; the operations themselves are stateless."""

    def __init__(self, rasterizer, office_command="libreoffice", office_timeout=None,
                 docx_timeout=60.0, work_dir=None):
        self.rasterizer = rasterizer
        self.office_command = office_command
        self.office_timeout = office_timeout
        self.docx_timeout = docx_timeout
        self.work_dir = work_dir

    # ------ LIBREOFFICE ------

    def _run_office(self, source, out_dir, args, timeout):
        profile = os.path.join(out_dir, "profile")
        command = [
            self.office_command,
            "--headless",
            f"-env:UserInstallation={pathlib.Path(profile).as_uri()}",
            *args,
            "--outdir", out_dir,
            source,
        ]
        run_command(command, timeout=timeout, env=office_env())

    def _office_workdir(self):
        if self.work_dir:
            os.makedirs(self.work_dir, exist_ok=True)
        return tempfile.mkdtemp(prefix="lo_", dir=self.work_dir)

    def office_to_pdf(self, input_path, output_path):
        """DOCX/PPTX/XLSX -> PDF through LibreOffice's PDF export."""
        ext = _extension(input_path)
        if ext not in OFFICE_EXTENSIONS:
            raise ConversionFailed(f"Unsupported office format: {ext}")

        temp_dir = self._office_workdir()
        try:
            source = os.path.join(temp_dir, f"source{ext}")
            shutil.copyfile(input_path, source)
            self._run_office(source, temp_dir, ["--convert-to", "pdf"], self.office_timeout)

            produced = os.path.join(temp_dir, "source.pdf")
            if not os.path.exists(produced):
                raise NoOutputProduced("Office to PDF produced no output. Is LibreOffice installed?")
            shutil.move(produced, output_path)
        finally:
            remove_path(temp_dir)

        return output_path

    def pdf_to_docx(self, input_path, output_dir):
        """PDF -> DOCX by importing the PDF as a Writer document.

        The input is copied to a whitespace-free name in a private working
        directory first; LibreOffice is picky about paths.
        """
        os.makedirs(output_dir, exist_ok=True)
        base_name = os.path.splitext(os.path.basename(input_path))[0]

        temp_dir = self._office_workdir()
        try:
            temp_pdf = os.path.join(temp_dir, "in.pdf")
            temp_docx = os.path.join(temp_dir, "in.docx")
            shutil.copyfile(input_path, temp_pdf)

            self._run_office(
                temp_pdf,
                temp_dir,
                ["--infilter=writer_pdf_import", "--convert-to", "docx"],
                self.docx_timeout,
            )
            if not os.path.exists(temp_docx):
                raise NoOutputProduced("PDF to DOCX produced no output. Is LibreOffice installed?")

            docx_path = os.path.join(output_dir, f"{base_name}.docx")
            shutil.move(temp_docx, docx_path)
        finally:
            remove_path(temp_dir)

        return docx_path

    # ------ PDF -> IMAGE ------

    def pdf_to_jpg(self, input_path, output_dir):
        """Render the first page of a PDF to ``<output_dir>/page-1.jpg``."""
        os.makedirs(output_dir, exist_ok=True)
        try:
            return self.rasterizer.render_first_page(input_path, output_dir, prefix="page")
        except ConversionFailed:
            raise
        except (RuntimeError, ValueError, OSError) as e:
            # PyMuPDF reports unreadable documents as RuntimeError/ValueError subclasses
            raise ConversionFailed(f"PDF to JPG failed: {e}") from e

    # ------ IMAGE -> PDF ------

    def image_to_pdf(self, input_path, output_path):
        """JPG/PNG -> single page PDF sized to the image's pixel dimensions."""
        ext = _extension(input_path)
        if ext not in IMAGE_EXTENSIONS:
            raise ConversionFailed(f"Unsupported image format: {ext}")

        codec, formats = ("PNG", ("PNG",)) if ext == ".png" else ("JPEG", JPEG_FORMATS)
        try:
            with Image.open(input_path) as img:
                width, height = img.size
                if img.format not in formats:
                    raise ConversionFailed(f"{os.path.basename(input_path)} is not a valid {codec} image.")

            with open(input_path, "rb") as f:
                image_bytes = f.read()

            with fitz.open() as doc:
                page = doc.new_page(width=width, height=height)
                page.insert_image(
                    fitz.Rect(0, 0, width, height),
                    stream=image_bytes,
                    keep_proportion=False,
                )
                pdf_bytes = doc.tobytes()
        except (OSError, RuntimeError, ValueError) as e:
            # Pillow raises UnidentifiedImageError (an OSError) for non-images
            raise ConversionFailed(f"Image to PDF failed: {e}") from e

        with open(output_path, "wb") as f:
            f.write(pdf_bytes)
        return output_path
