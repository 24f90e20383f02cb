"""
Universal File Converter
DOCX/PPTX/XLSX -> PDF, PDF -> JPG/DOCX, JPG/PNG -> PDF
"""
import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from .config import get_config
from .conversions import Converter, resolve_office_command
from .errors import ConverterError, FileTooLarge
from .rasterizers import select_rasterizer
from .routing import COMPATIBILITY_TABLE, ConversionRouter

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def ensure_dirs(app):
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    os.makedirs(app.config["OUTPUT_FOLDER"], exist_ok=True)


def build_converter(config):
    rasterizer = select_rasterizer(config["RASTERIZER"], config["RASTER_DPI"])
    return Converter(
        rasterizer=rasterizer,
        office_command=resolve_office_command(config.get("LIBREOFFICE_PATH")),
        office_timeout=config.get("OFFICE_TO_PDF_TIMEOUT"),
        docx_timeout=config.get("LIBREOFFICE_TIMEOUT"),
        work_dir=config["OUTPUT_FOLDER"],
    )


def create_app(config_name=None, overrides=None, operations=None):
    """Application factory.

    ``operations`` maps operation names from the compatibility table to
    callables; by default they come from a ``Converter`` built from config.
    """
    app = Flask(__name__, static_folder="public", static_url_path="")
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    ensure_dirs(app)

    if operations is None:
        converter = build_converter(app.config)
        operations = {
            "office_to_pdf": converter.office_to_pdf,
            "pdf_to_jpg": converter.pdf_to_jpg,
            "pdf_to_docx": converter.pdf_to_docx,
            "image_to_pdf": converter.image_to_pdf,
        }
        app.extensions["fileconverter.converter"] = converter

    app.extensions["fileconverter.router"] = ConversionRouter(
        COMPATIBILITY_TABLE, operations, app.config["OUTPUT_FOLDER"]
    )

    from .views import bp
    app.register_blueprint(bp)

    @app.errorhandler(ConverterError)
    def converter_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        logger.warning("Request body over MAX_CONTENT_LENGTH rejected")
        error = FileTooLarge(app.config["MAX_UPLOAD_SIZE"])
        return jsonify(error.to_dict()), error.status_code

    return app
