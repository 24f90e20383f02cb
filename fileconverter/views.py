import logging

from flask import Blueprint, current_app, jsonify, request

from .delivery import ScratchFiles, download_response
from .errors import ConverterError
from .intake import split_filename, store_upload, validate_upload

logger = logging.getLogger(__name__)

bp = Blueprint("converter", __name__)


def get_router():
    return current_app.extensions["fileconverter.router"]


@bp.route("/")
def index():
    return current_app.send_static_file("index.html")


@bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@bp.route("/convert", methods=["POST"])
def convert():
    """Convert one uploaded file and stream the result back.

    Request (multipart/form-data):
        - file: DOCX, PPTX, XLSX, PDF, JPG or PNG, at most 20MB
        - targetFormat: pdf, jpg or docx

    Responses:
        - 200 with the converted file as an attachment
        - 400 {"error": ...} for bad uploads and unsupported pairs
        - 500 {"error": "Conversion failed: ..."} when a converter fails

    Uploaded and generated files are removed once the response is sent or
    as soon as anything fails.
    """
    router = get_router()
    config = current_app.config

    # ------ VALIDATE FILE ------
    file = request.files.get("file")
    size = validate_upload(file, config["ALLOWED_MIME_TYPES"], config["MAX_UPLOAD_SIZE"])

    # ------ PICK CONVERSION ------
    _, ext = split_filename(file.filename)
    route = router.resolve(ext, request.form.get("targetFormat"))

    # ------ STORE, CONVERT, SEND ------
    scratch = ScratchFiles()
    try:
        upload = store_upload(file, config["UPLOAD_FOLDER"], size)
        scratch.upload_path = upload.path
        output_path = router.dispatch(route, upload.path, upload.original_name, scratch)
        response = download_response(output_path, scratch)
    except ConverterError as e:
        logger.error("Conversion %s -> %s failed: %s", ext, route.target, e)
        scratch.cleanup()
        raise
    except Exception as e:
        logger.exception("Unexpected error converting %s", file.filename)
        scratch.cleanup()
        raise ConverterError() from e

    logger.info("Conversion successful: %s -> %s", upload.original_name, output_path)
    return response
