"""
File converter configuration
Values come from the environment; classes are selected by FLASK_ENV.
"""
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))

MB = 1024 * 1024


def _optional_float(name, default=None):
    value = os.environ.get(name, "").strip()
    return float(value) if value else default


class Config:
    """Base configuration"""
    # Server
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 3000))
    PORT_RETRIES = int(os.environ.get("PORT_RETRIES", 5))

    # Scratch areas (transient, never relied upon across restarts)
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", os.path.join(PROJECT_ROOT, "uploads"))
    OUTPUT_FOLDER = os.environ.get("OUTPUT_FOLDER", os.path.join(PROJECT_ROOT, "outputs"))

    # Upload limits
    MAX_UPLOAD_SIZE = 20 * MB
    MAX_CONTENT_LENGTH = MAX_UPLOAD_SIZE + 1 * MB  # multipart overhead
    ALLOWED_MIME_TYPES = (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/pdf",
        "image/jpeg",
        "image/png",
    )

    # LibreOffice
    LIBREOFFICE_PATH = os.environ.get("LIBREOFFICE_PATH") or None
    LIBREOFFICE_TIMEOUT = _optional_float("LIBREOFFICE_TIMEOUT", 60.0)
    OFFICE_TO_PDF_TIMEOUT = _optional_float("OFFICE_TO_PDF_TIMEOUT")

    # PDF -> image
    RASTERIZER = os.environ.get("RASTERIZER", "auto")
    RASTER_DPI = int(os.environ.get("RASTER_DPI", 150))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    RASTERIZER = "pymupdf"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration class for environment"""
    env = env or os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
