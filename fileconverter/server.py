"""Process entry point: logging, scratch folders, port negotiation, serve."""
import errno
import logging
import socket
import sys

from . import create_app
from .config import get_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)


def port_is_free(host, port):
    """Bind test with the same SO_REUSEADDR the Werkzeug server sets.

    Without it a port left in TIME_WAIT looks busy.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return False
            raise
    return True


def find_open_port(host, port, retries):
    """First free port in ``port .. port + retries``, or None."""
    for candidate in range(port, port + retries + 1):
        if port_is_free(host, candidate):
            return candidate
        logger.warning("Port %s is in use, trying %s", candidate, candidate + 1)
    return None


def main(config_name=None):
    configure_logging(get_config(config_name).LOG_LEVEL)
    app = create_app(config_name)

    host = app.config["HOST"]
    port = find_open_port(host, app.config["PORT"], app.config["PORT_RETRIES"])
    if port is None:
        logger.critical(
            "Failed to start server: ports %s-%s are all in use",
            app.config["PORT"], app.config["PORT"] + app.config["PORT_RETRIES"],
        )
        sys.exit(1)

    logger.info("Universal File Converter running at http://localhost:%s", port)
    app.run(host=host, port=port, threaded=True, debug=False)


if __name__ == "__main__":
    main()
