"""Streaming the converted file back and removing everything the request created."""
import logging
import os
import shutil
import threading

from flask import send_file

logger = logging.getLogger(__name__)


def remove_path(path):
    """Delete a file or directory tree. Failures are logged, never raised."""
    if not path or not os.path.lexists(path):
        return False
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except OSError as e:
        logger.error("Cleanup error for %s: %s", path, e)
        return False
    logger.debug("Removed %s", path)
    return True


class ScratchFiles:
    """Every path one request created: the upload, the output, an output directory.

    ``cleanup`` runs its deletions exactly once no matter how many of the
    success/error/close paths reach it.
    """

    def __init__(self):
        self.upload_path = None
        self.output_path = None
        self.output_dir = None
        self._lock = threading.Lock()
        self._cleaned = False

    @property
    def paths(self):
        return [p for p in (self.upload_path, self.output_path, self.output_dir) if p]

    @property
    def cleaned(self):
        return self._cleaned

    def cleanup(self):
        with self._lock:
            if self._cleaned:
                return
            self._cleaned = True
        for path in self.paths:
            remove_path(path)


def download_response(path, scratch, filename=None):
    """Send ``path`` as an attachment and clean ``scratch`` up once the response closes.

    Must be called inside a request.
    """
    response = send_file(path, as_attachment=True, download_name=filename or os.path.basename(path))
    # a passthrough body goes to the server unwrapped and call_on_close hooks never run
    response.direct_passthrough = False
    response.headers["Access-Control-Expose-Headers"] = "Content-Disposition"
    response.call_on_close(scratch.cleanup)
    return response
