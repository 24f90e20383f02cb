import logging
import os
import subprocess
import time

from .errors import ToolFailed, ToolNotFound, ToolTimeout

logger = logging.getLogger(__name__)

STDERR_TAIL = 2000


def run_command(args, timeout=None, env=None, cwd=None):
    """Run an external converter and wait for it, at most ``timeout`` seconds.

    ``subprocess.run`` kills the child when the deadline passes, so a
    timed-out converter never outlives the request that started it.

    Raises:
        ToolNotFound: the executable does not exist.
        ToolTimeout: the deadline expired.
        ToolFailed: the process exited with a non-zero status.
    """
    command = os.path.basename(args[0])
    logger.info("Running %s", " ".join(args))
    started = time.monotonic()

    try:
        result = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            env=env,
            cwd=cwd,
            check=False,
        )
    except FileNotFoundError as e:
        logger.error("%s not found: %s", command, e)
        raise ToolNotFound(command) from e
    except subprocess.TimeoutExpired as e:
        logger.error("%s timed out after %ss", command, timeout)
        raise ToolTimeout(command, timeout) from e

    elapsed = time.monotonic() - started
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")[-STDERR_TAIL:]
        logger.error("%s exited with %s after %.2fs: %s", command, result.returncode, elapsed, stderr)
        raise ToolFailed(command, result.returncode, stderr)

    logger.info("%s finished in %.2fs", command, elapsed)
    return result
