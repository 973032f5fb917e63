import logging
import os
import sys
import time

from dotenv import load_dotenv

load_dotenv()

# Lines printed by the separation tool; demucs progress bars make it the noisiest source.
TOOL_LOGGER = "transmission_splitter.separator.tool"
_QUIET_LIBRARIES = ("botocore", "boto3", "s3transfer", "urllib3")


class UTCFormatter(logging.Formatter):
    converter = time.gmtime


def _level(name: str, default: str) -> int:
    value = os.getenv(name, default).upper()
    level = logging.getLevelName(value)
    if not isinstance(level, int):
        raise RuntimeError(f"{name} must be a logging level, got {value!r}")
    return level


def setup_logging(log_level: str = "INFO") -> logging.StreamHandler:
    """
    Log everything to stdout with UTC timestamps.

    LOG_LEVEL sets the root level, TOOL_LOG_LEVEL (default: same as root) the
    level of the separation tool's output, e.g. WARNING to drop its progress lines.
    AWS libraries never go below INFO, their DEBUG output includes request signatures.
    """
    root_level = _level("LOG_LEVEL", log_level)
    fmt = "%(asctime)sZ %(levelname)s %(name)s %(message)s"
    datefmt = "%Y-%m-%dT%H:%M:%S"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(UTCFormatter(fmt=fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers = [handler]

    logging.getLogger(TOOL_LOGGER).setLevel(_level("TOOL_LOG_LEVEL", logging.getLevelName(root_level)))
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(root_level, logging.INFO))

    return handler
