import logging
import os

logger = logging.getLogger(__name__)

def _env_bool(name: str, default: bool = False) -> bool:
    v = str(os.getenv(name, str(default))).strip().lower()
    return v in ("1", "true", "t", "yes", "y", "on")

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        n = int(v.strip(), 10)
    except ValueError:
        n = 0
    if n <= 0:
        logger.warning("%s=%r is not a positive integer, using %d", name, v, default)
        return default
    return n

def _env_log_level(name: str, default: str) -> str:
    v = os.getenv(name, default).strip().upper()
    if not isinstance(logging.getLevelName(v), int):
        logger.warning("%s=%r is not a logging level, using %s", name, v, default)
        return default
    return v

# Sniffing: the longest known image signature is 8 bytes (PNG)
SNIFF_LENGTH = 8

# PE linker timestamp: how much of the file head is read
HEAD_SIZE = _env_int("PYPROBE_HEAD_SIZE", 2048)
STRICT_SIGNATURE = _env_bool("PYPROBE_STRICT_SIGNATURE", False)

# Version-string recipes: "1.0.0+build20240131235959"
BUILD_MARKER = os.getenv("PYPROBE_BUILD_MARKER") or "+build"
BUILD_DATE_FORMAT = "%Y%m%d%H%M%S"
BUILD_DATE_ATTRIBUTE = "__build_date__"

# Logging
LOG_LEVEL = _env_log_level("PYPROBE_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
