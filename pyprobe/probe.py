from __future__ import annotations
import logging
import os
from typing import Any, Dict

from .errors import ProbeError
from .pe.header import read_linker_timestamp
from .sniff.image_type import detect_file_type
from .sniff.signatures import UNKNOWN

logger = logging.getLogger(__name__)


def probe_file(path: str | os.PathLike) -> Dict[str, Any]:
    """Sniff one file and, when it is not an image, try its linker timestamp."""
    path = os.fspath(path)
    item: Dict[str, Any] = {
        "path": path,
        "name": os.path.basename(path),
        "type": None,
        "build_date": None,
        "note": "",
    }
    try:
        item["type"] = detect_file_type(path)
    except OSError as e:
        item["note"] = f"read failed: {e}"
        return item
    if item["type"] != UNKNOWN:
        return item
    try:
        item["build_date"] = read_linker_timestamp(path).isoformat()
    except (ProbeError, OSError) as e:
        logger.debug("%s: no linker timestamp (%s)", path, e)
        item["note"] = str(e)
    return item
