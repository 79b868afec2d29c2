from __future__ import annotations
import logging
import os
from typing import BinaryIO, Optional, Tuple

from .. import config
from ..core.device import read_head
from .signatures import IMAGE_SIGNATURES, UNKNOWN

logger = logging.getLogger(__name__)

# Upper-case hex of every prefix, computed once.
_HEX_SIGNATURES = tuple((prefix.hex().upper(), prefix, label) for prefix, label in IMAGE_SIGNATURES)


def matching_signature(data: bytes) -> Optional[Tuple[bytes, str]]:
    if isinstance(data, str):
        raise TypeError("expected bytes-like input, got str")
    head = bytes(data[:config.SNIFF_LENGTH]).hex().upper()
    for hex_prefix, prefix, label in _HEX_SIGNATURES:
        # a shorter head can never start with a longer prefix
        if head.startswith(hex_prefix):
            return prefix, label
    return None


def detect_image_type(data: bytes) -> str:
    """Map the leading magic bytes of ``data`` to an image label or ``'unknown'``."""
    hit = matching_signature(data)
    return hit[1] if hit else UNKNOWN


def detect_stream_type(stream: BinaryIO) -> str:
    """Sniff a binary stream; seekable streams are left where they were."""
    seekable = stream.seekable()
    pos = stream.tell() if seekable else None
    head = b''
    try:
        # raw streams and pipes may return fewer bytes per call
        while len(head) < config.SNIFF_LENGTH:
            chunk = stream.read(config.SNIFF_LENGTH - len(head))
            if not chunk:
                break
            head += chunk
    finally:
        if seekable:
            stream.seek(pos)
    return detect_image_type(head)


def detect_file_type(path: str | os.PathLike) -> str:
    label = detect_image_type(read_head(path, config.SNIFF_LENGTH))
    logger.debug("%s sniffed as %s", os.fspath(path), label)
    return label
