from __future__ import annotations
from typing import Tuple

UNKNOWN = 'unknown'

# Ordered: first match wins.
IMAGE_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b'\xFF\xD8\xFF', 'JPG'),
    (b'II*\x00', 'TIFF'),  # little endian
    (b'MM\x00*', 'TIFF'),  # big endian
    (b'BM', 'BMP'),
    (b'GIF8', 'GIF'),  # GIF87a / GIF89a
    (b'\x89PNG\r\n\x1a\n', 'PNG'),
)

LABELS = tuple(dict.fromkeys(label for _, label in IMAGE_SIGNATURES))
