# pyprobe/core/device.py
from __future__ import annotations
import logging
import os
from typing import BinaryIO

logger = logging.getLogger(__name__)


class BlockDevice:
    def __init__(self, path: str | os.PathLike, readonly: bool = True) -> None:
        mode = 'rb' if readonly else 'r+b'
        self.path = os.fspath(path)
        self._f: BinaryIO = open(self.path, mode, buffering=0)
        self._size = os.path.getsize(self.path)

    @property
    def size(self) -> int:
        return self._size

    def read(self, offset: int, size: int) -> bytes:
        if offset < 0 or size < 0 or offset + size > self._size:
            raise ValueError(f"Read out of bounds: off={offset} size={size} total={self._size}")
        self._f.seek(offset)
        data = self._f.read(size)
        if len(data) != size:
            raise IOError(f"Short read at off={offset} want={size} got={len(data)}")
        return data

    def head(self, size: int) -> bytes:
        """Return up to ``size`` leading bytes; shorter files give what they have."""
        return self.read(0, min(size, self._size))

    def close(self) -> None:
        self._f.close()

    def __enter__(self) -> BlockDevice:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def read_head(path: str | os.PathLike, size: int) -> bytes:
    with BlockDevice(path) as dev:
        data = dev.head(size)
    logger.debug("read %d/%d head bytes from %s", len(data), size, dev.path)
    return data
