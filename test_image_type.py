#!/usr/bin/env python3
"""Magic-byte image sniffing"""

import io
import os

import pytest

from pyprobe.sniff.image_type import (
    detect_file_type,
    detect_image_type,
    detect_stream_type,
    matching_signature,
)
from pyprobe.sniff.signatures import IMAGE_SIGNATURES, LABELS, UNKNOWN


@pytest.mark.parametrize("prefix,label", IMAGE_SIGNATURES)
def test_every_signature_maps_to_its_label(prefix, label):
    assert detect_image_type(prefix) == label
    assert detect_image_type(prefix + b"\x00" * 16) == label


def test_concrete_headers():
    assert detect_image_type(bytes.fromhex("FFD8FFE000104A464946")) == "JPG"
    assert detect_image_type(bytes.fromhex("89504E470D0A1A0A")) == "PNG"
    assert detect_image_type(b"GIF89a\x01\x00") == "GIF"
    assert detect_image_type(b"BM6\x00\x0c\x00") == "BMP"
    assert detect_image_type(b"MM\x00*\x00\x00\x00\x08") == "TIFF"
    assert detect_image_type(bytes(4)) == UNKNOWN


def test_short_and_empty_input_is_unknown():
    assert detect_image_type(b"") == UNKNOWN
    assert detect_image_type(b"\x89PNG") == UNKNOWN  # truncated PNG prefix
    assert detect_image_type(b"\xFF\xD8") == UNKNOWN
    assert detect_image_type(b"B") == UNKNOWN


def test_bytes_like_inputs():
    assert detect_image_type(bytearray(b"GIF87a")) == "GIF"
    assert detect_image_type(memoryview(b"II*\x00rest")) == "TIFF"


def test_str_input_rejected():
    with pytest.raises(TypeError):
        detect_image_type("GIF89a")


def test_matching_signature_returns_prefix():
    assert matching_signature(b"BMxxxx") == (b"BM", "BMP")
    assert matching_signature(b"nothing") is None


def test_labels_closed_set():
    assert set(LABELS) == {"JPG", "TIFF", "BMP", "GIF", "PNG"}


def test_stream_position_restored():
    stream = io.BytesIO(b"junk" + b"\x89PNG\r\n\x1a\n" + b"\x00" * 8)
    stream.seek(4)
    assert detect_stream_type(stream) == "PNG"
    assert stream.tell() == 4


def test_pipe_stream():
    r, w = os.pipe()
    os.write(w, b"GIF89a" + b"\x00" * 4)
    os.close(w)
    with os.fdopen(r, "rb") as stream:
        assert not stream.seekable()
        assert detect_stream_type(stream) == "GIF"


class ChunkedRaw(io.RawIOBase):
    """Non-seekable raw stream handing out at most 3 bytes per read."""

    def __init__(self, data):
        super().__init__()
        self._data = data

    def readable(self):
        return True

    def readinto(self, b):
        n = min(3, len(b), len(self._data))
        b[:n] = self._data[:n]
        self._data = self._data[n:]
        return n


def test_short_reads_are_joined():
    assert detect_stream_type(ChunkedRaw(b"\x89PNG\r\n\x1a\n rest")) == "PNG"
    assert detect_stream_type(ChunkedRaw(b"\x89PN")) == UNKNOWN


def test_detect_file_type(tmp_path):
    img = tmp_path / "photo.bin"
    img.write_bytes(b"\xFF\xD8\xFF\xE1" + b"\x00" * 100)
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    assert detect_file_type(img) == "JPG"
    assert detect_file_type(str(empty)) == UNKNOWN


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        detect_file_type(tmp_path / "nope.png")


def main():
    raise SystemExit(pytest.main([__file__, "-q"]))

if __name__ == "__main__":
    main()
