#!/usr/bin/env python3
"""Linker timestamp decoding from synthetic PE heads"""

import logging
import struct
from datetime import datetime, timedelta, timezone

import pytest

from pyprobe import config
from pyprobe.errors import PeFormatError
from pyprobe.pe.header import (
    EPOCH,
    PE_HEADER_OFFSET,
    encode_linker_timestamp,
    linker_timestamp,
    parse_pe_header,
    read_linker_timestamp,
)


def _raw_head(pe_offset: int, seconds: int, size: int = 2048) -> bytes:
    buf = bytearray(size)
    buf[0:2] = b"MZ"
    struct.pack_into("<I", buf, PE_HEADER_OFFSET, pe_offset)
    buf[pe_offset:pe_offset + 4] = b"PE\x00\x00"
    struct.pack_into("<HHI", buf, pe_offset + 4, 0x8664, 6, seconds)
    return bytes(buf)


def test_known_offset_and_seconds():
    buf = _raw_head(0xF8, 1_700_000_000)
    hdr = parse_pe_header(buf)
    assert hdr.pe_offset == 0xF8
    assert hdr.signature_ok
    assert hdr.machine_name == "amd64"
    assert hdr.number_of_sections == 6
    assert hdr.time_date_stamp == 1_700_000_000
    assert linker_timestamp(buf) == EPOCH + timedelta(seconds=1_700_000_000)


def test_round_trip_exact_seconds():
    for when in (
        EPOCH,
        datetime(2018, 3, 4, 5, 6, 7, tzinfo=timezone.utc),
        datetime(2106, 2, 7, 6, 28, 15, tzinfo=timezone.utc),  # 0xFFFFFFFF
    ):
        assert linker_timestamp(encode_linker_timestamp(when)) == when


def test_naive_datetime_is_utc():
    buf = encode_linker_timestamp(datetime(2020, 1, 1))
    assert linker_timestamp(buf) == datetime(2020, 1, 1, tzinfo=timezone.utc)


def test_encode_rejects_out_of_range():
    with pytest.raises(ValueError):
        encode_linker_timestamp(datetime(1969, 12, 31, tzinfo=timezone.utc))
    with pytest.raises(ValueError):
        encode_linker_timestamp(datetime(2020, 1, 1, 0, 0, 0, 500, tzinfo=timezone.utc))


def test_short_buffer_raises():
    with pytest.raises(PeFormatError):
        parse_pe_header(b"MZ" + bytes(40))


def test_offset_past_end_raises():
    buf = bytearray(_raw_head(0x80, 1))
    struct.pack_into("<I", buf, PE_HEADER_OFFSET, 0xFFFF)
    with pytest.raises(ValueError):
        linker_timestamp(bytes(buf))
    # field ends exactly at the buffer end
    assert linker_timestamp(_raw_head(0x80, 42, size=0x80 + 12)) == EPOCH + timedelta(seconds=42)


def test_missing_signature_warns(caplog):
    buf = bytearray(_raw_head(0x80, 1234))
    buf[0:2] = b"XX"
    with caplog.at_level(logging.WARNING, logger="pyprobe.pe.header"):
        hdr = parse_pe_header(bytes(buf))
    assert not hdr.signature_ok
    assert hdr.time_date_stamp == 1234
    assert "signature missing" in caplog.text


def test_strict_signature(monkeypatch):
    monkeypatch.setattr(config, "STRICT_SIGNATURE", True)
    with pytest.raises(PeFormatError):
        parse_pe_header(bytes(2048))
    assert parse_pe_header(_raw_head(0x80, 5)).signature_ok


def test_deterministic_build_value_is_returned_as_is():
    # reproducible builds store a hash here; it decodes to an arbitrary date
    stamp = 0xF1A2B3C4
    assert linker_timestamp(_raw_head(0x80, stamp)) == EPOCH + timedelta(seconds=stamp)


def test_read_from_file(tmp_path):
    when = datetime(2023, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
    exe = tmp_path / "app.exe"
    exe.write_bytes(encode_linker_timestamp(when) + b"\xCC" * 4096)
    assert read_linker_timestamp(exe) == when

    plus5 = timezone(timedelta(hours=5))
    local = read_linker_timestamp(str(exe), tz=plus5)
    assert local == when
    assert local.utcoffset() == timedelta(hours=5)
    assert local.hour == 17


def test_read_small_file(tmp_path):
    exe = tmp_path / "tiny.exe"
    exe.write_bytes(b"MZ")
    with pytest.raises(PeFormatError):
        read_linker_timestamp(exe)


def main():
    raise SystemExit(pytest.main([__file__, "-q"]))

if __name__ == "__main__":
    main()
