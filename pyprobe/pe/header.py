from __future__ import annotations
import logging
import os
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from .. import config
from ..core.device import read_head
from ..errors import PeFormatError

logger = logging.getLogger(__name__)

DOS_SIG = b"MZ"
PE_SIG = b"PE\x00\x00"
PE_HEADER_OFFSET = 0x3C        # e_lfanew
LINKER_TIMESTAMP_OFFSET = 8    # from the start of the PE signature
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MACHINES = {
    0x014C: "i386",
    0x01C4: "armnt",
    0x8664: "amd64",
    0xAA64: "arm64",
}


@dataclass
class PeHeader:
    pe_offset: int
    signature_ok: bool
    machine: int
    number_of_sections: int
    time_date_stamp: int  # seconds since EPOCH; a hash for deterministic builds

    @property
    def machine_name(self) -> str:
        return MACHINES.get(self.machine, f"0x{self.machine:04x}")

    @property
    def build_time(self) -> datetime:
        return EPOCH + timedelta(seconds=self.time_date_stamp)


def parse_pe_header(buf: bytes, strict: Optional[bool] = None) -> PeHeader:
    if strict is None:
        strict = config.STRICT_SIGNATURE
    if len(buf) < PE_HEADER_OFFSET + 4:
        raise PeFormatError(f"Header too small: {len(buf)} bytes")
    pe_offset = struct.unpack_from('<I', buf, PE_HEADER_OFFSET)[0]
    if pe_offset + LINKER_TIMESTAMP_OFFSET + 4 > len(buf):
        raise PeFormatError(f"PE header offset 0x{pe_offset:x} outside the {len(buf)} bytes read")
    machine, number_of_sections, stamp = struct.unpack_from('<HHI', buf, pe_offset + 4)
    signature_ok = bytes(buf[0:2]) == DOS_SIG and bytes(buf[pe_offset:pe_offset + 4]) == PE_SIG
    if not signature_ok:
        if strict:
            raise PeFormatError("Missing MZ/PE signature")
        # still decode: the field position is all the recipe relies on
        logger.warning("MZ/PE signature missing (e_lfanew=0x%x); timestamp may be meaningless", pe_offset)
    return PeHeader(
        pe_offset=pe_offset,
        signature_ok=signature_ok,
        machine=machine,
        number_of_sections=number_of_sections,
        time_date_stamp=stamp,
    )


def linker_timestamp(buf: bytes) -> datetime:
    """Decode the COFF ``TimeDateStamp`` of a PE image head as an aware UTC datetime.

    Reproducible builds write a hash into this field; the value is returned
    as-is since it cannot be told apart from a real time.
    """
    return parse_pe_header(buf).build_time


def read_linker_timestamp(path: str | os.PathLike, tz: Optional[tzinfo] = None) -> datetime:
    when = linker_timestamp(read_head(path, config.HEAD_SIZE))
    logger.debug("%s linked at %s", os.fspath(path), when.isoformat())
    return when.astimezone(tz) if tz is not None else when


def encode_linker_timestamp(when: datetime, pe_offset: int = 0x80, size: Optional[int] = None) -> bytes:
    """Build a minimal image head whose linker timestamp is ``when`` (naive means UTC)."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    delta = when - EPOCH
    if delta.microseconds:
        raise ValueError("Linker timestamps have whole-second resolution")
    seconds = delta.days * 86400 + delta.seconds
    if not 0 <= seconds <= 0xFFFFFFFF:
        raise ValueError(f"{when.isoformat()} does not fit an unsigned 32-bit timestamp")
    if pe_offset < PE_HEADER_OFFSET + 4:
        raise ValueError("PE header would overlap the DOS header")
    size = max(size or config.HEAD_SIZE, pe_offset + 24)
    buf = bytearray(size)
    buf[0:2] = DOS_SIG
    struct.pack_into('<I', buf, PE_HEADER_OFFSET, pe_offset)
    buf[pe_offset:pe_offset + 4] = PE_SIG
    struct.pack_into('<HHI', buf, pe_offset + 4, 0x014C, 0, seconds)
    return bytes(buf)
