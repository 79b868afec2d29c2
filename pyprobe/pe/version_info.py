"""Build dates carried as formatted strings rather than in the PE header.

Two recipes:

* a version string with a build marker, e.g. ``1.2.0+build20240131235959``
  (a .NET ``InformationalVersion`` / PE ``ProductVersion``, or a PEP 440
  local version label of an installed distribution);
* a dedicated attribute holding only the formatted timestamp, e.g. a module
  level ``__build_date__ = "20240131235959"`` or a ``BuildDate`` entry in a
  PE version resource.

Both parse the timestamp as UTC with a fixed format.
"""
from __future__ import annotations
import logging
import os
from datetime import datetime, timezone
from importlib import metadata
from typing import Any, Dict, Iterable, Optional

from .. import config
from ..errors import BuildDateError, ProbeError

logger = logging.getLogger(__name__)

VERSION_STRING_NAMES = ('ProductVersion', 'FileVersion', 'BuildDate')


# yyyyMMddHHmmss: strptime alone would also take one-digit fields
FIXED_FORMAT = '%Y%m%d%H%M%S'
FIXED_DIGITS = 14


def _parse_stamp(value: str, fmt: str) -> datetime:
    if fmt == FIXED_FORMAT and not (len(value) == FIXED_DIGITS and value.isdigit()):
        raise BuildDateError(f"Build date {value!r} is not {FIXED_DIGITS} digits")
    try:
        return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise BuildDateError(f"Cannot parse build date {value!r} with {fmt!r}: {e}") from e


def parse_marked_timestamp(text: str, marker: Optional[str] = None, fmt: Optional[str] = None) -> Optional[datetime]:
    marker = marker or config.BUILD_MARKER
    fmt = fmt or config.BUILD_DATE_FORMAT
    idx = text.find(marker)
    if idx < 0:
        return None
    rest = text[idx + len(marker):]
    if fmt == FIXED_FORMAT:
        value = rest[:FIXED_DIGITS]
        if rest[FIXED_DIGITS:FIXED_DIGITS + 1].isdigit():
            raise BuildDateError(f"Build date {rest!r} is longer than {FIXED_DIGITS} digits")
    else:
        # PEP 440 local labels may carry further dot-separated segments
        value = rest.split('.', 1)[0].strip()
    return _parse_stamp(value, fmt)


def build_date_from_informational_version(version: str) -> Optional[datetime]:
    return parse_marked_timestamp(version)


def build_date_from_attribute(obj: Any, name: Optional[str] = None, fmt: Optional[str] = None) -> Optional[datetime]:
    name = name or config.BUILD_DATE_ATTRIBUTE
    value = getattr(obj, name, None)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BuildDateError(f"{name} must be a string, got {type(value).__name__}")
    return _parse_stamp(value.strip(), fmt or config.BUILD_DATE_FORMAT)


def build_date_from_distribution(dist_name: str) -> Optional[datetime]:
    version = metadata.version(dist_name)
    logger.debug("%s version %s", dist_name, version)
    return build_date_from_informational_version(version)


def read_version_strings(path: str | os.PathLike, names: Iterable[str] = VERSION_STRING_NAMES) -> Dict[str, str]:
    """Read ``StringFileInfo`` entries from a PE version resource (Windows only)."""
    try:
        import pywintypes
        import win32api
    except ImportError as e:
        raise ProbeError("PE version resources need pywin32 (Windows only)") from e

    path = os.fspath(path)
    out: Dict[str, str] = {}
    try:
        translations = win32api.GetFileVersionInfo(path, '\\VarFileInfo\\Translation')
    except pywintypes.error as e:
        logger.debug("no version resource in %s: %s", path, e)
        return out
    for lang, codepage in translations or []:
        for name in names:
            if name in out:
                continue
            key = '\\StringFileInfo\\%04x%04x\\%s' % (lang, codepage, name)
            try:
                value = win32api.GetFileVersionInfo(path, key)
            except pywintypes.error:
                continue
            if value:
                out[name] = value
    return out


def build_date_from_version_strings(strings: Dict[str, str]) -> Optional[datetime]:
    product = strings.get('ProductVersion')
    if product:
        when = build_date_from_informational_version(product)
        if when is not None:
            return when
    stamp = strings.get('BuildDate')
    if stamp:
        return _parse_stamp(stamp.strip(), config.BUILD_DATE_FORMAT)
    return None


def build_date_from_version_resource(path: str | os.PathLike) -> Optional[datetime]:
    return build_date_from_version_strings(read_version_strings(path))
