from __future__ import annotations
import argparse, json, logging
from datetime import datetime
from importlib.metadata import PackageNotFoundError
from typing import Any, Callable, Dict, List, Optional

from . import config
from .errors import ProbeError
from .sniff.image_type import detect_file_type
from .pe.header import read_linker_timestamp
from .pe.version_info import (
    build_date_from_distribution,
    build_date_from_version_resource,
    build_date_from_version_strings,
    read_version_strings,
)

logger = logging.getLogger(__name__)


def _build_date_attribute(path: str) -> Optional[datetime]:
    # the attribute recipe reads the BuildDate string entry only
    strings = read_version_strings(path, names=('BuildDate',))
    return build_date_from_version_strings(strings)


METHODS: Dict[str, Callable[[str], Optional[datetime]]] = {
    'pe': read_linker_timestamp,
    'version': build_date_from_version_resource,
    'attribute': _build_date_attribute,
}


def _iso(when: Optional[datetime], local: bool) -> Optional[str]:
    if when is None:
        return None
    return (when.astimezone() if local else when).isoformat()


def cmd_sniff(paths: List[str]) -> tuple[List[Dict[str, Any]], int]:
    items, status = [], 0
    for p in paths:
        try:
            items.append({'path': p, 'type': detect_file_type(p)})
        except OSError as e:
            logger.error("cannot read %s: %s", p, e)
            items.append({'path': p, 'type': None, 'error': str(e)})
            status = 1
    return items, status


def cmd_build_date(paths: List[str], method: str, local: bool) -> tuple[List[Dict[str, Any]], int]:
    reader = METHODS[method]
    items, status = [], 0
    for p in paths:
        entry: Dict[str, Any] = {'path': p, 'method': method}
        try:
            entry['build_date'] = _iso(reader(p), local)
        except (ProbeError, OSError) as e:
            logger.error("%s: %s", p, e)
            entry['build_date'] = None
            entry['error'] = str(e)
            status = 1
        items.append(entry)
    return items, status


def cmd_dist_date(name: str) -> tuple[Dict[str, Any], int]:
    entry: Dict[str, Any] = {'name': name, 'build_date': None}
    try:
        entry['build_date'] = _iso(build_date_from_distribution(name), False)
    except PackageNotFoundError:
        logger.error("distribution not installed: %s", name)
        entry['error'] = f"not installed: {name}"
        return entry, 1
    except ProbeError as e:
        logger.error("%s: %s", name, e)
        entry['error'] = str(e)
        return entry, 1
    return entry, 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog='pyprobe')
    ap.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    sub = ap.add_subparsers(dest='cmd', required=True)

    s1 = sub.add_parser('sniff', help='Detect image type from magic bytes')
    s1.add_argument('paths', nargs='+')

    s2 = sub.add_parser('build-date', help='Read the build date of a compiled binary')
    s2.add_argument('paths', nargs='+')
    s2.add_argument('--method', choices=sorted(METHODS), default='pe')
    s2.add_argument('--local', action='store_true', help='convert to local time')

    s3 = sub.add_parser('dist-date', help='Build date from an installed distribution version')
    s3.add_argument('name')

    sub.add_parser('gui', help='Open the PySide6 viewer')

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    if args.cmd == 'gui':
        from .gui_app import main as gui_main
        return gui_main()

    if args.cmd == 'sniff':
        items, status = cmd_sniff(args.paths)
    elif args.cmd == 'build-date':
        items, status = cmd_build_date(args.paths, args.method, args.local)
    else:
        items, status = cmd_dist_date(args.name)
    print(json.dumps(items, ensure_ascii=False, indent=2))
    return status


if __name__ == '__main__':
    raise SystemExit(main())
