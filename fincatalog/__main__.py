# -*- coding: utf-8 -*-
"""
FinCatalog CLI - Headless catalog lifecycle operations.

Usage::

    python -m fincatalog info survey.db
    python -m fincatalog convert old_survey.db
    python -m fincatalog backup ~/fincatalogData/surveyAreas/area1/catalog/survey.db
    python -m fincatalog restore area1_survey_Oct_19_2026.zip
    python -m fincatalog export survey.db exported.zip --yes
    python -m fincatalog export-finz survey.db 0 fin.finz

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fincatalog.catalog.models import CatalogStatus
from fincatalog.core.config import load_config
from fincatalog.core.lifecycle import CatalogLifecycle


def _prompt(title: str, message: str, target: str) -> bool:
    if not sys.stdin.isatty():
        return False
    answer = input(f"{message} {target}\n{title} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fincatalog",
        description="FinCatalog - Convert, back up and restore fin catalogs.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON configuration file.",
    )
    parser.add_argument(
        "--data-root",
        help="Override the configured data root folder.",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Replace existing export files without asking.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("info", help="Show a catalog, or list survey areas.")
    p.add_argument("catalog", type=Path, nargs="?")

    p = sub.add_parser("convert", help="Convert a legacy catalog in place.")
    p.add_argument("catalog", type=Path)

    p = sub.add_parser("duplicate", help="Copy a catalog to a new file.")
    p.add_argument("catalog", type=Path)
    p.add_argument("target", type=Path)

    p = sub.add_parser("backup", help="Back up a catalog and its images.")
    p.add_argument("catalog", type=Path)

    p = sub.add_parser("restore", help="Restore a backup archive.")
    p.add_argument("archive", type=Path)
    p.add_argument(
        "--area",
        help="Survey area to restore into (default: from the file name).",
    )

    p = sub.add_parser("export", help="Export a catalog to a zip archive.")
    p.add_argument("catalog", type=Path)
    p.add_argument("dest", type=Path)

    p = sub.add_parser("import", help="Import an exported catalog.")
    p.add_argument("archive", type=Path)
    p.add_argument("area", help="Survey area to import into.")

    p = sub.add_parser("export-finz", help="Export one fin to a .finz file.")
    p.add_argument("catalog", type=Path)
    p.add_argument("index", type=int, help="Fin position in the catalog.")
    p.add_argument("dest", type=Path)

    p = sub.add_parser("import-finz", help="Add a .finz fin to a catalog.")
    p.add_argument("catalog", type=Path)
    p.add_argument("package", type=Path)

    return parser


def _report(result) -> int:
    if result.ok:
        print(f"{result.status.value}: {result.path}")
        return 0
    detail = f" ({result.message})" if result.message else ""
    print(f"Error: {result.status.value}{detail}", file=sys.stderr)
    return 1


def _open(lifecycle: CatalogLifecycle, path: Path):
    catalog = lifecycle.open_existing(path)
    if catalog.status != CatalogStatus.LOADED:
        print(
            f"Error: cannot open catalog {path} ({catalog.status.value})",
            file=sys.stderr,
        )
        return None
    return catalog


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.data_root:
        config.data_root = args.data_root

    confirm = (lambda title, message, target: True) if args.yes else _prompt
    lifecycle = CatalogLifecycle(config=config, confirm_overwrite=confirm)

    if args.command == "info" and args.catalog is None:
        print(f"Data root: {lifecycle.data_root}")
        for area in lifecycle.survey_areas():
            names = ", ".join(lifecycle.catalog_names(area)) or "-"
            print(f"  {area}: {names}")
        return 0

    if args.command == "restore":
        return _report(lifecycle.restore(args.archive, area=args.area))
    if args.command == "import":
        return _report(lifecycle.import_catalog(args.archive, args.area))

    if args.command == "convert":
        catalog = lifecycle.open(args.catalog)
        if catalog.status != CatalogStatus.LOADED:
            print(f"Error: cannot convert {args.catalog}", file=sys.stderr)
            return 1
        print(f"Converted {catalog.filename}: {catalog.size()} fin(s)")
        catalog.close()
        return 0

    catalog = _open(lifecycle, args.catalog)
    if catalog is None:
        return 1

    try:
        if args.command == "info":
            print(f"Catalog: {catalog.filename}")
            print(f"Scheme:  {catalog.scheme.scheme_name}")
            print(f"Categories: {', '.join(catalog.scheme.category_names)}")
            print(f"Fins:    {catalog.size()} ({catalog.size_absolute()} slots)")
            return 0

        if args.command == "duplicate":
            try:
                target = lifecycle.duplicate(catalog, args.target)
            except FileExistsError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            print(f"Duplicated to {target.filename}: {target.size()} fin(s)")
            target.close()
            return 0

        if args.command == "backup":
            return _report(lifecycle.backup(catalog))
        if args.command == "export":
            return _report(lifecycle.export_catalog(catalog, args.dest))
        if args.command == "import-finz":
            return _report(lifecycle.import_finz(catalog, args.package))

        if args.command == "export-finz":
            record = catalog.get_item(args.index)
            if record is None:
                print(f"Error: no fin at position {args.index}", file=sys.stderr)
                return 1
            return _report(lifecycle.export_finz(record, args.dest))
    finally:
        catalog.close()

    return 1


if __name__ == "__main__":
    sys.exit(main())
