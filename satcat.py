"""SATCAT ingestion: CSV catalog file -> ordered CatalogRow list."""

from __future__ import annotations

import csv
import logging
from dataclasses import fields
from pathlib import Path
from typing import Callable

from errors import CatalogError
from models import CatalogRow
from query_builder import build_satcat_query

_COLUMN_COUNT = len(fields(CatalogRow))

LOGGER = logging.getLogger(__name__)


def load_catalog(path: str | Path) -> list[CatalogRow]:
    """Parse a SATCAT CSV (header row first) into rows, preserving file order.

    Columns are positional: INTLDES first, NORAD_CAT_ID second, then the
    descriptive columns. Extra trailing columns are ignored and missing
    descriptive ones default to "".
    """
    path = Path(path)
    try:
        with path.open(newline="", encoding="utf-8") as fh:
            reader = csv.reader(fh)
            if next(reader, None) is None:
                raise CatalogError(f"{path} is empty; expected a header row")

            rows: list[CatalogRow] = []
            for record in reader:
                if not record or not any(cell.strip() for cell in record):
                    continue
                rows.append(_row_from_record(record, reader.line_num, path))
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    except csv.Error as exc:
        raise CatalogError(f"Malformed CSV in {path}: {exc}") from exc

    LOGGER.info("Loaded %s catalog rows from %s", len(rows), path)
    return rows


def _row_from_record(record: list[str], line_num: int, path: Path) -> CatalogRow:
    if len(record) < 2:
        raise CatalogError(f"{path}:{line_num}: expected at least 2 columns, got {len(record)}")

    values = [cell.strip() for cell in record[:_COLUMN_COUNT]]
    if not values[1]:
        raise CatalogError(f"{path}:{line_num}: empty NORAD_CAT_ID")
    return CatalogRow(*values)


def download_catalog(path: str | Path, transport: Callable[[str], str], api_root: str) -> Path:
    """Fetch the full SATCAT as CSV and write it to path."""
    path = Path(path)
    body = transport(build_satcat_query(api_root))
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot write catalog {path}: {exc}") from exc
    LOGGER.info("Wrote SATCAT to %s", path)
    return path
