"""Read item records from the inventory sheet.

The sheet is normally a CSV export (``Halal_Info_2.csv``), but the first
worksheet of an ``.xlsx`` workbook is accepted as well. Either way each row
becomes a plain ``dict`` keyed by the header names below.
"""

import csv
import logging
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .dates import format_date
from .errors import SourceFormatError, SourceNotFoundError

logger = logging.getLogger(__name__)

COLUMNS = {
    "id": "Item ID",
    "name": "Item Name",
    "category": "Category",
    "batch": "Batch/GRIS No.",
    "brand": "Brand",
    "supplier": "Supplier",
    "item_expiry": "Item Expiry Date",
    "stock": "Stock Available",
    "purchased": "Purchased Date",
    "invoice": "Invoice",
    "halal_cert": "Halal Certificate",
    "halal_cert_url": "Halal Certificate URL",
    "cert_expiry": "Certificate Expiry Date",
}

EXCEL_SUFFIXES = (".xlsx", ".xlsm")

ItemRecord = Dict[str, Optional[str]]


def is_http_url(value: Optional[str]) -> bool:
    return bool(value) and str(value).startswith("http")


def resolve_certificate_url(item: Mapping[str, Optional[str]]) -> Optional[str]:
    """Certificate link for an item, falling back to the 'Halal Certificate' column."""
    for col in (COLUMNS["halal_cert_url"], COLUMNS["halal_cert"]):
        value = item.get(col)
        if is_http_url(value):
            return value
    return None


def normalize_item(item: Mapping[str, Optional[str]]) -> ItemRecord:
    """Return a copy of ``item`` with the certificate URL column filled in.

    Older sheets put the certificate link straight into 'Halal Certificate';
    it is promoted to 'Halal Certificate URL' when that column is empty.
    """
    out = dict(item)
    fallback = out.get(COLUMNS["halal_cert"])
    if not out.get(COLUMNS["halal_cert_url"]) and is_http_url(fallback):
        out[COLUMNS["halal_cert_url"]] = fallback
    return out


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return format_date(value.date() if isinstance(value, datetime) else value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def iter_csv_rows(path: Path) -> Iterator[ItemRecord]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield row


def iter_excel_rows(path: Path) -> Iterator[ItemRecord]:
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        # KeyError: a zip archive missing the workbook parts
        raise SourceFormatError(f"Could not read workbook {path}: {e}") from e
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return
        headers = [_cell_text(h) for h in header_row]
        for r in rows:
            if not any(v is not None and str(v).strip() for v in r):
                continue
            yield {h: _cell_text(v) for h, v in zip(headers, r) if h}
    finally:
        wb.close()


def load_items(path) -> List[ItemRecord]:
    """Read every row of the sheet at ``path`` and normalize it.

    The whole sheet is read before anything is returned, so a malformed row
    aborts the build before any page is written.
    """
    path = Path(path)
    if not path.is_file():
        raise SourceNotFoundError(path.resolve())

    reader = iter_excel_rows if path.suffix.lower() in EXCEL_SUFFIXES else iter_csv_rows
    try:
        items = [normalize_item(row) for row in reader(path)]
    except (csv.Error, UnicodeDecodeError) as e:
        raise SourceFormatError(f"Could not read {path}: {e}") from e

    logger.info("Processed %d items from %s", len(items), path)
    return items
