"""
Shared fixtures for the i-HIC test suite.

Provides:
- A fixed "today" so expiry classification is deterministic
- Sample item rows and a helper that writes them out as the CSV source
- A BuildConfig pointing every path into tmp_path
"""
import csv
from datetime import date
from pathlib import Path

import pytest

from ihic.config import BuildConfig
from ihic.source import COLUMNS

TODAY = date(2024, 6, 1)

HEADERS = list(COLUMNS.values())


def make_row(**overrides):
    """Full item row with every column present; keyword args use COLUMNS keys."""
    row = {
        COLUMNS["id"]: "1",
        COLUMNS["name"]: "Chicken Stock",
        COLUMNS["category"]: "Dry Goods",
        COLUMNS["batch"]: "GRIS-001",
        COLUMNS["brand"]: "Maggi",
        COLUMNS["supplier"]: "Nestle",
        COLUMNS["item_expiry"]: "01/12/2024",
        COLUMNS["stock"]: "12",
        COLUMNS["purchased"]: "15/01/2024",
        COLUMNS["invoice"]: "https://example.com/invoice/1.pdf",
        COLUMNS["halal_cert"]: "Yes",
        COLUMNS["halal_cert_url"]: "https://example.com/cert/1.pdf",
        COLUMNS["cert_expiry"]: "31/12/2025",
    }
    for key, value in overrides.items():
        row[COLUMNS[key]] = value
    return row


def write_csv(path: Path, rows):
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=HEADERS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def build_config(tmp_path):
    return BuildConfig(
        source_path=tmp_path / "Halal_Info_2.csv",
        output_dir=tmp_path / "generated",
        contact_email="pic@example.com",
        landing_page=tmp_path / "index.html",
    )
