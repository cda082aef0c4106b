"""i-HIC: static item pages for the Instant Halal & Inventory Checker."""

from .config import BuildConfig
from .dates import format_date, parse_date
from .errors import BuildError, SourceFormatError, SourceNotFoundError
from .expiry import ExpiryStatus, classify
from .generate import BuildResult, run
from .render import escape, render_item_page
from .source import load_items, normalize_item

__all__ = [
    "BuildConfig",
    "BuildError",
    "BuildResult",
    "ExpiryStatus",
    "SourceFormatError",
    "SourceNotFoundError",
    "classify",
    "escape",
    "format_date",
    "load_items",
    "normalize_item",
    "parse_date",
    "render_item_page",
    "run",
]
