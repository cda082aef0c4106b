"""Build configuration.

The defaults mirror the layout the generator was first deployed with:
the CSV export sits next to ``generate.py`` and pages land in ``generated/``.
"""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SOURCE = "Halal_Info_2.csv"
DEFAULT_OUTPUT_DIR = "generated"
DEFAULT_EMAIL = "mygml021@gmail.com"
DEFAULT_LANDING_PAGE = "index.html"

MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class BuildConfig:
    """Paths and contact address used by one build run."""
    source_path: Path = Path(DEFAULT_SOURCE)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    contact_email: str = DEFAULT_EMAIL
    # Static page copied into output_dir when present
    landing_page: Path = Path(DEFAULT_LANDING_PAGE)

    def __post_init__(self):
        # Accept plain strings from callers; frozen, so go through object.__setattr__
        for name in ("source_path", "output_dir", "landing_page"):
            object.__setattr__(self, name, Path(getattr(self, name)))

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_NAME
