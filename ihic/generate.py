"""Generate static item pages from the inventory sheet.

Inputs (defaults, see ihic.config):
  - Halal_Info_2.csv : one row per inventory item (an .xlsx export also works)
  - index.html       : optional landing page, copied as-is

Outputs (generated/):
  - item_<Item ID>.html per row
  - manifest.json listing the generated item IDs
  - index.html when the landing page exists

Usage:
  python generate.py
  python generate.py --watch
"""

import argparse
import json
import logging
import re
import shutil
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from .config import BuildConfig
from .errors import BuildError
from .render import render_item_page
from .source import COLUMNS, ItemRecord, load_items

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    output_dir: Path
    manifest_path: Path
    pages: List[Path] = field(default_factory=list)
    landing_page_copied: bool = False

    @property
    def item_count(self) -> int:
        return len(self.pages)


def page_filename(item_id) -> str:
    """Deterministic page name for an item; unsafe characters become '_'."""
    safe = re.sub(r"[^A-Za-z0-9._-]", "_", str(item_id or "").strip())
    return f"item_{safe}.html"


def build_manifest(items: List[ItemRecord], generated_at: Optional[datetime] = None) -> dict:
    generated_at = generated_at or datetime.now(timezone.utc)
    stamp = generated_at.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return {
        "generatedAt": stamp.replace("+00:00", "Z"),
        "items": len(items),
        "availableItems": [str(item.get(COLUMNS["id"]) or "") for item in items],
    }


def write_manifest(path: Path, items: List[ItemRecord]) -> None:
    path.write_text(json.dumps(build_manifest(items), indent=2), encoding="utf-8")
    logger.info("Generated: %s", path)


def copy_landing_page(src: Path, out_dir: Path) -> bool:
    if not src.is_file():
        return False
    shutil.copyfile(src, out_dir / src.name)
    logger.info("Copied %s to output directory", src.name)
    return True


def run(config: Optional[BuildConfig] = None, today: Optional[date] = None) -> BuildResult:
    """Regenerate every page, the manifest and the landing page copy.

    All records are read before the first write; a missing or unreadable
    source raises a BuildError and leaves the output directory untouched.
    """
    config = config or BuildConfig()
    logger.info("Starting build process...")

    items = load_items(config.source_path)

    out_dir = config.output_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    result = BuildResult(output_dir=out_dir, manifest_path=config.manifest_path)
    seen = set()
    for item in items:
        filename = page_filename(item.get(COLUMNS["id"]))
        if filename in seen:
            logger.warning("Duplicate page %s; later row overwrites earlier one", filename)
        seen.add(filename)

        path = out_dir / filename
        path.write_text(render_item_page(item, config.contact_email, today=today), encoding="utf-8")
        result.pages.append(path)
        logger.info("Generated: %s", path)

    write_manifest(config.manifest_path, items)
    result.landing_page_copied = copy_landing_page(config.landing_page, out_dir)

    logger.info("Build completed successfully")
    return result


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog="ihic",
        description="Generate i-HIC item pages from the inventory sheet",
    )
    ap.add_argument("--watch", action="store_true", help="Regenerate whenever the source file changes")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    config = BuildConfig()
    try:
        run(config)
    except BuildError as e:
        logger.error("Error: %s", e)
        return 1
    except Exception:
        logger.exception("Build failed")
        return 1

    if args.watch:
        from .watch import watch
        watch(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
