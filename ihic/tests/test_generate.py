"""
Integration tests for the batch build.

Run with: pytest ihic/tests/test_generate.py -v
"""

import json
import logging
from datetime import datetime, timezone

import pytest

from conftest import TODAY, make_row, write_csv
from ihic.errors import SourceFormatError, SourceNotFoundError
from ihic.generate import build_manifest, main, page_filename, run


class TestPageFilename:

    def test_plain_id(self):
        assert page_filename("7") == "item_7.html"

    def test_unsafe_characters(self):
        assert page_filename("../A B/7") == "item_.._A_B_7.html"

    def test_missing_id(self):
        assert page_filename(None) == "item_.html"


class TestManifest:

    def test_shape(self):
        items = [{"Item ID": "2"}, {"Item ID": "10"}]
        stamp = datetime(2024, 6, 1, 8, 30, 0, 123000, tzinfo=timezone.utc)
        assert build_manifest(items, stamp) == {
            "generatedAt": "2024-06-01T08:30:00.123Z",
            "items": 2,
            "availableItems": ["2", "10"],
        }


class TestRun:

    def test_one_page_per_record(self, build_config):
        ids = ["12", "3", "7", "100"]
        write_csv(build_config.source_path, [make_row(id=i) for i in ids])

        result = run(build_config, today=TODAY)

        out = build_config.output_dir
        assert sorted(p.name for p in out.glob("item_*.html")) == sorted(f"item_{i}.html" for i in ids)
        assert result.item_count == 4
        assert [p.name for p in result.pages] == [f"item_{i}.html" for i in ids]

        manifest = json.loads(build_config.manifest_path.read_text(encoding="utf-8"))
        assert manifest["items"] == 4
        assert manifest["availableItems"] == ids
        assert manifest["generatedAt"].endswith("Z")

    def test_page_content(self, build_config):
        write_csv(build_config.source_path, [make_row(id="7", name="Cocoa Powder", item_expiry="01/01/2020")])
        run(build_config, today=TODAY)
        page = (build_config.output_dir / "item_7.html").read_text(encoding="utf-8")
        assert "Cocoa Powder" in page
        assert "(Expired)" in page
        assert "mailto:pic@example.com?subject=" in page

    def test_missing_source_writes_nothing(self, build_config):
        with pytest.raises(SourceNotFoundError):
            run(build_config, today=TODAY)
        assert not build_config.output_dir.exists()

    def test_unreadable_source_writes_nothing(self, build_config):
        build_config.source_path.write_bytes(b"Item ID,Item Name\n1,\xff\xfe\n")
        with pytest.raises(SourceFormatError):
            run(build_config, today=TODAY)
        assert not build_config.output_dir.exists()

    def test_output_dir_created_recursively(self, tmp_path, build_config):
        from dataclasses import replace
        config = replace(build_config, output_dir=tmp_path / "site" / "items")
        write_csv(config.source_path, [make_row()])
        run(config, today=TODAY)
        assert (tmp_path / "site" / "items" / "item_1.html").is_file()

    def test_empty_sheet(self, build_config):
        write_csv(build_config.source_path, [])
        result = run(build_config, today=TODAY)
        assert result.pages == []
        manifest = json.loads(build_config.manifest_path.read_text(encoding="utf-8"))
        assert manifest["items"] == 0
        assert manifest["availableItems"] == []

    def test_rerun_overwrites(self, build_config):
        write_csv(build_config.source_path, [make_row(id="1", name="Old Name")])
        run(build_config, today=TODAY)
        write_csv(build_config.source_path, [make_row(id="1", name="New Name")])
        run(build_config, today=TODAY)
        page = (build_config.output_dir / "item_1.html").read_text(encoding="utf-8")
        assert "New Name" in page
        assert "Old Name" not in page

    def test_duplicate_ids_warn(self, build_config, caplog):
        write_csv(build_config.source_path, [make_row(id="1", name="First"), make_row(id="1", name="Second")])
        with caplog.at_level(logging.WARNING):
            result = run(build_config, today=TODAY)
        assert "Duplicate page item_1.html" in caplog.text
        assert result.item_count == 2
        assert "Second" in (build_config.output_dir / "item_1.html").read_text(encoding="utf-8")


class TestLandingPage:

    def test_copied_when_present(self, build_config):
        write_csv(build_config.source_path, [make_row()])
        build_config.landing_page.write_text("<html>home</html>", encoding="utf-8")
        result = run(build_config, today=TODAY)
        assert result.landing_page_copied is True
        assert (build_config.output_dir / "index.html").read_text(encoding="utf-8") == "<html>home</html>"

    def test_skipped_when_absent(self, build_config):
        write_csv(build_config.source_path, [make_row()])
        result = run(build_config, today=TODAY)
        assert result.landing_page_copied is False
        assert not (build_config.output_dir / "index.html").exists()


class TestMain:

    def test_success(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        write_csv(tmp_path / "Halal_Info_2.csv", [make_row(id="4")])
        assert main([]) == 0
        assert (tmp_path / "generated" / "item_4.html").is_file()
        assert (tmp_path / "generated" / "manifest.json").is_file()

    def test_missing_source_exits_nonzero(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main([]) == 1
        assert not (tmp_path / "generated").exists()
