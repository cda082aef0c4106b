"""
Tests that the script embedded in item pages reads dates like ihic.dates.

The page script re-runs the expiry rules in the browser; these tests run its
date functions under node and compare them with the Python ones.

Run with: pytest ihic/tests/test_page_script.py -v
"""

import json
import re
import shutil
import subprocess

import pytest

from conftest import TODAY, make_row
from ihic.dates import format_date, parse_date
from ihic.render import render_item_page

NODE = shutil.which("node")

pytestmark = pytest.mark.skipif(NODE is None, reason="node is not installed")

DATE_INPUTS = [
    "05/03/2024",
    "5/3/2024",
    "31/02/2024",
    "01/13/2024",
    "00/03/2024",
    "15/00/2024",
    "/03/2024",
    "05//2024",
    "05/03/24",
    "05/03/0",
    "5.5/03/2024",
    "1e1/03/2024",
    " 5 /+03/ 2024",
    "01/01/-5",
    "01/01/10000",
    "05/03",
    "aa/bb/cccc",
    "2024-03-05",
    "2024-02-30",
    "0000-01-01",
    "2024-3-5",
    "20240305",
    "2024-03-05T10:30:00",
    "garbage",
    "NA",
    "",
]


def page_date_functions(page):
    script = re.search(r"<script>(.*?)</script>", page, re.S).group(1)
    start = script.index("// Same rules as ihic.dates.parse_date")
    end = script.index("function getExpiryStatus")
    return script[start:end]


def run_page_dates(inputs):
    page = render_item_page(make_row(), today=TODAY)
    program = (
        page_date_functions(page)
        + "\nconst inputs = JSON.parse(process.argv[1]);"
        + "\nconsole.log(JSON.stringify(inputs.map(function(s) { return formatDate(parseDate(s)); })));"
    )
    proc = subprocess.run(
        [NODE, "-e", program, json.dumps(inputs)],
        capture_output=True, text=True, check=True, timeout=60,
    )
    return json.loads(proc.stdout)


class TestDateParity:

    @pytest.fixture(scope="class")
    def page_results(self):
        return dict(zip(DATE_INPUTS, run_page_dates(DATE_INPUTS)))

    @pytest.mark.parametrize("raw", DATE_INPUTS)
    def test_same_date(self, page_results, raw):
        assert page_results[raw] == format_date(parse_date(raw))
