#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Generate the i-HIC item pages from Halal_Info_2.csv.

Usage:
  python generate.py           # build once into generated/
  python generate.py --watch   # build, then rebuild on every change to the CSV
"""

import sys

from ihic.generate import main

if __name__ == "__main__":
    sys.exit(main())
