#!/usr/bin/env python3
# main.py
from __future__ import annotations
import sys
from perfmon_analyzer.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
