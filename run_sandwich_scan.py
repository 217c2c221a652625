#!/usr/bin/env python3
"""
Sandwich scanner runner.

Usage:
    python3 run_sandwich_scan.py
    python3 run_sandwich_scan.py --config configs/sandwich_scan.yaml --pair 1
"""
import sys

from sandwich_scan.cli import main

if __name__ == "__main__":
    sys.exit(main())
