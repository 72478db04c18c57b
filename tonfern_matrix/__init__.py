"""
Full-matrix regression runner for the TonfernPDF page.

Launches real browsers through Playwright, drives every tool workflow of the
page, captures the files it saves and writes a cross-browser report.

Usage:
  python -m tonfern_matrix
  python -m tonfern_matrix --browsers chromium --debug
"""

from __future__ import annotations

__version__ = "0.1.0"
