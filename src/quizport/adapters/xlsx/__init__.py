"""Spreadsheet (XLSX) import channel."""

from __future__ import annotations

from .parser import XlsxImportParser

__all__ = ["XlsxImportParser"]
