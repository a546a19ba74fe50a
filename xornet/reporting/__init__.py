"""Reporting utilities for xornet."""

from .artifacts import save_snapshots, write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["CsvSink", "JsonlSink", "PlotAdapter", "save_snapshots", "write_manifest", "write_summary"]
