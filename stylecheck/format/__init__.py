"""Mechanical fixes."""

from stylecheck.format.runner import apply_edits, run_format

__all__ = ["apply_edits", "run_format"]
