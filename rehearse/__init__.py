"""Rehearse: interview answer capture and transcript scoring."""

__version__ = "0.1.0"
