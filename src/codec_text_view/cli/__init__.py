"""Command-line interface module for Codec Text View.

This module provides the ``codec-text-view`` tool for decoding and
transcoding files through the reference codecs and benchmarking traversal.
"""

from .main import main

__all__ = ["main"]
