"""Shared helpers: configuration merging and extension loading."""
from __future__ import annotations

from .loader import iter_python_files, load_module_from_path
from .merge import deep_merge

__all__ = ["deep_merge", "iter_python_files", "load_module_from_path"]
