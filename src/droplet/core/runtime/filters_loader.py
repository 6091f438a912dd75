"""Load filter providers from directories of Python files.

Every ``*.py`` file (except ``__init__.py``) in the configured directories is
loaded as a module and registered with ``register_filter_provider``, so its
public functions become filters. Directories are processed in order; a later
module's same-signature filters replace earlier ones when a Strainer is
built.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from ..utils.loader import iter_python_files, load_module_from_path
from .strainer import register_filter_provider

logger = logging.getLogger(__name__)


def load_filter_modules(dirs: Iterable[Path]) -> List[str]:
    """Register every filter module found in ``dirs``; return their names."""
    loaded: List[str] = []
    for path in iter_python_files(Path(d) for d in dirs):
        module = load_module_from_path(path, "droplet.filters")
        if module is None:
            continue
        register_filter_provider(module)
        loaded.append(module.__name__)
    logger.debug("Loaded %d filter module(s)", len(loaded))
    return loaded


__all__ = ["load_filter_modules"]
