"""Module loading helpers for on-disk extensions.

Extension directories are searched in order; modules are loaded from file
without being added to ``sys.modules``.
"""
from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from types import ModuleType
from typing import Iterable, Optional, Set

logger = logging.getLogger(__name__)


def iter_python_files(
    dirs: Iterable[Path],
    exclude: Optional[Set[str]] = None,
) -> Iterable[Path]:
    """Yield all *.py files from existing directories in order.

    Args:
        dirs: Directories to search (in order)
        exclude: Set of filenames to exclude (default: {"__init__.py"})

    Yields:
        Paths to Python files
    """
    if exclude is None:
        exclude = {"__init__.py"}

    for d in dirs:
        if not d or not d.exists():
            continue
        for path in sorted(d.glob("*.py")):
            if path.is_file() and path.name not in exclude:
                yield path


def load_module_from_path(
    path: Path,
    namespace: str = "droplet.dynamic",
) -> Optional[ModuleType]:
    """Load a Python module from file; returns None (and warns) on failure.

    Args:
        path: Path to the .py file
        namespace: Module namespace prefix for the loaded module
    """
    module_name = f"{namespace}.{path.stem}"
    try:
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec and spec.loader:
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            return module
    except Exception as e:
        logger.warning("Failed to load module %s: %s", path, e)
    return None


__all__ = ["iter_python_files", "load_module_from_path"]
