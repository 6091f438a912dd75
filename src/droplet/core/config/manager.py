"""
droplet configuration management (YAML + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from droplet.data import get_data_path

from ..exceptions import ConfigError
from ..naming import NamingConvention, convention_from_name, set_naming_convention
from ..schemas.validation import validate_payload
from ..syntax import SyntaxCompatibility, set_default_syntax_compatibility
from ..utils.merge import deep_merge

logger = logging.getLogger(__name__)

ENV_PREFIX = "DROPLET_"
PROJECT_CONFIG_NAMES = ("droplet.yaml", "droplet.yml")
CONFIG_SCHEMA = "config.schema"


class ConfigManager:
    """Load, merge, and validate droplet configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: DROPLET_<section>__<key>
    2. Project config: <project_root>/droplet.yaml (or droplet.yml)
    3. Bundled defaults: droplet.data/config/defaults.yaml
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.project_root = Path(project_root) if project_root is not None else None
        self.environ = environ if environ is not None else os.environ
        self.core_config_path = get_data_path("config", "defaults.yaml")

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Configuration must never silently ignore invalid YAML.
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration file must contain a mapping: {path}",
                context={"path": str(path)},
            )
        return data

    def project_config_path(self) -> Optional[Path]:
        if self.project_root is None:
            return None
        for name in PROJECT_CONFIG_NAMES:
            candidate = self.project_root / name
            if candidate.exists():
                return candidate
        return None

    def load_config(self, *, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration mapping.

        Raises:
            ConfigError: On invalid YAML, malformed overrides or schema errors.
        """
        cfg = self.load_yaml(self.core_config_path)

        project_path = self.project_config_path()
        if project_path is not None:
            logger.debug("Merging project config %s", project_path)
            cfg = deep_merge(cfg, self.load_yaml(project_path))

        for path, value, raw in self._iter_env_overrides():
            logger.debug("Applying env override %s%s", ENV_PREFIX, raw)
            self._set_nested(cfg, path, value)

        if validate:
            validate_payload(cfg, CONFIG_SCHEMA)
        return cfg

    # ------------------------------------------------------------------
    # Environment overrides
    # ------------------------------------------------------------------
    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ConfigError(
                f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                context={"key": f"{ENV_PREFIX}{raw}"},
            )
        # Normalize to lowercase so env overrides create canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any, str]]:
        for key in sorted(self.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                raise ConfigError(f"Malformed {ENV_PREFIX}* key", context={"key": key})
            yield self._parse_env_key(raw), self._coerce_type(self.environ[key]), raw

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur = root
        for part in path[:-1]:
            key_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key_to_use = key_candidates.get(part, part)
            nxt = cur.setdefault(key_to_use, {})
            if not isinstance(nxt, dict):
                raise ConfigError(
                    f"Cannot override '{'.'.join(path)}': '{key_to_use}' is not a mapping",
                    context={"path": path},
                )
            cur = nxt
        leaf_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[leaf_candidates.get(path[-1], path[-1])] = value


@dataclass
class RuntimeSettings:
    """Typed view of the ``runtime`` and ``filters`` sections."""

    naming_convention: str = "ruby"
    syntax_compatibility: SyntaxCompatibility = SyntaxCompatibility.DOTLIQUID20
    filter_paths: List[Path] = field(default_factory=list)

    @classmethod
    def from_config(
        cls,
        cfg: Mapping[str, Any],
        *,
        project_root: Optional[Path] = None,
    ) -> "RuntimeSettings":
        runtime = cfg.get("runtime") or {}
        filters = cfg.get("filters") or {}
        base = Path(project_root) if project_root is not None else Path.cwd()
        paths = [Path(p) for p in filters.get("paths") or []]
        try:
            return cls(
                naming_convention=str(runtime.get("naming_convention", "ruby")).lower(),
                syntax_compatibility=SyntaxCompatibility.parse(
                    runtime.get("syntax_compatibility", "dotliquid20")
                ),
                filter_paths=[p if p.is_absolute() else base / p for p in paths],
            )
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    def convention(self) -> NamingConvention:
        return convention_from_name(self.naming_convention)


def apply_settings(settings: RuntimeSettings) -> List[str]:
    """Install settings as process defaults; returns loaded filter modules.

    Must run before concurrent rendering starts.
    """
    from ..runtime.filters_loader import load_filter_modules

    set_naming_convention(settings.convention())
    set_default_syntax_compatibility(settings.syntax_compatibility)
    return load_filter_modules(settings.filter_paths)


def configure(
    project_root: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> RuntimeSettings:
    """Load configuration for ``project_root`` and apply it."""
    cfg = ConfigManager(project_root, environ=environ).load_config()
    settings = RuntimeSettings.from_config(cfg, project_root=project_root)
    loaded = apply_settings(settings)
    logger.info(
        "droplet configured: naming=%s syntax=%s filter modules=%d",
        settings.naming_convention,
        settings.syntax_compatibility.name.lower(),
        len(loaded),
    )
    return settings


__all__ = [
    "ConfigManager",
    "RuntimeSettings",
    "apply_settings",
    "configure",
]
