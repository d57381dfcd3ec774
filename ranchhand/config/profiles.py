"""
RanchHand — Task Profiles

Per-task model and parameter defaults (embedding model, generation model,
temperature, chunk size). The profile file is YAML; a JSON file is valid
YAML and loads the same way.

A ProfileStore owns the file and hands out immutable Profiles snapshots.
merge() never mutates a snapshot that was already handed out: it builds
and returns a new one.

Usage:

    store = ProfileStore("~/.threadweaverinc/ranchhand/profiles.yaml")
    profiles = store.current()
    profiles.get("embed", "model")

    profiles = store.merge({"chunking": {"chunk_tokens": 256}})
"""

import copy
import os
import threading
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from ranchhand.config.system_loader import expand_path
from ranchhand.core.errors import BadRequest
from ranchhand.core.utils.logging_utils import get_component_logger


logger = get_component_logger("ProfileStore", component="api")


DEFAULT_PROFILES: Dict[str, Dict[str, Any]] = {
    "embed": {"model": "nomic-embed-text:latest"},
    "summarize_storage": {"model": "llama3:latest", "temperature": 0.2, "max_tokens": 512},
    "summarize_retrieval": {"model": "llama3:latest", "temperature": 0.1, "max_tokens": 256},
    "rerank": {"model": "bge-reranker:latest"},
    "intent": {"model": "phi4:3.8b", "temperature": 0.0},
    "chunking": {"chunk_tokens": 512, "overlap_tokens": 0},
}


def deep_merge(base: Mapping, patch: Optional[Mapping]) -> Dict[str, Any]:
    """
    Merge patch over base, recursing into nested mappings.
    Neither argument is modified.
    """

    out = copy.deepcopy(dict(base or {}))

    for key, value in (patch or {}).items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = deep_merge(out[key], value)
        elif isinstance(value, Mapping):
            out[key] = deep_merge({}, value)
        else:
            out[key] = copy.deepcopy(value)

    return out


def _freeze(value):
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class Profiles:
    """Read-only snapshot of the merged profile sections."""

    def __init__(self, data: Mapping):
        self._data = _freeze(data)

    def section(self, name: str) -> Mapping:
        value = self._data.get(name)
        return value if isinstance(value, Mapping) else MappingProxyType({})

    def get(self, section: str, key: str, default=None):
        value = self.section(section).get(key)
        return default if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        return _thaw(self._data)

    def __eq__(self, other):
        if not isinstance(other, Profiles):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Profiles({self.to_dict()!r})"


class ProfileStore:

    def __init__(self, path: Optional[str] = None, defaults: Optional[Mapping] = None):

        self.path = expand_path(path) if path else None
        self.defaults = deep_merge(DEFAULT_PROFILES, defaults or {})
        self._lock = threading.Lock()
        self._current = self.load()

    # -------------------------------------------------
    # Load
    # -------------------------------------------------

    def load(self) -> Profiles:
        """
        Read the profile file and merge it over the defaults.
        A missing or unreadable file yields the defaults.
        """

        stored = {}

        if self.path and os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    stored = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                logger.exception("Failed reading profiles at %s, using defaults", self.path)
                stored = {}

            if not isinstance(stored, Mapping):
                logger.warning("Ignoring profiles file %s: not a mapping", self.path)
                stored = {}

            for name in self._invalid_sections(self.defaults, stored):
                logger.warning("Ignoring profile section %r in %s: not a mapping", name, self.path)
                stored = {k: v for k, v in stored.items() if k != name}

        return Profiles(deep_merge(self.defaults, stored))

    @staticmethod
    def _invalid_sections(base: Mapping, patch: Mapping):
        """Sections that are mappings in base (or known defaults) but not in patch."""

        return [
            name for name, value in patch.items()
            if (name in DEFAULT_PROFILES or isinstance(base.get(name), Mapping))
            and not isinstance(value, Mapping)
        ]

    def reload(self) -> Profiles:
        with self._lock:
            self._current = self.load()
            return self._current

    def current(self) -> Profiles:
        return self._current

    # -------------------------------------------------
    # Merge
    # -------------------------------------------------

    def merge(self, patch: Optional[Mapping]) -> Profiles:

        if patch is not None and not isinstance(patch, Mapping):
            raise BadRequest("profile patch must be an object", stage="profiles")

        with self._lock:
            current = self._current.to_dict()

            invalid = self._invalid_sections(current, patch or {})
            if invalid:
                raise BadRequest(
                    f"profile sections must be objects: {', '.join(sorted(invalid))}",
                    stage="profiles"
                )

            merged = deep_merge(current, patch or {})

            if self.path:
                self._write(merged)

            self._current = Profiles(merged)

        logger.info("Profiles merged (sections=%s)", sorted((patch or {}).keys()))
        return self._current

    def _write(self, data: Dict[str, Any]):

        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp_path = self.path + ".tmp"

        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=True, default_flow_style=False)

        os.replace(tmp_path, self.path)
