"""Per-manager cache options and the ``pterolink.yaml`` loader.

A config file holds an ``application`` and/or a ``client`` section, each
mapping manager names to option specs::

    client:
      servers:
        fetch: true
        max: 200

Explicit options passed to a client win over the file; the file wins over
the defaults. A missing file is not an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigLoadError

CONFIG_FILENAME = "pterolink.yaml"

APPLICATION_MANAGERS: tuple[str, ...] = (
    "users",
    "nodes",
    "locations",
    "servers",
    "allocations",
    "nests",
    "databases",
)
CLIENT_MANAGERS: tuple[str, ...] = (
    "servers",
    "backups",
    "network",
    "databases",
    "schedules",
    "subusers",
    "files",
)


@dataclass(frozen=True)
class OptionSpec:
    """Options for one manager.

    Attributes:
        fetch: Whether ``connect()`` preloads the manager.
        cache: Whether fetched resources are kept in the manager cache.
        max: Cache capacity; ``None`` means unlimited.
    """

    fetch: bool = False
    cache: bool = True
    max: int | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], base: OptionSpec | None = None) -> OptionSpec:
        base = base or cls()
        max_entries = raw.get("max", base.max)
        if max_entries is not None and int(max_entries) < 0:
            max_entries = None
        return replace(
            base,
            fetch=bool(raw.get("fetch", base.fetch)),
            cache=bool(raw.get("cache", base.cache)),
            max=None if max_entries is None else int(max_entries),
        )


def load_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Raises:
        ConfigLoadError: If the file cannot be read or is not a mapping.
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as err:
        raise ConfigLoadError(f"Failed to load config {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config {path} must be a mapping")
    return data


def parse_options(
    raw: Mapping[str, Any] | None, managers: tuple[str, ...]
) -> dict[str, OptionSpec]:
    """Merge ``raw`` manager options over the defaults for ``managers``."""
    raw = raw or {}
    parsed: dict[str, OptionSpec] = {}
    for name in managers:
        spec = raw.get(name)
        if isinstance(spec, OptionSpec):
            parsed[name] = spec
        elif isinstance(spec, Mapping):
            parsed[name] = OptionSpec.from_mapping(spec)
        else:
            parsed[name] = OptionSpec()
    return parsed


def _resolve(
    section: str,
    managers: tuple[str, ...],
    options: Mapping[str, Any] | None,
    path: Path | None,
) -> dict[str, OptionSpec]:
    if options:
        return parse_options(options, managers)
    config_path = path or Path.cwd() / CONFIG_FILENAME
    if not config_path.exists():
        return parse_options(None, managers)
    return parse_options(load_config(config_path).get(section), managers)


def app_config(
    options: Mapping[str, Any] | None = None, *, path: Path | None = None
) -> dict[str, OptionSpec]:
    """Resolve application manager options."""
    return _resolve("application", APPLICATION_MANAGERS, options, path)


def client_config(
    options: Mapping[str, Any] | None = None, *, path: Path | None = None
) -> dict[str, OptionSpec]:
    """Resolve client manager options."""
    return _resolve("client", CLIENT_MANAGERS, options, path)
