"""Loading of solc configuration and dependency-graph descriptions.

Both file kinds are YAML or JSON (JSON is parsed by the YAML loader). The
solc section accepts the same shapes as the build tool's ``solidity`` config:

- ``"0.5.5"``
- ``{"version": "0.5.5", "settings": {...}}``
- ``{"compilers": [...], "overrides": {"contracts/Foo.sol": ...}}``
"""

from __future__ import annotations

import copy
import logging
import os
from typing import Any, Dict, Mapping

import yaml

from constants import Constants

from .dependency_graph import DependencyGraph, UnknownFileError
from .models import CompilerBuild, ResolvedFile, SolcConfig

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for malformed or unreadable configuration input."""


def _deep_merge(dest: Dict[str, Any], src: Mapping[str, Any]) -> None:
    """Deep-merge src into dest in-place."""
    for k, v in src.items():
        if isinstance(v, Mapping) and isinstance(dest.get(k), dict):
            _deep_merge(dest[k], v)
        else:
            dest[k] = copy.deepcopy(v)


def _read_document(path: str) -> Any:
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext not in Constants.SUPPORTED_CONFIG_EXTENSIONS:
        logger.warning("Unrecognized config extension '%s'; parsing as YAML", ext)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e


def parse_compiler_build(data: Any, where: str = "compiler") -> CompilerBuild:
    """Parse ``"0.5.5"`` or ``{"version": ..., "settings": ...}``."""
    if isinstance(data, (int, float)):
        raise ConfigError(f"{where}: version must be a string, got {data!r}")
    if isinstance(data, str):
        data = {"version": data}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where}: expected a version string or a mapping")

    version = data.get("version")
    if not isinstance(version, str) or not version.strip():
        raise ConfigError(f"{where}: missing 'version'")
    settings = data.get("settings") or {}
    if not isinstance(settings, Mapping):
        raise ConfigError(f"{where}: 'settings' must be a mapping")

    merged = copy.deepcopy(Constants.DEFAULT_SOLC_SETTINGS)
    _deep_merge(merged, settings)
    return CompilerBuild(version=version.strip(), settings=merged)


def parse_solc_config(data: Any) -> SolcConfig:
    """Build a SolcConfig from any supported solc section shape."""
    if data is None:
        raise ConfigError("Empty solc configuration")
    if isinstance(data, Mapping) and Constants.CONFIG_SECTION in data:
        data = data[Constants.CONFIG_SECTION]

    if isinstance(data, str) or (isinstance(data, Mapping) and "version" in data):
        return SolcConfig(compilers=(parse_compiler_build(data),), overrides={})

    if not isinstance(data, Mapping) or "compilers" not in data:
        raise ConfigError("solc configuration needs 'version' or 'compilers'")

    raw_compilers = data.get("compilers") or []
    if not isinstance(raw_compilers, list):
        raise ConfigError("'compilers' must be a list")
    compilers = tuple(
        parse_compiler_build(entry, where=f"compilers[{i}]")
        for i, entry in enumerate(raw_compilers)
    )

    raw_overrides = data.get("overrides") or {}
    if not isinstance(raw_overrides, Mapping):
        raise ConfigError("'overrides' must be a mapping of file name to compiler")
    overrides = {
        str(name): parse_compiler_build(entry, where=f"overrides[{name}]")
        for name, entry in raw_overrides.items()
    }

    logger.debug(
        "Loaded solc config: %d compilers, %d overrides", len(compilers), len(overrides)
    )
    return SolcConfig(compilers=compilers, overrides=overrides)


def load_solc_config(path: str) -> SolcConfig:
    """Load a solc configuration file (YAML or JSON)."""
    return parse_solc_config(_read_document(path))


def parse_dependency_graph(data: Any) -> DependencyGraph:
    """Build a DependencyGraph from resolver output.

    Expected shape::

        files:
          contracts/Foo.sol:
            pragmas: ["^0.5.0"]
            imports: ["contracts/Bar.sol"]
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("files"), Mapping):
        raise ConfigError("Graph description needs a 'files' mapping")

    files = []
    imports: Dict[str, list] = {}
    for name, entry in data["files"].items():
        entry = entry or {}
        if not isinstance(entry, Mapping):
            raise ConfigError(f"files[{name}]: expected a mapping")
        pragmas = entry.get("pragmas") or []
        if isinstance(pragmas, str):
            pragmas = [pragmas]
        files.append(
            ResolvedFile(
                global_name=str(name),
                version_pragmas=tuple(str(p) for p in pragmas),
                source_name=entry.get("sourceName"),
            )
        )
        imports[str(name)] = [str(i) for i in entry.get("imports") or []]

    try:
        return DependencyGraph.from_mapping(files, imports)
    except UnknownFileError as e:
        raise ConfigError(f"Graph description imports an unknown file: {e.name}") from e


def load_dependency_graph(path: str) -> DependencyGraph:
    """Load a dependency-graph description file (YAML or JSON)."""
    return parse_dependency_graph(_read_document(path))
