"""Compiler build selection using npm-style semver ranges.

Solidity version pragmas (``^0.5.0``, ``>=0.4.22 <0.7.0``) follow npm range
syntax, so matching goes through ``semantic_version.NpmSpec``.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional, Tuple

import semantic_version

from common.logging_utils import extra_context, is_debug_enabled

from .models import CompilationJobCreationError, CompilerBuild, ResolvedFile, SolcConfig

logger = logging.getLogger(__name__)

Selection = Tuple[Optional[CompilerBuild], Optional[CompilationJobCreationError]]


@lru_cache(maxsize=1024)
def _parse_version(version: str) -> Optional[semantic_version.Version]:
    try:
        return semantic_version.Version(version.strip())
    except ValueError:
        return None


def _normalize_range(range_str: str) -> str:
    """Attach comparators to their versions, so ``>= 0.5.0`` reads ``>=0.5.0``."""
    return re.sub(r'(<=|>=|<|>|=|~|\^)\s+', r'\1', range_str.strip())


@lru_cache(maxsize=1024)
def _parse_range(range_str: str):
    """Parse an npm range, falling back to SimpleSpec. Returns None if both fail."""
    norm = _normalize_range(range_str)
    try:
        return semantic_version.NpmSpec(norm)
    except ValueError:
        try:
            # SimpleSpec joins comparators with commas
            return semantic_version.SimpleSpec(re.sub(r'\s+', ',', norm))
        except ValueError as e:
            logger.warning("Invalid version pragma '%s': %s", range_str, e)
            return None


def satisfies(version: str, range_str: str) -> bool:
    """Return True if ``version`` is inside the npm-style range ``range_str``.

    Unparseable versions or ranges never match.
    """
    ver = _parse_version(version)
    spec = _parse_range(range_str)
    if ver is None or spec is None:
        if is_debug_enabled(logger):
            logger.debug(
                "Unparseable version or range treated as non-matching",
                extra=extra_context(
                    event="semver_parse_failure",
                    component="version_selector",
                    version=version,
                    range=range_str,
                ),
            )
        return False
    return spec.match(ver)


def accepts(file: ResolvedFile, build: CompilerBuild) -> bool:
    """Return True if every version pragma of ``file`` admits ``build``.

    Overrides are not consulted: they only apply to compilation roots.
    """
    return all(satisfies(build.version, pragma) for pragma in file.version_pragmas)


def _sort_key(indexed_build: Tuple[int, CompilerBuild]):
    position, build = indexed_build
    return (_parse_version(build.version), position)


def select_for_root(file: ResolvedFile, config: SolcConfig) -> Selection:
    """Pick the compiler build for ``file`` compiled as a root.

    Returns ``(build, None)`` on success and ``(None, error)`` otherwise.
    An override is the only candidate for its file. Without one, the highest
    satisfying version wins; equal versions resolve to the latest position in
    ``config.compilers``.
    """
    override = config.override_for(file)
    if override is not None:
        if accepts(file, override):
            return override, None
        logger.debug(
            "Override %s does not satisfy %s (%s)",
            override.version, file.global_name, ", ".join(file.version_pragmas),
        )
        return None, CompilationJobCreationError.NON_COMPILABLE_OVERRIDEN

    candidates = [
        (position, build)
        for position, build in enumerate(config.compilers)
        if _parse_version(build.version) is not None and accepts(file, build)
    ]
    if not candidates:
        logger.debug(
            "No configured compiler satisfies %s (%s)",
            file.global_name, ", ".join(file.version_pragmas),
        )
        return None, CompilationJobCreationError.NON_COMPILABLE

    _, chosen = max(candidates, key=_sort_key)
    if is_debug_enabled(logger):
        logger.debug(
            "Compiler selected",
            extra=extra_context(
                event="compiler_selected",
                component="version_selector",
                file=file.global_name,
                version=chosen.version,
                candidates=len(candidates),
            ),
        )
    return chosen, None
