"""Data models for compilation-job planning."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union


class CompilationJobCreationError(Enum):
    """Reasons a compilation job cannot be created for a root file."""
    NON_COMPILABLE = "non-compilable"
    NON_COMPILABLE_OVERRIDEN = "non-compilable-overriden"
    IMPORTS_INCOMPATIBLE_FILE = "imports-incompatible-file"


@dataclass(frozen=True)
class ResolvedFile:
    """A source file as produced by the import resolver.

    Identity is ``global_name``; two instances with the same global name are
    the same file for every planning purpose.
    """
    global_name: str
    version_pragmas: Tuple[str, ...] = field(default=(), compare=False)
    source_name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        # Accept lists from callers while keeping the instance hashable.
        # A bare string is a single pragma, not a sequence of characters.
        pragmas = self.version_pragmas
        if isinstance(pragmas, str):
            pragmas = (pragmas,)
        object.__setattr__(self, "version_pragmas", tuple(pragmas))

    def __str__(self) -> str:
        return self.global_name


@dataclass(frozen=True, eq=False)
class CompilerBuild:
    """A compiler version paired with the settings it is run with.

    Equality is structural over the version and the whole settings mapping,
    so two builds read from different config entries compare equal when they
    would produce the same compiler input.
    """
    version: str
    settings: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "settings", copy.deepcopy(dict(self.settings)))

    @property
    def settings_key(self) -> str:
        """Canonical JSON form of the settings, used for equality and hashing."""
        return json.dumps(self.settings, sort_keys=True, separators=(",", ":"), default=str)

    @property
    def optimizer_enabled(self) -> bool:
        optimizer = self.settings.get("optimizer")
        return isinstance(optimizer, Mapping) and optimizer.get("enabled") is True

    @property
    def optimizer_runs(self) -> Optional[int]:
        optimizer = self.settings.get("optimizer")
        if not isinstance(optimizer, Mapping):
            return None
        return optimizer.get("runs")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompilerBuild):
            return NotImplemented
        return self.version == other.version and self.settings_key == other.settings_key

    def __hash__(self) -> int:
        return hash((self.version, self.settings_key))

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "settings": copy.deepcopy(self.settings)}


@dataclass(frozen=True)
class SolcConfig:
    """Configured compiler builds plus per-file overrides.

    ``compilers`` order expresses preference: when two builds share the
    highest satisfying version the later one wins.
    """
    compilers: Tuple[CompilerBuild, ...] = ()
    overrides: Mapping[str, CompilerBuild] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "compilers", tuple(self.compilers))
        object.__setattr__(self, "overrides", dict(self.overrides))

    def override_for(self, file: ResolvedFile) -> Optional[CompilerBuild]:
        return self.overrides.get(file.global_name)

    def __hash__(self) -> int:
        return hash((self.compilers, tuple(sorted(self.overrides.items(), key=lambda kv: kv[0]))))


@dataclass(frozen=True)
class CompilationJob:
    """One compiler invocation: a build, the files it needs, and the files it emits.

    ``resolved_files`` keeps a deterministic order (roots first, then their
    dependencies in discovery order). ``emitting_files`` must be a subset of
    ``resolved_files``.
    """
    compiler_build: CompilerBuild
    resolved_files: Tuple[ResolvedFile, ...]
    emitting_files: FrozenSet[ResolvedFile]

    def __post_init__(self):
        resolved = tuple(dict.fromkeys(self.resolved_files))
        emitting = frozenset(self.emitting_files)
        object.__setattr__(self, "resolved_files", resolved)
        object.__setattr__(self, "emitting_files", emitting)
        missing = emitting.difference(resolved)
        if missing:
            names = ", ".join(sorted(f.global_name for f in missing))
            raise ValueError(f"Emitting files not part of the job: {names}")

    def emits_artifacts(self, file: ResolvedFile) -> bool:
        """Return True if artifacts must be produced for ``file``."""
        return file in self.emitting_files

    def get_resolved_files(self) -> Tuple[ResolvedFile, ...]:
        return self.resolved_files

    def get_solc_config(self) -> CompilerBuild:
        return self.compiler_build

    def merge(self, other: "CompilationJob") -> "CompilationJob":
        """Return a job compiling both jobs' files with their shared build."""
        if self.compiler_build != other.compiler_build:
            raise ValueError(
                "Cannot merge compilation jobs with different compiler builds: "
                f"{self.compiler_build.version} and {other.compiler_build.version}"
            )
        return CompilationJob(
            compiler_build=self.compiler_build,
            resolved_files=self.resolved_files + other.resolved_files,
            emitting_files=self.emitting_files | other.emitting_files,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solcConfig": self.compiler_build.to_dict(),
            "resolvedFiles": [f.global_name for f in self.resolved_files],
            "emittingFiles": sorted(f.global_name for f in self.emitting_files),
        }


@dataclass(frozen=True)
class JobCreated:
    """Successful job creation for a root file."""
    job: CompilationJob

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class JobCreationFailed:
    """Failed job creation for a root file; no partial job exists."""
    error: CompilationJobCreationError
    file: ResolvedFile

    @property
    def is_success(self) -> bool:
        return False


JobCreationResult = Union[JobCreated, JobCreationFailed]

# Error kind -> global names of the root files that failed with it.
ErrorsByKind = Dict[CompilationJobCreationError, Tuple[str, ...]]


@dataclass(frozen=True)
class ComponentJobs:
    """Planning outcome for one connected component."""
    jobs: Tuple[CompilationJob, ...]
    errors: ErrorsByKind

    def __post_init__(self):
        object.__setattr__(self, "jobs", tuple(self.jobs))
        object.__setattr__(self, "errors", dict(self.errors))


def group_errors(
    failures: Iterable[Tuple[CompilationJobCreationError, ResolvedFile]],
) -> ErrorsByKind:
    """Group ``(error, file)`` pairs by kind, keeping the order files were reported in."""
    grouped: Dict[CompilationJobCreationError, list] = {}
    for error, file in failures:
        names = grouped.setdefault(error, [])
        if file.global_name not in names:
            names.append(file.global_name)
    return {kind: tuple(names) for kind, names in grouped.items()}
