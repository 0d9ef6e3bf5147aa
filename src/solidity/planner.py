"""Whole-graph planning: connected components in, compilation jobs out.

Components are disjoint, so they can be planned independently and, when
``max_workers`` is greater than one, in parallel threads. Results are always
reported in component order regardless of completion order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants

from .compilation_job import create_compilation_jobs_from_connected_component, job_builder_for
from .dependency_graph import DependencyGraph
from .models import (
    CompilationJob,
    CompilationJobCreationError,
    ComponentJobs,
    ErrorsByKind,
    SolcConfig,
)

logger = logging.getLogger(__name__)

_ERROR_MESSAGES = {
    CompilationJobCreationError.NON_COMPILABLE_OVERRIDEN: (
        "The compiler version specified in your config for these files doesn't "
        "match their version pragma. Change the override in your config or the "
        "pragma statement in the files:"
    ),
    CompilationJobCreationError.NON_COMPILABLE: (
        "The Solidity version pragma statement in these files doesn't match any "
        "of the configured compilers in your config. Change the pragma or add "
        "compiler versions to your config:"
    ),
    CompilationJobCreationError.IMPORTS_INCOMPATIBLE_FILE: (
        "These files import other files that use a different and incompatible "
        "version of Solidity:"
    ),
}


class CompilationJobsCreationError(Exception):
    """Raised by callers that treat any per-file planning failure as fatal."""

    def __init__(self, errors: ErrorsByKind):
        self.errors = dict(errors)
        super().__init__(describe_errors(self.errors))


@dataclass(frozen=True)
class CompilationPlan:
    """Jobs and grouped errors for a whole dependency graph."""
    jobs: Tuple[CompilationJob, ...]
    errors: ErrorsByKind

    @property
    def has_errors(self) -> bool:
        return any(self.errors.values())

    def files_with_errors(self) -> List[str]:
        names: List[str] = []
        for kind in CompilationJobCreationError:
            names.extend(self.errors.get(kind, ()))
        return names

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "errors": {
                kind.value: list(names)
                for kind, names in self.errors.items()
                if names
            },
        }


def merge_error_maps(maps: List[ErrorsByKind]) -> ErrorsByKind:
    """Concatenate per-component error maps, keeping kinds and file order."""
    merged: Dict[CompilationJobCreationError, Tuple[str, ...]] = {}
    for errors in maps:
        for kind, names in errors.items():
            merged[kind] = merged.get(kind, ()) + tuple(names)
    return merged


def _plan_component(component: DependencyGraph, solc_config: SolcConfig) -> ComponentJobs:
    return create_compilation_jobs_from_connected_component(
        component, job_builder_for(component, solc_config)
    )


def plan_compilation_jobs(
    dependency_graph: DependencyGraph,
    solc_config: SolcConfig,
    max_workers: Optional[int] = None,
) -> CompilationPlan:
    """Plan compilation jobs for every file in ``dependency_graph``."""
    components = dependency_graph.get_connected_components()
    workers = max(1, int(max_workers or 1))

    with Timer() as t:
        if workers > 1 and len(components) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(
                    executor.map(lambda c: _plan_component(c, solc_config), components)
                )
        else:
            results = [_plan_component(c, solc_config) for c in components]

    jobs: List[CompilationJob] = []
    for result in results:
        jobs.extend(result.jobs)
    plan = CompilationPlan(
        jobs=tuple(jobs),
        errors=merge_error_maps([r.errors for r in results]),
    )

    logger.info(
        "%s %d files, %d components, %d compilation jobs, %d files with errors",
        Constants.ANALYSIS,
        len(dependency_graph),
        len(components),
        len(plan.jobs),
        len(plan.files_with_errors()),
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Planning finished",
            extra=extra_context(
                event="plan_finished",
                component="planner",
                outcome="errors" if plan.has_errors else "success",
                duration_ms=t.duration_ms(),
                workers=workers,
            ),
        )
    return plan


def describe_errors(errors: ErrorsByKind) -> str:
    """Render grouped planning errors as a human readable report."""
    sections = []
    for kind in (
        CompilationJobCreationError.NON_COMPILABLE_OVERRIDEN,
        CompilationJobCreationError.NON_COMPILABLE,
        CompilationJobCreationError.IMPORTS_INCOMPATIBLE_FILE,
    ):
        names = errors.get(kind) or ()
        if not names:
            continue
        lines = [_ERROR_MESSAGES[kind], ""]
        lines.extend(f"  * {name}" for name in names)
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


def ensure_no_errors(plan: CompilationPlan) -> CompilationPlan:
    """Return ``plan`` unchanged, or raise if any file could not be planned."""
    if plan.has_errors:
        raise CompilationJobsCreationError(plan.errors)
    return plan
