"""Compilation job creation for single files and connected components."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence, Tuple

from common.logging_utils import extra_context, is_debug_enabled

from .dependency_graph import DependencyGraph
from .models import (
    CompilationJob,
    CompilationJobCreationError,
    CompilerBuild,
    ComponentJobs,
    JobCreated,
    JobCreationFailed,
    JobCreationResult,
    ResolvedFile,
    SolcConfig,
    group_errors,
)
from .version_selector import accepts, select_for_root

logger = logging.getLogger(__name__)

JobBuilder = Callable[[ResolvedFile], JobCreationResult]


def create_compilation_job_from_file(
    dependency_graph: DependencyGraph,
    file: ResolvedFile,
    solc_config: SolcConfig,
) -> JobCreationResult:
    """Create the job that compiles ``file`` and everything it imports.

    The root's compiler build is chosen first; every transitive import must
    then accept that same build. Imports never get an override or a selection
    of their own.
    """
    build, error = select_for_root(file, solc_config)
    if build is None:
        return JobCreationFailed(error=error, file=file)

    closure = dependency_graph.transitive_closure(file)
    for dependency in closure:
        if dependency == file:
            continue
        if not accepts(dependency, build):
            logger.debug(
                "%s imports %s, which does not accept solc %s",
                file.global_name, dependency.global_name, build.version,
            )
            return JobCreationFailed(
                error=CompilationJobCreationError.IMPORTS_INCOMPATIBLE_FILE,
                file=file,
            )

    return JobCreated(
        CompilationJob(
            compiler_build=build,
            resolved_files=closure,
            emitting_files=frozenset([file]),
        )
    )


def merge_compilation_jobs(
    jobs: Sequence[CompilationJob],
    is_mergeable: Callable[[CompilationJob], bool],
) -> List[CompilationJob]:
    """Merge mergeable jobs that share a compiler build.

    Builds are compared structurally. Output keeps the position of the first
    job of each merged group; jobs that are not mergeable pass through as-is.
    """
    groups: Dict[CompilerBuild, List[CompilationJob]] = {}
    order: List[object] = []
    for job in jobs:
        if not is_mergeable(job):
            order.append(job)
            continue
        build = job.get_solc_config()
        if build not in groups:
            groups[build] = []
            order.append(build)
        groups[build].append(job)

    merged: List[CompilationJob] = []
    for entry in order:
        if isinstance(entry, CompilationJob):
            merged.append(entry)
            continue
        group = groups[entry]
        combined = group[0]
        for other in group[1:]:
            combined = combined.merge(other)
        if len(group) > 1 and is_debug_enabled(logger):
            logger.debug(
                "Merged compilation jobs",
                extra=extra_context(
                    event="jobs_merged",
                    component="compilation_job",
                    version=entry.version,
                    merged=len(group),
                    files=len(combined.resolved_files),
                ),
            )
        merged.append(combined)
    return merged


def _has_optimizer_bug(job: CompilationJob) -> bool:
    # A file shared by several optimized jobs can get divergent bytecode and
    # metadata across those jobs; compiling it once avoids that.
    return job.get_solc_config().optimizer_enabled


def merge_compilation_jobs_with_bug(jobs: Sequence[CompilationJob]) -> List[CompilationJob]:
    """Merge same-build jobs whose build runs the optimizer."""
    return merge_compilation_jobs(jobs, _has_optimizer_bug)


def create_compilation_jobs_from_connected_component(
    connected_component: DependencyGraph,
    build_job_for_file: JobBuilder,
) -> ComponentJobs:
    """Plan every file of one connected component.

    Per-file failures are collected by kind instead of aborting; successful
    jobs are merged where the optimizer workaround applies.
    """
    jobs: List[CompilationJob] = []
    failures: List[Tuple[CompilationJobCreationError, ResolvedFile]] = []

    for file in connected_component.get_resolved_files():
        result = build_job_for_file(file)
        if not result.is_success:
            # Report under the requested file, whatever the callback echoed back
            failures.append((result.error, file))
            continue
        if result.job.emits_artifacts(file):
            jobs.append(result.job)

    merged = merge_compilation_jobs_with_bug(jobs)
    return ComponentJobs(jobs=merged, errors=group_errors(failures))


def job_builder_for(dependency_graph: DependencyGraph, solc_config: SolcConfig) -> JobBuilder:
    """Return the per-file callback used by the component planner."""
    def build(file: ResolvedFile) -> JobCreationResult:
        return create_compilation_job_from_file(dependency_graph, file, solc_config)
    return build
