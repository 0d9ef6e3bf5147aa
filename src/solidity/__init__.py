"""Compilation-job planning for Solidity projects.

Given an import graph whose files carry version pragmas and a solc
configuration, this package decides which files are compiled together and
with which compiler build.
"""

from .models import (
    CompilationJob,
    CompilationJobCreationError,
    CompilerBuild,
    ComponentJobs,
    JobCreated,
    JobCreationFailed,
    ResolvedFile,
    SolcConfig,
)
from .dependency_graph import DependencyGraph, UnknownFileError
from .compilation_job import (
    create_compilation_job_from_file,
    create_compilation_jobs_from_connected_component,
)
from .planner import CompilationJobsCreationError, CompilationPlan, plan_compilation_jobs

__all__ = [
    "CompilationJob",
    "CompilationJobCreationError",
    "CompilerBuild",
    "ComponentJobs",
    "JobCreated",
    "JobCreationFailed",
    "ResolvedFile",
    "SolcConfig",
    "DependencyGraph",
    "UnknownFileError",
    "create_compilation_job_from_file",
    "create_compilation_jobs_from_connected_component",
    "CompilationJobsCreationError",
    "CompilationPlan",
    "plan_compilation_jobs",
]
