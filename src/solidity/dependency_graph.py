"""Import graph over resolved source files.

Files live in one insertion-ordered arena and edges are stored as index sets,
so import cycles never turn into reference cycles. Every query is read-only
and returns results in a deterministic order (file insertion order or
discovery order from the queried file).
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .models import ResolvedFile


class UnknownFileError(KeyError):
    """Raised when a graph query or edge references a file outside the graph."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"File '{self.name}' is not part of the dependency graph"


class DependencyGraph:
    """Directed import graph; an edge ``a -> b`` means ``a`` imports ``b``."""

    def __init__(self, files: Iterable[ResolvedFile] = ()):
        self._files: List[ResolvedFile] = []
        self._index: Dict[str, int] = {}
        self._imports: List[Set[int]] = []
        self._imported_by: List[Set[int]] = []
        for file in files:
            self.add_file(file)

    @classmethod
    def from_mapping(
        cls,
        files: Iterable[ResolvedFile],
        imports: Mapping[str, Iterable[str]],
    ) -> "DependencyGraph":
        """Build a graph from files and a ``importer -> imported names`` mapping."""
        graph = cls(files)
        for importer, imported_names in imports.items():
            for imported in imported_names:
                graph.add_dependency(importer, imported)
        return graph

    def add_file(self, file: ResolvedFile) -> ResolvedFile:
        """Add a file, returning the stored instance if the name is already known."""
        existing = self._index.get(file.global_name)
        if existing is not None:
            return self._files[existing]
        self._index[file.global_name] = len(self._files)
        self._files.append(file)
        self._imports.append(set())
        self._imported_by.append(set())
        return file

    def add_dependency(self, importer, imported) -> None:
        """Record that ``importer`` imports ``imported``; both must be in the graph."""
        src = self._index_of(importer)
        dst = self._index_of(imported)
        self._imports[src].add(dst)
        self._imported_by[dst].add(src)

    def _index_of(self, file) -> int:
        name = file.global_name if isinstance(file, ResolvedFile) else str(file)
        idx = self._index.get(name)
        if idx is None:
            raise UnknownFileError(name)
        return idx

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, file) -> bool:
        return self.has(file)

    def has(self, file) -> bool:
        name = file.global_name if isinstance(file, ResolvedFile) else str(file)
        return name in self._index

    def get(self, name: str) -> Optional[ResolvedFile]:
        idx = self._index.get(name)
        return None if idx is None else self._files[idx]

    def get_resolved_files(self) -> Tuple[ResolvedFile, ...]:
        return tuple(self._files)

    def get_dependencies(self, file) -> Tuple[ResolvedFile, ...]:
        """Files directly imported by ``file``, in insertion order."""
        idx = self._index_of(file)
        return tuple(self._files[i] for i in sorted(self._imports[idx]))

    def get_importers(self, file) -> Tuple[ResolvedFile, ...]:
        """Files directly importing ``file``, in insertion order."""
        idx = self._index_of(file)
        return tuple(self._files[i] for i in sorted(self._imported_by[idx]))

    def _reachable(self, start: int) -> List[int]:
        # Breadth-first over forward edges; neighbours visited in index order.
        seen = {start}
        order = [start]
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for nxt in sorted(self._imports[current]):
                if nxt not in seen:
                    seen.add(nxt)
                    order.append(nxt)
                    queue.append(nxt)
        return order

    def transitive_closure(self, file) -> Tuple[ResolvedFile, ...]:
        """``file`` followed by every file it imports directly or indirectly."""
        return tuple(self._files[i] for i in self._reachable(self._index_of(file)))

    def get_transitive_dependencies(self, file) -> Tuple[ResolvedFile, ...]:
        """Every file imported directly or indirectly by ``file``.

        ``file`` itself is included only when it imports itself through a cycle.
        """
        start = self._index_of(file)
        reachable = self._reachable(start)[1:]
        in_cycle = any(start in self._imports[i] for i in [start, *reachable])
        deps = [self._files[i] for i in reachable]
        if in_cycle:
            deps.append(self._files[start])
        return tuple(deps)

    def get_connected_components(self) -> List["DependencyGraph"]:
        """Split the graph into components, treating imports as undirected.

        Components are ordered by their first file and keep insertion order
        internally.
        """
        component_of = [-1] * len(self._files)
        groups: List[List[int]] = []
        for start in range(len(self._files)):
            if component_of[start] != -1:
                continue
            group_id = len(groups)
            members = []
            component_of[start] = group_id
            queue = deque([start])
            while queue:
                current = queue.popleft()
                members.append(current)
                for nxt in self._imports[current] | self._imported_by[current]:
                    if component_of[nxt] == -1:
                        component_of[nxt] = group_id
                        queue.append(nxt)
            groups.append(sorted(members))

        return [self._subgraph(members) for members in groups]

    def _subgraph(self, members: List[int]) -> "DependencyGraph":
        sub = DependencyGraph(self._files[i] for i in members)
        member_set = set(members)
        for i in members:
            for j in sorted(self._imports[i]):
                if j in member_set:
                    sub.add_dependency(self._files[i], self._files[j])
        return sub

    def __repr__(self) -> str:
        edges = sum(len(s) for s in self._imports)
        return f"DependencyGraph(files={len(self._files)}, imports={edges})"
