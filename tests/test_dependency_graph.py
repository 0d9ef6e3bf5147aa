"""Tests for the dependency graph."""

import pytest

from src.solidity.dependency_graph import DependencyGraph, UnknownFileError
from src.solidity.models import ResolvedFile


def names(files):
    return [f.global_name for f in files]


@pytest.fixture
def chain():
    """Foo -> Bar -> Qux, plus an unrelated Lonely file."""
    files = [ResolvedFile(n, ("^0.5.0",)) for n in ("Foo", "Bar", "Qux", "Lonely")]
    return DependencyGraph.from_mapping(files, {"Foo": ["Bar"], "Bar": ["Qux"]})


class TestDependencyGraph:
    """Tests for graph construction and queries."""

    def test_files_keep_insertion_order(self, chain):
        assert names(chain.get_resolved_files()) == ["Foo", "Bar", "Qux", "Lonely"]
        assert len(chain) == 4

    def test_direct_dependencies(self, chain):
        assert names(chain.get_dependencies(chain.get("Foo"))) == ["Bar"]
        assert names(chain.get_importers(chain.get("Bar"))) == ["Foo"]
        assert chain.get_dependencies(chain.get("Qux")) == ()

    def test_transitive_closure_follows_imports_forward(self, chain):
        assert names(chain.transitive_closure(chain.get("Foo"))) == ["Foo", "Bar", "Qux"]
        assert names(chain.transitive_closure(chain.get("Bar"))) == ["Bar", "Qux"]

    def test_transitive_dependencies_exclude_root(self, chain):
        assert names(chain.get_transitive_dependencies(chain.get("Foo"))) == ["Bar", "Qux"]

    def test_cycle_is_finite(self):
        files = [ResolvedFile(n) for n in ("Foo", "Bar", "Qux")]
        graph = DependencyGraph.from_mapping(files, {"Foo": ["Bar"], "Bar": ["Qux"], "Qux": ["Foo"]})
        assert sorted(names(graph.transitive_closure(files[1]))) == ["Bar", "Foo", "Qux"]
        # The root is its own transitive dependency through the cycle
        assert "Bar" in names(graph.get_transitive_dependencies(files[1]))

    def test_connected_components_are_undirected(self, chain):
        components = chain.get_connected_components()
        assert [names(c.get_resolved_files()) for c in components] == [
            ["Foo", "Bar", "Qux"],
            ["Lonely"],
        ]
        assert names(components[0].get_dependencies(chain.get("Bar"))) == ["Qux"]

    def test_component_joins_files_sharing_an_import(self):
        files = [ResolvedFile(n) for n in ("Importer1", "Importer2", "Imported", "Other")]
        graph = DependencyGraph.from_mapping(
            files, {"Importer1": ["Imported"], "Importer2": ["Imported"]}
        )
        components = graph.get_connected_components()
        assert len(components) == 2
        assert names(components[0].get_resolved_files()) == ["Importer1", "Importer2", "Imported"]

    def test_unknown_edge_target_raises(self):
        graph = DependencyGraph([ResolvedFile("Foo")])
        with pytest.raises(UnknownFileError) as exc:
            graph.add_dependency("Foo", "Missing")
        assert exc.value.name == "Missing"
        assert "Missing" in str(exc.value)

    def test_add_file_is_idempotent_by_name(self):
        graph = DependencyGraph()
        first = graph.add_file(ResolvedFile("Foo", ("^0.5.0",)))
        second = graph.add_file(ResolvedFile("Foo", ("^0.6.0",)))
        assert second is first
        assert len(graph) == 1

    def test_membership(self, chain):
        assert ResolvedFile("Foo") in chain
        assert chain.has("Qux")
        assert not chain.has("Nope")
        assert chain.get("Nope") is None


class TestResolvedFile:
    """Tests for resolved file values."""

    def test_string_pragma_is_a_single_pragma(self):
        assert ResolvedFile("Foo", "^0.5.0").version_pragmas == ("^0.5.0",)

    def test_list_pragmas_become_a_tuple(self):
        file = ResolvedFile("Foo", ["^0.5.0", ">=0.5.3"])
        assert file.version_pragmas == ("^0.5.0", ">=0.5.3")
        assert hash(file) == hash(ResolvedFile("Foo"))
