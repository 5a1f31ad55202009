"""Tests for the dependency graph and the creation order."""

import random

from seedgraph.generation.graph import DependencyNode, build_dependency_graph
from seedgraph.generation.ordering import topological_sort
from seedgraph.schema.models import SchemaIR


def graph_from_edges(names, edges):
    """Build a graph where each (a, b) edge means a depends on b."""
    graph = {n: DependencyNode(name=n) for n in names}
    for a, b in edges:
        graph[a].depends_on.add(b)
        if a not in graph[b].referenced_by:
            graph[b].referenced_by.append(a)
    return graph


def test_graph_uses_required_single_relations_only(entity_factory):
    entities = [
        entity_factory("Level"),
        entity_factory("Team"),
        entity_factory("User", requires=["Level"], optional=["Team"]),
    ]
    graph = build_dependency_graph(entities)
    assert list(graph) == ["Level", "Team", "User"]
    assert graph["User"].depends_on == {"Level"}
    assert graph["Level"].referenced_by == ["User"]
    assert graph["Team"].referenced_by == []


def test_graph_ignores_self_list_and_foreign_relations(blog_schema):
    graph = build_dependency_graph(blog_schema.entities)
    assert graph["User"].depends_on == {"Level"}
    assert "User" not in graph["User"].referenced_by
    assert graph["Post"].depends_on == {"User"}
    assert graph["Level"].depends_on == set()


def test_graph_skips_unknown_targets(entity_factory):
    graph = build_dependency_graph([entity_factory("Orphan", requires=["Ghost"])])
    assert graph["Orphan"].depends_on == set()


def test_blog_order(blog_schema):
    result = topological_sort(build_dependency_graph(blog_schema.entities))
    assert result.order == ["Level", "User", "Post"]
    assert not result.has_cycle


def test_kahn_is_fifo():
    graph = graph_from_edges(["C", "A", "B", "D"], [("D", "A"), ("D", "B")])
    assert topological_sort(graph).order == ["C", "A", "B", "D"]


def test_random_dags_respect_every_edge():
    rng = random.Random(42)
    for _ in range(50):
        n = rng.randint(1, 12)
        names = [f"T{i}" for i in range(n)]
        edges = [
            (names[i], names[j])
            for i in range(n)
            for j in range(i)
            if rng.random() < 0.3
        ]
        shuffled = names[:]
        rng.shuffle(shuffled)

        result = topological_sort(graph_from_edges(shuffled, edges))
        assert sorted(result.order) == sorted(names)
        assert not result.cyclic
        position = {name: idx for idx, name in enumerate(result.order)}
        for a, b in edges:
            assert position[b] < position[a]


def test_cyclic_pair_is_still_ordered():
    graph = graph_from_edges(["X", "Y"], [("X", "Y"), ("Y", "X")])
    result = topological_sort(graph)
    assert result.order == ["X", "Y"]
    assert result.cyclic == ["X", "Y"]
    assert result.has_cycle


def test_cycle_keeps_acyclic_prefix_and_insertion_order():
    graph = graph_from_edges(
        ["Root", "B", "A", "Leaf"],
        [("A", "B"), ("B", "A"), ("A", "Root"), ("Leaf", "A")],
    )
    result = topological_sort(graph)
    assert result.order == ["Root", "B", "A", "Leaf"]
    assert result.cyclic == ["B", "A", "Leaf"]


def test_random_graphs_are_permutations():
    rng = random.Random(7)
    for _ in range(50):
        n = rng.randint(1, 10)
        names = [f"N{i}" for i in range(n)]
        edges = [(a, b) for a in names for b in names if a != b and rng.random() < 0.25]
        result = topological_sort(graph_from_edges(names, edges))
        assert len(result.order) == n
        assert set(result.order) == set(names)


def test_chain_schema_order(chain_schema):
    schema: SchemaIR = chain_schema(4)
    result = topological_sort(build_dependency_graph(schema.entities))
    assert result.order == ["E1", "E2", "E3", "E4"]


def test_dependents_follow_schema_order(entity_factory):
    entities = [
        entity_factory("Level"),
        entity_factory("Zed", requires=["Level"]),
        entity_factory("Alpha", requires=["Level"]),
    ]
    graph = build_dependency_graph(entities)
    assert graph["Level"].referenced_by == ["Zed", "Alpha"]
    assert topological_sort(graph).order == ["Level", "Zed", "Alpha"]
