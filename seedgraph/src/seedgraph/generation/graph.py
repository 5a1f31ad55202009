"""Entity dependency graph built from relation metadata."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set
from seedgraph.schema.models import EntitySpec


@dataclass
class DependencyNode:
    """One entity type in the dependency graph."""

    name: str
    depends_on: Set[str] = field(default_factory=set)
    referenced_by: List[str] = field(default_factory=list)


def build_dependency_graph(entities: Iterable[EntitySpec]) -> Dict[str, DependencyNode]:
    """
    Build the "requires" graph between entity types.

    An edge A -> B exists iff A has a required, non-list relation field
    targeting B. Self relations never produce an edge, and relations to
    types outside the schema are ignored. Dependents are kept in schema order.

    Args:
        entities: Entity specifications, in schema order

    Returns:
        Dictionary mapping entity name -> DependencyNode, in schema order
    """
    entities = list(entities)
    graph: Dict[str, DependencyNode] = {e.name: DependencyNode(name=e.name) for e in entities}

    for entity in entities:
        for f in entity.relation_fields():
            if f.is_list or not f.is_required:
                continue
            target = f.type
            if target == entity.name or target not in graph:
                continue
            graph[entity.name].depends_on.add(target)
            if entity.name not in graph[target].referenced_by:
                graph[target].referenced_by.append(entity.name)

    return graph
