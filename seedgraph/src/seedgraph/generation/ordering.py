"""Creation order of entity types: Kahn's algorithm with a cycle fallback."""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List
from seedgraph.config.logging import get_logger
from .graph import DependencyNode

logger = get_logger(__name__)


@dataclass
class OrderResult:
    """Best-effort creation order plus the entities that could not be ordered."""

    order: List[str]
    cyclic: List[str] = field(default_factory=list)

    @property
    def has_cycle(self) -> bool:
        return bool(self.cyclic)


def topological_sort(graph: Dict[str, DependencyNode]) -> OrderResult:
    """
    Order entity types so that dependencies come before their dependents.

    If the graph contains a cycle, the entities left over once no more
    zero in-degree nodes remain are appended in graph insertion order, so
    the result is always a permutation of the graph's nodes.

    Args:
        graph: Dependency graph from build_dependency_graph

    Returns:
        OrderResult with the order and any cyclic entities
    """
    in_degree: Dict[str, int] = {name: len(node.depends_on) for name, node in graph.items()}

    queue = deque(name for name, degree in in_degree.items() if degree == 0)
    ordered: List[str] = []

    while queue:
        current = queue.popleft()
        ordered.append(current)
        for ref in graph[current].referenced_by:
            in_degree[ref] -= 1
            if in_degree[ref] == 0:
                queue.append(ref)

    if len(ordered) < len(graph):
        placed = set(ordered)
        remaining = [name for name in graph if name not in placed]
        logger.warning(
            f"Possible dependency cycle among {len(remaining)} entity type(s): "
            f"{', '.join(remaining)}. Appending them in schema order."
        )
        return OrderResult(order=ordered + remaining, cyclic=remaining)

    logger.debug(f"Creation order: {', '.join(ordered)}")
    return OrderResult(order=ordered)
