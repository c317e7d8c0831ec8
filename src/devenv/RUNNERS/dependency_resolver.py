"""
Dependency resolution for services to determine switching order.
"""
from typing import Dict, Iterable, List, Tuple
from ..MODELS.switch_result import ServiceGroup
from ..errors import CircularDependencyError, DependencyFormatError, UnknownServiceError

SEPARATOR = " -> "

# DFS colouring
_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def parse_dependency(dependency: str) -> Tuple[str, str]:
    """
    Splits a constraint such as ``"aws -> kubernetes"`` into its endpoints.

    :param dependency: The constraint string.
    :return: (from, to) with surrounding whitespace removed.
    :raises DependencyFormatError: If it does not name exactly two services.
    """
    parts = [part.strip() for part in dependency.split(SEPARATOR)]
    if len(parts) != 2 or not all(parts):
        raise DependencyFormatError(
            f"invalid dependency format: {dependency} (expected format: 'service1 -> service2')"
        )
    return parts[0], parts[1]


class DependencyResolver:
    """
    Resolves the switching order of services from ``"from -> to"`` constraints.

    Resolution is recomputed on every call; the resolver never mutates the
    service names or constraints it was given.
    """
    def __init__(self, services: Iterable[str], dependencies: Iterable[str] = ()):
        """
        :param services: Names of the configured services (a mapping's keys are used).
        :param dependencies: Ordering constraints.
        """
        self.services = frozenset(services)
        self.dependencies = tuple(dependencies)

    def resolve(self) -> List[ServiceGroup]:
        """
        Groups services into levels using a level-wise topological sort.

        Every service in a level depends only on services in earlier levels,
        so levels run in order and the members of a level may run concurrently.
        Names within a level are sorted.

        :return: The levels, first to last.
        :raises DependencyError: On a malformed constraint, an unknown service or a cycle.
        """
        graph, in_degree = self._build_graph()
        self._detect_cycles(graph)
        return self._sort_levels(graph, in_degree)

    def execution_order(self) -> List[str]:
        """
        Flattens the levels into a single order.
        """
        return [name for group in self.resolve() for name in group.services]

    def parallel_groups(self) -> List[ServiceGroup]:
        """
        Returns the groups of services that can be switched in parallel.
        """
        return self.resolve()

    def validate(self) -> None:
        """
        Raises if the constraints are not satisfiable.
        """
        self.resolve()

    def _build_graph(self) -> Tuple[Dict[str, List[str]], Dict[str, int]]:
        graph: Dict[str, List[str]] = {name: [] for name in self.services}
        in_degree: Dict[str, int] = {name: 0 for name in self.services}

        for dependency in self.dependencies:
            source, target = parse_dependency(dependency)
            if source not in self.services:
                raise UnknownServiceError(f"dependency source service '{source}' not found")
            if target not in self.services:
                raise UnknownServiceError(f"dependency target service '{target}' not found")
            graph[source].append(target)
            in_degree[target] += 1

        return graph, in_degree

    def _detect_cycles(self, graph: Dict[str, List[str]]) -> None:
        """
        Depth-first search with three-state colouring. Reaching a node that
        is still in progress means a back edge, i.e. a cycle.
        """
        state = {name: _UNVISITED for name in graph}

        for root in sorted(graph):
            if state[root] != _UNVISITED:
                continue
            state[root] = _IN_PROGRESS
            stack = [(root, iter(graph[root]))]
            while stack:
                node, neighbours = stack[-1]
                for neighbour in neighbours:
                    if state[neighbour] == _IN_PROGRESS:
                        raise CircularDependencyError(
                            f"circular dependency detected involving services: {node} -> {neighbour}"
                        )
                    if state[neighbour] == _UNVISITED:
                        state[neighbour] = _IN_PROGRESS
                        stack.append((neighbour, iter(graph[neighbour])))
                        break
                else:
                    state[node] = _DONE
                    stack.pop()

    def _sort_levels(self, graph: Dict[str, List[str]], in_degree: Dict[str, int]) -> List[ServiceGroup]:
        remaining = dict(in_degree)
        groups: List[ServiceGroup] = []

        while remaining:
            current = sorted(name for name, degree in remaining.items() if degree == 0)
            if not current:
                raise CircularDependencyError(
                    "circular dependency detected - no services with zero in-degree"
                )

            groups.append(ServiceGroup(level=len(groups), services=current))

            for name in current:
                del remaining[name]
                for dependent in graph[name]:
                    if dependent in remaining:
                        remaining[dependent] -= 1

        return groups
