"""Project dependency graph and deterministic dependency-first ordering."""

from __future__ import annotations

from typing import Self

import networkx as nx

from variantfold.errors import DependencyCycleError, ValidationError
from variantfold.models import Project


class ProjectGraph:
    """Directed graph of projects.

    Edges point from a dependency to its dependent, so a topological order
    of the underlying graph lists dependencies first.
    """

    def __init__(self) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()

    def add_project(self, project: Project) -> Self:
        if not project.path:
            raise ValidationError("Project paths must be non-empty.")
        self._graph.add_node(project.path, project=project)
        return self

    def add_dependency(self, dependent: str, dependency: str) -> Self:
        """Record that *dependent* depends on *dependency*."""
        for path in (dependent, dependency):
            if path not in self._graph:
                raise ValidationError(
                    "Dependency edge references an unknown project.",
                    hint="Add both projects with add_project() before linking them.",
                    context={"project": path, "operation": "add_dependency"},
                )
        self._graph.add_edge(dependency, dependent)
        return self

    def __contains__(self, path: object) -> bool:
        return path in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def project(self, path: str) -> Project:
        if path not in self._graph:
            raise ValidationError("Unknown project.", context={"project": path})
        project: Project = self._graph.nodes[path]["project"]
        return project

    @property
    def projects(self) -> tuple[Project, ...]:
        return tuple(self.project(path) for path in sorted(self._graph.nodes))

    def dependencies_of(self, path: str) -> tuple[str, ...]:
        return tuple(sorted(self._graph.predecessors(path)))

    def dependents_of(self, path: str) -> tuple[str, ...]:
        return tuple(sorted(self._graph.successors(path)))

    def ordered_paths(self) -> tuple[str, ...]:
        """Dependency-first project paths, ties broken by path."""
        cycle = self.find_cycle()
        if cycle is not None:
            raise DependencyCycleError(
                "Project dependency graph contains a cycle.",
                cycle=cycle,
                hint="Variant compression requires an acyclic project graph.",
                context={"operation": "topological_order"},
            )
        return tuple(nx.lexicographical_topological_sort(self._graph))

    def find_cycle(self) -> tuple[str, ...] | None:
        """Return one dependency cycle as ``(a, b, ..., a)``, or ``None``."""
        try:
            edges = nx.find_cycle(self._graph)
        except nx.NetworkXNoCycle:
            return None
        # Edges run dependency -> dependent; report in "depends on" direction.
        nodes = [edge[1] for edge in reversed(edges)]
        return (*nodes, nodes[0])


def topological_order(graph: ProjectGraph) -> tuple[Project, ...]:
    """Order projects so every dependency precedes its dependents.

    Ties between independent projects are broken by path, so repeated runs
    over the same graph yield the same sequence.
    """
    return tuple(graph.project(path) for path in graph.ordered_paths())


__all__ = ["ProjectGraph", "topological_order"]
