"""Resource tree - per-client forest of protected resources."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from grantgate.domain.entities import PermissionResource
from grantgate.domain.exceptions import ResourceTreeCorrupted, ResourceUnknown


class ResourceTree:
    """Arena of resources keyed by id; parent and child links are ids.

    Built once per request from the current rows, never cached. Parent pointers
    that reference a missing node make that node a root of its client's forest.
    """

    def __init__(self, resources: Iterable[PermissionResource]) -> None:
        self._nodes: dict[UUID, PermissionResource] = {}
        self._children: dict[UUID, list[UUID]] = {}
        self._by_code: dict[tuple[str, str], UUID] = {}
        for resource in resources:
            self._nodes[resource.id] = resource
            self._by_code[(resource.client_id, resource.code)] = resource.id
        for resource in self._nodes.values():
            if resource.parent_id is not None and resource.parent_id in self._nodes:
                self._children.setdefault(resource.parent_id, []).append(resource.id)
        for ids in self._children.values():
            ids.sort(key=self._order_key)

    @classmethod
    def build(cls, resources: Iterable[PermissionResource]) -> ResourceTree:
        return cls(resources)

    def _order_key(self, resource_id: UUID) -> tuple[int, str]:
        node = self._nodes[resource_id]
        return (node.sort_order, node.name)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, resource_id: UUID) -> PermissionResource:
        try:
            return self._nodes[resource_id]
        except KeyError:
            raise ResourceUnknown(resource_id) from None

    def resolve_by_code(self, client_id: str, code: str) -> UUID:
        """Resource id for a code within one client's forest."""
        try:
            return self._by_code[(client_id, code)]
        except KeyError:
            raise ResourceUnknown(f"{client_id}/{code}") from None

    def children_of(self, resource_id: UUID) -> list[PermissionResource]:
        self.get(resource_id)
        return [self._nodes[child] for child in self._children.get(resource_id, [])]

    def roots(self, client_id: str | None = None) -> list[PermissionResource]:
        """Roots ordered by (sort_order, name), optionally limited to one client."""
        result = [
            node
            for node in self._nodes.values()
            if (node.parent_id is None or node.parent_id not in self._nodes)
            and (client_id is None or node.client_id == client_id)
        ]
        result.sort(key=lambda node: (node.sort_order, node.name))
        return result

    def descendants_of(self, resource_id: UUID) -> set[UUID]:
        """All nodes below resource_id, excluding the node itself.

        Raises ResourceTreeCorrupted if the walk reaches a node twice.
        """
        self.get(resource_id)
        seen: set[UUID] = set()
        stack = list(self._children.get(resource_id, []))
        while stack:
            current = stack.pop()
            if current == resource_id or current in seen:
                raise ResourceTreeCorrupted(f"Cycle detected below resource {resource_id}")
            seen.add(current)
            stack.extend(self._children.get(current, []))
        return seen

    def ancestors_of(self, resource_id: UUID) -> list[UUID]:
        """Ancestor ids, nearest first."""
        node = self.get(resource_id)
        result: list[UUID] = []
        visited = {resource_id}
        while node.parent_id is not None and node.parent_id in self._nodes:
            if node.parent_id in visited:
                raise ResourceTreeCorrupted(f"Cycle detected above resource {resource_id}")
            visited.add(node.parent_id)
            result.append(node.parent_id)
            node = self._nodes[node.parent_id]
        return result

    def is_descendant(self, ancestor: UUID, candidate: UUID) -> bool:
        if ancestor not in self._nodes or candidate not in self._nodes:
            return False
        return ancestor in self.ancestors_of(candidate)
