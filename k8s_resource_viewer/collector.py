import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from k8s_resource_viewer.errors import HandlerError, InvalidObjectError
from k8s_resource_viewer.models import Edge, EdgeKind, ObjectKey

logger = logging.getLogger(__name__)


@dataclass
class GraphSnapshot:
    """Everything one traversal collected, ready for the assembler."""

    objects: dict[ObjectKey, dict[str, Any]] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    lookup_errors: dict[ObjectKey, list[str]] = field(default_factory=dict)


class ObjectCollector:
    """
    Object handler that accumulates the graph found by a traversal.

    Objects are stored once per key and edges once per (source, target, kind).
    The lock should be the one used by the traversal's VisitState. Objects
    that cannot be identified raise HandlerError, which aborts the traversal.

    Example:
        >>> lock = asyncio.Lock()
        >>> collector = ObjectCollector(lock)
        >>> engine = ObjectVisitor(queryer, registry, VisitState(lock))
        >>> await engine.visit(root, collector)
        >>> snapshot = collector.snapshot()
    """

    def __init__(self, lock: asyncio.Lock | None = None) -> None:
        self.lock = lock or asyncio.Lock()
        self._objects: dict[ObjectKey, dict[str, Any]] = {}
        self._edges: dict[Edge, None] = {}
        self._lookup_errors: dict[ObjectKey, list[str]] = {}

    async def add_object(self, obj: dict[str, Any]) -> None:
        key = _object_key(obj)
        async with self.lock:
            self._objects.setdefault(key, obj)

    async def add_edge(self, source: dict[str, Any], target: dict[str, Any], kind: EdgeKind) -> None:
        source_key = _object_key(source)
        target_key = _object_key(target)
        edge = Edge(source=source_key, target=target_key, kind=kind)

        async with self.lock:
            self._objects.setdefault(source_key, source)
            self._objects.setdefault(target_key, target)

            if edge in self._edges:
                return
            self._edges[edge] = None

        logger.debug(f"Added edge: {source_key} --[{kind.value}]--> {target_key}")

    async def add_lookup_error(self, key: ObjectKey, message: str) -> None:
        async with self.lock:
            self._lookup_errors.setdefault(key, []).append(message)

    def snapshot(self) -> GraphSnapshot:
        """Copy of the collected graph. Call after the traversal has finished."""
        return GraphSnapshot(
            objects=dict(self._objects),
            edges=list(self._edges),
            lookup_errors={key: list(messages) for key, messages in self._lookup_errors.items()},
        )

    @property
    def object_count(self) -> int:
        return len(self._objects)

    @property
    def edge_count(self) -> int:
        return len(self._edges)


def _object_key(obj: dict[str, Any]) -> ObjectKey:
    try:
        return ObjectKey.from_object(obj)
    except (InvalidObjectError, ValueError) as e:
        raise HandlerError(f"Cannot record object without identity: {e}") from e
