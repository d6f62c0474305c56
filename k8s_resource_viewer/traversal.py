import asyncio
import logging
from typing import Any

from k8s_resource_viewer.errors import InvalidObjectError, QueryError
from k8s_resource_viewer.models import ObjectKey, Relation
from k8s_resource_viewer.protocols import ObjectHandlerProtocol, QueryerProtocol
from k8s_resource_viewer.visitors.registry import VisitorRegistry

logger = logging.getLogger(__name__)


class VisitState:
    """
    Objects already visited or in flight during one traversal.

    The lock is shared with the traversal's object handler so that the
    visited set and the accumulated graph are guarded by the same mutex.
    """

    def __init__(self, lock: asyncio.Lock | None = None) -> None:
        self.lock = lock or asyncio.Lock()
        self._in_flight: set[ObjectKey] = set()
        self._visited: set[ObjectKey] = set()

    async def mark(self, key: ObjectKey) -> bool:
        """
        Claim ``key`` for visiting.

        Returns:
            True if the caller should visit the object, False if another
            branch already visited it or is visiting it now
        """
        async with self.lock:
            if key in self._visited or key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    async def finish(self, key: ObjectKey) -> None:
        async with self.lock:
            self._in_flight.discard(key)
            self._visited.add(key)

    def seen(self) -> set[ObjectKey]:
        return self._visited | self._in_flight


class ObjectVisitor:
    """
    Walks the relationship graph from a root object.

    For each object the registered visitor of its kind discovers related
    objects; every relationship is reported to the handler and the related
    object is visited in its own task. Each object is visited at most once
    per traversal, so cycles and diamonds terminate and every incoming edge
    is still recorded.

    Failures:
    - QueryError from a visitor is attached to the object through
      ``handler.add_lookup_error`` and the traversal continues.
    - Any error raised by the handler aborts the whole traversal; sibling
      branches are cancelled and the error is re-raised to the caller.

    Example:
        >>> engine = ObjectVisitor(queryer, VisitorRegistry.get_global())
        >>> await engine.visit(deployment, collector)
    """

    def __init__(
        self,
        queryer: QueryerProtocol,
        registry: VisitorRegistry,
        state: VisitState | None = None,
        max_concurrency: int = 16,
    ):
        self.queryer = queryer
        self.registry = registry
        self.state = state or VisitState()
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def visit(
        self,
        obj: dict[str, Any],
        handler: ObjectHandlerProtocol,
        is_root: bool = True,
    ) -> None:
        """
        Visit ``obj`` and everything reachable from it.

        Args:
            obj: Fully resolved object dict
            handler: Receives objects, edges and lookup errors
            is_root: True for the traversal's starting object, which is
                reported to the handler even when it has no relationships
        """
        try:
            await self._visit(obj, handler, is_root)
        except BaseExceptionGroup as group:
            raise _first_leaf(group) from None

    async def _visit(
        self,
        obj: dict[str, Any],
        handler: ObjectHandlerProtocol,
        is_root: bool,
    ) -> None:
        key = ObjectKey.from_object(obj)

        if not await self.state.mark(key):
            logger.debug(f"Already visited {key}")
            return

        if is_root:
            await handler.add_object(obj)

        relations = await self._discover(key, obj, handler)

        async with asyncio.TaskGroup() as group:
            for relation in relations:
                group.create_task(self._follow(obj, relation, handler))

        await self.state.finish(key)

    async def _discover(
        self,
        key: ObjectKey,
        obj: dict[str, Any],
        handler: ObjectHandlerProtocol,
    ) -> list[Relation]:
        visitor = self.registry.get_visitor(obj)

        async with self._semaphore:
            try:
                relations = await visitor.discover(obj, self.queryer)
            except QueryError as e:
                logger.warning(f"Relationship lookup failed for {key}: {e}")
                await handler.add_lookup_error(key, str(e))
                relations = e.partial

        relations = [relation for relation in relations if _is_identifiable(key, relation)]
        logger.debug(f"{visitor.__class__.__name__} found {len(relations)} relations for {key}")
        return relations

    async def _follow(
        self,
        obj: dict[str, Any],
        relation: Relation,
        handler: ObjectHandlerProtocol,
    ) -> None:
        if relation.outbound:
            await handler.add_edge(obj, relation.object, relation.kind)
        else:
            await handler.add_edge(relation.object, obj, relation.kind)

        await self._visit(relation.object, handler, is_root=False)


def _is_identifiable(source: ObjectKey, relation: Relation) -> bool:
    try:
        ObjectKey.from_object(relation.object)
    except (InvalidObjectError, ValueError) as e:
        logger.warning(f"Skipping malformed object related to {source}: {e}")
        return False
    return True


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    """Unwrap nested task group failures to the first original exception."""
    exc: BaseException = group
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc
