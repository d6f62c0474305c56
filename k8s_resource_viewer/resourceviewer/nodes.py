import asyncio
import logging
from collections import Counter
from typing import Any, Protocol

from k8s_resource_viewer.errors import QueryError, StatusContractError
from k8s_resource_viewer.models import MemberSummary, Node, NodeStatus, ObjectKey, ObjectStatus
from k8s_resource_viewer.objectstatus import StatusRegistry
from k8s_resource_viewer.protocols import LinkGeneratorProtocol, ObjectStoreProtocol

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    async def status(self, obj: dict[str, Any]) -> ObjectStatus: ...


class StatusCache:
    """
    Evaluates each object's status once per graph build, running at most
    ``max_concurrency`` evaluators at a time.

    Evaluator failures and lookup errors recorded during the traversal
    degrade the status to at least ``unknown`` and add their text to the
    details instead of failing the build.
    """

    def __init__(
        self,
        store: ObjectStoreProtocol,
        registry: StatusRegistry | None = None,
        lookup_errors: dict[ObjectKey, list[str]] | None = None,
        max_concurrency: int = 16,
    ):
        self.store = store
        self.registry = registry or StatusRegistry.get_global()
        self.lookup_errors = lookup_errors or {}
        self._cache: dict[ObjectKey, ObjectStatus] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def status(self, obj: dict[str, Any]) -> ObjectStatus:
        key = ObjectKey.from_object(obj)
        if key in self._cache:
            return self._cache[key]

        try:
            async with self._semaphore:
                result = await self.registry.status(obj, self.store)
        except (StatusContractError, QueryError) as e:
            logger.warning(f"Unable to evaluate status of {key}: {e}")
            result = ObjectStatus(status=NodeStatus.UNKNOWN, details=[f"Unable to evaluate status: {e}"])

        errors = self.lookup_errors.get(key)
        if errors:
            result = ObjectStatus(
                status=NodeStatus.worst(result.status, NodeStatus.UNKNOWN),
                details=result.details + errors,
            )

        self._cache[key] = result
        return result


class ObjectNodeFactory:
    """Creates the node for a single object."""

    def __init__(self, link: LinkGeneratorProtocol, object_status: StatusSource):
        self.link = link
        self.object_status = object_status

    async def create(self, obj: dict[str, Any], query: dict[str, str] | None = None) -> Node:
        metadata = obj.get("metadata") or {}
        path = self.link.for_object_with_query(obj, query or {})
        object_status = await self.object_status.status(obj)

        return Node(
            name=metadata.get("name") or "",
            api_version=obj.get("apiVersion") or "",
            kind=obj.get("kind") or "",
            status=object_status.status,
            details=list(object_status.details),
            path=path,
        )


class PodGroupNodeFactory:
    """
    Creates one node standing in for several pods.

    The group status is the worst member status (error > warning > unknown
    > ok); every member keeps its own status in ``members``.
    """

    def __init__(self, object_status: StatusSource):
        self.object_status = object_status

    async def create(self, name: str, members: list[dict[str, Any]]) -> Node:
        if not members:
            raise ValueError(f"Group {name!r} has no members")

        summaries = []
        for member in members:
            member_status = await self.object_status.status(member)
            summaries.append(
                MemberSummary(
                    name=(member.get("metadata") or {}).get("name") or "",
                    status=member_status.status,
                    details=tuple(member_status.details),
                )
            )
        summaries.sort(key=lambda summary: summary.name)

        rollup = NodeStatus.worst(*(summary.status for summary in summaries))
        counts = Counter(summary.status for summary in summaries)
        breakdown = ", ".join(
            f"{counts[status]} {status.value}"
            for status in sorted(counts, key=lambda s: s.severity, reverse=True)
        )

        first = members[0]
        return Node(
            name=name,
            api_version=first.get("apiVersion") or "v1",
            kind=first.get("kind") or "Pod",
            status=rollup,
            details=[f"{len(summaries)} pods: {breakdown}"],
            is_group=True,
            members=summaries,
        )
