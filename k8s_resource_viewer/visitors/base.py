import asyncio
from collections.abc import Awaitable
from typing import Any

from k8s_resource_viewer.errors import InvalidObjectError, QueryError
from k8s_resource_viewer.models import EdgeKind, ObjectKey, Relation
from k8s_resource_viewer.protocols import QueryerProtocol


class BaseVisitor:
    """
    Base class for kind-specific relationship discovery.

    Every visitor reports the owners of the object it visits; subclasses add
    the relationships particular to their kinds by overriding
    ``discover_related``.
    """

    def get_kinds(self) -> list[tuple[str, str]]:
        """
        Return the (apiVersion, kind) pairs this visitor handles.
        Used by the registry when the visitor is registered without an explicit key.

        Returns:
            List of pairs like [("apps/v1", "Deployment")]
        """
        return []

    async def discover(self, obj: dict[str, Any], queryer: QueryerProtocol) -> list[Relation]:
        """
        Find the objects related to ``obj``.

        Lookups run concurrently. If some fail, the rest still complete and
        a QueryError is raised carrying the relations that were found.
        """
        return await self._collect(
            self._owner_relations(obj, queryer),
            self.discover_related(obj, queryer),
        )

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return []

    async def _collect(self, *lookups: Awaitable[list[Relation]]) -> list[Relation]:
        results = await asyncio.gather(*lookups, return_exceptions=True)

        relations: list[Relation] = []
        errors: list[QueryError] = []

        for result in results:
            if isinstance(result, QueryError):
                errors.append(result)
                relations.extend(result.partial)
            elif isinstance(result, BaseException):
                raise result
            else:
                relations.extend(result)

        if errors:
            message = "; ".join(str(e) for e in errors)
            raise QueryError(message, cause=errors[0], partial=relations)

        return relations

    async def _owner_relations(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        owners = await queryer.owners_for_object(obj)
        return [Relation(object=owner, kind=EdgeKind.OWNER, outbound=False) for owner in owners]

    async def _owned_relations(
        self,
        obj: dict[str, Any],
        queryer: QueryerProtocol,
        api_version: str,
        kind: str,
    ) -> list[Relation]:
        children = await queryer.children(obj, api_version, kind)
        return [Relation(object=child, kind=EdgeKind.OWNER) for child in children]

    def _describe(self, obj: dict[str, Any]) -> str:
        try:
            return str(ObjectKey.from_object(obj))
        except (InvalidObjectError, ValueError):
            return repr((obj.get("metadata") or {}).get("name"))


class DefaultVisitor(BaseVisitor):
    """Fallback visitor: relationships come from owner references only."""
