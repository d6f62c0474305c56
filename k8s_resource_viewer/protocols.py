from typing import Any, Protocol, runtime_checkable

from k8s_resource_viewer.models import EdgeKind, Link, ObjectKey, Relation, StoreKey


@runtime_checkable
class ObjectStoreProtocol(Protocol):
    """
    Key based access to cluster objects.

    Implementations may serve from an informer cache; ``list`` reports
    whether that cache is still being populated.
    """

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        """Return the named object, or None if it does not exist."""
        ...

    async def list(self, key: StoreKey) -> tuple[list[dict[str, Any]], bool]:
        """Return matching objects and whether the store is still loading them."""
        ...

    async def is_loading(self, key: StoreKey) -> bool: ...


@runtime_checkable
class QueryerProtocol(Protocol):
    """Answers kind-specific relationship questions about objects."""

    async def get(self, key: StoreKey) -> dict[str, Any] | None: ...

    async def services_for_pod(self, pod: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def service_account_for_pod(self, pod: dict[str, Any]) -> dict[str, Any] | None: ...

    async def owner_reference_for_object(self, obj: dict[str, Any]) -> dict[str, Any] | None: ...

    async def owners_for_object(self, obj: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def children(
        self, owner: dict[str, Any], api_version: str, kind: str
    ) -> list[dict[str, Any]]: ...

    async def pods_for_service(self, service: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def ingresses_for_service(self, service: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def services_for_ingress(self, ingress: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def scale_target_for_hpa(self, hpa: dict[str, Any]) -> dict[str, Any] | None: ...


@runtime_checkable
class LinkGeneratorProtocol(Protocol):
    def for_object_with_query(self, obj: dict[str, Any], query: dict[str, str]) -> Link: ...


@runtime_checkable
class ObjectHandlerProtocol(Protocol):
    """Receives what a traversal discovers."""

    async def add_object(self, obj: dict[str, Any]) -> None: ...

    async def add_edge(
        self, source: dict[str, Any], target: dict[str, Any], kind: EdgeKind
    ) -> None: ...

    async def add_lookup_error(self, key: ObjectKey, message: str) -> None: ...


@runtime_checkable
class VisitorProtocol(Protocol):
    """Kind-specific relationship discovery."""

    async def discover(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]: ...
