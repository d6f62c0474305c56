import logging
from collections.abc import Awaitable, Callable
from typing import Any

from k8s_resource_viewer.errors import StatusContractError
from k8s_resource_viewer.models import NodeStatus, ObjectStatus
from k8s_resource_viewer.protocols import ObjectStoreProtocol

logger = logging.getLogger(__name__)

StatusFunc = Callable[[dict[str, Any], ObjectStoreProtocol], Awaitable[ObjectStatus]]


class StatusRegistry:
    """
    Table of status evaluators keyed by (apiVersion, kind).

    Kinds without an evaluator resolve to ``unknown`` with no details.
    """

    _global_registry: "StatusRegistry | None" = None

    def __init__(self) -> None:
        self._evaluators: dict[tuple[str, str], StatusFunc] = {}

    @classmethod
    def get_global(cls) -> "StatusRegistry":
        if cls._global_registry is None:
            from k8s_resource_viewer.objectstatus import get_default_status_registry

            cls._global_registry = get_default_status_registry()
        return cls._global_registry

    def register(self, api_version: str, kind: str, evaluator: StatusFunc) -> None:
        self._evaluators[(api_version, kind)] = evaluator

    def get_evaluator(self, api_version: str, kind: str) -> StatusFunc | None:
        return self._evaluators.get((api_version, kind))

    def list_kinds(self) -> list[tuple[str, str]]:
        return sorted(self._evaluators)

    async def status(self, obj: dict[str, Any] | None, store: ObjectStoreProtocol) -> ObjectStatus:
        """
        Evaluate the health of an object.

        Raises:
            StatusContractError: if obj is None or not an object dict
        """
        if obj is None:
            raise StatusContractError("Cannot evaluate status of a nil object")
        if not isinstance(obj, dict):
            raise StatusContractError(f"Cannot evaluate status of {type(obj).__name__}")

        evaluator = self.get_evaluator(obj.get("apiVersion") or "", obj.get("kind") or "")
        if evaluator is None:
            return ObjectStatus(status=NodeStatus.UNKNOWN)

        return await evaluator(obj, store)


def require_kind(obj: dict[str, Any] | None, kind: str, api_versions: tuple[str, ...]) -> dict[str, Any]:
    """
    Validate the object an evaluator received.

    Raises:
        StatusContractError: if obj is None or is not one of the expected kind
    """
    if obj is None:
        raise StatusContractError(f"{kind} is nil")
    if not isinstance(obj, dict):
        raise StatusContractError(f"Expected {kind}, got {type(obj).__name__}")

    if obj.get("kind") != kind or obj.get("apiVersion") not in api_versions:
        raise StatusContractError(
            f"Expected {kind} ({', '.join(api_versions)}), "
            f"got {obj.get('kind')!r} ({obj.get('apiVersion')!r})"
        )

    return obj


def replica_count(value: Any) -> int:
    """Coerce an optional replica count to int; missing counts are zero."""
    if value is None:
        return 0
    return int(value)
