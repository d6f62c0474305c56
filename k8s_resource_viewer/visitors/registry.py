import logging
from typing import Any

from k8s_resource_viewer.models import split_api_version
from k8s_resource_viewer.protocols import VisitorProtocol
from k8s_resource_viewer.visitors.base import DefaultVisitor

logger = logging.getLogger(__name__)

VisitorKey = tuple[str, str, str]

ANY = "*"


class VisitorRegistry:
    """
    Maps (group, version, kind) to the visitor that discovers that kind's edges.

    Lookups try the exact (group, version, kind), then a visitor registered
    for the kind alone, then the default visitor, which follows owner
    references only.

    Example:
        >>> registry = VisitorRegistry()
        >>> registry.register(PodVisitor())
        >>> visitor = registry.get_visitor({"apiVersion": "v1", "kind": "Pod"})
    """

    _global_registry: "VisitorRegistry | None" = None

    def __init__(self, default: VisitorProtocol | None = None) -> None:
        self._visitors: dict[VisitorKey, VisitorProtocol] = {}
        self._default: VisitorProtocol = default or DefaultVisitor()

    @classmethod
    def get_global(cls) -> "VisitorRegistry":
        """
        Get the global registry with the built-in visitors registered.

        Returns:
            Global VisitorRegistry instance
        """
        if cls._global_registry is None:
            from k8s_resource_viewer.visitors import get_default_registry

            cls._global_registry = get_default_registry()
        return cls._global_registry

    @staticmethod
    def key_for(api_version: str, kind: str) -> VisitorKey:
        group, version = split_api_version(api_version)
        return group, version, kind

    def register(
        self,
        visitor: VisitorProtocol,
        api_version: str | None = None,
        kind: str | None = None,
    ) -> None:
        """
        Register a visitor.

        Args:
            visitor: Visitor instance
            api_version: apiVersion to register for; with ``kind``, overrides
                the pairs returned by ``visitor.get_kinds()``
            kind: Kind to register for; without ``api_version`` the visitor
                handles that kind in every group and version not registered
                explicitly
        """
        if kind and not api_version:
            self._visitors[(ANY, ANY, kind)] = visitor
            logger.debug(f"Registered {visitor.__class__.__name__} for any {kind}")
            return

        if api_version and kind:
            pairs = [(api_version, kind)]
        else:
            pairs = list(getattr(visitor, "get_kinds", lambda: [])())

        if not pairs:
            logger.warning(f"{visitor.__class__.__name__} declares no kinds; not registered")
            return

        for pair_api_version, pair_kind in pairs:
            key = self.key_for(pair_api_version, pair_kind)
            existing = self._visitors.get(key)
            if existing is not None and existing is not visitor:
                logger.debug(
                    f"Replacing {existing.__class__.__name__} with "
                    f"{visitor.__class__.__name__} for {key}"
                )
            self._visitors[key] = visitor
            logger.debug(f"Registered {visitor.__class__.__name__} for {key}")

    def register_default(self, visitor: VisitorProtocol) -> None:
        self._default = visitor

    def get_visitor(self, obj: dict[str, Any]) -> VisitorProtocol:
        api_version = obj.get("apiVersion") or ""
        kind = obj.get("kind") or ""
        visitor = self._visitors.get(self.key_for(api_version, kind))
        if visitor is None:
            visitor = self._visitors.get((ANY, ANY, kind), self._default)
        return visitor

    def is_registered(self, api_version: str, kind: str) -> bool:
        return self.key_for(api_version, kind) in self._visitors

    def list_visitors(self) -> list[dict[str, Any]]:
        """
        List registered visitors.

        Returns:
            One dict per (group, version, kind) plus one for the default
        """
        info = [
            {
                "group": group,
                "version": version,
                "kind": kind,
                "visitor": visitor.__class__.__name__,
                "type": "kind",
            }
            for (group, version, kind), visitor in sorted(self._visitors.items())
        ]
        info.append({"visitor": self._default.__class__.__name__, "type": "default"})
        return info

    def clear(self) -> None:
        """Remove all kind registrations. The default visitor stays."""
        self._visitors.clear()
        logger.debug("Visitor registry cleared")
