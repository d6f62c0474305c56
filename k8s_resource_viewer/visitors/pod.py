import logging
from typing import Any

from k8s_resource_viewer.models import EdgeKind, Relation, StoreKey
from k8s_resource_viewer.protocols import QueryerProtocol
from k8s_resource_viewer.visitors.base import BaseVisitor

logger = logging.getLogger(__name__)


class PodVisitor(BaseVisitor):
    """
    Relationships of a Pod.

    - Services in the same namespace selecting the pod
    - The ServiceAccount it runs as (``default`` when unset)
    - ConfigMaps, Secrets and PersistentVolumeClaims referenced by volumes
      and container environment
    """

    def get_kinds(self) -> list[tuple[str, str]]:
        return [("v1", "Pod")]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._collect(
            self._service_relations(obj, queryer),
            self._service_account_relations(obj, queryer),
            self._reference_relations(obj, queryer),
        )

    async def _service_relations(
        self, pod: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        services = await queryer.services_for_pod(pod)
        return [
            Relation(object=service, kind=EdgeKind.SELECTOR_MATCH, outbound=False)
            for service in services
        ]

    async def _service_account_relations(
        self, pod: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        service_account = await queryer.service_account_for_pod(pod)
        if service_account is None:
            logger.debug(f"No ServiceAccount found for {self._describe(pod)}")
            return []
        return [Relation(object=service_account, kind=EdgeKind.REFERENCE)]

    async def _reference_relations(
        self, pod: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        namespace = (pod.get("metadata") or {}).get("namespace")
        relations = []

        for kind, name in extract_pod_references(pod.get("spec") or {}):
            referenced = await queryer.get(
                StoreKey(api_version="v1", kind=kind, namespace=namespace, name=name)
            )
            if referenced is None:
                logger.debug(f"{kind} {namespace}/{name} referenced by {self._describe(pod)} not found")
                continue
            relations.append(Relation(object=referenced, kind=EdgeKind.REFERENCE))

        return relations


def extract_pod_references(spec: dict[str, Any]) -> list[tuple[str, str]]:
    """
    Collect (kind, name) pairs a pod spec refers to through volumes and env.

    Duplicates are removed; order follows first appearance.
    """
    references: list[tuple[str, str]] = []

    def add(kind: str, name: str | None) -> None:
        if name and (kind, name) not in references:
            references.append((kind, name))

    for volume in spec.get("volumes") or []:
        add("ConfigMap", (volume.get("configMap") or {}).get("name"))
        add("Secret", (volume.get("secret") or {}).get("secretName"))
        add("PersistentVolumeClaim", (volume.get("persistentVolumeClaim") or {}).get("claimName"))

        for source in (volume.get("projected") or {}).get("sources") or []:
            add("ConfigMap", (source.get("configMap") or {}).get("name"))
            add("Secret", (source.get("secret") or {}).get("name"))

    containers = (spec.get("initContainers") or []) + (spec.get("containers") or [])
    for container in containers:
        for env_from in container.get("envFrom") or []:
            add("ConfigMap", (env_from.get("configMapRef") or {}).get("name"))
            add("Secret", (env_from.get("secretRef") or {}).get("name"))

        for env_var in container.get("env") or []:
            value_from = env_var.get("valueFrom") or {}
            add("ConfigMap", (value_from.get("configMapKeyRef") or {}).get("name"))
            add("Secret", (value_from.get("secretKeyRef") or {}).get("name"))

    for pull_secret in spec.get("imagePullSecrets") or []:
        add("Secret", pull_secret.get("name"))

    return references
