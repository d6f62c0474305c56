from k8s_resource_viewer.resourceviewer.assembler import GraphAssembler, PodGroup
from k8s_resource_viewer.resourceviewer.nodes import (
    ObjectNodeFactory,
    PodGroupNodeFactory,
    StatusCache,
    StatusSource,
)

__all__ = [
    "GraphAssembler",
    "ObjectNodeFactory",
    "PodGroup",
    "PodGroupNodeFactory",
    "StatusCache",
    "StatusSource",
]
