"""Exceptions raised by k8s-resource-viewer."""


class ResourceViewerError(Exception):
    """Base class for all resource viewer errors."""


class InvalidObjectError(ResourceViewerError):
    """An object dict lacks the fields needed to identify it."""


class QueryError(ResourceViewerError):
    """
    A relationship lookup against the object store failed.

    Lookup errors degrade the affected node; they never abort a traversal.
    ``partial`` holds relations that were found before or beside the failure.
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        partial: list | None = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.partial = partial or []


class HandlerError(ResourceViewerError):
    """
    The object handler failed to record a node or edge. Fatal to the traversal.

    Custom object handlers should raise this type as well.
    """


class StatusContractError(ResourceViewerError):
    """A status evaluator received a missing object or one of the wrong kind."""


class ObjectNotFoundError(ResourceViewerError):
    """The requested root object does not exist in the object store."""
