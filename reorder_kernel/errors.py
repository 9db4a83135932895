"""
Reorder error taxonomy.

Every failure is raised synchronously to the caller. Nothing in the kernel
retries or swallows these; the transport layer maps `status_code` onto its
own protocol.
"""


class ReorderError(Exception):
    """Base class for every failure raised by the reorder kernel."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
        }


class NotFoundError(ReorderError):
    """A target, neighbor, entity or collection id does not resolve."""

    status_code = 404


class ReorderValidationError(ReorderError):
    """
    Conflicting or missing directives, a violated adjacency invariant,
    or a malformed sort key.
    """

    status_code = 422


class KeyspaceExhaustedError(ReorderError):
    """No representable key exists strictly between two bounds."""

    status_code = 409
