"""
Errors raised by the search and recommendation engines

core/errors.py maps each category onto an HTTP status.
"""


class RelevanceError(Exception):
    """Base class for engine errors"""
    pass


class InvalidInput(RelevanceError):
    """Caller supplied an unusable argument"""
    pass


class InvalidQuery(InvalidInput):
    """Search text is missing or blank"""

    def __init__(self, message: str = "Query must not be empty"):
        super().__init__(message)


class NotFound(RelevanceError):
    """A referenced product, user or search record does not exist"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class CollaboratorUnavailable(RelevanceError):
    """A backing store (catalog, history, analytics) failed"""

    def __init__(self, collaborator: str, message: str = ""):
        self.collaborator = collaborator
        super().__init__(f"{collaborator} unavailable" + (f": {message}" if message else ""))
