"""
Exception taxonomy for stampgraph.

Input errors (bad identifier, missing root, root without content) reach the
caller. Lookup errors raised while resolving nested dependencies are caught by
the resolver and never escape a traversal.
"""

from typing import Optional


class StampgraphError(Exception):
    """Base class for all stampgraph errors."""


class InvalidIdentifierError(StampgraphError):
    """Raised when an identifier is neither a numeric id nor a valid reference."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Invalid stamp identifier '{identifier}'. Must be a numeric ID or valid CPID"
        )


class StampNotFoundError(StampgraphError):
    """Raised when the lookup service has no stamp for an identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No stamp found for identifier: {identifier}")


class NoContentError(StampgraphError):
    """Raised when the stamp being analyzed carries no decodable payload."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"No content available for this artifact ({identifier})")


class StampLookupError(StampgraphError):
    """
    Raised when the lookup service could not be reached or answered with an error.

    Attributes:
        status_code: HTTP status if a response was received.
        endpoint: The request path that failed.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
