"""Shared exceptions module."""

from typing import Optional


class GhSyncException(Exception):
    """Base exception for ghsync services."""

    pass


class NotFoundException(GhSyncException):
    """Exception raised when an object is not found."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class UpstreamNotFoundError(NotFoundException):
    """Raised when the requested collection does not exist upstream for owner/name.

    Distinct from an empty page: an empty repository returns a page with no nodes.
    """

    def __init__(self, owner: str, name: str, collection: str):
        """Create a new UpstreamNotFoundError instance.

        Args:
        ----
            owner (str): Repository owner.
            name (str): Repository name.
            collection (str): The GraphQL connection that was requested (e.g. "issues").

        """
        self.owner = owner
        self.name = name
        self.collection = collection
        super().__init__(f"Repository {collection} not found upstream for {owner}/{name}")


class UpstreamTransportError(GhSyncException):
    """Raised when the upstream API could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Create a new UpstreamTransportError instance.

        Args:
        ----
            message (str): The error message.
            status_code (int, optional): HTTP status code, if a response was received.

        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class GitHubGraphQLError(GhSyncException):
    """Raised when a GraphQL response carries an errors envelope."""

    def __init__(self, errors: list[dict]):
        """Create a new GitHubGraphQLError instance.

        Args:
        ----
            errors (list[dict]): The `errors` array of the GraphQL response.

        """
        self.errors = errors
        super().__init__("; ".join(str(error.get("message", error)) for error in errors))

    @property
    def is_not_found(self) -> bool:
        """Whether every error is a NOT_FOUND error (unknown repository or node)."""
        return bool(self.errors) and all(error.get("type") == "NOT_FOUND" for error in self.errors)


class MissingGitHubTokenError(GhSyncException):
    """Raised when no GitHub token is configured."""

    def __init__(self, message: Optional[str] = "GITHUB_TOKEN is missing"):
        """Create a new MissingGitHubTokenError instance."""
        self.message = message
        super().__init__(self.message)


class PersistenceError(GhSyncException):
    """Raised when a batch upsert failed and its transaction was rolled back."""

    def __init__(self, table: str, batch_size: int, cause: Exception):
        """Create a new PersistenceError instance.

        Args:
        ----
            table (str): Target table of the batch.
            batch_size (int): Number of rows in the rolled back batch.
            cause (Exception): The underlying database error.

        """
        self.table = table
        self.batch_size = batch_size
        self.cause = cause
        super().__init__(f"Upsert of {batch_size} rows into {table} failed: {cause}")
