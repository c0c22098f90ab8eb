"""Core exception types for tagsnap."""


class TagsnapError(Exception):
    """Base exception for all tagsnap errors."""
    pass


class ConfigError(TagsnapError):
    """Raised when a checkout options file cannot be loaded."""
    pass


class RepositoryError(TagsnapError):
    """Base for failures raised while driving the repository session."""
    pass


class OpenFailedError(RepositoryError):
    """Raised when a path does not hold a git repository."""
    pass


class RemoteNotFoundError(RepositoryError):
    """Raised when the configured remote is missing."""
    pass


class FetchFailedError(RepositoryError):
    """Raised when fetching from the remote fails (network or auth)."""
    pass


class TagNotFoundError(RepositoryError):
    """Raised when no tag object matches the requested name."""
    pass


class TagScanError(TagNotFoundError):
    """Raised when object database enumeration fails before a match is found."""
    pass


class CheckoutFailedError(RepositoryError):
    """Raised when the tag's tree cannot be materialized."""
    pass


class HeadUpdateFailedError(CheckoutFailedError):
    """Raised when HEAD cannot be moved to the checked out tag."""
    pass


class SessionStateError(RepositoryError):
    """Raised when a session operation is called out of order."""
    pass


class PruneError(TagsnapError):
    """Base for sparse prune failures."""
    pass


class MetadataNotFoundError(PruneError):
    """Raised when the working directory has no .git entry."""
    pass


class PruneIOError(PruneError):
    """Raised when listing, reading or deleting fails mid-prune.

    ``removed`` holds the entries already deleted before the failure.
    """

    def __init__(self, message: str, removed=None):
        super().__init__(message)
        self.removed = list(removed or [])
