"""Repository session: fetch, tag resolution and tree checkout over pygit2."""
import enum
import logging
from pathlib import Path
from typing import List, Optional

import pygit2
from pygit2.enums import RepositoryOpenFlag

from tagsnap.core.errors import (
    CheckoutFailedError,
    FetchFailedError,
    HeadUpdateFailedError,
    OpenFailedError,
    RemoteNotFoundError,
    SessionStateError,
    TagNotFoundError,
    TagScanError,
)
from tagsnap.repo.credentials import CredentialProvider
from tagsnap.repo.options import CheckoutOptions

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"


class SessionState(str, enum.Enum):
    """Lifecycle of a session; FAILED and CLOSED are terminal."""

    OPENED = "opened"
    FETCHED = "fetched"
    TAG_RESOLVED = "tag_resolved"
    CHECKED_OUT = "checked_out"
    PRUNED = "pruned"
    FAILED = "failed"
    CLOSED = "closed"


class RepositorySession:
    """Exclusive handle on one on-disk repository.

    Operations must run in order: ``fetch_origin`` → ``resolve_tag`` →
    ``checkout_tag``. A failure moves the session to ``FAILED`` and every
    later call raises ``SessionStateError``. Use as a context manager so
    the underlying handle is released on every exit path.
    """

    def __init__(
        self,
        repository: pygit2.Repository,
        path: Path,
        ssh_path: str = "",
        options: Optional[CheckoutOptions] = None,
    ):
        self._repo = repository
        self.path = Path(path)
        self.ssh_path = str(ssh_path or "")
        self.options = options or CheckoutOptions()
        self.state = SessionState.OPENED

    @classmethod
    def open(
        cls,
        path,
        ssh_path: str = "",
        options: Optional[CheckoutOptions] = None,
    ) -> "RepositorySession":
        """Open the repository at ``path`` without searching parent directories.

        Raises:
            OpenFailedError: If ``path`` is not a git repository
        """
        path = Path(path)
        try:
            repo = pygit2.Repository(str(path), RepositoryOpenFlag.NO_SEARCH)
        except (pygit2.GitError, KeyError, OSError) as e:
            raise OpenFailedError(f"Cannot open repository at {path}: {e}") from e
        logger.debug(f"Opened repository {repo.path}")
        return cls(repo, path, ssh_path=ssh_path, options=options)

    def __enter__(self) -> "RepositorySession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def repository(self) -> pygit2.Repository:
        return self._repo

    def close(self) -> None:
        """Release the repository handle. Safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return
        self._repo.free()
        self.state = SessionState.CLOSED

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            expected = " or ".join(s.value for s in states)
            raise SessionStateError(
                f"Session is {self.state.value}; expected {expected}"
            )

    def _fail(self, error: Exception) -> Exception:
        self.state = SessionState.FAILED
        return error

    def fetch_origin(self) -> None:
        """Fetch branches and tags from the configured remote.

        Raises:
            RemoteNotFoundError: If the remote does not exist
            FetchFailedError: If the transport or authentication fails
        """
        self._require(SessionState.OPENED)
        name = self.options.remote_name
        try:
            remote = self._repo.remotes[name]
        except KeyError as e:
            raise self._fail(RemoteNotFoundError(f"Remote '{name}' not found")) from e

        logger.info(f"Fetching {name} ({remote.url})")
        callbacks = CredentialProvider(self.ssh_path, self.options)
        try:
            stats = remote.fetch(refspecs=list(self.options.refspecs), callbacks=callbacks)
        except (pygit2.GitError, KeyError, ValueError, OSError) as e:
            raise self._fail(FetchFailedError(f"Fetch from {name} failed: {e}")) from e

        logger.info(f"Fetched {stats.received_objects} objects from {name}")
        self.state = SessionState.FETCHED

    def resolve_tag(self, tag_name: str) -> pygit2.Tag:
        """Find the annotated tag object named exactly ``tag_name``.

        Raises:
            TagNotFoundError: If no tag object has that name
            TagScanError: If the object database scan fails before a match
        """
        self._require(SessionState.FETCHED)
        try:
            if self.options.tag_lookup == "ref":
                tag = self._lookup_tag_ref(tag_name)
            else:
                tag = self._scan_for_tag(tag_name)
        except Exception:
            self.state = SessionState.FAILED
            raise

        logger.info(f"Resolved tag {tag_name} → {str(tag.id)[:12]}")
        self.state = SessionState.TAG_RESOLVED
        return tag

    def _scan_for_tag(self, tag_name: str) -> pygit2.Tag:
        matches: List[pygit2.Tag] = []
        scan_error = None
        scanned = 0
        try:
            for oid in self._repo.odb:
                obj = self._repo.get(oid)
                scanned += 1
                if isinstance(obj, pygit2.Tag) and obj.name == tag_name:
                    matches.append(obj)
        except (pygit2.GitError, KeyError, ValueError) as e:
            scan_error = e

        logger.debug(f"Scanned {scanned} objects, {len(matches)} tag match(es) for {tag_name}")

        if scan_error is not None:
            if not matches:
                raise TagScanError(
                    f"Object database scan failed before tag '{tag_name}' was found: {scan_error}"
                ) from scan_error
            logger.warning(
                f"Object database scan stopped early ({scan_error}); using tag found before the error"
            )

        if not matches:
            raise TagNotFoundError(f"Unable to find tag '{tag_name}'")
        return self._pick_tag(tag_name, matches)

    def _pick_tag(self, tag_name: str, matches: List[pygit2.Tag]) -> pygit2.Tag:
        # Several tag objects can share a name after a re-tag; prefer the live ref
        if len(matches) > 1:
            ref = self._repo.references.get(TAG_REF_PREFIX + tag_name)
            if ref is not None:
                for tag in matches:
                    if tag.id == ref.target:
                        return tag
        return matches[-1]

    def _lookup_tag_ref(self, tag_name: str) -> pygit2.Tag:
        # Names that are not valid ref names cannot exist as tags
        try:
            ref = self._repo.references.get(TAG_REF_PREFIX + tag_name)
            if ref is None:
                raise TagNotFoundError(f"Unable to find tag '{tag_name}'")
            obj = self._repo.get(ref.resolve().target)
        except (pygit2.GitError, KeyError, ValueError) as e:
            raise TagNotFoundError(f"Unable to find tag '{tag_name}': {e}") from e
        if not isinstance(obj, pygit2.Tag):
            raise TagNotFoundError(
                f"Ref {TAG_REF_PREFIX}{tag_name} does not point to an annotated tag"
            )
        return obj

    def checkout_tag(self, tag: pygit2.Tag, tag_name: str) -> pygit2.Oid:
        """Materialize the tag's tree in the working directory and move HEAD.

        Returns:
            Id of the commit the tag points to

        Raises:
            CheckoutFailedError: If the target is not a commit or checkout fails
            HeadUpdateFailedError: If HEAD cannot be set to refs/tags/<tag_name>
        """
        self._require(SessionState.TAG_RESOLVED)
        try:
            commit = tag.peel(pygit2.Commit)
            tree = commit.tree
        except (pygit2.GitError, ValueError) as e:
            raise self._fail(
                CheckoutFailedError(f"Tag '{tag_name}' does not point to a commit: {e}")
            ) from e

        logger.info(f"Checking out {tag_name} ({str(commit.id)[:12]})")
        try:
            self._repo.checkout_tree(tree, strategy=self.options.strategy_flags)
        except pygit2.GitError as e:
            raise self._fail(CheckoutFailedError(f"Checkout of '{tag_name}' failed: {e}")) from e

        try:
            self._repo.set_head(TAG_REF_PREFIX + tag_name)
        except (pygit2.GitError, KeyError, ValueError) as e:
            raise self._fail(
                HeadUpdateFailedError(f"Cannot set HEAD to {TAG_REF_PREFIX}{tag_name}: {e}")
            ) from e

        self.state = SessionState.CHECKED_OUT
        return commit.id

    def mark_pruned(self) -> None:
        """Record that the sparse prune completed after checkout."""
        self._require(SessionState.CHECKED_OUT)
        self.state = SessionState.PRUNED

    def mark_failed(self) -> None:
        """Move to FAILED unless the session is already closed."""
        if self.state is not SessionState.CLOSED:
            self.state = SessionState.FAILED
