"""Fetch, resolve, checkout and prune a tag in one call."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from tagsnap.core.errors import PruneIOError, TagsnapError
from tagsnap.repo.options import CheckoutOptions
from tagsnap.repo.report import CheckoutReport
from tagsnap.repo.session import RepositorySession
from tagsnap.sparse.pruner import locate_sparse_file, prune

logger = logging.getLogger(__name__)


def checkout_tag(
    repo_path: Path,
    tag: str,
    ssh_path: str = "",
    options: Optional[CheckoutOptions] = None,
) -> CheckoutReport:
    """Check out ``tag`` into ``repo_path`` and prune it to the sparse allowlist.

    Steps run strictly in order and the first failure aborts the rest:
    fetch from origin, resolve the tag, check out its tree and move HEAD,
    then prune. A prune failure happens after the working tree has already
    been replaced, so callers must read a ``PruneError`` as "checkout
    succeeded, prune incomplete".

    Args:
        repo_path: Working directory of an existing repository
        tag: Exact name of an annotated tag
        ssh_path: Directory holding id_rsa / id_rsa.pub (may be empty)
        options: Remote, credential and checkout settings

    Returns:
        CheckoutReport describing the resolved commit and pruned entries

    Raises:
        OpenFailedError, RemoteNotFoundError, FetchFailedError,
        TagNotFoundError, CheckoutFailedError: Before the tree is replaced
        MetadataNotFoundError, PruneIOError: After the tree is replaced
    """
    repo_path = Path(repo_path)
    options = options or CheckoutOptions()
    logger.info(f"Searching {repo_path} for git tag {tag}")

    with RepositorySession.open(repo_path, ssh_path=ssh_path, options=options) as session:
        session.fetch_origin()
        tag_obj = session.resolve_tag(tag)
        commit_id = session.checkout_tag(tag_obj, tag)

        try:
            removed = prune(repo_path)
            sparse_applied = locate_sparse_file(repo_path) is not None
        except OSError as e:
            session.mark_failed()
            raise PruneIOError(f"Cannot re-read sparse metadata in {repo_path}: {e}", removed) from e
        except TagsnapError:
            session.mark_failed()
            raise
        session.mark_pruned()

    return CheckoutReport(
        repo_path=str(repo_path.absolute()),
        tag=tag,
        resolved_commit=str(commit_id),
        tag_object=str(tag_obj.id),
        sparse_applied=sparse_applied,
        removed_entries=removed,
        checked_out_at=datetime.now(timezone.utc).isoformat(),
    )
