"""Sparse pruner: narrow a full checkout to the sparse-checkout allowlist.

The allowlist lives at ``<workdir>/.git/info/sparse-checkout``, one entry
per line. Only immediate children of the working directory are considered:
an entry is kept when its name appears verbatim in the allowlist, or with a
single trailing path separator (``docs/`` keeps ``docs``). Hidden entries
are never touched, which keeps ``.git`` itself safe.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from tagsnap.core.errors import MetadataNotFoundError, PruneIOError

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"
INFO_DIR_NAME = "info"
SPARSE_FILE_NAME = "sparse-checkout"

SEPARATORS = {os.sep, "/"}


def find_entry(parent: Path, name: str) -> Optional[Path]:
    """Return the child of ``parent`` named exactly ``name``, or None.

    Matches by listing the directory so the comparison is case-sensitive
    on every filesystem.
    """
    with os.scandir(parent) as it:
        for entry in it:
            if entry.name == name:
                return Path(parent) / entry.name
    return None


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_covered(name: str, entries: Sequence[str]) -> bool:
    """True if ``name`` is allowed by the sparse entries."""
    for entry in entries:
        if entry == name:
            return True
        if any(entry == name + sep for sep in SEPARATORS):
            return True
    return False


def read_sparse_entries(path: Path) -> List[str]:
    """Read a sparse-checkout file into its raw entries.

    Content is split on newlines without stripping, so a trailing newline
    yields a final empty entry. No filename is empty, so it never covers
    anything.
    """
    return Path(path).read_text(encoding="utf-8").split("\n")


def locate_sparse_file(working_dir: Path) -> Optional[Path]:
    """Find ``.git/info/sparse-checkout`` under ``working_dir``.

    Returns:
        Path to the sparse file, or None if ``info`` or the file is absent

    Raises:
        MetadataNotFoundError: If ``working_dir`` has no ``.git`` entry
        OSError: If a directory cannot be listed
    """
    git_dir = find_entry(working_dir, GIT_DIR_NAME)
    if git_dir is None:
        raise MetadataNotFoundError(f"No {GIT_DIR_NAME} found in {working_dir}")

    info_dir = find_entry(git_dir, INFO_DIR_NAME)
    if info_dir is None:
        return None
    return find_entry(info_dir, SPARSE_FILE_NAME)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def prune(working_dir: Path) -> List[str]:
    """Delete top-level entries not covered by the sparse-checkout file.

    Args:
        working_dir: Root of the checked out working tree

    Returns:
        Sorted names of the entries removed (empty if no sparse file exists)

    Raises:
        MetadataNotFoundError: If ``working_dir`` has no ``.git`` entry
        PruneIOError: On any filesystem failure; already removed entries stay removed
    """
    working_dir = Path(working_dir)
    try:
        sparse_file = locate_sparse_file(working_dir)
    except OSError as e:
        raise PruneIOError(f"Cannot read repository metadata in {working_dir}: {e}") from e

    if sparse_file is None:
        logger.info(f"No sparse-checkout configured in {working_dir}; nothing to prune")
        return []

    try:
        entries = read_sparse_entries(sparse_file)
        children = sorted(os.listdir(working_dir))
    except OSError as e:
        raise PruneIOError(f"Cannot prepare prune of {working_dir}: {e}") from e

    removed: List[str] = []
    for name in children:
        if is_hidden(name) or is_covered(name, entries):
            continue
        try:
            _remove(working_dir / name)
        except OSError as e:
            raise PruneIOError(f"Failed to remove {working_dir / name}: {e}", removed) from e
        logger.debug(f"Removed {name}")
        removed.append(name)

    logger.info(f"Pruned {len(removed)} entries from {working_dir}")
    return removed
