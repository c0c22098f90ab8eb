"""tagsnap CLI - check out a git tag and prune it to the sparse allowlist."""
import logging
import sys
from pathlib import Path

import click

from tagsnap.core.errors import ConfigError, PruneError, TagNotFoundError
from tagsnap.repo import CheckoutOptions, checkout_tag
from tagsnap.sparse import prune as prune_working_tree

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("tagsnap")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """tagsnap - reproducible, minimal on-disk snapshots of tagged releases."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command()
@click.option(
    "--repopath",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Path to the repository working directory",
)
@click.option(
    "--tag",
    required=True,
    help="Git tag to checkout",
)
@click.option(
    "--sshpath",
    default="",
    help="Directory holding id_rsa and id_rsa.pub for the remote",
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with checkout options",
)
@click.option(
    "--report",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a JSON checkout report to this file",
)
def checkout(repopath: Path, tag: str, sshpath: str, config: Path, report: Path):
    """Fetch origin, check out TAG and prune to the sparse-checkout file.

    Examples:
        tagsnap checkout --repopath /srv/app --tag v1.4.0
        tagsnap checkout --repopath /srv/app --tag v1.4.0 --sshpath ~/.ssh

    Exit codes:
        0: Success
        1: Generic runtime failure
        3: Requested tag not found
        4: Checkout succeeded but pruning did not complete
        7: Configuration file error
    """
    try:
        options = CheckoutOptions.load(config) if config else CheckoutOptions()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(7)

    try:
        result = checkout_tag(
            repo_path=repopath,
            tag=tag,
            ssh_path=sshpath,
            options=options,
        )
    except TagNotFoundError as e:
        logger.error(f"Tag not found: {str(e)}")
        sys.exit(3)
    except PruneError as e:
        logger.error(f"Checked out {tag} but prune incomplete: {str(e)}")
        sys.exit(4)
    except Exception as e:
        logger.error(f"Checkout failed: {str(e)}")
        sys.exit(1)

    click.echo(f"[OK] Checked out {tag}")
    click.echo(f"  Commit: {result.resolved_commit[:12]}")
    click.echo(f"  Path: {result.repo_path}")
    if result.sparse_applied:
        click.echo(f"  Pruned: {len(result.removed_entries)} entries")
    if report:
        result.save(report)
        click.echo(f"  Report: {report}")
    sys.exit(0)


@main.command()
@click.option(
    "--repopath",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Path to the repository working directory",
)
def prune(repopath: Path):
    """Prune a working tree to its .git/info/sparse-checkout allowlist."""
    try:
        removed = prune_working_tree(repopath)
    except PruneError as e:
        logger.error(f"Prune failed: {str(e)}")
        sys.exit(1)

    click.echo(f"[OK] Pruned {len(removed)} entries")
    for name in removed:
        click.echo(f"  - {name}")
    sys.exit(0)


if __name__ == "__main__":
    main()
