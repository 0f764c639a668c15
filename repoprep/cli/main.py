"""repoprep CLI"""

import sys
from pathlib import Path

import click

from repoprep import __version__
from repoprep.cli.utils.logging import configure_logging, logger
from repoprep.git.exceptions import PreparationError
from repoprep.model.config import AuthenticationCredentials, PreparationConfig
from repoprep.prepare.preparer import GitPreparer


@click.group()
@click.version_option(__version__, prog_name="repoprep")
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug mode",
)
@click.pass_context
def cli(ctx, debug):
    """
    Prepare git repositories for version calculation.
    """
    ctx.ensure_object(dict)
    ctx.obj["DEBUG"] = debug
    configure_logging(debug)


@cli.command("prepare")
@click.argument(
    "path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
)
@click.option("--url", "-u", help="Clone this remote URL instead of using PATH.")
@click.option("--branch", "-b", help="Branch to prepare.")
@click.option(
    "--clone-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Base directory for dynamic clones (defaults to the temp directory).",
)
@click.option("--dot-git-dir", type=click.Path(path_type=Path), help=".git directory.")
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Root of the working copy.",
)
@click.option("--username", envvar="REPOPREP_USERNAME", help="Remote username.")
@click.option("--password", envvar="REPOPREP_PASSWORD", help="Remote password.")
@click.option("--no-fetch", is_flag=True, help="Do not fetch from the remote.")
def prepare(
    path: Path,
    url,
    branch,
    clone_path,
    dot_git_dir,
    project_root,
    username,
    password,
    no_fetch: bool,
):
    """Prepare a local working copy or a dynamic clone of a remote URL.

    Prints the .git directory and the project root on success. A local working
    copy is only located, never modified: normalizing it needs a build server,
    which is available to library callers through ``build_context``.

    Example:

      repoprep prepare --url https://github.com/org/proj.git --branch main
    """
    authentication = None
    if username or password:
        authentication = AuthenticationCredentials(
            username=username, password=password
        )

    config = PreparationConfig(
        target_path=path,
        dot_git_directory=dot_git_dir,
        project_root_directory=project_root,
        target_url=url,
        target_branch=branch,
        authentication=authentication,
        no_fetch=no_fetch,
        dynamic_repository_clone_path=clone_path,
    )

    try:
        result = GitPreparer(config).prepare()
    except PreparationError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    click.echo(f"dotGitDirectory: {result.dot_git_directory}")
    click.echo(f"projectRootDirectory: {result.project_root_directory}")


if __name__ == "__main__":
    cli(obj={})
