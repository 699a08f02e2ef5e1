"""CLI entrypoint for nexuspm."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


def _setup_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def _project_folder(ctx: click.Context, folder: str) -> str:
    """Vault-relative POSIX path of an existing folder ("" for the vault root)."""
    vault: Path = ctx.obj["vault"]
    path = (vault / folder).resolve()
    try:
        relative = path.relative_to(vault)
    except ValueError:
        raise click.BadParameter(f"'{folder}' is outside the vault {vault}.", param_hint="FOLDER")
    if not path.is_dir():
        raise click.BadParameter(f"Folder '{folder}' does not exist in {vault}.", param_hint="FOLDER")
    posix = relative.as_posix()
    return "" if posix == "." else posix


def _settings(ctx: click.Context):
    from .config import SETTINGS_FILENAME, load_settings

    try:
        return load_settings(ctx.obj["vault"])
    except ValueError as e:
        raise click.ClickException(f"Invalid {SETTINGS_FILENAME}: {e}")


NOTE_TYPES = ["decision-project", "memo", "option", "decision", "risk", "assumption", "evidence"]

folder_argument = click.argument("folder", default=".")

json_option = click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)


@click.group()
@click.version_option(__version__, prog_name="nexuspm")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the Obsidian vault (defaults to the current directory)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, verbose: bool) -> None:
    """nexuspm - project management over a folder of Markdown notes.

    Notes link to their parent through a `parent` property; nexuspm rebuilds
    the tree, numbers it, and rolls up progress, scores and risk.
    """
    _setup_logging(verbose)

    ctx.ensure_object(dict)
    if vault is None:
        vault = Path.cwd()

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()


@cli.command()
@folder_argument
@json_option
@click.pass_context
def show(ctx: click.Context, folder: str, output_json: bool) -> None:
    """Render FOLDER as a WBS or decision project, whichever it is.

    The type comes from the folder's .nexuspm marker, or is guessed from
    the notes inside it.
    """
    from .commands.project_cmd import run_show

    folder = _project_folder(ctx, folder)
    exit_code = run_show(ctx.obj["vault"], folder, output_json=output_json, settings=_settings(ctx))
    sys.exit(exit_code)


@cli.command()
@folder_argument
@json_option
@click.pass_context
def wbs(ctx: click.Context, folder: str, output_json: bool) -> None:
    """Show the work-breakdown structure of FOLDER.

    Examples:

        nexuspm wbs Projects/Website

        nexuspm -v ~/vault wbs Projects/Website --json
    """
    from .commands.wbs_cmd import run_wbs

    folder = _project_folder(ctx, folder)
    exit_code = run_wbs(ctx.obj["vault"], folder, output_json=output_json, settings=_settings(ctx))
    sys.exit(exit_code)


@cli.command()
@folder_argument
@json_option
@click.option(
    "--top",
    type=click.IntRange(min=0),
    default=None,
    help="Number of risks to list (default from nexuspm.toml, else 5)",
)
@click.pass_context
def decision(ctx: click.Context, folder: str, output_json: bool, top: int | None) -> None:
    """Show criteria, ranked options and top risks of FOLDER."""
    from .commands.decision_cmd import run_decision

    folder = _project_folder(ctx, folder)
    exit_code = run_decision(
        ctx.obj["vault"],
        folder,
        output_json=output_json,
        top=top,
        settings=_settings(ctx),
    )
    sys.exit(exit_code)


@cli.command()
@folder_argument
@json_option
@click.option(
    "--type",
    "project_type",
    type=click.Choice(["wbs", "decision"]),
    default=None,
    help="Validate as this project type instead of detecting it",
)
@click.pass_context
def validate(ctx: click.Context, folder: str, output_json: bool, project_type: str | None) -> None:
    """Check that FOLDER forms a single tree.

    Exits with status 1 when there is no root, more than one root, or a
    parent cycle.
    """
    from .commands.validate_cmd import run_validate

    folder = _project_folder(ctx, folder)
    exit_code = run_validate(
        ctx.obj["vault"],
        folder,
        output_json=output_json,
        project_type=project_type,
        settings=_settings(ctx),
    )
    sys.exit(exit_code)


@cli.command()
@folder_argument
@click.option(
    "--type",
    "project_type",
    type=click.Choice(["wbs", "decision"]),
    required=True,
    help="Project type to record",
)
@click.option("--name", default=None, help="Display name (defaults to the folder name)")
@click.pass_context
def init(ctx: click.Context, folder: str, project_type: str, name: str | None) -> None:
    """Mark FOLDER as a project by writing its .nexuspm file."""
    from .commands.project_cmd import run_init

    folder = _project_folder(ctx, folder)
    sys.exit(run_init(ctx.obj["vault"], folder, project_type, name))


@cli.command()
@folder_argument
@click.option(
    "--type",
    "item_type",
    type=click.Choice(NOTE_TYPES),
    required=True,
    help="Kind of decision note to create",
)
@click.option("--name", default=None, help="Note name (defaults to the type's name, numbered if taken)")
@click.option("--parent", default=None, help="Parent note (defaults to the folder's project note)")
@click.pass_context
def new(ctx: click.Context, folder: str, item_type: str, name: str | None, parent: str | None) -> None:
    """Create a decision note in FOLDER from its starter template.

    Examples:

        nexuspm new Vendor --type option --name "Acme Cloud"

        nexuspm new Vendor --type decision-project
    """
    from .commands.note_cmd import run_new

    folder = _project_folder(ctx, folder)
    sys.exit(run_new(ctx.obj["vault"], folder, item_type, name=name, parent=parent, settings=_settings(ctx)))


@cli.command()
@folder_argument
@click.pass_context
def watch(ctx: click.Context, folder: str) -> None:
    """Re-render FOLDER whenever its notes change.

    Runs until interrupted (Ctrl+C).
    """
    from .commands.watch_cmd import run_watch

    folder = _project_folder(ctx, folder)
    _settings(ctx)  # fail fast on an invalid nexuspm.toml
    sys.exit(run_watch(ctx.obj["vault"], folder))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
