"""Command-line interface for stagedit."""

import sys

import click
from dotenv import load_dotenv

from stagedit.core import SettingsManager
from stagedit.editing import EditorLauncher, EditSession, Installer
from stagedit.error_handling import StageditError
from stagedit.ui.console import ConsoleInterface, configure_logging
from stagedit.utils.validation import ValidationError, validate_target_path

# Load environment variables
load_dotenv()


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """stagedit - edit files in your editor and install only what changed."""
    pass


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "--from",
    "original",
    default=None,
    help=(
        "Seed the edit from this file instead of the target "
        "(one target only, not with templating)"
    ),
)
@click.option(
    "-c",
    "--comment",
    "comments",
    multiple=True,
    help="Show this file as commented reference below the editable area",
)
@click.option(
    "--template/--no-template",
    default=None,
    help="Wrap the editable area in markers (implied by --comment)",
)
@click.option("--marker-start", default=None, help="Line opening the editable area")
@click.option("--marker-end", default=None, help="Line closing the editable area")
@click.option(
    "--remove-empty-parent/--keep-empty-parent",
    default=None,
    help="Remove parent directories left empty after editing",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def edit(
    targets: tuple[str, ...],
    original: str | None,
    comments: tuple[str, ...],
    template: bool | None,
    marker_start: str | None,
    marker_end: str | None,
    remove_empty_parent: bool | None,
    verbose: bool,
):
    """Edit TARGETS in one editor session and install the changed ones."""
    ui = ConsoleInterface()
    settings = SettingsManager()
    configure_logging(verbose or settings.get_verbose_mode())

    if original and len(targets) != 1:
        raise click.UsageError("--from can only be used with a single target")
    if (marker_start is None) != (marker_end is None):
        raise click.UsageError("--marker-start and --marker-end must be used together")

    if template is None:
        template = bool(comments) or marker_start is not None
    if template and marker_start is None:
        marker_start, marker_end = settings.get_markers()
    if template and original:
        raise click.UsageError(
            "--from cannot be combined with templating; the template shows the "
            "current target"
        )
    if not template:
        if comments:
            raise click.UsageError("--comment cannot be combined with --no-template")
        marker_start = marker_end = None

    if remove_empty_parent is None:
        remove_empty_parent = settings.get_remove_empty_parent()

    try:
        session = EditSession(
            marker_start=marker_start,
            marker_end=marker_end,
            remove_empty_parent=remove_empty_parent,
        )
    except ValidationError as e:
        ui.show_system_error(str(e))
        sys.exit(1)

    with session:
        try:
            for target in targets:
                validate_target_path(target)
                added = session.add(
                    target,
                    original_path=original,
                    comment_sources=list(comments) if template else None,
                )
                if not added:
                    ui.show_warning(f"{target} given more than once, editing it once")

            installer = Installer(launcher=EditorLauncher.from_settings(settings))
            report = installer.run(session)
        except ValidationError as e:
            ui.show_system_error(str(e))
            sys.exit(1)
        except StageditError as e:
            ui.show_system_error(e.get_user_message())
            sys.exit(1)

    ui.show_install_report(report)
    if report.has_failures:
        ui.show_warning(
            f"{len(report.failed)} of {len(report.files)} file(s) could not be "
            "installed"
        )


@cli.command()
def editor():
    """Show which editor would be launched."""
    ui = ConsoleInterface()
    launcher = EditorLauncher.from_settings(SettingsManager())
    try:
        description = launcher.describe()
    except StageditError as e:
        ui.show_system_error(e.get_user_message())
        sys.exit(1)
    ui.show_info(f"Editor: {description}")


@cli.command()
@click.argument("key")
@click.argument("value")
def config(key: str, value: str):
    """Set a user setting (markerStart, markerEnd, fallbackEditors,
    removeEmptyParent)."""
    ui = ConsoleInterface()
    settings = SettingsManager()
    try:
        settings.update_user_setting(key, value)
    except ValidationError as e:
        ui.show_system_error(str(e))
        sys.exit(1)
    ui.show_system_success(f"{key} saved to {settings.settings_file}")
