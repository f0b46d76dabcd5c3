def main() -> None:
    """Entry point for stagedit."""
    from stagedit.ui.cli import cli

    cli()
