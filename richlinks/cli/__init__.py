"""CLI entry point for richlinks."""

import logging

import rich_click as click
from rich.logging import RichHandler

from .. import __version__

# Import command modules by alias to avoid shadowing module names with command objects
# so that `import richlinks.cli.<module>` still resolves to the module.
from . import config_cmd as _config_mod
from . import preview as _preview_mod
from ._console import console


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline activity")
def cli(verbose: bool):
    """Rich link previews in the terminal."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Register commands
cli.add_command(_preview_mod.preview)
cli.add_command(_preview_mod.validate)
cli.add_command(_config_mod.config)


if __name__ == "__main__":
    cli()
