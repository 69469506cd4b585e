"""
pwnedkit CLI - Main entry point for the command-line interface.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from pwnedkit import __version__
from pwnedkit.hibp.cli import hibp

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="pwnedkit")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """pwnedkit - Have I Been Pwned utilities

    Check passwords with k-anonymity range queries, and look up
    breaches, pastes and subscription details.
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


main.add_command(hibp)


if __name__ == "__main__":
    main()
