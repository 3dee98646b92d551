"""CLI command for showing the effective configuration."""

from __future__ import annotations

from typing import Annotated

import typer

from album_purge.config import get_config
from album_purge.utils.output import OutputFormat, print_output


def show(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show settings and provider endpoints in effect."""
    config = get_config()
    data = {**config.settings.model_dump(), **config.provider.model_dump()}
    data["library_url"] = config.provider.library_url
    print_output(data, output, title="Configuration")
