"""
stampgraph CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from ..config import load_config
from .commands import analyze, deps, survey
from .utils import configure_logging, echo_error


@click.group()
@click.version_option(package_name="stampgraph")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Path to config file (default: .stampgraph/config.yaml)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """stampgraph: Recursive Stamp Analysis Engine.

    Decodes the code embedded in a stamp, classifies it, and maps the
    other stamps it loads into a bounded, cycle-safe dependency graph.

    \b
    Quick Start:
      stampgraph analyze A12345678901234567890
      stampgraph deps 12345 --format mermaid
      stampgraph survey 101 102 103 --min-occurrences 2
    """
    try:
        config = load_config(config_path)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        echo_error(f"Invalid configuration: {e}")
        ctx.exit(1)

    configure_logging(config.logging.level, verbose)
    ctx.obj = config


# Register commands
main.add_command(analyze.analyze)
main.add_command(deps.deps)
main.add_command(survey.survey)

if __name__ == "__main__":
    main()
