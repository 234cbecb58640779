"""
Deps Command - Map the stamps a recursive stamp loads.
"""

import json
from typing import Optional

import click

from ...analysis.analyzer import DependencyGraphOptions, StampAnalyzer
from ...config import StampgraphConfig
from ...core.types import GraphFormat, GraphReport
from ..utils import console, create_client, echo_warning, handle_errors, run_async


async def _build(
    config: StampgraphConfig, identifier: str, options: DependencyGraphOptions
) -> GraphReport:
    async with create_client(config) as client:
        analyzer = StampAnalyzer(client, resolution_timeout=config.analysis.resolution_timeout)
        with console.status(f"[bold green]Resolving dependencies of {identifier}...[/bold green]"):
            return await analyzer.build_dependency_graph(identifier, options)


@click.command()
@click.argument("identifier")
@click.option("--max-depth", type=int, default=None,
              help="Maximum graph depth, 1-10 (default from config)")
@click.option("-f", "--format", "output_format",
              type=click.Choice([f.value for f in GraphFormat]), default=GraphFormat.TREE.value,
              help="Output format")
@click.option("--no-metadata", is_flag=True, help="Omit stamp metadata from nodes")
@click.option("--no-resolve", is_flag=True, help="Do not follow dependencies")
@click.option("--raw-data", is_flag=True, help="Append the structural JSON dump")
@click.pass_obj
def deps(
    config: StampgraphConfig,
    identifier: str,
    max_depth: Optional[int],
    output_format: str,
    no_metadata: bool,
    no_resolve: bool,
    raw_data: bool,
) -> None:
    """
    Build the dependency graph of a stamp.

    IDENTIFIER is a numeric stamp id or a CPID.
    """
    with handle_errors():
        options = DependencyGraphOptions(
            max_depth=max_depth if max_depth is not None else config.analysis.graph_max_depth,
            include_metadata=not no_metadata,
            format=GraphFormat(output_format),
            resolve_all=not no_resolve,
        )
        report = run_async(_build(config, identifier, options))

    click.echo(report.rendered)

    if report.graph.truncated:
        echo_warning("Dependency resolution hit the deadline; the graph is incomplete")

    if raw_data and options.format != GraphFormat.JSON:
        click.echo()
        click.echo(json.dumps(report.graph.to_dict(), indent=2))
