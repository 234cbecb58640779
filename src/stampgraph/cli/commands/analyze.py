"""
Analyze Command - Static analysis of a single stamp's code.
"""

import json
from typing import Optional

import click

from ...analysis.analyzer import AnalyzeOptions, StampAnalyzer
from ...analysis.report import format_analysis_report
from ...config import StampgraphConfig
from ...core.types import AnalysisResult
from ..utils import console, create_client, handle_errors, run_async


async def _analyze(
    config: StampgraphConfig, identifier: str, options: AnalyzeOptions
) -> AnalysisResult:
    async with create_client(config) as client:
        analyzer = StampAnalyzer(client, resolution_timeout=config.analysis.resolution_timeout)
        with console.status(f"[bold green]Analyzing stamp {identifier}...[/bold green]"):
            return await analyzer.analyze_stamp_code(identifier, options)


@click.command()
@click.argument("identifier")
@click.option("--max-depth", type=int, default=None,
              help="Dependency resolution depth, 1-10 (default from config)")
@click.option("--no-deps", is_flag=True, help="Skip dependency resolution")
@click.option("--raw", "include_raw", is_flag=True, help="Include the decoded source")
@click.option("--no-security", is_flag=True, help="Skip security analysis")
@click.option("--no-performance", is_flag=True, help="Skip performance analysis")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def analyze(
    config: StampgraphConfig,
    identifier: str,
    max_depth: Optional[int],
    no_deps: bool,
    include_raw: bool,
    no_security: bool,
    no_performance: bool,
    as_json: bool,
) -> None:
    """
    Analyze the code embedded in a stamp.

    IDENTIFIER is a numeric stamp id or a CPID.
    """
    with handle_errors():
        options = AnalyzeOptions(
            include_dependencies=not no_deps,
            max_depth=max_depth if max_depth is not None else config.analysis.max_depth,
            include_raw_content=include_raw,
            include_security_analysis=not no_security,
            include_performance_analysis=not no_performance,
        )
        result = run_async(_analyze(config, identifier, options))

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    click.echo(format_analysis_report(
        result,
        include_security=options.include_security_analysis,
        include_performance=options.include_performance_analysis,
    ))
    if result.raw_content is not None:
        click.echo()
        click.echo("📜 Raw Content:")
        click.echo(result.raw_content)
