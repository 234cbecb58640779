"""
Survey Command - Tally coding patterns across a set of stamps.
"""

import json
import logging
from typing import List, Sequence

import click

from ...analysis.analyzer import StampAnalyzer
from ...analysis.report import format_survey_report
from ...analysis.survey import PatternSurvey, SurveyFamily, SurveyOptions
from ...config import StampgraphConfig
from ...core.exceptions import StampLookupError, StampNotFoundError
from ...core.types import StampRecord
from ..utils import console, create_client, echo_warning, handle_errors, run_async

logger = logging.getLogger(__name__)


async def _fetch(config: StampgraphConfig, identifiers: Sequence[str]) -> List[StampRecord]:
    """Fetch each stamp, skipping the ones that cannot be found."""
    records = []
    async with create_client(config) as client:
        analyzer = StampAnalyzer(client)
        with console.status(f"[bold green]Fetching {len(identifiers)} stamps...[/bold green]"):
            for identifier in identifiers:
                try:
                    records.append(await analyzer.resolve_stamp(identifier))
                except (StampNotFoundError, StampLookupError) as e:
                    logger.debug(f"Survey skipped {identifier}: {e}")
                    echo_warning(f"Skipping {identifier}: {e}")
    return records


@click.command()
@click.argument("identifiers", nargs=-1, required=True)
@click.option("-t", "--pattern-type", "pattern_types", multiple=True,
              type=click.Choice([f.value for f in SurveyFamily]),
              help="Pattern family to survey (repeatable, default: all)")
@click.option("--min-occurrences", type=int, default=3, help="Minimum occurrences to report (2-100)")
@click.option("--sort-by", type=click.Choice(["frequency", "complexity", "alphabetical"]),
              default="frequency", help="Result ordering")
@click.option("--no-examples", is_flag=True, help="Omit code snippets")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def survey(
    config: StampgraphConfig,
    identifiers: tuple,
    pattern_types: tuple,
    min_occurrences: int,
    sort_by: str,
    no_examples: bool,
    as_json: bool,
) -> None:
    """
    Survey coding patterns across the given stamps.

    Each IDENTIFIER is a numeric stamp id or a CPID.
    """
    with handle_errors():
        options = SurveyOptions(
            pattern_types=list(pattern_types) or [SurveyFamily.ALL],
            min_occurrences=min_occurrences,
            include_examples=not no_examples,
            sort_by=sort_by,
        )
        records = run_async(_fetch(config, identifiers))

    result = PatternSurvey().run(records, options)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        click.echo(format_survey_report(result))
