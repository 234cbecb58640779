"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, logging setup and the async bridge used by every
command that talks to the lookup service.
"""

import asyncio
import logging
import sys
from contextlib import contextmanager
from typing import Any, Coroutine, Iterator, NoReturn, TypeVar

import click
from pydantic import ValidationError
from rich.console import Console

from ..client.stampchain import StampchainClient
from ..config import StampgraphConfig
from ..core.exceptions import StampgraphError

T = TypeVar("T")

# Progress goes to stderr so --json output stays machine-readable
console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross to stderr.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"), err=True)


def configure_logging(level: str, verbose: bool = False) -> None:
    """Configure root logging from the config level; --verbose forces DEBUG."""
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="[%X]", stream=sys.stderr)
    logging.getLogger().setLevel(resolved)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def create_client(config: StampgraphConfig) -> StampchainClient:
    return StampchainClient(base_url=config.api.base_url, timeout=config.api.timeout)


def fail(message: str) -> NoReturn:
    echo_error(message)
    sys.exit(1)


@contextmanager
def handle_errors() -> Iterator[None]:
    """
    Map library errors raised inside the block to a red error line and exit 1.

    Invalid options surface as pydantic ValidationErrors and are reported
    the same way as lookup and input failures.
    """
    try:
        yield
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        fail(f"Invalid option {field}: {error['msg']}")
    except StampgraphError as e:
        fail(str(e))


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)
