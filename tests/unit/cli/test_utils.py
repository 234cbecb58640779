"""Unit tests for CLI utilities."""

import logging

import pytest
from pydantic import BaseModel, Field

from stampgraph.cli.utils import configure_logging, create_client, handle_errors, run_async
from stampgraph.config import StampgraphConfig
from stampgraph.core.exceptions import StampNotFoundError


class _Bounded(BaseModel):
    max_depth: int = Field(ge=1, le=10)


class TestUtils:
    def test_handle_errors_reports_library_errors(self, capsys):
        with pytest.raises(SystemExit) as exc:
            with handle_errors():
                raise StampNotFoundError("A404")

        assert exc.value.code == 1
        assert "No stamp found for identifier: A404" in capsys.readouterr().err

    def test_handle_errors_reports_invalid_options(self, capsys):
        with pytest.raises(SystemExit):
            with handle_errors():
                _Bounded(max_depth=11)

        assert "Invalid option max_depth" in capsys.readouterr().err

    def test_handle_errors_passes_other_exceptions(self):
        with pytest.raises(KeyError):
            with handle_errors():
                raise KeyError("x")

    def test_configure_logging(self):
        configure_logging("warning")
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

        configure_logging("warning", verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_create_client_uses_config(self):
        config = StampgraphConfig.model_validate(
            {"api": {"base_url": "http://localhost:9000/api/", "timeout": 3}}
        )
        client = create_client(config)
        assert client.base_url == "http://localhost:9000/api"
        run_async(client.close())

    def test_run_async(self):
        async def answer():
            return 42

        assert run_async(answer()) == 42
