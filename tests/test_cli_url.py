import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from objectfetcher.cli import app


class TestCLIURL:
    """Test the CLI functionality with remote URLs."""

    @pytest.fixture
    def runner(self):
        """CLI test runner."""
        return CliRunner()

    def test_remote_file(self, runner, httpserver):
        """Test single URL output with pretty JSON."""
        fixture_path = Path(__file__).parent / "fixtures" / "catalog.xml"
        httpserver.expect_request("/catalog.xml").respond_with_data(
            fixture_path.read_bytes(), content_type="text/xml"
        )
        result = runner.invoke(app, ["--wrapper", "--skip-first", httpserver.url_for("/catalog.xml")])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["objects"][1]["author"] == "Ralls, Kim"

    def test_remote_post(self, runner, httpserver):
        """Test --data sends a POST body."""
        httpserver.expect_request("/search", method="POST", data="q=rain").respond_with_data(
            b"<hits><hit>Midnight Rain</hit></hits>", content_type="text/xml"
        )
        result = runner.invoke(app, ["--sync", "--wrapper", "--data", "q=rain", httpserver.url_for("/search")])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["objects"] == ["Midnight Rain"]

    def test_remote_error(self, runner, httpserver):
        httpserver.expect_request("/down").respond_with_data("down", status=502)
        result = runner.invoke(app, [httpserver.url_for("/down")])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "502" in payload["error"]
