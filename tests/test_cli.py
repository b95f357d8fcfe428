"""Tests for the Typer CLI."""

from typer.testing import CliRunner

from configbridge import __version__
from configbridge.cli import app

runner = CliRunner()


def test_version():
    """--version prints the package version."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_requires_repository(monkeypatch):
    """config exits 1 when the repository is not configured."""
    monkeypatch.delenv("REPO_OWNER", raising=False)
    monkeypatch.delenv("REPO_NAME", raising=False)

    result = runner.invoke(app, ["config"])

    assert result.exit_code == 1
    assert "REPO_OWNER" in result.output


def test_config_masks_secrets(monkeypatch):
    """config shows the repository but never the client secret."""
    monkeypatch.setenv("REPO_OWNER", "octo")
    monkeypatch.setenv("REPO_NAME", "admin-config")
    monkeypatch.setenv("GITHUB_CLIENT_ID", "Iv1.abc")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "supersecretvalue123")

    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "octo/admin-config" in result.output
    assert "supersecretvalue123" not in result.output


def test_serve_passes_config_to_uvicorn(monkeypatch):
    """serve builds the app from env and hands host/port to uvicorn."""
    monkeypatch.setenv("REPO_OWNER", "octo")
    monkeypatch.setenv("REPO_NAME", "admin-config")
    monkeypatch.setenv("PORT", "4567")
    calls = {}

    def fake_run(asgi_app, host, port, log_level):
        calls.update(app=asgi_app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = runner.invoke(app, ["serve", "--host", "0.0.0.0"])

    assert result.exit_code == 0, result.output
    assert calls["host"] == "0.0.0.0"
    assert calls["port"] == 4567
    assert calls["app"].state.config.repository == "octo/admin-config"
