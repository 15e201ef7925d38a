"""Shared fixtures for xcurl tests."""

import re

import pytest
from click.testing import CliRunner

from xcurl import core
from xcurl.executor import HttpResponse

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path, monkeypatch):
    """Run the test from an empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


@pytest.fixture(autouse=True)
def global_xcurl_dir(tmp_path, monkeypatch):
    """Override the global ~/.xcurl directory to a temp location."""
    fake_global = tmp_path / "fake_home" / ".xcurl"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    for var in ("XCURL_CONFIG", "XCURL_PROFILE", "XCURL_THEME", "XCURL_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    return fake_global


@pytest.fixture
def make_response():
    """Factory for HttpResponse objects."""

    def _make(
        status_code=200,
        body="",
        headers=None,
        reason="OK",
        version="HTTP/1.1",
    ):
        if headers is None:
            headers = [("content-type", "application/json")]
        return HttpResponse(
            status_code=status_code,
            reason=reason,
            version=version,
            headers=list(headers),
            body=body,
        )

    return _make


def strip_ansi(text):
    return ANSI_RE.sub("", text)
