"""Shared fixtures: isolate every test from the user's terraplan config."""

import pytest

from terraplan import config as settings


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config_file = tmp_path / "terraplan-config" / "config.json"
    monkeypatch.setattr(settings, "CONFIG_DIR", config_file.parent)
    monkeypatch.setattr(settings, "CONFIG_FILE", config_file)
    monkeypatch.delenv("TERRAPLAN_MAX_INSTANCES", raising=False)
    monkeypatch.delenv("TERRAPLAN_CLI_MODE", raising=False)
    settings.reset_config()
    yield config_file
    settings.reset_config()
