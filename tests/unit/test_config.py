"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from harbormaster.config import CONFIG_ENV_VAR, HarbormasterConfig, load_config
from harbormaster.exceptions import ConfigurationError
from harbormaster.models import Scheduler


def test_defaults(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    config = load_config()

    assert config.schedulers == [Scheduler.ECS, Scheduler.EKS]
    assert config.request_timeout == 30.0
    assert config.region is None


def test_save_and_load(tmp_path):
    path = tmp_path / "harbormaster.yml"
    HarbormasterConfig(region="eu-west-1", schedulers=["eks"], request_timeout=10).save(path)

    config = load_config(path)

    assert config.region == "eu-west-1"
    assert config.schedulers == [Scheduler.EKS]
    assert config.request_timeout == 10


def test_env_var_names_config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yml"
    path.write_text("region: ap-southeast-2\nlog_level: debug\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    config = load_config()

    assert config.region == "ap-southeast-2"
    assert config.log_level == "DEBUG"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.yml")


def test_invalid_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("schedulers: [swarm]\n")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)

    assert "schedulers" in exc_info.value.details


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("")

    assert load_config(path) == HarbormasterConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"schedulers": []},
        {"schedulers": ["ecs", "ecs"]},
        {"request_timeout": 0},
        {"connect_timeout": -1},
        {"log_level": "LOUD"},
    ],
)
def test_validation(kwargs):
    with pytest.raises(ValidationError):
        HarbormasterConfig(**kwargs)
