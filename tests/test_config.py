"""Tests for input reading and validation."""
import os

import pytest

from allure_uploader.config import (
    ActionInputs,
    input_env_name,
    load_ci_context,
    load_env_file,
    load_run_config,
    parse_flag,
)
from allure_uploader.errors import ConfigurationError


def make_env(**overrides):
    env = {
        "INPUT_ALLURE-SERVER-URL": "https://allure.example.com",
        "INPUT_ALLURE-RESULTS-DIRECTORY": "allure-results",
        "INPUT_PROJECT-ID": "demo",
        "INPUT_IS-SECURE": "false",
        "INPUT_ALLURE-GENERATE": "true",
        "INPUT_ALLURE-CLEAN-RESULTS": "false",
    }
    env.update(overrides)
    return env


class TestActionInputs:
    def test_env_name(self):
        assert input_env_name("allure-server-url") == "INPUT_ALLURE-SERVER-URL"
        assert input_env_name("my input") == "INPUT_MY_INPUT"

    def test_get_strips_value(self):
        inputs = ActionInputs({"INPUT_PROJECT-ID": "  demo \n"})
        assert inputs.get("project-id") == "demo"

    def test_missing_optional_is_empty(self):
        assert ActionInputs({}).get("security-user") == ""

    def test_missing_required_raises(self):
        with pytest.raises(ConfigurationError, match="Input required and not supplied: project-id"):
            ActionInputs({}).get("project-id", required=True)

    def test_overrides_win(self):
        inputs = ActionInputs({"INPUT_PROJECT-ID": "env"}).with_overrides(
            {"project-id": "cli", "is-secure": None}
        )
        assert inputs.get("project-id") == "cli"
        assert inputs.get("is-secure") == ""


class TestParseFlag:
    def test_true_false(self):
        assert parse_flag("is-secure", "true") is True
        assert parse_flag("is-secure", "false") is False

    @pytest.mark.parametrize("value", ["True", "yes", "1", ""])
    def test_rejects_other_values(self, value):
        with pytest.raises(ConfigurationError, match="is-secure has to be true/false"):
            parse_flag("is-secure", value)


class TestLoadRunConfig:
    def test_load(self):
        config = load_run_config(ActionInputs(make_env()))
        assert config.server_url == "https://allure.example.com"
        assert config.base_url == "https://allure.example.com/"
        assert config.project_id == "demo"
        assert config.is_secure is False
        assert config.generate is True
        assert config.clean_results is False
        assert config.security_user is None
        assert config.timeout is None

    def test_credentials_read_when_present(self):
        env = make_env(**{
            "INPUT_IS-SECURE": "true",
            "INPUT_SECURITY-USER": "bot",
            "INPUT_SECURITY-PASS": "secret",
        })
        config = load_run_config(ActionInputs(env))
        assert config.is_secure is True
        assert config.security_user == "bot"
        assert config.security_pass == "secret"

    def test_invalid_clean_flag(self):
        env = make_env(**{"INPUT_ALLURE-CLEAN-RESULTS": "maybe"})
        with pytest.raises(ConfigurationError, match="allure-clean-results has to be true/false"):
            load_run_config(ActionInputs(env))

    def test_invalid_generate_flag(self):
        env = make_env(**{"INPUT_ALLURE-GENERATE": "TRUE"})
        with pytest.raises(ConfigurationError, match="allure-generate has to be true/false"):
            load_run_config(ActionInputs(env))

    def test_missing_server_url(self):
        env = make_env()
        del env["INPUT_ALLURE-SERVER-URL"]
        with pytest.raises(ConfigurationError, match="allure-server-url"):
            load_run_config(ActionInputs(env))

    def test_rejects_non_http_url(self):
        env = make_env(**{"INPUT_ALLURE-SERVER-URL": "allure.example.com"})
        with pytest.raises(ConfigurationError, match="http"):
            load_run_config(ActionInputs(env))

    @pytest.mark.parametrize("url", ["http://host:abc/", "http://exa mple.com:abc/", "https://"])
    def test_rejects_malformed_url(self, url):
        env = make_env(**{"INPUT_ALLURE-SERVER-URL": url})
        with pytest.raises(ConfigurationError, match="allure-server-url"):
            load_run_config(ActionInputs(env))

    def test_timeout(self):
        assert load_run_config(ActionInputs(make_env()), timeout=30).timeout == 30.0
        with pytest.raises(ConfigurationError):
            load_run_config(ActionInputs(make_env()), timeout=0)


class TestLoadCIContext:
    def test_from_environment(self):
        ctx = load_ci_context({
            "GITHUB_SERVER_URL": "https://ghe.example.com",
            "GITHUB_REPOSITORY": "acme/shop",
            "GITHUB_RUN_ID": "99",
        })
        assert ctx.repo_owner == "acme"
        assert ctx.repo_name == "shop"
        assert ctx.run_url == "https://ghe.example.com/acme/shop/actions/runs/99"

    def test_default_server(self):
        ctx = load_ci_context({"GITHUB_REPOSITORY": "acme/shop", "GITHUB_RUN_ID": "1"})
        assert ctx.server_url == "https://github.com"

    def test_missing_repository(self):
        with pytest.raises(ConfigurationError, match="GITHUB_REPOSITORY"):
            load_ci_context({"GITHUB_RUN_ID": "1"})

    def test_missing_run_id(self):
        with pytest.raises(ConfigurationError, match="GITHUB_RUN_ID"):
            load_ci_context({"GITHUB_REPOSITORY": "acme/shop"})


def test_load_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# inputs",
                "INPUT_ALLURE-SERVER-URL=https://allure.example.com",
                "INPUT_PROJECT-ID='demo'",
                "export GITHUB_RUN_ID=7",
            ]
        ),
        encoding="utf-8",
    )

    # setenv first so monkeypatch removes the loaded values afterwards
    for key in ("INPUT_ALLURE-SERVER-URL", "INPUT_PROJECT-ID"):
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    monkeypatch.setenv("GITHUB_RUN_ID", "1")

    loaded = load_env_file(env_path)

    assert loaded == ["INPUT_ALLURE-SERVER-URL", "INPUT_PROJECT-ID"]
    assert os.environ["INPUT_ALLURE-SERVER-URL"] == "https://allure.example.com"
    assert os.environ["INPUT_PROJECT-ID"] == "demo"
    assert os.environ["GITHUB_RUN_ID"] == "1"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(ConfigurationError, match="env file not found"):
        load_env_file(tmp_path / "nope.env")


def test_load_env_file_rejects_directory(tmp_path):
    with pytest.raises(ConfigurationError, match="env file not a file"):
        load_env_file(tmp_path)
