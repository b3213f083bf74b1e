"""
Unit tests for configuration loading.
"""

import logging

import pytest

from ai_code_reviewer.config import (
    AIConfig,
    AppConfig,
    ConfigurationError,
    GitHubConfig,
    LoggingConfig,
    load_config,
    setup_logging,
)


class TestFromEnv:
    """Unit tests for AppConfig.from_env."""

    def test_action_inputs(self):
        config = AppConfig.from_env({
            "INPUT_GITHUB_TOKEN": "ghp_x",
            "INPUT_API_KEY": "sk",
            "INPUT_AI_PROVIDER": " OpenAI ",
            "INPUT_MODEL": "gpt-4o",
            "INPUT_EXCLUDE": "dist/**, *.md ,,",
            "INPUT_AVALIAR_TEST_PR": "TRUE",
            "INPUT_WEBHOOK_URL": "https://hooks.example.com/x",
        })

        assert config.github.token == "ghp_x"
        assert config.ai.api_key == "sk"
        assert config.ai.provider == "openai"
        assert config.ai.model == "gpt-4o"
        assert config.review.exclude_patterns == ("dist/**", "*.md")
        assert config.review.evaluate_tests_only is True
        assert config.webhook.url == "https://hooks.example.com/x"

    def test_defaults(self):
        config = AppConfig.from_env({})

        assert config.ai.provider == "gemini"
        assert config.ai.model == "gemini-pro"
        assert config.ai.temperature == 0.2
        assert config.ai.max_tokens == 700
        assert config.review.evaluate_tests_only is False
        assert config.review.exclude_patterns == ()
        assert config.webhook.url is None

    def test_plain_environment_fallbacks(self):
        config = AppConfig.from_env({
            "GITHUB_TOKEN": "ghp_env",
            "EVALUATE_TESTS_ONLY": "true",
            "LOG_LEVEL": "DEBUG",
        })

        assert config.github.token == "ghp_env"
        assert config.review.evaluate_tests_only is True
        assert config.logging.level == "DEBUG"

    @pytest.mark.parametrize("value", ["false", "yes", "1", ""])
    def test_only_true_enables_flag(self, value):
        config = AppConfig.from_env({"INPUT_AVALIAR_TEST_PR": value})
        assert config.review.evaluate_tests_only is False


class TestValidate:
    """Unit tests for AppConfig.validate."""

    def test_valid(self):
        AppConfig(github=GitHubConfig(token="t")).validate()

    def test_missing_token(self):
        with pytest.raises(ConfigurationError, match="GitHub token"):
            AppConfig().validate()

    def test_collects_all_errors(self):
        config = AppConfig(
            ai=AIConfig(provider="bard", temperature=3.0),
            logging=LoggingConfig(level="LOUD"),
        )
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "GitHub token" in message
        assert "bard" in message
        assert "Temperature" in message
        assert "LOUD" in message

    def test_load_config_validates(self):
        with pytest.raises(ConfigurationError):
            load_config(environ={})
        assert load_config(environ={"GITHUB_TOKEN": "t"}).github.token == "t"


class TestFromYaml:
    """Unit tests for AppConfig.from_yaml."""

    def test_sections(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "ai:\n"
            "  provider: openai\n"
            "  model: gpt-4o\n"
            "  api_key: sk\n"
            "github:\n"
            "  token: ghp\n"
            "review:\n"
            "  evaluate_tests_only: true\n"
            "  exclude_patterns:\n"
            "    - dist/**\n"
            "webhook:\n"
            "  url: https://hooks.example.com\n",
            encoding="utf-8",
        )

        config = load_config(str(config_file))

        assert config.ai.provider == "openai"
        assert config.github.token == "ghp"
        assert config.review.evaluate_tests_only is True
        assert config.review.exclude_patterns == ("dist/**",)
        assert config.webhook.url == "https://hooks.example.com"

    def test_comma_separated_patterns(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("review:\n  exclude_patterns: 'a/**, b/**'\n", encoding="utf-8")

        assert AppConfig.from_yaml(str(config_file)).review.exclude_patterns == ("a/**", "b/**")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.from_yaml(str(tmp_path / "nope.yaml"))


class TestToDict:
    """Unit tests for AppConfig.to_dict."""

    def test_secrets_are_omitted(self):
        config = AppConfig(
            ai=AIConfig(api_key="sk-secret"),
            github=GitHubConfig(token="ghp-secret"),
        )
        data = config.to_dict()

        assert "sk-secret" not in repr(data)
        assert "ghp-secret" not in repr(data)
        assert data["ai"]["has_api_key"] is True


class TestSetupLogging:
    """Unit tests for setup_logging."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "review.log"
        root = logging.getLogger()
        before = list(root.handlers)

        setup_logging(LoggingConfig(file_path=str(log_file)))
        try:
            added = [h for h in root.handlers if h not in before]
            assert any(getattr(h, "baseFilename", None) == str(log_file) for h in added)
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
