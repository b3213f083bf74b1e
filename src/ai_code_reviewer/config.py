"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Mapping, Tuple
from pathlib import Path


SUPPORTED_PROVIDERS = ("openai", "gemini")


class ConfigurationError(ValueError):
    """Missing or invalid configuration"""


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() == "true"


def _parse_patterns(value: Optional[str]) -> Tuple[str, ...]:
    """쉼표로 구분된 glob 목록을 튜플로 변환"""
    if not value:
        return ()
    return tuple(p.strip() for p in value.split(",") if p.strip())


def _get_input(environ: Mapping[str, str], name: str, *fallbacks: str) -> Optional[str]:
    """
    Read a GitHub Action input, falling back to plain environment variables.

    Action inputs are exposed as INPUT_<NAME> with spaces replaced by
    underscores and the name upper-cased.
    """
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = environ.get(key)
    if value:
        return value
    for fallback in fallbacks:
        value = environ.get(fallback)
        if value:
            return value
    return None


@dataclass(frozen=True)
class AIConfig:
    """AI 리뷰 백엔드 설정"""
    provider: str = "gemini"
    api_key: Optional[str] = None
    model: str = "gemini-pro"
    temperature: float = 0.2
    max_tokens: int = 700
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class ReviewConfig:
    """리뷰 실행 설정"""
    evaluate_tests_only: bool = False
    exclude_patterns: Tuple[str, ...] = ()
    review_language: str = "português"


@dataclass(frozen=True)
class WebhookConfig:
    """테스트 누락 알림 webhook 설정"""
    url: Optional[str] = None
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass(frozen=True)
class AppConfig:
    """전체 애플리케이션 설정"""
    ai: AIConfig = field(default_factory=AIConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Action 입력값과 환경 변수에서 설정 로드"""
        env = os.environ if environ is None else environ
        return cls(
            ai=AIConfig(
                provider=(_get_input(env, "AI_PROVIDER", "AI_PROVIDER") or "gemini").strip().lower(),
                api_key=_get_input(env, "API_KEY", "API_KEY"),
                model=_get_input(env, "MODEL", "MODEL") or "gemini-pro",
            ),
            github=GitHubConfig(
                token=_get_input(env, "GITHUB_TOKEN", "GITHUB_TOKEN"),
                api_base_url=env.get("GITHUB_API_URL", "https://api.github.com"),
            ),
            review=ReviewConfig(
                evaluate_tests_only=_parse_bool(
                    _get_input(env, "AVALIAR_TEST_PR", "EVALUATE_TESTS_ONLY")
                ),
                exclude_patterns=_parse_patterns(_get_input(env, "exclude", "EXCLUDE")),
            ),
            webhook=WebhookConfig(
                url=_get_input(env, "WEBHOOK_URL", "WEBHOOK_URL"),
            ),
            logging=LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO"),
                format=env.get("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=env.get("LOG_FILE"),
            ),
            debug=_parse_bool(env.get("RUNNER_DEBUG") or env.get("DEBUG")),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        review_data = dict(config_data.get('review', {}))
        patterns = review_data.get('exclude_patterns', ())
        if isinstance(patterns, str):
            review_data['exclude_patterns'] = _parse_patterns(patterns)
        else:
            review_data['exclude_patterns'] = tuple(patterns)

        return cls(
            ai=AIConfig(**config_data.get('ai', {})),
            github=GitHubConfig(**config_data.get('github', {})),
            review=ReviewConfig(**review_data),
            webhook=WebhookConfig(**config_data.get('webhook', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # GitHub 토큰 필수 확인
        if not self.github.token:
            errors.append("GitHub token is required")

        if self.ai.provider not in SUPPORTED_PROVIDERS:
            errors.append(f"Unsupported AI provider: {self.ai.provider}")

        if not 0.0 <= self.ai.temperature <= 2.0:
            errors.append("Temperature must be between 0.0 and 2.0")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'ai': {
                'provider': self.ai.provider,
                'model': self.ai.model,
                'temperature': self.ai.temperature,
                'max_tokens': self.ai.max_tokens,
                'has_api_key': bool(self.ai.api_key),
            },
            'github': {
                'api_base_url': self.github.api_base_url,
                'timeout_seconds': self.github.timeout_seconds,
                # 보안상 토큰은 제외
            },
            'review': {
                'evaluate_tests_only': self.review.evaluate_tests_only,
                'exclude_patterns': list(self.review.exclude_patterns),
                'review_language': self.review.review_language,
            },
            'webhook': {
                'enabled': bool(self.webhook.url),
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


def load_config(config_path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build and validate the run configuration.

    Args:
        config_path: Optional YAML file; environment/action inputs otherwise
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated AppConfig

    Raises:
        ConfigurationError: If validation fails
    """
    if config_path:
        config = AppConfig.from_yaml(config_path)
    else:
        config = AppConfig.from_env(environ)
    config.validate()
    return config


def setup_logging(logging_config: LoggingConfig, debug: bool = False) -> None:
    """로깅 설정"""
    level = logging.DEBUG if debug else getattr(logging, logging_config.level.upper())
    logging.basicConfig(
        level=level,
        format=logging_config.format,
    )

    # 파일 로깅이 설정된 경우 로테이션 설정
    if logging_config.file_path:
        from logging.handlers import RotatingFileHandler

        handler = RotatingFileHandler(
            logging_config.file_path,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(logging_config.format))
        logging.getLogger().addHandler(handler)
