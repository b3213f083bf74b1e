"""
AI Review Providers

Interchangeable AI backends exposing the same contract: a prompt string
in, structured reviews (or free text) out. Providers never raise for a
single failed call; they log and return None.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import AIConfig, ConfigurationError
from ..models.review import AIReviewItem
from .parsing import ParseError, extract_structured_reviews


logger = logging.getLogger(__name__)

REVIEWS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "reviews": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "lineNumber": {"type": "STRING"},
                    "reviewComment": {"type": "STRING"},
                },
                "required": ["lineNumber", "reviewComment"],
            },
        },
    },
    "required": ["reviews"],
}

JSON_ONLY_INSTRUCTION = """
IMPORTANT: You must respond only with valid JSON matching this exact schema:
{
  "reviews": [
    {
      "lineNumber": "string",
      "reviewComment": "string"
    }
  ]
}"""


class AIProviderError(Exception):
    """AI backend returned an unusable response"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AIProvider(ABC):
    """
    Base class for AI review backends.

    Subclasses implement ``_complete`` for their HTTP API; the public
    methods wrap it with structured-output parsing and failure handling.
    """

    name = "base"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 700,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key of the backend
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Maximum tokens of a completion
            timeout: Optional request timeout in seconds
            session: Optional pre-configured requests session
        """
        if not api_key:
            raise ConfigurationError(f"API key is required for {self.name}")

        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or self._create_session()

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _post(self, url: str, payload: Dict, headers: Optional[Dict[str, str]] = None,
              params: Optional[Dict[str, str]] = None) -> Dict:
        response = self.session.post(url, json=payload, headers=headers, params=params,
                                     timeout=self.timeout)
        if not response.ok:
            raise AIProviderError(
                f"{self.name} API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise AIProviderError(f"{self.name} returned a non-JSON body") from e

    @abstractmethod
    def _complete(self, prompt: str, json_mode: bool) -> str:
        """Send the prompt and return the raw completion text."""

    def get_response(self, prompt: str) -> Optional[List[AIReviewItem]]:
        """
        Get structured reviews for a prompt.

        Args:
            prompt: Review prompt

        Returns:
            List of review items (empty when no issues), or None on failure
        """
        try:
            text = self._complete(prompt, json_mode=True)
            return extract_structured_reviews(text)
        except ParseError as e:
            logger.warning(f"{self.name} response could not be parsed: {e}")
        except (requests.RequestException, AIProviderError) as e:
            logger.error(f"{self.name} request failed: {e}")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"{self.name} response has an unexpected shape: {e}")
        return None

    def process_reason(self, prompt: str, json_mode: bool = False) -> Optional[str]:
        """
        Get a free-text answer for a prompt.

        Returns:
            Stripped text, or None on failure or empty output
        """
        try:
            text = self._complete(prompt, json_mode=json_mode)
        except (requests.RequestException, AIProviderError) as e:
            logger.error(f"{self.name} request failed: {e}")
            return None
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"{self.name} response has an unexpected shape: {e}")
            return None

        text = (text or "").strip()
        return text or None


class OpenAIProvider(AIProvider):
    """OpenAI chat completions backend."""

    name = "openai"
    api_url = "https://api.openai.com/v1/chat/completions"
    json_mode_models = (
        "gpt-4-1106-preview",
        "gpt-4-turbo",
        "gpt-4o",
        "gpt-3.5-turbo-1106",
    )

    def supports_json_mode(self) -> bool:
        return self.model.startswith(self.json_mode_models)

    def _complete(self, prompt: str, json_mode: bool) -> str:
        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0,
            "messages": [{"role": "system", "content": prompt}],
        }
        if json_mode and self.supports_json_mode():
            payload["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        data = self._post(self.api_url, payload, headers=headers)

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise AIProviderError("No choices in OpenAI response")

        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if content is not None and not isinstance(content, str):
            raise AIProviderError("OpenAI message content is not text")
        return (content or "").strip()


class GeminiProvider(AIProvider):
    """Google Gemini generateContent backend."""

    name = "gemini"
    api_base = "https://generativelanguage.googleapis.com/v1beta/models"

    def _complete(self, prompt: str, json_mode: bool) -> str:
        generation_config = {
            "temperature": self.temperature,
            "topP": 1,
            "topK": 1,
            "maxOutputTokens": self.max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = REVIEWS_SCHEMA
            prompt = f"{prompt}\n{JSON_ONLY_INSTRUCTION}"

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        url = f"{self.api_base}/{self.model}:generateContent"
        data = self._post(url, payload, params={"key": self.api_key})

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise AIProviderError("No candidates in Gemini response")

        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise AIProviderError("Gemini candidate has no content parts")

        texts = [part.get("text") for part in parts if isinstance(part, dict)]
        return "".join(text for text in texts if isinstance(text, str)).strip()


PROVIDERS = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def create_provider(config: AIConfig, session: Optional[requests.Session] = None) -> AIProvider:
    """
    Create the AI provider selected by configuration.

    Raises:
        ConfigurationError: If the provider is unknown or the API key is missing
    """
    provider_cls = PROVIDERS.get(config.provider)
    if provider_cls is None:
        raise ConfigurationError(f"Unsupported AI provider: {config.provider}")

    if not config.api_key:
        raise ConfigurationError("API_KEY is required")

    logger.info(f"Using {config.provider} provider with model {config.model}")
    return provider_cls(
        api_key=config.api_key,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout_seconds,
        session=session,
    )
