"""
Machine translation of missing strings.

This module provides the ``TranslationService`` interface and an HTTP
implementation for OpenAI, Anthropic Claude, Google Cloud Translation and
Azure Translator. Provider failures never stop a run: the failure is
logged and the untranslated text is returned instead.
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, cast

import httpx

from ..config.schema import AIConfig, ValidationRulesConfig
from ..utils.exceptions import TranslationServiceError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
CLAUDE_URL = "https://api.anthropic.com/v1/messages"
GOOGLE_URL = "https://translation.googleapis.com/language/translate/v2"

PLACEHOLDER_PATTERN = re.compile(r"\{[^}]+\}|:[a-zA-Z_][a-zA-Z0-9_]*")

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "nl": "Dutch",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "pl": "Polish",
    "tr": "Turkish",
    "he": "Hebrew",
    "hi": "Hindi",
    "th": "Thai",
    "vi": "Vietnamese",
}

# Provider specific language codes; anything not listed is sent unchanged
LANGUAGE_CODE_MAPPINGS: dict[str, dict[str, str]] = {
    "google": {"zh": "zh-CN"},
    "azure": {"zh": "zh-Hans"},
}


def map_language_code(language: str, provider: str) -> str:
    """Translate a locale code into the code a provider expects."""
    return LANGUAGE_CODE_MAPPINGS.get(provider, {}).get(language, language)


def extract_placeholders(text: str) -> set[str]:
    """Return the ``{name}`` and ``:name`` placeholders used in a string."""
    return set(PLACEHOLDER_PATTERN.findall(text))


class TranslationService(ABC):
    """Interface of a machine translation backend."""

    @abstractmethod
    def translate_batch(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        """Translate ``texts`` in order; failures return the original texts."""

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate a single string."""
        result = self.translate_batch([text], source_language, target_language)
        return result[0] if result else text

    def get_supported_languages(self) -> dict[str, str]:
        """Language codes offered to the user, mapped to their names."""
        return dict(SUPPORTED_LANGUAGES)

    @abstractmethod
    def validate_translation(
        self, original: str, translated: str, target_language: str
    ) -> bool:
        """Whether ``translated`` is an acceptable translation of ``original``."""


class AITranslationService(TranslationService):
    """Translation through the HTTP APIs of the configured provider."""

    def __init__(
        self,
        ai_config: AIConfig,
        validation: ValidationRulesConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            ai_config: Provider selection, credentials and context
            validation: Rules used by ``validate_translation``
            client: HTTP client to use; one is created when omitted
        """
        self.ai_config: AIConfig = ai_config
        self.provider: str = ai_config.provider
        self.validation: ValidationRulesConfig = validation or ValidationRulesConfig()
        self._owns_client: bool = client is None
        self._client: httpx.Client = client or httpx.Client(timeout=ai_config.timeout)

    def __enter__(self) -> AITranslationService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            self._client.close()

    def translate_batch(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        """
        Translate a batch of strings with the configured provider.

        Args:
            texts: Strings to translate
            source_language: Locale of ``texts``
            target_language: Locale to translate into

        Returns:
            Translations in the same order, or ``texts`` unchanged on failure
        """
        if not texts:
            return []

        try:
            return self.request_translations(texts, source_language, target_language)
        except (httpx.HTTPError, TranslationServiceError, ValueError, LookupError, TypeError) as e:
            logger.error(
                f"Translation failed with provider '{self.provider}' "
                f"({source_language} -> {target_language}, {len(texts)} texts): {e}"
            )
            return list(texts)

    def request_translations(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        """
        Call the provider without any fallback.

        Raises:
            TranslationServiceError: If the provider is misconfigured or answers badly
            httpx.HTTPError: On transport errors and error status codes
        """
        match self.provider:
            case "openai":
                translations = self._translate_with_openai(texts, source_language, target_language)
            case "claude":
                translations = self._translate_with_claude(texts, source_language, target_language)
            case "google":
                translations = self._translate_with_google(texts, source_language, target_language)
            case "azure":
                translations = self._translate_with_azure(texts, source_language, target_language)
            case _:
                raise TranslationServiceError(f"Unsupported AI provider: {self.provider}")

        if len(translations) != len(texts):
            raise TranslationServiceError(
                f"Provider '{self.provider}' returned {len(translations)} translations for {len(texts)} texts"
            )
        return translations

    def validate_translation(
        self, original: str, translated: str, target_language: str
    ) -> bool:
        """
        Check a translation against the configured rules.

        Empty or unchanged output, output that is too long and (when enabled)
        output that drops or invents placeholders are rejected.
        """
        if not translated or translated == original:
            return False
        if len(translated) > self.validation.max_value_length:
            return False
        if self.validation.validate_placeholders:
            return extract_placeholders(original) == extract_placeholders(translated)
        return True

    def build_translation_context(self) -> str:
        """Instructions appended to language-model prompts."""
        context = self.ai_config.context
        parts: list[str] = []
        if context.domain:
            parts.append(f"Domain: {context.domain}")
        if context.tone:
            parts.append(f"Tone: {context.tone}")
        if context.additional_context:
            parts.append(context.additional_context)
        parts.append("Preserve any placeholders like :name, {count}, etc")
        parts.append("Maintain the same formatting and structure")
        return ". ".join(parts) + "."

    def _build_prompt(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> str:
        texts_json = json.dumps(list(texts), ensure_ascii=False)
        return (
            f"Translate the following JSON array of strings from {source_language} "
            f"to {target_language}. {self.build_translation_context()} "
            f"Return only a valid JSON array with the translations in the same order:\n\n{texts_json}"
        )

    @staticmethod
    def _parse_json_array(content: str, provider: str) -> list[str]:
        """Decode the JSON array a language model answered with."""
        try:
            decoded: object = json.loads(content)  # pyright: ignore[reportAny]
        except json.JSONDecodeError as e:
            raise TranslationServiceError(f"Invalid translation response from {provider}: {e}") from e
        if not isinstance(decoded, list):
            raise TranslationServiceError(f"Invalid translation response from {provider}")
        return [str(item) for item in cast(list[object], decoded)]

    def _post(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json_body: object | None = None,
        data: Mapping[str, object] | None = None,
    ) -> object:
        response = self._client.post(
            url,
            headers=dict(headers or {}),
            params=dict(params or {}),
            json=json_body,
            data=data,  # pyright: ignore[reportArgumentType]
        )
        _ = response.raise_for_status()
        return cast(object, response.json())

    def _translate_with_openai(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        config = self.ai_config.openai
        if not config.api_key:
            raise TranslationServiceError("OpenAI API key not configured")

        result = self._post(
            OPENAI_URL,
            headers={"Authorization": f"Bearer {config.api_key}"},
            json_body={
                "model": config.model,
                "messages": [
                    {
                        "role": "system",
                        "content": "You are a professional translator. Always return valid JSON arrays.",
                    },
                    {
                        "role": "user",
                        "content": self._build_prompt(texts, source_language, target_language),
                    },
                ],
                "max_tokens": config.max_tokens,
                "temperature": config.temperature,
            },
        )
        content = cast(dict[str, list[dict[str, dict[str, str]]]], result)["choices"][0]["message"]["content"]
        return self._parse_json_array(content, "OpenAI")

    def _translate_with_claude(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        config = self.ai_config.claude
        if not config.api_key:
            raise TranslationServiceError("Claude API key not configured")

        result = self._post(
            CLAUDE_URL,
            headers={"x-api-key": config.api_key, "anthropic-version": "2023-06-01"},
            json_body={
                "model": config.model,
                "max_tokens": config.max_tokens,
                "messages": [
                    {
                        "role": "user",
                        "content": self._build_prompt(texts, source_language, target_language),
                    }
                ],
            },
        )
        content = cast(dict[str, list[dict[str, str]]], result)["content"][0]["text"]
        return self._parse_json_array(content, "Claude")

    def _translate_with_google(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        config = self.ai_config.google
        if not config.api_key:
            raise TranslationServiceError("Google Translate API key not configured")

        result = self._post(
            GOOGLE_URL,
            params={"key": config.api_key},
            json_body={
                "q": list(texts),
                "source": map_language_code(source_language, "google"),
                "target": map_language_code(target_language, "google"),
                "format": "text",
            },
        )
        translations = cast(dict[str, dict[str, list[dict[str, str]]]], result)["data"]["translations"]
        return [item["translatedText"] for item in translations]

    def _translate_with_azure(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        config = self.ai_config.azure
        if not config.api_key or not config.region:
            raise TranslationServiceError("Azure Translator API key and region not configured")

        endpoint = (config.endpoint or f"https://{config.region}.api.cognitive.microsoft.com").rstrip("/")
        result = self._post(
            f"{endpoint}/translator/text/v3.0/translate",
            headers={
                "Ocp-Apim-Subscription-Key": config.api_key,
                "Ocp-Apim-Subscription-Region": config.region,
            },
            params={
                "api-version": "3.0",
                "from": map_language_code(source_language, "azure"),
                "to": map_language_code(target_language, "azure"),
            },
            json_body=[{"text": text} for text in texts],
        )
        if not isinstance(result, list):
            raise TranslationServiceError("Invalid response from Azure Translator API")
        items = cast(list[dict[str, list[dict[str, str]]]], result)
        return [item["translations"][0]["text"] for item in items]


def translate_missing(
    service: TranslationService,
    source_texts: Mapping[str, str],
    source_language: str,
    target_language: str,
    batch_size: int = 50,
    rate_limit: int = 60,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, str]:
    """
    Translate missing keys in batches.

    Args:
        service: Translation backend
        source_texts: Key -> text in the source language
        source_language: Locale of the source texts
        target_language: Locale to translate into
        batch_size: Number of texts per provider request
        rate_limit: Maximum requests per minute
        sleep: Function used to pause between batches

    Returns:
        Key -> translated text for every text that came back translated
    """
    keys = list(source_texts)
    batches = [keys[i : i + batch_size] for i in range(0, len(keys), batch_size)]
    pause = 60.0 / rate_limit
    translations: dict[str, str] = {}

    for batch_index, batch in enumerate(batches):
        logger.info(f"Processing batch {batch_index + 1} of {len(batches)}")
        texts = [source_texts[key] for key in batch]
        translated = service.translate_batch(texts, source_language, target_language)

        if len(translated) != len(batch):
            logger.error(f"Skipping batch {batch_index + 1}: got {len(translated)} results for {len(batch)} texts")
        else:
            for key, original, text in zip(batch, texts, translated):
                if service.validate_translation(original, text, target_language):
                    translations[key] = text
                else:
                    logger.debug(f"Keeping untranslated text for '{key}'")

        if batch_index < len(batches) - 1:
            logger.debug(f"Waiting {pause:.1f}s to respect rate limits")
            sleep(pause)

    logger.info(f"Translated {len(translations)} of {len(keys)} keys for {target_language}")
    return translations
