"""Tests for the machine translation service."""

# pyright: reportPrivateUsage=false, reportAny=false

import json
from collections.abc import Callable, Sequence

import httpx
import pytest

from src.localizator.config.schema import AIConfig, ValidationRulesConfig
from src.localizator.services.translation_service import (
    AITranslationService,
    TranslationService,
    extract_placeholders,
    map_language_code,
    translate_missing,
)

Handler = Callable[[httpx.Request], httpx.Response]


def make_service(
    handler: Handler,
    ai: dict[str, object],
    validation: ValidationRulesConfig | None = None,
) -> AITranslationService:
    """Build a service whose HTTP traffic goes to ``handler``."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return AITranslationService(AIConfig.model_validate(ai), validation, client=client)


class FakeService(TranslationService):
    """Uppercases everything; records the batches it received."""

    def __init__(self, drop_last: bool = False) -> None:
        self.batches: list[list[str]] = []
        self.drop_last: bool = drop_last

    def translate_batch(
        self, texts: Sequence[str], source_language: str, target_language: str
    ) -> list[str]:
        self.batches.append(list(texts))
        result = [text.upper() for text in texts]
        return result[:-1] if self.drop_last else result

    def validate_translation(
        self, original: str, translated: str, target_language: str
    ) -> bool:
        return bool(translated) and translated != original


class TestHelpers:
    """Test cases for module level helpers."""

    def test_map_language_code(self) -> None:
        """Test provider specific language codes."""
        assert map_language_code("zh", "google") == "zh-CN"
        assert map_language_code("zh", "azure") == "zh-Hans"
        assert map_language_code("zh", "openai") == "zh"
        assert map_language_code("de", "google") == "de"

    def test_extract_placeholders(self) -> None:
        """Test that both placeholder styles are found."""
        assert extract_placeholders("Hello :name, you have {count} messages") == {":name", "{count}"}
        assert extract_placeholders("No placeholders") == set()


class TestProviders:
    """Test cases for the request and response format of each provider."""

    def test_openai(self) -> None:
        """Test the OpenAI chat completion request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            content = json.dumps(["Hallo", "Welt"])
            return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

        service = make_service(handler, {"provider": "openai", "openai": {"api_key": "sk-test"}})
        assert service.translate_batch(["Hello", "World"], "en", "de") == ["Hallo", "Welt"]

        request = seen[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-3.5-turbo"
        assert '["Hello", "World"]' in body["messages"][1]["content"]

    def test_claude(self) -> None:
        """Test the Anthropic messages request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"content": [{"text": '["Bonjour"]'}]})

        service = make_service(handler, {"provider": "claude", "claude": {"api_key": "ak"}})
        assert service.translate_batch(["Hello"], "en", "fr") == ["Bonjour"]
        assert seen[0].headers["x-api-key"] == "ak"
        assert seen[0].headers["anthropic-version"] == "2023-06-01"

    def test_google(self) -> None:
        """Test the Google Cloud Translation request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"data": {"translations": [{"translatedText": "你好"}]}}
            )

        service = make_service(handler, {"provider": "google", "google": {"api_key": "gk"}})
        assert service.translate_batch(["Hello"], "en", "zh") == ["你好"]
        assert seen[0].url.params["key"] == "gk"
        body = json.loads(seen[0].content)
        assert body == {"q": ["Hello"], "source": "en", "target": "zh-CN", "format": "text"}

    def test_azure(self) -> None:
        """Test the Azure Translator request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"translations": [{"text": "Hola"}]}])

        service = make_service(
            handler, {"provider": "azure", "azure": {"api_key": "az", "region": "westeurope"}}
        )
        assert service.translate_batch(["Hello"], "en", "es") == ["Hola"]
        request = seen[0]
        assert request.url.host == "westeurope.api.cognitive.microsoft.com"
        assert request.url.path == "/translator/text/v3.0/translate"
        assert request.url.params["to"] == "es"
        assert request.headers["Ocp-Apim-Subscription-Key"] == "az"
        assert json.loads(request.content) == [{"text": "Hello"}]


class TestFailures:
    """Test cases for provider failures falling back to the original texts."""

    def test_missing_api_key(self) -> None:
        """Test that an unconfigured provider returns the texts unchanged."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        service = make_service(handler, {"provider": "openai"})
        assert service.translate_batch(["Hello"], "en", "de") == ["Hello"]

    def test_http_error_status(self) -> None:
        """Test that an error status returns the texts unchanged."""
        service = make_service(
            lambda request: httpx.Response(500, json={"error": "boom"}),
            {"provider": "claude", "claude": {"api_key": "ak"}},
        )
        assert service.translate_batch(["A", "B"], "en", "de") == ["A", "B"]

    def test_transport_error(self) -> None:
        """Test that a connection failure returns the texts unchanged."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        service = make_service(handler, {"provider": "google", "google": {"api_key": "gk"}})
        assert service.translate_batch(["Hello"], "en", "de") == ["Hello"]

    @pytest.mark.parametrize("content", ["not json", '{"a": 1}', '["only one"]'])
    def test_bad_model_answer(self, content: str) -> None:
        """Test that unusable or wrongly sized answers return the texts unchanged."""
        service = make_service(
            lambda request: httpx.Response(
                200, json={"choices": [{"message": {"content": content}}]}
            ),
            {"provider": "openai", "openai": {"api_key": "k"}},
        )
        assert service.translate_batch(["A", "B"], "en", "de") == ["A", "B"]

    @pytest.mark.parametrize(
        ("ai", "body"),
        [
            ({"provider": "openai", "openai": {"api_key": "k"}}, {"choices": []}),
            ({"provider": "claude", "claude": {"api_key": "k"}}, {"content": []}),
            (
                {"provider": "azure", "azure": {"api_key": "k", "region": "eu"}},
                [{"translations": []}],
            ),
        ],
    )
    def test_empty_result_lists(self, ai: dict[str, object], body: object) -> None:
        """Test that answers with empty result lists return the texts unchanged."""
        service = make_service(lambda request: httpx.Response(200, json=body), ai)
        assert service.translate_batch(["Hello"], "en", "de") == ["Hello"]
        assert translate_missing(service, {"a.b": "Hello"}, "en", "de", sleep=lambda _: None) == {}

    def test_empty_batch_makes_no_request(self) -> None:
        """Test that nothing is sent for an empty batch."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        service = make_service(handler, {"provider": "openai", "openai": {"api_key": "k"}})
        assert service.translate_batch([], "en", "de") == []

    def test_translate_single(self) -> None:
        """Test the single string convenience method."""
        service = make_service(
            lambda request: httpx.Response(200, json=[{"translations": [{"text": "Hallo"}]}]),
            {"provider": "azure", "azure": {"api_key": "az", "region": "eu"}},
        )
        assert service.translate("Hello", "en", "de") == "Hallo"


class TestValidateTranslation:
    """Test cases for translation validation."""

    @pytest.fixture
    def service(self) -> AITranslationService:
        """Service that never sends anything."""
        return make_service(
            lambda request: httpx.Response(500),
            {"provider": "openai"},
            ValidationRulesConfig(max_value_length=20),
        )

    def test_accepts_good_translation(self, service: AITranslationService) -> None:
        """Test a translation keeping its placeholders."""
        assert service.validate_translation("Hello :name", "Hallo :name", "de")

    @pytest.mark.parametrize(
        "translated",
        ["", "Hello :name", "Hallo", "Hallo :name und {count}", "Hallo :name" + "!" * 20],
    )
    def test_rejects_bad_translation(self, service: AITranslationService, translated: str) -> None:
        """Test empty, unchanged, placeholder-changing and too long output."""
        assert not service.validate_translation("Hello :name", translated, "de")

    def test_placeholder_check_can_be_disabled(self) -> None:
        """Test that placeholders are not compared when the check is off."""
        service = make_service(
            lambda request: httpx.Response(500),
            {"provider": "openai"},
            ValidationRulesConfig(validate_placeholders=False),
        )
        assert service.validate_translation("Hello :name", "Hallo", "de")

    def test_context_in_prompt(self) -> None:
        """Test that domain, tone and extra context are part of the instructions."""
        service = make_service(
            lambda request: httpx.Response(500),
            {
                "provider": "openai",
                "context": {"domain": "e-commerce", "tone": "formal", "additional_context": "Use Sie"},
            },
        )
        context = service.build_translation_context()
        assert "Domain: e-commerce" in context
        assert "Tone: formal" in context
        assert "Use Sie" in context
        assert "placeholders" in context


class TestTranslateMissing:
    """Test cases for batched translation of missing keys."""

    def test_batches_and_rate_limit_pauses(self) -> None:
        """Test batch sizes and the pause between batches."""
        service = FakeService()
        pauses: list[float] = []
        texts = {f"k.{i}": f"text {i}" for i in range(5)}

        result = translate_missing(service, texts, "en", "de", batch_size=2, rate_limit=30, sleep=pauses.append)

        assert [len(batch) for batch in service.batches] == [2, 2, 1]
        assert pauses == [2.0, 2.0]
        assert result == {key: text.upper() for key, text in texts.items()}

    def test_invalid_translations_are_left_out(self) -> None:
        """Test that texts coming back unchanged are not returned."""
        service = FakeService()
        result = translate_missing(service, {"a.x": "ok", "a.y": "123"}, "en", "de", sleep=lambda _: None)
        assert result == {"a.x": "OK"}

    def test_mismatched_batch_is_skipped(self) -> None:
        """Test that a batch with the wrong number of results is dropped."""
        service = FakeService(drop_last=True)
        result = translate_missing(service, {"a.x": "one", "a.y": "two"}, "en", "de", sleep=lambda _: None)
        assert result == {}

    def test_no_texts(self) -> None:
        """Test that nothing happens for an empty mapping."""
        service = FakeService()
        assert translate_missing(service, {}, "en", "de", sleep=lambda _: None) == {}
        assert service.batches == []
