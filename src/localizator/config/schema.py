"""Configuration schema for Localizator using nested Pydantic models."""

import re
from pathlib import Path
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.exceptions import ConfigurationError

StoreFormat = Literal["nested-files", "single-document"]

NESTED_FILES: StoreFormat = "nested-files"
SINGLE_DOCUMENT: StoreFormat = "single-document"

# Selector spellings accepted in config files and on the command line
FORMAT_ALIASES: dict[str, StoreFormat] = {
    "default": NESTED_FILES,
    "php": NESTED_FILES,
    "nested-files": NESTED_FILES,
    "json": SINGLE_DOCUMENT,
    "single-document": SINGLE_DOCUMENT,
}

LOCALE_PATTERN = re.compile(r"^[A-Za-z]{2,3}([_-][A-Za-z0-9]+)*$")

DEFAULT_FUNCTIONS = [
    "__",
    "trans",
    "trans_choice",
    "@lang",
    "@choice",
    "Lang::get",
    "Lang::choice",
    "Lang::trans",
    "Lang::transChoice",
    "$t",
    "$tc",
]


def resolve_format(selector: str) -> StoreFormat:
    """
    Map a persisted-format selector to its canonical name.

    Args:
        selector: Selector as written by the user (e.g. "php", "json")

    Returns:
        Canonical format name

    Raises:
        ConfigurationError: If the selector is not recognised
    """
    try:
        return FORMAT_ALIASES[selector.strip().lower()]
    except KeyError:
        supported = ", ".join(sorted(FORMAT_ALIASES))
        raise ConfigurationError(
            f"Invalid format '{selector}'. Supported formats: {supported}",
            context={"selector": selector},
        ) from None


def validate_locale(locale: str) -> str:
    """
    Check that a locale identifier is safe to use as a file name.

    Raises:
        ConfigurationError: If the locale does not look like a language tag
    """
    if not LOCALE_PATTERN.match(locale):
        raise ConfigurationError(
            f"Invalid locale identifier: {locale!r}", context={"locale": locale}
        )
    return locale


class OutputConfig(BaseModel):
    """Output formatting configuration."""

    indent: Annotated[int, Field(ge=0, le=16)] = Field(
        default=4,
        description="Number of spaces used for indentation in generated files",
    )
    comments: bool = Field(
        default=True,
        description="Whether to write a header comment in generated files",
    )
    backup: bool = Field(
        default=False,
        description="Whether to copy existing files to a timestamped backup before writing",
    )


class ValidationRulesConfig(BaseModel):
    """Rules for validating translation keys and values."""

    key_pattern: str = Field(
        default=r"^[a-z0-9_.\-]+$",
        description="Regular expression that well-formed keys should match",
    )
    max_key_length: Annotated[int, Field(gt=0)] = Field(
        default=100,
        description="Maximum allowed length for translation keys",
    )
    max_value_length: Annotated[int, Field(gt=0)] = Field(
        default=1000,
        description="Maximum allowed length for translation values",
    )
    validate_placeholders: bool = Field(
        default=True,
        description="Whether translated values must keep the source placeholders",
    )

    @field_validator("key_pattern")
    @classmethod
    def validate_key_pattern(cls, v: str) -> str:
        """Make sure the key pattern compiles."""
        try:
            _ = re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid key pattern {v!r}: {e}") from e
        return v


class OpenAIConfig(BaseModel):
    """OpenAI chat completion settings."""

    api_key: str | None = None
    model: str = "gpt-3.5-turbo"
    max_tokens: Annotated[int, Field(gt=0)] = 1000
    temperature: Annotated[float, Field(ge=0, le=2)] = 0.3


class ClaudeConfig(BaseModel):
    """Anthropic messages API settings."""

    api_key: str | None = None
    model: str = "claude-3-sonnet-20240229"
    max_tokens: Annotated[int, Field(gt=0)] = 1000


class GoogleConfig(BaseModel):
    """Google Cloud Translation settings."""

    api_key: str | None = None


class AzureConfig(BaseModel):
    """Azure Translator settings."""

    api_key: str | None = None
    region: str | None = None
    endpoint: str | None = None


class TranslationContextConfig(BaseModel):
    """Extra context handed to language-model providers."""

    domain: str = "general"
    tone: str = "neutral"
    additional_context: str = ""


class AIConfig(BaseModel):
    """Machine translation configuration."""

    provider: Literal["openai", "claude", "google", "azure"] = Field(
        default="openai",
        description="Translation provider used by --auto-translate",
    )
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    claude: ClaudeConfig = Field(default_factory=ClaudeConfig)
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    azure: AzureConfig = Field(default_factory=AzureConfig)
    context: TranslationContextConfig = Field(default_factory=TranslationContextConfig)
    auto_translate: bool = False
    review_required: bool = True
    batch_size: Annotated[int, Field(ge=1, le=500)] = Field(
        default=50,
        description="Number of strings sent to the provider in one request",
    )
    rate_limit: Annotated[int, Field(ge=1)] = Field(
        default=60,
        description="Maximum provider requests per minute",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="HTTP timeout in seconds for provider requests",
    )


class LocalizatorConfig(BaseModel):
    """
    Configuration model for Localizator.

    A single frozen instance is passed explicitly to every component.
    Command-line overrides produce a new instance via ``model_copy``.
    """

    localize: StoreFormat = Field(
        default=NESTED_FILES,
        description="Persisted format: nested PHP files per unit or one JSON document per locale",
    )
    source_language: str = Field(
        default="en",
        description="Locale whose values are used as the source for machine translation",
    )
    locales: list[str] = Field(
        default_factory=lambda: ["en"],
        description="Locales generated when none are given on the command line",
    )
    lang_path: Path = Field(
        default=Path("lang"),
        description="Root directory of the translation stores",
    )
    dirs: list[Path] = Field(
        default_factory=lambda: [
            Path("app"),
            Path("resources/views"),
            Path("resources/js"),
            Path("resources/vue"),
            Path("routes"),
        ],
        description="Directories scanned for translation functions",
    )
    patterns: list[str] = Field(
        default_factory=lambda: ["*.php", "*.blade.php", "*.vue", "*.js", "*.ts"],
        description="Glob patterns of files to scan",
    )
    exclude: list[str] = Field(
        default_factory=lambda: [
            "vendor",
            "node_modules",
            "storage",
            "bootstrap/cache",
            ".git",
            "tests",
            "database/migrations",
        ],
        description="Directories (relative to each scanned dir) to skip",
    )
    functions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FUNCTIONS),
        description="Translation functions, directives and template helpers to look for",
    )
    nested: bool = Field(
        default=True,
        description="Split dotted keys into nested structures inside each unit file",
    )
    sort: bool = Field(default=True, description="Sort keys in generated files")
    remove_missing: bool = Field(
        default=False,
        description="Remove stored keys that are no longer found in the code",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    validation: ValidationRulesConfig = Field(default_factory=ValidationRulesConfig)
    ai: AIConfig = Field(default_factory=AIConfig)

    model_config: ClassVar[ConfigDict] = ConfigDict(
        str_strip_whitespace=True,
        extra="forbid",
        frozen=True,
    )

    @field_validator("localize", mode="before")
    @classmethod
    def normalize_localize(cls, v: object) -> object:
        """Accept every selector alias and store the canonical name."""
        if isinstance(v, str) and v.strip().lower() in FORMAT_ALIASES:
            return FORMAT_ALIASES[v.strip().lower()]
        return v

    @field_validator("source_language")
    @classmethod
    def validate_source_language(cls, v: str) -> str:
        """Validate the source locale identifier."""
        if not LOCALE_PATTERN.match(v):
            raise ValueError(f"Invalid locale identifier: {v!r}")
        return v

    @field_validator("locales")
    @classmethod
    def validate_locales(cls, v: list[str]) -> list[str]:
        """Validate every default locale identifier."""
        for locale in v:
            if not LOCALE_PATTERN.match(locale):
                raise ValueError(f"Invalid locale identifier: {locale!r}")
        return v

    @property
    def uses_single_document(self) -> bool:
        """Whether translations are stored as one JSON document per locale."""
        return self.localize == SINGLE_DOCUMENT
