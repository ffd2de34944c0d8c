"""Tests for translation key extraction from source text."""

from pathlib import Path

import pytest

from src.localizator.config.schema import DEFAULT_FUNCTIONS
from src.localizator.scanning.extractor import (
    InvocationPattern,
    PatternFamily,
    build_patterns,
    classify,
    extract_keys,
    extract_keys_from_file,
    strip_comments,
)
from tests.utils.test_helpers import FIXTURES_DIR


@pytest.fixture
def default_patterns() -> list[InvocationPattern]:
    """Compile the default helper names."""
    return build_patterns(DEFAULT_FUNCTIONS)


class TestClassify:
    """Test cases for deriving the pattern family of a helper name."""

    @pytest.mark.parametrize(
        ("name", "family"),
        [
            ("__", PatternFamily.FUNCTION),
            ("trans_choice", PatternFamily.FUNCTION),
            ("@lang", PatternFamily.DIRECTIVE),
            ("@choice", PatternFamily.DIRECTIVE),
            ("Lang::get", PatternFamily.STATIC_METHOD),
            ("$t", PatternFamily.TEMPLATE_VARIABLE),
            ("$tc", PatternFamily.TEMPLATE_VARIABLE),
        ],
    )
    def test_classify(self, name: str, family: PatternFamily) -> None:
        """Test that each naming convention maps to its family."""
        assert classify(name) is family

    def test_template_variable_has_mustache_regex(self) -> None:
        """Test that template helpers also match the {{ $t('key') }} form."""
        pattern = InvocationPattern.from_name("$t")
        assert len(pattern.regexes) == 2
        assert InvocationPattern.from_name("__").regexes[0].pattern.startswith("(?<!")


class TestStripComments:
    """Test cases for comment removal."""

    def test_removes_all_comment_conventions(self) -> None:
        """Test that block, line, directive and markup comments disappear."""
        text = (
            "a /* __('x') */ b\n"
            "c // __('y')\n"
            "d {{-- @lang('z') --}} e\n"
            "f <!-- $t('w') --> g\n"
        )
        result = strip_comments(text)
        assert "__('x')" not in result
        assert "__('y')" not in result
        assert "@lang('z')" not in result
        assert "$t('w')" not in result
        for kept in ("a", "b", "c", "d", "e", "f", "g"):
            assert kept in result

    def test_multiline_block_comment(self) -> None:
        """Test that block comments spanning lines are removed."""
        text = "before\n/*\n __('hidden.key')\n*/\nafter"
        assert strip_comments(text) == "before\n\nafter"


class TestExtractKeys:
    """Test cases for key extraction."""

    def test_each_family(self, default_patterns: list[InvocationPattern]) -> None:
        """Test that every invocation family is recognised."""
        text = """
            __('a.function')
            trans("a.trans")
            trans_choice('a.choice', 3)
            @lang('a.directive')
            @choice('a.directive_choice', $n)
            Lang::get('a.static')
            Lang::choice("a.static_choice", 2)
            {{ $t('a.template') }}
            this.$tc('a.template_choice', 2)
        """
        assert extract_keys(text, default_patterns) == {
            "a.function",
            "a.trans",
            "a.choice",
            "a.directive",
            "a.directive_choice",
            "a.static",
            "a.static_choice",
            "a.template",
            "a.template_choice",
        }

    def test_keys_between_comments(self, default_patterns: list[InvocationPattern]) -> None:
        """Test that a key inside a block comment is dropped while its neighbours remain."""
        text = "__('a') /* __('b') */ __('c')"
        assert extract_keys(text, default_patterns) == {"a", "c"}

    def test_interpolated_literal_yields_nothing(
        self, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test that an interpolating literal and a variable argument give no keys."""
        assert extract_keys('trans("{$dynamic}") __($variable)', default_patterns) == set()

    def test_whitespace_around_arguments(self, default_patterns: list[InvocationPattern]) -> None:
        """Test that whitespace between name, parenthesis and literal is allowed."""
        text = "__ (\n   'spaced.key'  )\n{{ $t ( \"spaced.template\" , { n: 1 } ) }}"
        assert extract_keys(text, default_patterns) == {"spaced.key", "spaced.template"}

    def test_commented_calls_are_ignored(self, default_patterns: list[InvocationPattern]) -> None:
        """Test that calls inside comments contribute nothing."""
        text = "// __('line.key')\n/* trans('block.key') */\n{{-- @lang('blade.key') --}}\n<!-- $t('html.key') -->"
        assert extract_keys(text, default_patterns) == set()

    def test_dynamic_and_empty_literals_are_dropped(
        self, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test that variables, interpolation and empty literals are not keys."""
        text = """
            __($key)
            __('$variable')
            __("messages.{$type}")
            __('{{ name }}')
            __(`prefix.${name}`)
            __('')
            __('   ')
            __('static.key')
        """
        assert extract_keys(text, default_patterns) == {"static.key"}

    def test_escapes_are_removed_and_whitespace_trimmed(
        self, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test key normalization of escaped and padded literals."""
        text = r"""__('it\'s.key') __("  padded.key  ") __('other "quote" key')"""
        assert extract_keys(text, default_patterns) == {
            "it's.key",
            "padded.key",
            'other "quote" key',
        }

    def test_names_do_not_match_inside_identifiers(
        self, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test that helper names only match at a word boundary."""
        text = "untrans('no.one') $trans('no.two') my__('no.three') trans('yes.one')"
        assert extract_keys(text, default_patterns) == {"yes.one"}

    def test_only_configured_names(self) -> None:
        """Test that unconfigured helpers are not recognised."""
        patterns = build_patterns(["t"])
        assert extract_keys("t('custom.key') __('default.key')", patterns) == {"custom.key"}

    def test_duplicate_keys_collapse(self, default_patterns: list[InvocationPattern]) -> None:
        """Test that the same key referenced twice appears once."""
        text = "__('dup.key') @lang('dup.key') {{ $t('dup.key') }}"
        assert extract_keys(text, default_patterns) == {"dup.key"}

    def test_comment_markers_inside_literals_truncate(
        self, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test the known limitation: comment markers inside strings are not protected."""
        text = "__('before.key'); $url = 'http://example.com'; __('same.line.key')"
        # Everything after '//' on this line is treated as a comment
        assert extract_keys(text, default_patterns) == {"before.key"}


class TestExtractKeysFromFile:
    """Test cases for extracting keys from files on disk."""

    def test_php_fixture(self, default_patterns: list[InvocationPattern]) -> None:
        """Test extraction from the sample PHP controller."""
        keys = extract_keys_from_file(FIXTURES_DIR / "sample.php", default_patterns)
        assert keys == {
            "dashboard.widgets.title",
            "welcome.messages.greeting",
            "items.lists.count",
            "auth.login.failed",
            "validation.custom.email.required",
            "profile.settings.title",
        }

    def test_blade_fixture(self, default_patterns: list[InvocationPattern]) -> None:
        """Test extraction from the sample Blade template."""
        keys = extract_keys_from_file(FIXTURES_DIR / "sample.blade.php", default_patterns)
        assert keys == {
            "app.meta.title",
            "dashboard.header.welcome",
            "messages.notifications.items",
            "buttons.forms.submit",
            "labels.user.name",
        }

    def test_missing_file(
        self, tmp_path: Path, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test that a missing file yields no keys."""
        assert extract_keys_from_file(tmp_path / "missing.php", default_patterns) == set()

    def test_undecodable_file(
        self, tmp_path: Path, default_patterns: list[InvocationPattern]
    ) -> None:
        """Test that a file that is not UTF-8 yields no keys."""
        path = tmp_path / "binary.php"
        _ = path.write_bytes(b"\xff\xfe__('x.y')\x80")
        assert extract_keys_from_file(path, default_patterns) == set()
