"""
Key extraction: comment stripping, invocation matching and key normalization.
"""

from .extractor import (
    InvocationPattern,
    PatternFamily,
    build_patterns,
    extract_keys,
    extract_keys_from_file,
    strip_comments,
)
from .file_scanner import FileScanner
from .normalizer import normalize_key, validate_key

__all__ = [
    "FileScanner",
    "InvocationPattern",
    "PatternFamily",
    "build_patterns",
    "extract_keys",
    "extract_keys_from_file",
    "normalize_key",
    "strip_comments",
    "validate_key",
]
