"""Join Codes & Themes — tests for code generation/normalization and theme catalogs."""

from skillsharp.core.codes import (
    CODE_ALPHABET, EXAM_CODE_LENGTH, INSTITUTE_CODE_LENGTH,
    generate_exam_code, generate_institute_code, normalize_code,
)
from skillsharp.core.themes import (
    BG_THEMES, COLOR_THEMES, DEFAULT_THEME, is_valid_bg_theme, is_valid_color_theme,
)


def test_institute_code_shape():
    code = generate_institute_code()
    assert len(code) == INSTITUTE_CODE_LENGTH
    assert set(code) <= set(CODE_ALPHABET)


def test_exam_code_shape():
    code = generate_exam_code()
    assert len(code) == EXAM_CODE_LENGTH
    assert set(code) <= set(CODE_ALPHABET)


def test_alphabet_skips_ambiguous_characters():
    assert not set("0O1I") & set(CODE_ALPHABET)


def test_normalize_code():
    assert normalize_code("  ab12cd ") == "AB12CD"
    assert normalize_code(None) == ""


def test_default_theme_present_in_both_catalogs():
    assert DEFAULT_THEME in COLOR_THEMES
    assert DEFAULT_THEME in BG_THEMES


def test_theme_validation():
    assert is_valid_color_theme("ocean")
    assert not is_valid_color_theme("neon")
    assert is_valid_bg_theme("warm")
    assert not is_valid_bg_theme("ocean")
