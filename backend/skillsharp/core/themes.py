"""Theme Catalog — the color and background palettes a profile may select."""

COLOR_THEMES: dict[str, str] = {
    "default": "Purple",
    "ocean": "Ocean",
    "forest": "Forest",
    "sunset": "Sunset",
    "rose": "Rose",
    "midnight": "Midnight",
}

BG_THEMES: dict[str, str] = {
    "default": "Modern",
    "pure": "Pure",
    "soft": "Soft",
    "neutral": "Neutral",
    "deep": "Deep",
    "warm": "Warm",
    "cool": "Cool",
}

DEFAULT_THEME = "default"


def is_valid_color_theme(theme_id: str) -> bool:
    return theme_id in COLOR_THEMES


def is_valid_bg_theme(theme_id: str) -> bool:
    return theme_id in BG_THEMES
