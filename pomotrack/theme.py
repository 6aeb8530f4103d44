from enum import StrEnum


class ThemeMode(StrEnum):
    DARK = "dark"
    LIGHT = "light"


# Built-in textual themes
THEMES = {
    ThemeMode.DARK: "catppuccin-mocha",
    ThemeMode.LIGHT: "catppuccin-latte",
}


def theme_mode(dark_mode: bool) -> ThemeMode:
    return ThemeMode.DARK if dark_mode else ThemeMode.LIGHT


def get_theme_name(dark_mode: bool) -> str:
    return THEMES[theme_mode(dark_mode)]
