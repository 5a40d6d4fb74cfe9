"""Langues de réponse supportées (codes de la config LANGUAGE)."""

DEFAULT_LANGUAGE = "fr"

LANGUAGES: dict[str, str] = {
    "fr": "Français",
    "en": "English",
    "es": "Español",
    "de": "Deutsch",
    "pt": "Português",
    "it": "Italiano",
    "ru": "Русский",
    "uk": "Українська",
    "tr": "Türkçe",
    "ar": "العربية",
    "id": "Indonesia",
    "vi": "Tiếng Việt",
    "jp": "日本語",
    "ko": "한국어",
    "zh-Hans": "简体中文",
    "zh-Hant": "繁體中文",
}


def get_language_name(code: str) -> str:
    """Nom affichable d'une langue, le code lui-même s'il est inconnu."""
    return LANGUAGES.get(code, code)
