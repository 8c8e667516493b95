"""Language and sidecar naming configuration for image metadata."""

from typing import Dict, Optional

DEFAULT_LANGUAGE = "English"

# Sidecar categories
DESCRIPTION = "description"
PEOPLE = "people"
OBJECTS = "objects"
SCENES = "scenes"
EXIF = "EXIF"

CATEGORIES = (DESCRIPTION, PEOPLE, OBJECTS, SCENES, EXIF)

# Short codes and common spellings mapped to the language names used in
# sidecar file names (``description.Dutch.json``)
LANGUAGE_ALIASES: Dict[str, str] = {
    "en": "English",
    "eng": "English",
    "english": "English",
    "nl": "Dutch",
    "dutch": "Dutch",
    "de": "German",
    "german": "German",
    "fr": "French",
    "french": "French",
    "es": "Spanish",
    "spanish": "Spanish",
    "it": "Italian",
    "italian": "Italian",
    "pt": "Portuguese",
    "portuguese": "Portuguese",
    "ja": "Japanese",
    "japanese": "Japanese",
    "ko": "Korean",
    "korean": "Korean",
    "zh": "Chinese (Simplified)",
    "cn": "Chinese (Simplified)",
    "zh-cn": "Chinese (Simplified)",
    "zh_cn": "Chinese (Simplified)",
    "chinese": "Chinese (Simplified)",
    "zh-tw": "Chinese (Traditional)",
    "zh_tw": "Chinese (Traditional)",
}


def normalize_language(language: Optional[str]) -> str:
    """Normalize a language code or name to its canonical name.

    Args:
        language: Language code (``nl``), name (``dutch``) or None

    Returns:
        Canonical language name; unknown names are returned as given
    """
    if language is None:
        return DEFAULT_LANGUAGE
    language_clean = language.strip()
    if not language_clean or language_clean.lower() in ("auto", "automatic", "default"):
        return DEFAULT_LANGUAGE
    return LANGUAGE_ALIASES.get(language_clean.lower(), language_clean)


def is_default_language(language: Optional[str]) -> bool:
    return normalize_language(language) == DEFAULT_LANGUAGE


def sidecar_name(category: str, language: Optional[str] = None) -> str:
    """Get the sidecar name for a metadata category.

    Only descriptions are stored per language; the default language uses
    the plain ``description.json`` name.
    """
    if category == DESCRIPTION and language and not is_default_language(language):
        return f"{category}.{normalize_language(language)}.json"
    return f"{category}.json"
