"""
Internationalization (i18n) utility module for translated error and email text.

This module provides functionality for:
- Loading and managing translations for the supported languages
- Translating messages by key
- Falling back to the default language or the key itself

Translations use Python's gettext. Compiled ``.mo`` catalogues are optional:
the ``.po`` sources shipped with the package are read with Babel into an in-memory
catalogue that is consulted whenever gettext returns the bare msgid.
"""

import gettext
import os
from typing import Dict, Optional

from babel.messages.pofile import read_po

from codedrafts_auth.core.config.settings import settings
from codedrafts_auth.core.logging import logger

_LOCALES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "locales"))

_translations: Dict[str, gettext.NullTranslations] = {}
_fallback_catalogs: Dict[str, Dict[str, str]] = {}


def _parse_po_file(po_path: str) -> Dict[str, str]:
    with open(po_path, "rb") as po_file:
        po_catalog = read_po(po_file)
    return {
        message.id: message.string or message.id
        for message in po_catalog
        if message.id and isinstance(message.id, str)
    }


def setup_i18n(locales_path: str = _LOCALES_PATH) -> None:
    """
    Initialize the internationalization system by loading translations.

    Loads gettext catalogues for each supported language and parses the
    ``.po`` files as a fallback.

    Raises:
        FileNotFoundError: If the locales directory is not found.
    """
    if not os.path.exists(locales_path):
        raise FileNotFoundError(f"Locales directory not found: {locales_path}")

    for lang in settings.SUPPORTED_LANGUAGES:
        _translations[lang] = gettext.translation(
            domain="messages",
            localedir=locales_path,
            languages=[lang],
            fallback=True,
        )

        po_path = os.path.join(locales_path, lang, "LC_MESSAGES", "messages.po")
        catalog = _parse_po_file(po_path) if os.path.exists(po_path) else {}
        _fallback_catalogs[lang] = catalog
        logger.debug("i18n_initialized", language=lang, entries=len(catalog))

    logger.debug("i18n_setup_complete", default_locale=settings.DEFAULT_LANGUAGE)


def get_translated_message(key: str, locale: Optional[str] = None) -> str:
    """
    Retrieve a translated message for the given key and locale.

    Unsupported locales fall back to ``settings.DEFAULT_LANGUAGE``; unknown keys
    are returned unchanged.

    Args:
        key: The message key to translate.
        locale: The target language code (defaults to DEFAULT_LANGUAGE).

    Returns:
        The translated message or the original key if no translation exists.
    """
    if not _translations:
        setup_i18n()

    locale = locale or settings.DEFAULT_LANGUAGE
    if locale not in _translations:
        logger.warning(
            "unsupported_locale_requested",
            requested_locale=locale,
            fallback_locale=settings.DEFAULT_LANGUAGE,
        )
        locale = settings.DEFAULT_LANGUAGE

    translation = _translations.get(locale)
    if translation is None:
        logger.error("translation_missing_for_locale", locale=locale)
        return key

    translated = translation.gettext(key)
    if translated == key:
        translated = _fallback_catalogs.get(locale, {}).get(key, key)
        if translated == key:
            logger.warning("translation_key_not_found", key=key, locale=locale)

    return translated
