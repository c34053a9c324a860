"""Tests for the i18n helpers."""

from codedrafts_auth.utils.i18n import _LOCALES_PATH, _parse_po_file, get_translated_message


def test_default_language_is_vietnamese():
    assert get_translated_message("password_reset_subject") == "Cài đặt lại mật khẩu"


def test_english_catalogue():
    assert get_translated_message("token_expired", "en") != "token_expired"


def test_unsupported_locale_falls_back_to_default():
    assert get_translated_message("password_reset_subject", "fr") == get_translated_message("password_reset_subject")


def test_unknown_key_is_returned_unchanged():
    assert get_translated_message("no_such_key", "en") == "no_such_key"


def test_every_vi_key_is_translated_in_en():
    vi = _parse_po_file(f"{_LOCALES_PATH}/vi/LC_MESSAGES/messages.po")
    en = _parse_po_file(f"{_LOCALES_PATH}/en/LC_MESSAGES/messages.po")

    assert vi.keys() == en.keys()
    assert "invalid_credentials" in vi
