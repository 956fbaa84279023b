"""Tests for the theme preference store."""

import pytest

from cv_match.storage.preferences import PreferenceStore


class TestPreferenceStore:
    def test_default_theme(self, preferences):
        assert preferences.get_theme() == "light"

    def test_configured_default(self, kv):
        assert PreferenceStore(kv, default_theme="dark").get_theme() == "dark"

    def test_set_and_get(self, preferences, kv):
        preferences.set_theme("dark")
        assert preferences.get_theme() == "dark"
        assert kv.get("theme") == '"dark"'

    def test_toggle(self, preferences):
        assert preferences.toggle_theme() == "dark"
        assert preferences.toggle_theme() == "light"
        assert preferences.get_theme() == "light"

    def test_invalid_theme_rejected(self, preferences):
        with pytest.raises(ValueError, match="theme"):
            preferences.set_theme("purple")

    @pytest.mark.parametrize("raw", ['"purple"', "{broken", "42", "[]"])
    def test_bad_stored_value_falls_back(self, preferences, kv, raw):
        kv.set("theme", raw)
        assert preferences.get_theme() == "light"
