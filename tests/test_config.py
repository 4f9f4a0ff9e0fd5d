"""
test_config.py - Settings loading, API key lookup and default state
Run with: pytest tests/test_config.py -v
"""
import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from config import DEFAULT_MODEL, Settings, get_api_key, get_default_state, load_settings


class TestLoadSettings:

    def test_missing_file_gives_defaults(self, tmp_path):
        s = load_settings(str(tmp_path / "nope.json"))
        assert s == Settings()
        assert s.gemini_model == DEFAULT_MODEL

    def test_values_read(self, tmp_path):
        p = tmp_path / "settings.json"
        p.write_text(json.dumps({"fee_percentage": 20, "number_of_lawyers": 3, "hide_zero_paid": False}))
        s = load_settings(str(p))
        assert s.fee_percentage == 20.0
        assert s.number_of_lawyers == 3
        assert s.hide_zero_paid is False

    def test_unknown_keys_ignored(self, tmp_path):
        p = tmp_path / "settings.json"
        p.write_text(json.dumps({"theme": "dark", "gemini_model": "gemini-x"}))
        s = load_settings(str(p))
        assert s.gemini_model == "gemini-x"
        assert not hasattr(s, "theme")

    def test_values_clamped(self, tmp_path):
        p = tmp_path / "settings.json"
        p.write_text(json.dumps({"fee_percentage": -10, "number_of_lawyers": 0}))
        s = load_settings(str(p))
        assert s.fee_percentage == 0.0
        assert s.number_of_lawyers == 1


class TestApiKey:

    def test_gemini_key_preferred(self, monkeypatch):
        monkeypatch.setattr(config, "load_dotenv", lambda: False)
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("GOOGLE_API_KEY", "o-key")
        assert get_api_key() == "g-key"

    def test_google_key_fallback(self, monkeypatch):
        monkeypatch.setattr(config, "load_dotenv", lambda: False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "o-key")
        assert get_api_key() == "o-key"

    def test_no_key(self, monkeypatch):
        monkeypatch.setattr(config, "load_dotenv", lambda: False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        assert get_api_key() is None


class TestDefaultState:

    def test_one_zero_deposit(self):
        state = get_default_state()
        assert len(state.deposits) == 1
        assert state.deposits[0].amount == 0.0
        assert state.record is None
        assert state.items == []

    def test_settings_applied(self):
        state = get_default_state(Settings(fee_percentage=15.0, number_of_lawyers=2, hide_zero_paid=False))
        assert state.fee.enabled is False
        assert state.fee.percentage == 15.0
        assert state.number_of_lawyers == 2
        assert state.hide_zero_paid is False
