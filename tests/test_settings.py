"""
Tests for settings loading.
"""

from ecrverify.settings import VerifySettings, get_settings, reload_settings


def test_defaults():
    settings = VerifySettings()
    assert settings.config_folder == "examples"
    assert settings.config_file_name == "test.tfvars"
    assert settings.api_max_retries == 0
    assert settings.terraform_binary == "terraform"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("EV_CONFIG_FOLDER", "../../examples")
    monkeypatch.setenv("EV_API_MAX_RETRIES", "2")
    settings = reload_settings()
    assert settings.config_folder == "../../examples"
    assert settings.api_max_retries == 2
    assert get_settings() is settings
