"""Tests for configuration loading and mailer selection."""

import json

import pytest

from tourmail.config import Config, get_config, reset_config
from tourmail.core.mailer import create_mailer


def test_defaults(tmp_config):
    assert tmp_config.setup_required
    assert tmp_config.mail_provider == "sendgrid"
    assert tmp_config.admin_ids == []
    assert tmp_config.watched_collections["waitlist"] == ["create"]
    assert tmp_config.log_level == "INFO"
    assert tmp_config.data_dir.is_dir()
    assert tmp_config.templates_dir.is_dir()


def test_settings_file_merges_over_defaults(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({
        "email": {"provider": "console", "from_email": "tours@example.com"},
        "auth": {"admin_ids": ["admin-1", 42]},
    }))
    config = Config(base_dir=tmp_path)

    assert not config.setup_required
    assert config.mail_provider == "console"
    assert config.from_email == "tours@example.com"
    assert config.from_name == "Baja Moto Tour 2026"
    assert config.admin_ids == ["admin-1", "42"]


def test_corrupt_settings_fall_back_to_defaults(tmp_path):
    (tmp_path / "settings.json").write_text("{not json")
    assert Config(base_dir=tmp_path).mail_provider == "sendgrid"


def test_set_and_save(tmp_config):
    tmp_config.set("branding.title", "Copper Canyon Run")
    reloaded = Config(base_dir=tmp_config.base_dir)
    assert reloaded.brand_title == "Copper Canyon Run"


def test_env_api_key_wins(tmp_config, monkeypatch):
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
    tmp_config.set("email.sendgrid_api_key", "SG.file", save=False)
    assert tmp_config.sendgrid_api_key == "SG.file"
    monkeypatch.setenv("SENDGRID_API_KEY", "SG.env")
    assert tmp_config.sendgrid_api_key == "SG.env"


def test_tourmail_dir_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TOURMAIL_DIR", str(tmp_path / "tm"))
    reset_config()
    try:
        assert get_config().base_dir == tmp_path / "tm"
    finally:
        reset_config()


def test_reply_to_blank_is_none(tmp_config):
    tmp_config.set("email.reply_to", "", save=False)
    assert tmp_config.reply_to is None


def test_create_mailer(tmp_config, monkeypatch):
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
    mailer = create_mailer(tmp_config)
    assert mailer.provider_id == "sendgrid"
    assert not mailer.configured

    tmp_config.set("email.provider", "console", save=False)
    assert create_mailer(tmp_config).provider_id == "console"

    tmp_config.set("email.provider", "pigeon", save=False)
    with pytest.raises(ValueError, match="pigeon"):
        create_mailer(tmp_config)
