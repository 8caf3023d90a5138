from __future__ import annotations

import importlib
from decimal import Decimal

import pytest

from config import get_settings_module
from src.hrm_system.hrm_system.settings import Settings


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_app_env_selects_module(monkeypatch, env, expected):
    monkeypatch.delenv("HRM_SETTINGS_MODULE", raising=False)
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == expected


def test_explicit_module_overrides_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("HRM_SETTINGS_MODULE", "myco.hrm_settings")

    assert get_settings_module() == "myco.hrm_settings"


def test_settings_from_testing_module():
    settings = Settings.from_module(importlib.import_module("config.testing"))

    assert settings.TESTING is True
    assert settings.ENABLE_SCHEDULER is False
    assert settings.COMPANY_TIMEZONE == "Asia/Kolkata"
    assert isinstance(settings.PF_RATE, Decimal)
    assert isinstance(settings.CORS_ORIGINS, tuple)
