"""Tests for settings resolution."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from flutter_interview.config import DEFAULT_LANGUAGES, Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FLUTTER_INTERVIEW_ROOT",
        "FLUTTER_INTERVIEW_EXPECTED_TOTAL",
        "FLUTTER_INTERVIEW_LANGUAGES",
        "FLUTTER_INTERVIEW_STRICT",
        "FLUTTER_INTERVIEW_TIMEOUT",
        "FLUTTER_INTERVIEW_CONCURRENCY",
        "FLUTTER_INTERVIEW_DEBOUNCE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = get_settings()
    assert settings.root == Path(".")
    assert settings.expected_total == 100
    assert settings.allowed_languages == DEFAULT_LANGUAGES
    assert settings.strict is False
    assert settings.external_timeout == 10.0
    assert settings.external_concurrency == 8
    assert settings.watch_debounce == 1600


def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLUTTER_INTERVIEW_ROOT", "/srv/guide")
    monkeypatch.setenv("FLUTTER_INTERVIEW_EXPECTED_TOTAL", "120")
    monkeypatch.setenv("FLUTTER_INTERVIEW_LANGUAGES", "Dart, kotlin,,swift")
    monkeypatch.setenv("FLUTTER_INTERVIEW_STRICT", "true")
    monkeypatch.setenv("FLUTTER_INTERVIEW_TIMEOUT", "2.5")
    monkeypatch.setenv("FLUTTER_INTERVIEW_CONCURRENCY", "4")
    monkeypatch.setenv("FLUTTER_INTERVIEW_DEBOUNCE", "300")

    settings = get_settings()

    assert settings.root == Path("/srv/guide")
    assert settings.expected_total == 120
    assert settings.allowed_languages == frozenset({"dart", "kotlin", "swift"})
    assert settings.strict is True
    assert settings.external_timeout == 2.5
    assert settings.external_concurrency == 4
    assert settings.watch_debounce == 300


def test_empty_environment_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLUTTER_INTERVIEW_EXPECTED_TOTAL", "")
    assert get_settings().expected_total == 100


def test_overrides_beat_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLUTTER_INTERVIEW_EXPECTED_TOTAL", "120")
    assert get_settings(expected_total=37).expected_total == 37


def test_none_overrides_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLUTTER_INTERVIEW_STRICT", "1")
    assert get_settings(strict=None, root=None).strict is True


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("FLUTTER_INTERVIEW_EXPECTED_TOTAL", "0"),
        ("FLUTTER_INTERVIEW_EXPECTED_TOTAL", "many"),
        ("FLUTTER_INTERVIEW_TIMEOUT", "-1"),
        ("FLUTTER_INTERVIEW_CONCURRENCY", "0"),
    ],
)
def test_invalid_environment(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        get_settings()


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        Settings(expected_total=0)
