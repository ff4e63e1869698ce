import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_LANGUAGES: frozenset[str] = frozenset(
    {"dart", "kotlin", "swift", "bash", "yaml", "json", "text", "groovy", "xml", "ruby"}
)


class Settings(BaseModel):
    root: Path = Path(".")
    expected_total: int = Field(default=100, ge=1)
    allowed_languages: frozenset[str] = DEFAULT_LANGUAGES
    strict: bool = False
    external_timeout: float = Field(default=10.0, gt=0)
    external_concurrency: int = Field(default=8, ge=1)
    watch_debounce: int = Field(default=1600, ge=0)

    @field_validator("allowed_languages", mode="before")
    @classmethod
    def _split_languages(cls, value: object) -> object:
        if isinstance(value, str):
            return frozenset(part.strip().lower() for part in value.split(",") if part.strip())
        return value


_ENV_FIELDS = {
    "FLUTTER_INTERVIEW_ROOT": "root",
    "FLUTTER_INTERVIEW_EXPECTED_TOTAL": "expected_total",
    "FLUTTER_INTERVIEW_LANGUAGES": "allowed_languages",
    "FLUTTER_INTERVIEW_STRICT": "strict",
    "FLUTTER_INTERVIEW_TIMEOUT": "external_timeout",
    "FLUTTER_INTERVIEW_CONCURRENCY": "external_concurrency",
    "FLUTTER_INTERVIEW_DEBOUNCE": "watch_debounce",
}


def get_settings(**overrides: object) -> Settings:
    """Build settings from the environment, then apply non-None *overrides*."""
    values: dict[str, object] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings.model_validate(values)
