from dataclasses import dataclass
from pathlib import Path

INDEX_FILE = "README.md"
LEVEL_FILE = "README.md"


@dataclass(frozen=True)
class Level:
    slug: str
    title: str
    experience: str

    @property
    def relative_path(self) -> str:
        return f"{self.slug}/{LEVEL_FILE}"


LEVELS: tuple[Level, ...] = (
    Level(slug="junior", title="Junior", experience="0-2 years"),
    Level(slug="mid-level", title="Mid-Level", experience="2-4 years"),
    Level(slug="senior", title="Senior", experience="4-7 years"),
    Level(slug="expert", title="Expert", experience="7+ years"),
)

_LEVEL_ALIASES = {
    "junior": "junior",
    "jr": "junior",
    "mid-level": "mid-level",
    "midlevel": "mid-level",
    "mid": "mid-level",
    "middle": "mid-level",
    "senior": "senior",
    "sr": "senior",
    "expert": "expert",
    "exp": "expert",
}

_LEVELS_BY_SLUG = {level.slug: level for level in LEVELS}


def normalize_level(name: str) -> str:
    normalized = name.strip().lower().replace("_", "-").replace(" ", "-")
    resolved = _LEVEL_ALIASES.get(normalized, normalized)
    if resolved not in _LEVELS_BY_SLUG:
        raise ValueError(f"Unknown level '{name}'. Supported: {[level.slug for level in LEVELS]}")
    return resolved


def get_level(name: str) -> Level:
    return _LEVELS_BY_SLUG[normalize_level(name)]


def level_position(slug: str) -> int:
    return [level.slug for level in LEVELS].index(normalize_level(slug))


def neighbours(slug: str) -> tuple[Level | None, Level | None]:
    """Return the (previous, next) levels around *slug*."""
    pos = level_position(slug)
    previous = LEVELS[pos - 1] if pos > 0 else None
    following = LEVELS[pos + 1] if pos + 1 < len(LEVELS) else None
    return previous, following


def detect_level_from_path(file_path: Path) -> str:
    """Map ``<root>/<level>/README.md`` to its level slug."""
    if file_path.name != LEVEL_FILE:
        raise ValueError(f"Not a level document: {file_path}")
    return normalize_level(file_path.parent.name)


def resolve_level(level: str | None, file_path: Path | None) -> str:
    if level:
        return normalize_level(level)
    if file_path:
        return detect_level_from_path(file_path)
    raise ValueError("Level must be provided when no file path is available.")
