"""Runtime settings with JSON overrides."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

from .harmonica import DEFAULT_KEY, harmonica_key
from .pitch import DEFAULT_MIN_CLARITY
from .transpose import DEFAULT_SEARCH_LIMIT, TransposeFilters


@dataclass(frozen=True)
class Settings:
    """Defaults for the CLI and MCP server."""
    key: str = DEFAULT_KEY
    min_clarity: float = DEFAULT_MIN_CLARITY
    transpose_limit: int = DEFAULT_SEARCH_LIMIT
    exclude_over: bool = True
    exclude_bends: bool = False

    @property
    def filters(self) -> TransposeFilters:
        return TransposeFilters(
            exclude_over=self.exclude_over, exclude_bends=self.exclude_bends,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _validate(settings: Settings) -> Settings:
    if harmonica_key(settings.key) is None:
        raise ValueError(f"Invalid harmonica key: {settings.key!r}")
    if not 0.0 <= settings.min_clarity <= 1.0:
        raise ValueError(f"min_clarity must be in [0, 1], got {settings.min_clarity}")
    if settings.transpose_limit < 0:
        raise ValueError(f"transpose_limit must be >= 0, got {settings.transpose_limit}")
    return settings


def settings_from_dict(data: Dict[str, Any], base: Settings = Settings()) -> Settings:
    """Apply overrides from a dict; unknown keys are rejected."""
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
    return _validate(replace(base, **data))


def load_settings(path: Union[str, Path]) -> Settings:
    """Load settings from a JSON object file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the JSON is not an object or holds invalid values.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No settings file: {p}")
    with open(p) as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must hold a JSON object: {p}")
    return settings_from_dict(data)
