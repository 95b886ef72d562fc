"""Analysis settings: edge harmonic, orb divisor and cross-chart orb halving."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import SettingsError

logger = logging.getLogger(__name__)

CIRCLE = 360.0

EDGE_HARMONIC_DEFAULT = 108
ORB_DIVISOR_DEFAULT = 30
HALF_ORBS_FOR_DOUBLES_DEFAULT = True

# Keys used in the settings file, kept compatible with existing settings files.
EDGE_HARMONIC_KEY = "HARMONICA_ULTIMA"
ORB_DIVISOR_KEY = "ORBS_DIVISOR"
HALF_ORBS_KEY = "ORBES_DIMIDII_DUPLICIBUS"

ENV_OVERRIDES = {
    EDGE_HARMONIC_KEY: "RESONANCE_EDGE_HARMONIC",
    ORB_DIVISOR_KEY: "RESONANCE_ORB_DIVISOR",
    HALF_ORBS_KEY: "RESONANCE_HALF_ORBS",
}


@dataclass(frozen=True)
class Settings:
    """Configuration consumed by every matrix and pattern computation."""

    edge_harmonic: int = EDGE_HARMONIC_DEFAULT
    orb_divisor: int = ORB_DIVISOR_DEFAULT
    half_orbs_for_doubles: bool = HALF_ORBS_FOR_DOUBLES_DEFAULT

    def __post_init__(self) -> None:
        if self.edge_harmonic < 1:
            raise SettingsError(f"edge harmonic must be positive, got {self.edge_harmonic}")
        if self.orb_divisor < 1:
            raise SettingsError(f"orb divisor must be positive, got {self.orb_divisor}")

    @property
    def primary_orb(self) -> float:
        """Conjunction orb in degrees: the circle split by the orb divisor."""
        return CIRCLE / self.orb_divisor

    def orb_for(self, same_chart: bool) -> float:
        """Effective orb for a pair of points, halved across charts when enabled."""
        if not same_chart and self.half_orbs_for_doubles:
            return self.primary_orb / 2
        return self.primary_orb

    def pattern_orb(self, dimension: int) -> float:
        """Orb for a pattern spanning ``dimension`` charts."""
        return self.orb_for(same_chart=dimension <= 1)

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"true", "1", "yes", "on"}


def _parse_positive_int(key: str, value: str) -> int:
    try:
        number = int(value.strip())
    except ValueError:
        raise SettingsError(f"{key} expects an integer, got {value!r}") from None
    if number < 1:
        raise SettingsError(f"{key} must be positive, got {number}")
    return number


def _read_settings_file(path: Path) -> dict[str, str]:
    """
    Read ``KEY = value`` lines.

    Blank lines, ``#`` comments, lines without ``=`` and lines with an empty
    key or value are skipped.
    """
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key, value = key.strip(), value.strip()
        if key and value:
            values[key] = value
    return values


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Build Settings from an optional settings file and environment overrides.

    The file location falls back to ``RESONANCE_SETTINGS``; a missing file
    means defaults. Environment variables win over the file.
    """
    raw: dict[str, str] = {}
    source = path or os.environ.get("RESONANCE_SETTINGS")
    if source:
        file_path = Path(source).expanduser()
        if file_path.exists():
            raw.update(_read_settings_file(file_path))
            logger.debug("Loaded settings from %s", file_path)
        else:
            logger.info("Settings file %s not found, using defaults", file_path)

    for key, env_name in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            raw[key] = env_value

    kwargs: dict[str, object] = {}
    if EDGE_HARMONIC_KEY in raw:
        kwargs["edge_harmonic"] = _parse_positive_int(EDGE_HARMONIC_KEY, raw[EDGE_HARMONIC_KEY])
    if ORB_DIVISOR_KEY in raw:
        kwargs["orb_divisor"] = _parse_positive_int(ORB_DIVISOR_KEY, raw[ORB_DIVISOR_KEY])
    if HALF_ORBS_KEY in raw:
        kwargs["half_orbs_for_doubles"] = _parse_bool(raw[HALF_ORBS_KEY])
    return Settings(**kwargs)


def save_settings(settings: Settings, path: str | Path) -> Path:
    """Write settings in the same ``KEY = value`` format that load_settings reads."""
    file_path = Path(path).expanduser()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        f"{EDGE_HARMONIC_KEY} = {settings.edge_harmonic}",
        f"{ORB_DIVISOR_KEY} = {settings.orb_divisor}",
        f"{HALF_ORBS_KEY} = {str(settings.half_orbs_for_doubles).lower()}",
    ]
    file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return file_path
