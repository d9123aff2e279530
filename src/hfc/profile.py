"""Codec profile (v1) for hfc.

Goal: make encode/decode settings reproducible (same weights file, same
tie-break policy on both sides).

This module intentionally stays *small* and strict:
  - JSON only
  - explicit profile id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PROFILE_ID_V1 = "hfc.profile.v1"

ZSTD_LEVEL_MIN = 1
ZSTD_LEVEL_MAX = 22


class ProfileError(ValueError):
    pass


def _profile_source(profile_arg: str) -> tuple[str, str]:
    """Return (json_text, origin). ``@path`` reads a file, anything else is inline JSON."""
    s = profile_arg.strip()
    if not s:
        raise ProfileError("profile: argomento vuoto (atteso @file.json o JSON inline)")
    if not s.startswith("@"):
        return s, "inline"

    p = Path(s[1:]).expanduser()
    if not p.is_file():
        raise ProfileError(f"profile: file non trovato: {p}")
    try:
        return p.read_text(encoding="utf-8"), str(p)
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileError(f"profile: impossibile leggere {p}: {e}") from e


def _load_json_arg(profile_arg: str) -> dict[str, Any]:
    text, origin = _profile_source(profile_arg)
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProfileError(
            f"profile ({origin}): JSON non valido a riga {e.lineno} colonna {e.colno}: {e.msg}"
        ) from e
    if not isinstance(obj, dict):
        raise ProfileError(
            f"profile ({origin}): atteso un oggetto JSON, trovato {type(obj).__name__}"
        )
    return obj


def _optional_bool(obj: dict[str, Any], key: str) -> bool | None:
    if key not in obj:
        return None
    v = obj.get(key)
    if isinstance(v, bool):
        return v
    raise ProfileError(f"profile: campo '{key}' deve essere booleano")


def _optional_str(obj: dict[str, Any], key: str) -> str | None:
    if key not in obj or obj.get(key) is None:
        return None
    v = obj.get(key)
    if not isinstance(v, str) or not v.strip():
        raise ProfileError(f"profile: campo '{key}' deve essere una stringa non vuota")
    return v.strip()


def _optional_int(obj: dict[str, Any], key: str, *, lo: int, hi: int | None = None) -> int | None:
    if key not in obj or obj.get(key) is None:
        return None
    v = obj.get(key)
    # bool e' un int in Python: lo escludiamo esplicitamente
    if isinstance(v, bool) or not isinstance(v, int):
        raise ProfileError(f"profile: campo '{key}' deve essere intero")
    if v < lo or (hi is not None and v > hi):
        bounds = f">= {lo}" if hi is None else f"in [{lo}, {hi}]"
        raise ProfileError(f"profile: campo '{key}' deve essere {bounds}")
    return v


@dataclass(frozen=True)
class ProfileV1:
    """Encode/decode settings. None means "not set": CLI flag or default wins."""

    name: str
    optimize_ties: bool | None = None
    weights: str | None = None
    chunk_size: int | None = None
    zstd_level: int | None = None

    def weights_path(self) -> Path | None:
        if self.weights is None:
            return None
        return Path(self.weights).expanduser()


def load_profile(profile_arg: str) -> ProfileV1:
    """Load and validate a profile.

    profile_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(profile_arg)

    # Strict key set (keep it small and stable).
    allowed = {"profile", "name", "optimize_ties", "weights", "chunk_size", "zstd_level"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise ProfileError(f"profile: chiavi non supportate: {', '.join(extra)}")

    profile_id = obj.get("profile")
    if profile_id != PROFILE_ID_V1:
        raise ProfileError(
            f"profile: versione non supportata: {profile_id!r} (attesa {PROFILE_ID_V1!r})"
        )

    name = obj.get("name")
    if name is None:
        name = "profile"
    if not isinstance(name, str) or not name.strip():
        raise ProfileError("profile: campo 'name' deve essere stringa")

    return ProfileV1(
        name=name.strip(),
        optimize_ties=_optional_bool(obj, "optimize_ties"),
        weights=_optional_str(obj, "weights"),
        chunk_size=_optional_int(obj, "chunk_size", lo=1),
        zstd_level=_optional_int(obj, "zstd_level", lo=ZSTD_LEVEL_MIN, hi=ZSTD_LEVEL_MAX),
    )
