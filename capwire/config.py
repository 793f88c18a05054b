"""
capwire.config
--------------

Safety limits for the capwire codec.

The codec itself is pure; these limits only bound how much work a single
decode call may do on untrusted input:

- CodecLimits: maximum payload size accepted by the decoder and the maximum
  nesting depth of sequences/mappings.
- Config: the whole bundle.

- load_config(): build Config from defaults ← file ← environment ← overrides.
  All environment variables are optional. When provided, they override defaults.

Environment variables (prefix: CAPWIRE_*)
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
CAPWIRE_MAX_PAYLOAD_BYTES=16MiB      # numbers accept "KB/MiB/GB" style suffixes
CAPWIRE_MAX_DEPTH=64

# Optional config file (JSON, or YAML when PyYAML is installed). Env still wins.
CAPWIRE_CONFIG=/path/to/capwire.json

File layout::

    {"limits": {"max_payload_bytes": 1048576, "max_depth": 32}}
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger("capwire.config")

# -----------------------------
# Helpers: parsing & validation
# -----------------------------

_SIZE_RE = re.compile(
    r"^\s*(?P<num>\d+)(?P<unit>kb|kib|mb|mib|gb|gib|b)?\s*$", re.IGNORECASE
)

_UNITS = {
    "b": 1,
    "kb": 1000,
    "kib": 1024,
    "mb": 1000**2,
    "mib": 1024**2,
    "gb": 1000**3,
    "gib": 1024**3,
}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None and v != "" else default


def _parse_int(v: Optional[str], default: int) -> int:
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        log.warning("config_value_ignored", extra={"value": v, "expected": "int"})
        return default


def _parse_bytes(v: Optional[str], default: int) -> int:
    if v is None:
        return default
    m = _SIZE_RE.match(v)
    if not m:
        log.warning("config_value_ignored", extra={"value": v, "expected": "size"})
        return default
    unit = (m.group("unit") or "b").lower()
    return int(m.group("num")) * _UNITS[unit]


def _load_file_config(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        log.warning("config_file_missing", extra={"path": str(path)})
        return {}
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # YAML is an optional extra
        try:
            import yaml  # type: ignore
        except ImportError:
            log.warning(
                "config_file_not_json_and_pyyaml_missing", extra={"path": str(path)}
            )
            return {}
        data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


# -----------------------------
# Dataclasses
# -----------------------------


@dataclass(frozen=True)
class CodecLimits:
    max_payload_bytes: int = 16 * 1024 * 1024  # 16 MiB per decoded buffer
    max_depth: int = 64  # nested sequences/mappings


@dataclass(frozen=True)
class Config:
    limits: CodecLimits = dataclasses.field(default_factory=CodecLimits)

    def to_dict(self) -> Dict[str, Any]:
        return {"limits": dataclasses.asdict(self.limits)}


DEFAULT_CONFIG = Config()

# -----------------------------
# Loader
# -----------------------------


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge: keys in overrides replace keys in base; dictionaries merge 1-level deep.
    """
    out = dict(base)
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            nv = dict(out[k])
            nv.update(v)
            out[k] = nv
        else:
            out[k] = v
    return out


def load_config(
    file_path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None
) -> Config:
    """
    Build a Config from (defaults) ← file (JSON/YAML) ← environment ← overrides.
    """
    d: Dict[str, Any] = Config().to_dict()

    path_env = _env("CAPWIRE_CONFIG")
    p = file_path or (Path(path_env) if path_env else None)
    if p:
        file_cfg = _load_file_config(Path(p))
        if file_cfg:
            d = _apply_overrides(d, file_cfg)

    limits = dict(d.get("limits", {}))
    limits.update(
        {
            "max_payload_bytes": _parse_bytes(
                _env("CAPWIRE_MAX_PAYLOAD_BYTES"),
                int(limits.get("max_payload_bytes", CodecLimits.max_payload_bytes)),
            ),
            "max_depth": _parse_int(
                _env("CAPWIRE_MAX_DEPTH"),
                int(limits.get("max_depth", CodecLimits.max_depth)),
            ),
        }
    )
    d["limits"] = limits

    if overrides:
        d = _apply_overrides(d, overrides)

    known = {f.name for f in dataclasses.fields(CodecLimits)}
    cfg = Config(
        limits=CodecLimits(**{k: v for k, v in d["limits"].items() if k in known})
    )
    return _sanity(cfg)


def _sanity(cfg: Config) -> Config:
    """
    Clamp ranges to safe values; return a potentially adjusted Config.
    """
    max_payload = max(1_024, min(1 << 31, cfg.limits.max_payload_bytes))
    # stays well below the interpreter's recursion limit
    max_depth = max(1, min(512, cfg.limits.max_depth))

    if (
        max_payload == cfg.limits.max_payload_bytes
        and max_depth == cfg.limits.max_depth
    ):
        return cfg

    log.info(
        "config_clamped",
        extra={"max_payload_bytes": max_payload, "max_depth": max_depth},
    )
    return Config(limits=CodecLimits(max_payload_bytes=max_payload, max_depth=max_depth))


__all__ = [
    "CodecLimits",
    "Config",
    "DEFAULT_CONFIG",
    "load_config",
]
