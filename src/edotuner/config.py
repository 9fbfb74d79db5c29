# src/edotuner/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging
import yaml

logger = logging.getLogger(__name__)

# Paket-Root: .../src/edotuner
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "edotuner" / "config.yaml"

def _safe_load(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if isinstance(data, dict):
                return data
            logger.warning("ignoring %s: top level is not a mapping", path)
    except (OSError, yaml.YAMLError) as e:
        # lieber leer zurückgeben als den Dialog zu crashen
        logger.warning("could not read config %s: %s", path, e)
    return {}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Lädt die Konfiguration (Default + User-Overrides) und liefert ein gemergtes Dict.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    cfg = _deep_merge(_safe_load(dpath), _safe_load(upath))

    # Minimal-Defaults sicherstellen
    cfg.setdefault("history_capacity", 30)
    cfg.setdefault("default_temperament", "equal12")
    cfg.setdefault("log_level", "WARNING")
    offs = cfg.get("offsets")
    if not isinstance(offs, dict):
        offs = {}
    offs.setdefault("limit", 99.9)
    offs.setdefault("decimals", 1)
    cfg["offsets"] = offs
    return cfg

def get_history_capacity(cfg: Dict[str, Any]) -> int:
    try:
        return max(1, int(cfg.get("history_capacity", 30)))
    except (TypeError, ValueError):
        return 30

def get_offset_limit(cfg: Dict[str, Any]) -> float:
    try:
        return abs(float((cfg.get("offsets") or {}).get("limit", 99.9)))
    except (TypeError, ValueError):
        return 99.9

def get_offset_decimals(cfg: Dict[str, Any]) -> int:
    try:
        return max(0, int((cfg.get("offsets") or {}).get("decimals", 1)))
    except (TypeError, ValueError):
        return 1

def get_log_level(cfg: Dict[str, Any]) -> int:
    name = str(cfg.get("log_level", "WARNING")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
