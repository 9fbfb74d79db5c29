# src/edotuner/persist.py
"""
Gespeichertes Tuning als kleines JSON-Dokument:

    {"offsets": [21 Zahlen], "temperament": "equal19", "root": 8, "pure": 11, "tweak": 0.0}

`offsets` stehen in Feldreihenfolge (Cb, C, C#, Db, …, B#), intern wird in
Quintenreihenfolge gerechnet. Ältere Dokumente ohne `tweak` sind gültig.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from .errors import MalformedDocument
from .pitch import NUM_SIMPLE, C_INDEX, A_INDEX, fields_to_fifths, fifths_to_fields
from .temperaments import TEMPERAMENTS, TemperamentTable

logger = logging.getLogger(__name__)


@dataclass
class TuningDocument:
    temperament: TemperamentTable
    root: int = C_INDEX
    pure: int = A_INDEX
    tweak: float = 0.0
    offsets: List[float] = field(default_factory=lambda: [0.0] * NUM_SIMPLE)  # Quintenreihenfolge


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDocument(f"{key}: expected a number, got {value!r}")
    return float(value)


def _index(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise MalformedDocument(f"{key}: expected an integer, got {value!r}")
    if not 0 <= int(value) < NUM_SIMPLE:
        raise MalformedDocument(f"{key}: {value} outside 0..{NUM_SIMPLE - 1}")
    return int(value)


def from_dict(data: Dict[str, Any]) -> TuningDocument:
    if not isinstance(data, dict):
        raise MalformedDocument("document must be a JSON object")
    missing = [k for k in ("offsets", "temperament", "root", "pure") if k not in data]
    if missing:
        raise MalformedDocument(f"missing keys: {', '.join(missing)}")

    name = data["temperament"]
    if name not in TEMPERAMENTS:
        raise MalformedDocument(f"unknown temperament: {name!r}")

    offs = data["offsets"]
    if not isinstance(offs, list) or len(offs) != NUM_SIMPLE:
        raise MalformedDocument(f"offsets: expected a list of {NUM_SIMPLE} numbers")
    fields = [_number(v, f"offsets[{i}]") for i, v in enumerate(offs)]

    return TuningDocument(
        temperament=TEMPERAMENTS[name],
        root=_index(data["root"], "root"),
        pure=_index(data["pure"], "pure"),
        tweak=_number(data.get("tweak", 0.0), "tweak"),
        offsets=fields_to_fifths(fields),
    )


def to_dict(doc: TuningDocument) -> Dict[str, Any]:
    return {
        "offsets": fifths_to_fields(list(doc.offsets)),
        "temperament": doc.temperament.name,
        "root": int(doc.root),
        "pure": int(doc.pure),
        "tweak": float(doc.tweak),
    }


def parse_document(text: str) -> TuningDocument:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f"invalid JSON: {e}") from e
    return from_dict(data)


def format_document(doc: TuningDocument) -> str:
    return json.dumps(to_dict(doc), indent=2)


def load_document(path: Path) -> TuningDocument:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedDocument(f"could not read {path}: {e}") from e
    try:
        doc = parse_document(text)
    except MalformedDocument as e:
        logger.warning("rejected tuning document %s: %s", path, e)
        raise
    logger.debug("loaded %s (%s)", path, doc.temperament.name)
    return doc


def save_document(path: Path, doc: TuningDocument):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_document(doc), encoding="utf-8")
    logger.debug("saved %s (%s)", path, doc.temperament.name)
