# src/edotuner/pitch.py
from __future__ import annotations
from typing import Dict, List, Tuple
from .errors import InvalidPitchClass

# Tonal pitch classes (Quintenzirkel), Numerierung wie in der Notationssoftware:
#   -1 = Fbb … 5 = Bbb | 6 = Fb … 26 = B# | 27 = F## … 33 = B##
TPC_MIN = -1
TPC_MAX = 33
SIMPLE_MIN = 6
SIMPLE_MAX = 26
NUM_SIMPLE = 21

C_INDEX = 8
A_INDEX = 11

NATURALS = ["F", "C", "G", "D", "A", "E", "B"]
_ACCIDENTALS = ["bb", "b", "", "#", "##"]

# simple index 0..20 in Quintenreihenfolge
SIMPLE_NAMES: List[str] = [n + a for a in ("b", "", "#") for n in NATURALS]

# Feldreihenfolge der gespeicherten Offsets (Dokument/Dialog)
FIELD_ORDER: List[str] = [
    "Cb", "C", "C#", "Db", "D", "D#", "Eb", "E", "E#", "Fb", "F", "F#",
    "Gb", "G", "G#", "Ab", "A", "A#", "Bb", "B", "B#",
]

STEP_TO_FIFTHS = {n: i for i, n in enumerate(NATURALS)}  # F=0 … B=6


def is_valid(tpc: int) -> bool:
    return TPC_MIN <= tpc <= TPC_MAX


def check_tpc(tpc: int) -> int:
    if isinstance(tpc, bool) or not isinstance(tpc, int) or not is_valid(tpc):
        raise InvalidPitchClass(tpc)
    return tpc


def is_simple(tpc: int) -> bool:
    return SIMPLE_MIN <= tpc <= SIMPLE_MAX


def is_double_flat(tpc: int) -> bool:
    return TPC_MIN <= tpc < SIMPLE_MIN


def is_double_sharp(tpc: int) -> bool:
    return SIMPLE_MAX < tpc <= TPC_MAX


def to_index(tpc: int) -> int:
    """Simple pitch class -> Tabellenindex 0..20."""
    if not is_simple(tpc):
        raise InvalidPitchClass(tpc)
    return tpc - SIMPLE_MIN


def from_index(index: int) -> int:
    if not 0 <= index < NUM_SIMPLE:
        raise InvalidPitchClass(index + SIMPLE_MIN)
    return index + SIMPLE_MIN


def tpc_name(tpc: int) -> str:
    check_tpc(tpc)
    k = tpc - TPC_MIN
    return NATURALS[k % 7] + _ACCIDENTALS[k // 7]


def index_name(index: int) -> str:
    return tpc_name(from_index(index))


def tpc_from_step(step: str, alter: int = 0) -> int:
    """
    (step, alter) wie in MusicXML <pitch> -> tonal pitch class.
    Eine Alteration verschiebt um 7 Quinten.
    """
    key = (step or "").strip().upper()
    if key not in STEP_TO_FIFTHS:
        raise InvalidPitchClass(step)
    tpc = STEP_TO_FIFTHS[key] + 13 + 7 * int(alter)
    return check_tpc(tpc)


def parse_spelling(text: str) -> int:
    """'C', 'F#', 'Bb', 'Ebb', 'G##' (auch 'x' für ##) -> tonal pitch class."""
    s = (text or "").strip()
    if not s:
        raise InvalidPitchClass(text)
    step, acc = s[0], s[1:].replace("x", "##")
    if acc and set(acc) == {"#"}:
        alter = len(acc)
    elif acc and set(acc) == {"b"}:
        alter = -len(acc)
    elif acc == "":
        alter = 0
    else:
        raise InvalidPitchClass(text)
    return tpc_from_step(step, alter)


def parse_index(text: str) -> int:
    """Index (0..20) oder einfache Schreibweise -> simple index."""
    s = str(text).strip()
    if s.lstrip("-").isdigit():
        index = int(s)
        from_index(index)
        return index
    return to_index(parse_spelling(s))


def _build_field_maps() -> Tuple[List[int], Dict[int, int]]:
    field_to_index = [to_index(parse_spelling(n)) for n in FIELD_ORDER]
    index_to_field = {idx: pos for pos, idx in enumerate(field_to_index)}
    return field_to_index, index_to_field


FIELD_TO_INDEX, INDEX_TO_FIELD = _build_field_maps()


def fields_to_fifths(values: List[float]) -> List[float]:
    """Feldreihenfolge (Cb, C, C#, …) -> Quintenreihenfolge (Fb, Cb, Gb, …)."""
    out = [0.0] * NUM_SIMPLE
    for pos, idx in enumerate(FIELD_TO_INDEX):
        out[idx] = values[pos]
    return out


def fifths_to_fields(values: List[float]) -> List[float]:
    return [values[idx] for idx in FIELD_TO_INDEX]
