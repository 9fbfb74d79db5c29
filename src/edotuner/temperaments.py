# src/edotuner/temperaments.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple
from .errors import UnsupportedDivision
from .pitch import NUM_SIMPLE, C_INDEX, A_INDEX, TPC_MIN, SIMPLE_MAX, is_double_flat, is_double_sharp, to_index


@dataclass(frozen=True)
class TemperamentTable:
    name: str
    division: int
    offsets: Tuple[float, ...]   # Cent-Abweichung von 12-EDO, Quintenreihenfolge, Index 8 = C
    root_index: int = C_INDEX
    pure_index: int = A_INDEX
    label: str = ""

    def __post_init__(self):
        if len(self.offsets) != NUM_SIMPLE:
            raise ValueError(f"{self.name}: expected {NUM_SIMPLE} offsets, got {len(self.offsets)}")


# --- eingebaute Tabellen (Quintenkette der jeweiligen Teilung, A = 0) ---

EQUAL12 = TemperamentTable(
    name="equal12", division=12, label="12-EDO",
    offsets=(0.0,) * NUM_SIMPLE,
)

EQUAL15 = TemperamentTable(
    name="equal15", division=15, label="15-EDO",
    offsets=(
        -220.0, -200.0, -180.0, -160.0, -140.0, -120.0, -100.0,
        -80.0, -60.0, -40.0, -20.0, 0.0, 20.0, 40.0,
        60.0, 80.0, 100.0, 120.0, 140.0, 160.0, 180.0,
    ),
)

EQUAL17 = TemperamentTable(
    name="equal17", division=17, label="17-EDO",
    offsets=(
        -64.7, -58.8, -52.9, -47.1, -41.2, -35.3, -29.4,
        -23.5, -17.6, -11.8, -5.9, 0.0, 5.9, 11.8,
        17.6, 23.5, 29.4, 35.3, 41.2, 47.1, 52.9,
    ),
)

EQUAL19 = TemperamentTable(
    name="equal19", division=19, label="19-EDO",
    offsets=(
        57.9, 52.6, 47.4, 42.1, 36.8, 31.6, 26.3,
        21.1, 15.8, 10.5, 5.3, 0.0, -5.3, -10.5,
        -15.8, -21.1, -26.3, -31.6, -36.8, -42.1, -47.4,
    ),
)

TEMPERAMENTS: Dict[str, TemperamentTable] = {
    t.name: t for t in (EQUAL12, EQUAL15, EQUAL17, EQUAL19)
}

DEFAULT_TEMPERAMENT = EQUAL12


def get_temperament(name: str) -> TemperamentTable:
    try:
        return TEMPERAMENTS[name]
    except KeyError:
        raise KeyError(f"unknown temperament: {name!r}") from None


def by_division(division: int) -> TemperamentTable:
    for t in TEMPERAMENTS.values():
        if t.division == division:
            return t
    raise UnsupportedDivision(division)


# --- Enharmonik für Doppelvorzeichen ---
# Je Teilung: Fbb Cbb Gbb Dbb Abb Ebb Bbb -> simple index, F## … B## -> simple index.
# 12-EDO: 12 Quinten enharmonisch, 17-EDO: 17, 19-EDO: 19.
# 15-EDO nutzt vorerst die 12-EDO-Zuordnung (Notation nicht quintenbasiert, fachlich zu prüfen).

DOUBLE_FLAT_REMAP: Dict[int, Tuple[int, ...]] = {
    12: (5, 6, 7, 8, 9, 10, 11),         # Eb Bb F C G D A
    15: (5, 6, 7, 8, 9, 10, 11),
    17: (10, 11, 12, 13, 14, 15, 16),    # D A E B F# C# G#
    19: (12, 13, 14, 15, 16, 17, 18),    # E B F# C# G# D# A#
}

DOUBLE_SHARP_REMAP: Dict[int, Tuple[int, ...]] = {
    12: (9, 10, 11, 12, 13, 14, 15),     # G D A E B F# C#
    15: (9, 10, 11, 12, 13, 14, 15),
    17: (4, 5, 6, 7, 8, 9, 10),          # Ab Eb Bb F C G D
    19: (2, 3, 4, 5, 6, 7, 8),           # Gb Db Ab Eb Bb F C
}


def remap_double(tpc: int, division: int) -> int:
    """Doppelvorzeichen -> simple index der enharmonischen Entsprechung."""
    if division not in DOUBLE_FLAT_REMAP or division not in DOUBLE_SHARP_REMAP:
        raise UnsupportedDivision(division)
    if is_double_flat(tpc):
        return DOUBLE_FLAT_REMAP[division][tpc - TPC_MIN]
    if is_double_sharp(tpc):
        return DOUBLE_SHARP_REMAP[division][tpc - SIMPLE_MAX - 1]
    return to_index(tpc)
