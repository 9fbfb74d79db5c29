# src/edotuner/resolve.py
"""
Temperament resolver: notierte pitch class -> Cent-Offset.

Einfache Schreibweisen (Fb … B#) werden aus der Tabelle berechnet, relativ zum
reinen Ton (pure tone), der dadurch exakt auf seiner 12-EDO-Höhe bleibt.
Doppelvorzeichen werden je Teilung enharmonisch auf eine einfache Schreibweise
abgebildet und liefern deren *aktuellen* (ggf. manuell editierten) Wert.
"""
from __future__ import annotations
from typing import Callable, List, Optional, Sequence
from .pitch import NUM_SIMPLE, C_INDEX, check_tpc, is_simple, to_index
from .temperaments import TemperamentTable, remap_double

Lookup = Callable[[int], float]


def _rotate(index: int, root: int) -> int:
    # +NUM_SIMPLE hält den Index vor dem Modulo positiv
    return (index - root + C_INDEX + NUM_SIMPLE) % NUM_SIMPLE


def pure_adjustment(table: TemperamentTable, root: int, pure_tone: int) -> float:
    return table.offsets[_rotate(pure_tone, root)]


def compute_offset(index: int, table: TemperamentTable, root: int, pure_tone: int, tweak: float = 0.0) -> float:
    """Offset einer einfachen Schreibweise (simple index 0..20) aus der Tabelle."""
    raw = table.offsets[_rotate(index, root)]
    return raw - pure_adjustment(table, root, pure_tone) + tweak


def compute_all(table: TemperamentTable, root: int, pure_tone: int, tweak: float = 0.0) -> List[float]:
    return [compute_offset(i, table, root, pure_tone, tweak) for i in range(NUM_SIMPLE)]


def resolve_offset(
    pitch_class: int,
    table: TemperamentTable,
    root: int,
    pure_tone: int,
    tweak: float = 0.0,
    finals: Optional[Sequence[float]] = None,
) -> float:
    """
    pitch_class: tonal pitch class (-1 … 33)
    finals: aktuell angezeigte 21 Endwerte; Doppelvorzeichen lesen daraus.
            Ohne finals wird die Entsprechung aus der Tabelle berechnet.
    """
    check_tpc(pitch_class)
    if is_simple(pitch_class):
        return compute_offset(to_index(pitch_class), table, root, pure_tone, tweak)
    idx = remap_double(pitch_class, table.division)
    if finals is not None:
        return float(finals[idx])
    return compute_offset(idx, table, root, pure_tone, tweak)


class Resolver:
    """
    Gleiche Validierung und Doppelvorzeichen-Logik, aber beliebige Quelle
    für die 21 einfachen Werte (z.B. gespeicherte oder editierte Offsets).
    """
    def __init__(self, division: int, lookup: Lookup):
        self.division = int(division)
        self.lookup = lookup

    @classmethod
    def from_offsets(cls, division: int, offsets: Sequence[float]) -> "Resolver":
        values = [float(v) for v in offsets]
        if len(values) != NUM_SIMPLE:
            raise ValueError(f"expected {NUM_SIMPLE} offsets, got {len(values)}")
        return cls(division, values.__getitem__)

    @classmethod
    def from_table(cls, table: TemperamentTable, root: int, pure_tone: int, tweak: float = 0.0) -> "Resolver":
        return cls(table.division, lambda i: compute_offset(i, table, root, pure_tone, tweak))

    def index_for(self, pitch_class: int) -> int:
        check_tpc(pitch_class)
        if is_simple(pitch_class):
            return to_index(pitch_class)
        return remap_double(pitch_class, self.division)

    def __call__(self, pitch_class: int) -> float:
        return float(self.lookup(self.index_for(pitch_class)))
