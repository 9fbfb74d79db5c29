# src/edotuner/score.py
"""
Schnittstelle zur Notationssoftware: Noten kommen von außen (Auswahl/Cursor),
der Kern schreibt nur den Cent-Offset (`tuning`) pro Note zurück.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional
from .pitch import tpc_from_step

logger = logging.getLogger(__name__)


@dataclass
class ScoreNote:
    tpc: int                  # tonal pitch class (-1 … 33)
    tuning: float = 0.0       # Cent-Offset, wird vom Kern geschrieben
    voice: Optional[str] = None
    staff: Optional[str] = None

    @classmethod
    def from_pitch(cls, step: str, alter: int = 0, **kw) -> "ScoreNote":
        return cls(tpc=tpc_from_step(step, alter), **kw)


def apply_tuning(notes: Iterable, resolve: Callable[[int], float]) -> int:
    """
    Schreibt resolve(note.tpc) nach note.tuning. Alle Offsets werden zuerst
    berechnet; bei ungültiger pitch class bleibt keine Note verändert.
    Rückgabe: Anzahl geänderter Noten.
    """
    items = list(notes)
    values = [resolve(n.tpc) for n in items]
    for n, cents in zip(items, values):
        n.tuning = cents
    logger.debug("tuned %d notes", len(items))
    return len(items)
