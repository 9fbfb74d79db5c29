# src/edotuner/state.py
"""
Tuning-Session: veränderlicher Zustand + Setter, die ausschließlich über die
CommandHistory mutieren. Jede angewandte Änderung geht als (field, value)-Diff
an registrierte Observer (Dialog, Tests, …).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union
from .history import CommandHistory, DEFAULT_CAPACITY
from .persist import TuningDocument
from .pitch import NUM_SIMPLE, C_INDEX, A_INDEX
from .resolve import Resolver, compute_all
from .score import apply_tuning
from .temperaments import DEFAULT_TEMPERAMENT, TemperamentTable, get_temperament

logger = logging.getLogger(__name__)

Observer = Callable[[str, Any], None]


@dataclass
class TuningState:
    temperament: TemperamentTable = DEFAULT_TEMPERAMENT
    division: int = DEFAULT_TEMPERAMENT.division
    root: int = C_INDEX
    pure_tone: int = A_INDEX
    tweak: float = 0.0
    final_offsets: List[float] = field(default_factory=lambda: [0.0] * NUM_SIMPLE)
    modified: bool = False

    def snapshot(self) -> dict:
        return {
            "temperament": self.temperament.name,
            "division": self.division,
            "root": self.root,
            "pure_tone": self.pure_tone,
            "tweak": self.tweak,
            "final_offsets": tuple(self.final_offsets),
            "modified": self.modified,
        }


@dataclass(frozen=True)
class Change:
    """Ein Feld-Diff: alter und neuer Wert, sonst nichts."""
    field: str
    old: Any
    new: Any


class TuningSession:
    def __init__(self, state: Optional[TuningState] = None, history: Optional[CommandHistory] = None,
                 capacity: int = DEFAULT_CAPACITY):
        # leere History ist falsy (__len__), daher explizit auf None prüfen
        self.state = state if state is not None else TuningState()
        self.history = history if history is not None else CommandHistory(capacity)
        self._observers: List[Observer] = []

    # ---- Observer

    def subscribe(self, fn: Observer):
        self._observers.append(fn)

    def unsubscribe(self, fn: Observer):
        if fn in self._observers:
            self._observers.remove(fn)

    def _notify(self, name: str, value: Any):
        for fn in list(self._observers):
            fn(name, value)

    # ---- Anwenden eines Diffs (einziger Schreibzugriff auf den Zustand)

    def _apply(self, name: str, value: Any):
        st = self.state
        if name == "temperament":
            st.temperament = value
            st.division = value.division
        elif name == "final_offset":
            index, cents = value
            st.final_offsets[index] = cents
        elif name == "final_offsets":
            st.final_offsets[:] = list(value)
        else:
            setattr(st, name, value)
        self._notify(name, value)

    def _push(self, change: Change, label: str):
        self.history.add(
            partial(self._apply, change.field, change.old),
            partial(self._apply, change.field, change.new),
            label,
        )

    # ---- Setter (je ein Command)

    def set_temperament(self, table: TemperamentTable):
        self._push(Change("temperament", self.state.temperament, table), "temperament")

    def set_root(self, index: int):
        self._push(Change("root", self.state.root, int(index)), "root")

    def set_pure_tone(self, index: int):
        self._push(Change("pure_tone", self.state.pure_tone, int(index)), "pure tone")

    def set_tweak(self, cents: float):
        self._push(Change("tweak", self.state.tweak, float(cents)), "tweak")

    def set_final_offset(self, index: int, cents: float):
        old = self.state.final_offsets[index]
        self._push(Change("final_offset", (index, old), (index, float(cents))), "offset")

    def set_final_offsets(self, values: Sequence[float], label: str = "offsets"):
        new = tuple(float(v) for v in values)
        if len(new) != NUM_SIMPLE:
            raise ValueError(f"expected {NUM_SIMPLE} offsets, got {len(new)}")
        self._push(Change("final_offsets", tuple(self.state.final_offsets), new), label)

    def set_modified(self, flag: bool):
        self._push(Change("modified", self.state.modified, bool(flag)), "modified")

    def recalculate(self):
        """Alle 21 Endwerte neu aus der Tabelle – ein einziger 21-Feld-Diff."""
        st = self.state
        values = compute_all(st.temperament, st.root, st.pure_tone, st.tweak)
        logger.debug("recalculate %s root=%d pure=%d tweak=%s", st.temperament.name, st.root, st.pure_tone, st.tweak)
        self.set_final_offsets(values, label="recalculate")

    # ---- zusammengesetzte Benutzeraktionen (je eine Transaktion)

    def select_temperament(self, table: Union[str, TemperamentTable]):
        if isinstance(table, str):
            table = get_temperament(table)
        with self.history.transaction(f"select {table.name}"):
            self.set_temperament(table)
            self.set_root(table.root_index)
            self.set_pure_tone(table.pure_index)
            self.set_tweak(0.0)
            self.recalculate()
            self.set_modified(True)

    def select_root(self, index: int):
        with self.history.transaction("select root"):
            self.set_root(index)
            self.set_tweak(0.0)
            self.recalculate()
            self.set_modified(True)

    def select_pure_tone(self, index: int):
        with self.history.transaction("select pure tone"):
            self.set_pure_tone(index)
            self.set_tweak(0.0)
            self.recalculate()
            self.set_modified(True)

    def edit_tweak(self, cents: float):
        with self.history.transaction("edit tweak"):
            self.set_tweak(cents)
            self.recalculate()
            self.set_modified(True)

    def edit_final_offset(self, index: int, cents: float):
        with self.history.transaction("edit offset"):
            self.set_final_offset(index, cents)
            self.set_modified(True)

    def load_document(self, doc: TuningDocument):
        with self.history.transaction("load"):
            self.set_temperament(doc.temperament)
            self.set_root(doc.root)
            self.set_pure_tone(doc.pure)
            self.set_tweak(doc.tweak)
            self.set_final_offsets(doc.offsets, label="load offsets")
            self.set_modified(False)
        logger.debug("session loaded %s", doc.temperament.name)

    def to_document(self) -> TuningDocument:
        st = self.state
        return TuningDocument(
            temperament=st.temperament,
            root=st.root,
            pure=st.pure_tone,
            tweak=st.tweak,
            offsets=list(st.final_offsets),
        )

    def mark_saved(self):
        self.set_modified(False)

    # ---- Undo / Redo

    def undo(self) -> Optional[str]:
        return self.history.undo()

    def redo(self) -> Optional[str]:
        return self.history.redo()

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ---- Anwenden auf Noten

    def resolver(self) -> Resolver:
        """Resolver über die aktuell angezeigten Endwerte (inkl. manueller Edits)."""
        return Resolver.from_offsets(self.state.division, self.state.final_offsets)

    def offset_for(self, pitch_class: int) -> float:
        return self.resolver()(pitch_class)

    def apply(self, notes: Iterable) -> int:
        return apply_tuning(notes, self.resolver())
