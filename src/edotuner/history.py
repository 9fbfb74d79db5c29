# src/edotuner/history.py
"""
Generische Undo/Redo-Historie mit atomaren Transaktionen.

Jede Zustandsänderung läuft über ``add(undo, redo, label)``; ``redo`` wird
sofort ausgeführt. Mehrere Commands zwischen ``begin()`` und ``end()`` bilden
einen Eintrag, der als Ganzes rückgängig gemacht wird (Undo in umgekehrter
Reihenfolge, Redo in Einfügereihenfolge).
"""
from __future__ import annotations
import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional
from .errors import TransactionError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 30

Action = Callable[[], None]


class HistoryState(enum.Enum):
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"


@dataclass
class Command:
    undo: Action
    redo: Action
    label: str = ""


@dataclass
class HistoryEntry:
    label: str = ""
    commands: List[Command] = field(default_factory=list)

    def undo(self):
        for cmd in reversed(self.commands):
            cmd.undo()

    def redo(self):
        for cmd in self.commands:
            cmd.redo()


class CommandHistory:
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = int(capacity)
        self.entries: List[HistoryEntry] = []
        self.cursor = -1
        self.state = HistoryState.IDLE
        self._redo_tail: List[HistoryEntry] = []

    # ---- Transaktionen

    @property
    def in_transaction(self) -> bool:
        return self.state is HistoryState.IN_TRANSACTION

    def begin(self, label: str = ""):
        if self.in_transaction:
            raise TransactionError("begin() while a transaction is open")
        # Redo-Zweig abhängen; endgültig weg erst mit end()
        self._redo_tail = self.entries[self.cursor + 1:]
        del self.entries[self.cursor + 1:]
        self.entries.append(HistoryEntry(label=label))
        self.cursor = len(self.entries) - 1
        self.state = HistoryState.IN_TRANSACTION

    def end(self):
        if not self.in_transaction:
            raise TransactionError("end() without begin()")
        self.state = HistoryState.IDLE
        self._redo_tail = []
        entry = self.entries[self.cursor]
        # Ring voll -> ältesten Eintrag erst beim Commit verdrängen
        if len(self.entries) > self.capacity:
            dropped = self.entries.pop(0)
            self.cursor -= 1
            logger.debug("history full, evicted %r", dropped.label)
        logger.debug("committed %r (%d commands)", entry.label, len(entry.commands))

    @contextmanager
    def transaction(self, label: str = "") -> Iterator[HistoryEntry]:
        """
        begin()/end() als Kontext. Wirft der Block, werden die bereits
        ausgeführten Commands zurückgenommen und der Eintrag verworfen.
        """
        self.begin(label)
        entry = self.entries[self.cursor]
        try:
            yield entry
        except BaseException:
            self._rollback(entry)
            raise
        self.end()

    def _rollback(self, entry: HistoryEntry):
        logger.debug("rolling back %r (%d commands)", entry.label, len(entry.commands))
        self.state = HistoryState.IDLE
        entry.undo()
        del self.entries[self.cursor]
        self.cursor -= 1
        self.entries.extend(self._redo_tail)
        self._redo_tail = []

    # ---- Commands

    def add(self, undo: Action, redo: Action, label: str = ""):
        cmd = Command(undo=undo, redo=redo, label=label)
        redo()
        if self.in_transaction:
            self.entries[self.cursor].commands.append(cmd)
            return
        self.begin(label)
        self.entries[self.cursor].commands.append(cmd)
        self.end()

    # ---- Undo / Redo

    def can_undo(self) -> bool:
        return self.cursor >= 0

    def can_redo(self) -> bool:
        return self.cursor + 1 < len(self.entries)

    def undo(self) -> Optional[str]:
        if self.in_transaction:
            raise TransactionError("undo() inside an open transaction")
        if self.cursor < 0:
            return None
        entry = self.entries[self.cursor]
        entry.undo()
        self.cursor -= 1
        logger.debug("undo %r", entry.label)
        return entry.label

    def redo(self) -> Optional[str]:
        if self.in_transaction:
            raise TransactionError("redo() inside an open transaction")
        if self.cursor + 1 >= len(self.entries):
            return None
        self.cursor += 1
        entry = self.entries[self.cursor]
        entry.redo()
        logger.debug("redo %r", entry.label)
        return entry.label

    def labels(self) -> List[str]:
        return [e.label for e in self.entries]

    def clear(self):
        if self.in_transaction:
            raise TransactionError("clear() inside an open transaction")
        self.entries.clear()
        self.cursor = -1

    def __len__(self) -> int:
        return len(self.entries)
