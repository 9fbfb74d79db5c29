# src/edotuner/errors.py
from __future__ import annotations


class TuningError(Exception):
    """Basis aller Fehler des Tuning-Kerns."""


class InvalidPitchClass(TuningError, ValueError):
    def __init__(self, value):
        super().__init__(f"invalid pitch class: {value!r}")
        self.value = value


class UnsupportedDivision(TuningError, ValueError):
    def __init__(self, division):
        super().__init__(f"no enharmonic table for {division!r}-EDO")
        self.division = division


class MalformedDocument(TuningError, ValueError):
    """Gespeichertes Tuning-Dokument nicht lesbar (JSON, Temperatur, Offsets)."""


class TransactionError(TuningError, RuntimeError):
    """begin()/end() falsch verschachtelt – Bug im Aufrufer, kein Benutzerfehler."""
