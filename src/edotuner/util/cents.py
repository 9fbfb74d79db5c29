from __future__ import annotations
import re
from typing import Optional

_CENTS_RE = re.compile(r"^[+-]?\d{1,3}(?:[.,]\d*)?$")

def format_cents(value: float, decimals: int = 1) -> str:
    out = f"{float(value):.{decimals}f}"
    # keine "-0.0"-Anzeige
    if float(out) == 0.0:
        out = f"{0.0:.{decimals}f}"
    return out

def parse_cents(text: str, limit: float = 99.9, decimals: int = 1) -> float:
    """Eingabe eines Offset-Felds: Dezimalzahl mit max. `decimals` Nachkommastellen, |x| <= limit."""
    s = (text or "").strip()
    if not _CENTS_RE.match(s):
        raise ValueError(f"not a cent value: {text!r}")
    s = s.replace(",", ".")
    if "." in s and len(s.split(".", 1)[1]) > decimals:
        raise ValueError(f"at most {decimals} decimal(s) allowed: {text!r}")
    value = float(s)
    if abs(value) > limit:
        raise ValueError(f"{value} outside ±{limit}")
    return value

def parse_cents_edit(text: str, current: float, limit: float = 99.9, decimals: int = 1) -> Optional[float]:
    """Wie parse_cents, aber None wenn das Feld den aktuellen Wert unverändert anzeigt."""
    shown = format_cents(current, decimals)
    if (text or "").strip() == shown:
        return None
    value = parse_cents(text, limit, decimals)
    if format_cents(value, decimals) == shown:
        return None
    return value
