
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import WidthError

@dataclass(frozen=True)
class Width:
    """Un ancho entero (8/16/32/64) con sus límites con y sin signo."""
    bits: int
    mask: int = field(init=False)
    smin: int = field(init=False)
    smax: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "mask", (1 << self.bits) - 1)
        object.__setattr__(self, "smin", -(1 << (self.bits - 1)))
        object.__setattr__(self, "smax", (1 << (self.bits - 1)) - 1)

    @property
    def umax(self) -> int:
        return self.mask

    def to_unsigned(self, v: int) -> int:
        return v & self.mask

    def to_signed(self, v: int) -> int:
        v &= self.mask
        return v - (1 << self.bits) if v > self.smax else v

    def check_unsigned(self, name: str, v: int) -> int:
        if isinstance(v, bool) or not isinstance(v, int):
            raise WidthError(f"{name} must be an int, got {type(v).__name__}")
        if not 0 <= v <= self.umax:
            raise WidthError(f"{name}={v} does not fit in u{self.bits}")
        return v

    def check_signed(self, name: str, v: int) -> int:
        if isinstance(v, bool) or not isinstance(v, int):
            raise WidthError(f"{name} must be an int, got {type(v).__name__}")
        if not self.smin <= v <= self.smax:
            raise WidthError(f"{name}={v} does not fit in i{self.bits}")
        return v

WIDTHS: Dict[int, Width] = {b: Width(b) for b in (8, 16, 32, 64)}

def reduce(raw: int, range_max: Optional[int], width: Width) -> int:
    """
    Reduce un valor crudo al rango [0, range_max].
    El +1 se hace con enteros de Python, así umax-1 no colapsa a rango cero.
    """
    if range_max is None or range_max == width.umax:
        return raw
    return raw % (range_max + 1)

def normalize_bounds(lo: int, hi: int):
    return (hi, lo) if hi < lo else (lo, hi)

def unsigned_span(lo: int, hi: int):
    """(lo, span) ya ordenados, para el caso sin signo."""
    lo, hi = normalize_bounds(lo, hi)
    return lo, hi - lo

def signed_span(lo: int, hi: int, width: Width):
    """
    Igual que unsigned_span pero con signo: reinterpreta los límites como
    patrones sin signo del mismo ancho; el span siempre cabe en umax.
    """
    lo, hi = normalize_bounds(lo, hi)
    span = (width.to_unsigned(hi) - width.to_unsigned(lo)) & width.mask
    return lo, span

def signed_result(lo: int, raw: int, width: Width) -> int:
    return width.to_signed(width.to_unsigned(lo) + raw)
