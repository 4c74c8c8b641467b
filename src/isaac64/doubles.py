
from __future__ import annotations
import math
import struct
import sys
from dataclasses import dataclass

from .errors import DoubleDomainError

# IEEE-754 binary64: 1 bit signo, 11 exponente, 52 fracción
EXP_BIAS = 0x3FF
EXP_MIN = 1
EXP_MAX = 0x7FE
EXP_MASK = 0x7FF
SIGN_BIT = 1 << 63
FRAC_BITS = 0xF_FFFF_FFFF_FFFF

def double_to_bits(d: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", d))[0]

def bits_to_double(u: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", u))[0]

def is_subnormal(d: float) -> bool:
    if d == 0.0:
        return False
    bits = double_to_bits(d)
    return ((bits >> 52) & EXP_MASK) == 0 and (bits & FRAC_BITS) != 0

@dataclass(frozen=True)
class DoubleBits:
    negative: bool
    exponent: int
    fraction: int

    @classmethod
    def from_float(cls, d: float) -> "DoubleBits":
        db = double_to_bits(d)
        return cls((db & SIGN_BIT) != 0, (db >> 52) & EXP_MASK, db & FRAC_BITS)

    @property
    def unbiased_exponent(self) -> int:
        return self.exponent - EXP_BIAS

    def to_float(self) -> float:
        return encode(self.negative, self.exponent, self.fraction)

def encode(negative: bool, exponent: int, fraction: int) -> float:
    if not 0 <= exponent <= EXP_MAX:
        raise DoubleDomainError(f"exponent field {exponent} outside the finite range")
    d = fraction & FRAC_BITS
    if negative:
        d |= SIGN_BIT
    d |= exponent << 52
    return bits_to_double(d)

def validate_bounds(lo: float, hi: float) -> None:
    if math.isnan(lo) or math.isnan(hi) or math.isinf(lo) or math.isinf(hi):
        raise DoubleDomainError("You cannot use infinities or NaNs for min or max; use finite values")
    if is_subnormal(lo) != is_subnormal(hi):
        raise DoubleDomainError("You cannot mix subnormal and normal doubles for min & max; "
                                "choose both subnormals or both normals")

@dataclass(frozen=True)
class DoubleRequest:
    """
    Límites ya resueltos para construir un double en (lo, hi).

    resolve() aplica, antes de sacar ningún número:
      - lo <= hi siempre (se intercambian si hace falta)
      - min_zero = +0 con subnormales
      - min_zero queda por debajo de la magnitud de un límite distinto de cero
      - un límite exactamente 0.0 se sustituye por +/-min_zero
      - debe existir al menos un double estrictamente entre lo y hi
    """
    lo: float
    hi: float
    min_zero: float
    subnormal: bool

    @classmethod
    def resolve(cls, lo: float, hi: float, min_zero: float) -> "DoubleRequest":
        lo, hi = float(lo), float(hi)
        validate_bounds(lo, hi)
        if math.isnan(min_zero) or math.isinf(min_zero) or min_zero < 0.0:
            raise DoubleDomainError("min_zero must be a finite value >= 0")
        if lo == hi:
            raise DoubleDomainError(f"empty range: min == max == {lo!r}")
        if lo > hi:
            lo, hi = hi, lo

        sn = is_subnormal(lo)
        if sn:
            min_zero = 0.0
        else:
            if min_zero < sys.float_info.min:
                raise DoubleDomainError("min_zero must be a normal double (> 0) when min and max are normal")
            # min_zero queda estrictamente por debajo de cualquier límite distinto de cero
            for bound in (lo, hi):
                if bound != 0.0 and abs(bound) <= min_zero:
                    min_zero = math.nextafter(abs(bound), 0.0)
            if lo == 0.0:
                lo = min_zero
            elif hi == 0.0:
                hi = -min_zero
        if not math.nextafter(lo, hi) < hi:
            raise DoubleDomainError(f"no double lies strictly inside ({lo!r}, {hi!r})")
        return cls(lo, hi, min_zero, sn)

def construct_double(req: DoubleRequest, draw) -> float:
    """
    Construye el double sacando signo, exponente y fracción por separado.
    draw aporta ranged_rand16s / ranged_rand32 / ranged_rand64.

    Los extremos se acotan con el double adyacente hacia dentro del rango,
    así el resultado nunca es igual a lo ni a hi.
    """
    d1 = DoubleBits.from_float(req.lo)
    d2 = DoubleBits.from_float(req.hi)

    # signo: ambos iguales -> ese; distintos -> al azar
    same_sign = d1.negative == d2.negative
    negative = d1.negative if same_sign else draw.ranged_rand16s(-0x8000, 0x7FFF) < 0

    # near: magnitud mínima admitida; far: magnitud máxima admitida
    if same_sign:
        near_mag, far_mag = sorted((abs(req.lo), abs(req.hi)))
        near = DoubleBits.from_float(math.nextafter(near_mag, math.inf))
    else:
        far_mag = abs(req.lo if negative else req.hi)
        near = DoubleBits.from_float(req.min_zero)
    far = DoubleBits.from_float(math.nextafter(far_mag, 0.0))

    # subnormales: ambos exponentes son 0 y no se consume nada
    exp_min, exp_max = near.exponent, far.exponent
    new_exp = draw.ranged_rand32(exp_min, exp_max)

    frac_min, frac_max = 0, FRAC_BITS
    # la fracción sólo se acota si el exponente cae en un extremo
    if new_exp == exp_min or new_exp == exp_max:
        if same_sign:
            if exp_min == exp_max:
                frac_min, frac_max = near.fraction, far.fraction
            elif new_exp == exp_min:
                frac_min = near.fraction
            else:
                frac_max = far.fraction
        else:
            frac_max = far.fraction

        # potencias enteras de 2; el suelo de near se mantiene si se baja a exp_min
        if frac_max == 0 and new_exp > exp_min:
            new_exp -= 1
            frac_max = FRAC_BITS
            frac_min = near.fraction if same_sign and new_exp == exp_min else 0

    new_frac = draw.ranged_rand64(frac_min, frac_max)
    return encode(negative, new_exp, new_frac)
