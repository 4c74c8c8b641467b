
# src/isaac64/rng.py
from __future__ import annotations
import logging
import struct
import threading
from typing import Iterable, List, Optional

import numpy as np

from .banks import SubwordBank
from .config import RngConfig
from .core import Isaac64Core
from .doubles import DoubleRequest, construct_double
from .errors import CharsetError
from .ranged import WIDTHS, reduce, signed_result, signed_span, unsigned_span
from .seeding import SeedMaterial, normalize_seed

logger = logging.getLogger(__name__)

DIGITS = "0123456789"
UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWER = "abcdefghijklmnopqrstuvwxyz"

W8, W16, W32, W64 = WIDTHS[8], WIDTHS[16], WIDTHS[32], WIDTHS[64]

def build_charset(upper: bool = True, lower: bool = True, numeric: bool = True,
                  extra_symbols: Optional[Iterable[str]] = None) -> List[str]:
    charset: List[str] = []
    if numeric:
        charset.extend(DIGITS)
    if upper:
        charset.extend(UPPER)
    if lower:
        charset.extend(LOWER)
    if extra_symbols is not None:
        charset.extend(extra_symbols)
    if not charset:
        raise CharsetError("You must enable at least one character group or pass custom symbols.")
    if len(charset) > 256:
        raise CharsetError("charset cannot hold more than 256 symbols")
    return charset

class Isaac64:
    """
    Generador ISAAC64 con bancos de sub-palabras y muestreo por rangos.

    Formas de semilla (mutuamente excluyentes):
      Isaac64()                      -> 2048 bytes de entropía del sistema
      Isaac64(testing=True)          -> estado de referencia sin semilla
      Isaac64(b"...")                -> hasta 2048 bytes
      Isaac64([w0, w1, ...])         -> hasta 256 palabras de 64 bits
      Isaac64(0xDEADBEEF)            -> un entero de 64 bits distinto de cero

    Todas las operaciones públicas se serializan con un único lock por instancia.
    No es un generador criptográfico.
    """
    def __init__(self, seed=None, *, testing: bool = False, ignore_bounds: bool = False,
                 config: Optional[RngConfig] = None):
        self.config = config or RngConfig()
        self._lock = threading.RLock()
        self._core = Isaac64Core()
        self._bank32 = SubwordBank(32)
        self._bank16 = SubwordBank(16)
        self._bank8 = SubwordBank(8)
        material = normalize_seed(seed, testing=testing, ignore_bounds=ignore_bounds, config=self.config)
        self._apply_seed(material)

    @classmethod
    def for_testing(cls) -> "Isaac64":
        return cls(testing=True)

    # ---------- ciclo de vida ----------

    def _apply_seed(self, material: SeedMaterial) -> None:
        self._core.initialize(material.words)
        for bank in (self._bank32, self._bank16, self._bank8):
            bank.clear()
        logger.debug("isaac64: seeded (%s form)", material.form)

    def reseed(self, seed=None, *, testing: bool = False, ignore_bounds: bool = False) -> None:
        # se valida antes de tocar nada: una semilla rechazada no altera el estado
        material = normalize_seed(seed, testing=testing, ignore_bounds=ignore_bounds, config=self.config)
        with self._lock:
            self._apply_seed(material)

    def shuffle(self) -> None:
        """Mezcla de nuevo el estado y repuebla el buffer; no re-siembra."""
        with self._lock:
            self._core.shuffle()
            self._core.reset_cursor()
            logger.debug("isaac64: explicit shuffle #%d", self._core.shuffles)

    def clone(self) -> "Isaac64":
        with self._lock:
            copy = Isaac64.__new__(Isaac64)
            copy.config = self.config
            copy._lock = threading.RLock()
            copy._core = self._core.clone()
            copy._bank32 = self._bank32.clone()
            copy._bank16 = self._bank16.clone()
            copy._bank8 = self._bank8.clone()
        logger.debug("isaac64: cloned at cursor %d", copy._core.cursor)
        return copy

    @property
    def words_consumed(self) -> int:
        """Palabras de 64 bits sacadas del núcleo desde la última siembra."""
        with self._lock:
            return self._core.words_consumed

    @property
    def shuffles(self) -> int:
        with self._lock:
            return self._core.shuffles

    # ---------- sacar palabras ----------

    def _narrow(self, bank: SubwordBank) -> int:
        v = bank.pop()
        if v is None:
            v = bank.bank_word(self._core.next_word())
        return v

    def _check_max(self, width, max_value: Optional[int]) -> Optional[int]:
        if max_value is not None:
            width.check_unsigned("max_value", max_value)
        return max_value

    def rand64(self, max_value: Optional[int] = None) -> int:
        """Entero sin signo de 64 bits en [0, max_value]; None = ancho completo."""
        self._check_max(W64, max_value)
        with self._lock:
            return reduce(self._core.next_word(), max_value, W64)

    def rand32(self, max_value: Optional[int] = None) -> int:
        self._check_max(W32, max_value)
        with self._lock:
            return reduce(self._narrow(self._bank32), max_value, W32)

    def rand16(self, max_value: Optional[int] = None) -> int:
        self._check_max(W16, max_value)
        with self._lock:
            return reduce(self._narrow(self._bank16), max_value, W16)

    def rand8(self, max_value: Optional[int] = None) -> int:
        self._check_max(W8, max_value)
        with self._lock:
            return reduce(self._narrow(self._bank8), max_value, W8)

    # ---------- rangos [min, max] inclusivos ----------

    def _ranged(self, width, draw, a: int, b: int) -> int:
        width.check_unsigned("min_value", a)
        width.check_unsigned("max_value", b)
        if a == b:
            return a
        lo, span = unsigned_span(a, b)
        return lo + draw(span)

    def _ranged_signed(self, width, draw, a: int, b: int) -> int:
        width.check_signed("min_value", a)
        width.check_signed("max_value", b)
        if a == b:
            return a
        lo, span = signed_span(a, b, width)
        return signed_result(lo, draw(span), width)

    def ranged_rand64(self, min_value: int, max_value: int) -> int:
        return self._ranged(W64, self.rand64, min_value, max_value)

    def ranged_rand64s(self, min_value: int, max_value: int) -> int:
        return self._ranged_signed(W64, self.rand64, min_value, max_value)

    def ranged_rand32(self, min_value: int, max_value: int) -> int:
        return self._ranged(W32, self.rand32, min_value, max_value)

    def ranged_rand32s(self, min_value: int, max_value: int) -> int:
        return self._ranged_signed(W32, self.rand32, min_value, max_value)

    def ranged_rand16(self, min_value: int, max_value: int) -> int:
        return self._ranged(W16, self.rand16, min_value, max_value)

    def ranged_rand16s(self, min_value: int, max_value: int) -> int:
        return self._ranged_signed(W16, self.rand16, min_value, max_value)

    def ranged_rand8(self, min_value: int, max_value: int) -> int:
        return self._ranged(W8, self.rand8, min_value, max_value)

    def ranged_rand8s(self, min_value: int, max_value: int) -> int:
        return self._ranged_signed(W8, self.rand8, min_value, max_value)

    # ---------- caracteres ----------

    def rand_alphanum(self, upper: bool = True, lower: bool = True, numeric: bool = True,
                      extra_symbols: Optional[Iterable[str]] = None) -> str:
        charset = build_charset(upper, lower, numeric, extra_symbols)
        count = len(charset)
        limit = 256 - (256 % count)
        # rechazo para quitar el sesgo del módulo
        with self._lock:
            while True:
                rnd = self.rand8()
                if rnd < limit:
                    return charset[rnd % count]

    # ---------- doubles ----------

    def rand_double_raw(self, min_value: float, max_value: float, min_zero: Optional[float] = None) -> float:
        """
        Double en (min_value, max_value) sacando signo, exponente y fracción
        por separado. Ambos límites deben ser normales o ambos subnormales.
        min_zero es el mínimo práctico cuando el cero forma parte del rango.
        """
        req = DoubleRequest.resolve(min_value, max_value,
                                    self.config.min_zero if min_zero is None else min_zero)
        with self._lock:
            return construct_double(req, self)

    def rand_double(self) -> float:
        """Double en (0.0, 1.0): la mantisa de [1, 2) menos el 1 implícito."""
        return self.rand_double_raw(1.0, 2.0, 1.0e-3) - 1.0

    # ---------- lotes ----------

    def random_bytes(self, n: int) -> bytes:
        if n <= 0:
            return b""
        whole, rest = divmod(n, 8)
        with self._lock:
            words = [self._core.next_word() for _ in range(whole)]
            tail = bytes(self.rand8() for _ in range(rest))
        return struct.pack("<%dQ" % whole, *words) + tail

    def rand64_array(self, count: int) -> np.ndarray:
        """np.ndarray uint64 con count palabras del mismo flujo que rand64()."""
        if count <= 0:
            return np.empty(0, dtype=np.uint64)
        with self._lock:
            words = [self._core.next_word() for _ in range(count)]
        return np.array(words, dtype=np.uint64)

    def rand32_array(self, count: int) -> np.ndarray:
        if count <= 0:
            return np.empty(0, dtype=np.uint32)
        with self._lock:
            vals = [self._narrow(self._bank32) for _ in range(count)]
        return np.array(vals, dtype=np.uint32)
