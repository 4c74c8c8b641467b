
from __future__ import annotations
import secrets
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import MAX_SEED_BYTES, RngConfig
from .core import SIZE
from .errors import SeedError
from .mixing import MASK64

@dataclass(frozen=True)
class SeedMaterial:
    """Semilla ya validada: 256 palabras, o None para la forma cero/testing."""
    words: Optional[List[int]]
    form: str  # "zero" | "int" | "words" | "bytes" | "system"

    @property
    def is_zero(self) -> bool:
        return self.words is None

ZERO_SEED = SeedMaterial(None, "zero")

def system_seed(n: int = MAX_SEED_BYTES) -> bytes:
    return secrets.token_bytes(min(n, MAX_SEED_BYTES))

def pack_bytes(data: bytes) -> List[int]:
    """Little-endian, 8 bytes por palabra; lo que falte queda a cero."""
    words = [0] * SIZE
    for i, byte in enumerate(data):
        words[i >> 3] |= byte << ((i & 7) * 8)
    return words

def _from_bytes(data: bytes, ignore_bounds: bool, form: str = "bytes") -> SeedMaterial:
    if len(data) == 0 or len(data) > MAX_SEED_BYTES:
        if not ignore_bounds:
            raise SeedError(f"Cannot seed ISAAC64 with zero or more than {MAX_SEED_BYTES} bytes; "
                            f"pass ignore_bounds=True to allow it")
        if len(data) == 0:
            return ZERO_SEED
        data = data[:MAX_SEED_BYTES]
    return SeedMaterial(pack_bytes(data), form)

def _from_words(seq, ignore_bounds: bool) -> SeedMaterial:
    values = [int(w) for w in seq]
    if len(values) == 0 or len(values) > SIZE:
        if not ignore_bounds:
            raise SeedError(f"Cannot seed ISAAC64 with zero or more than {SIZE} words; "
                            f"pass ignore_bounds=True to allow it")
        if len(values) == 0:
            return ZERO_SEED
        values = values[:SIZE]
    for w in values:
        if not 0 <= w <= MASK64:
            raise SeedError(f"seed word out of 64-bit range: {w}")
    return SeedMaterial(values + [0] * (SIZE - len(values)), "words")

def normalize_seed(seed=None, *, testing: bool = False, ignore_bounds: bool = False,
                   config: Optional[RngConfig] = None) -> SeedMaterial:
    """
    Convierte cualquiera de las formas de semilla admitidas en SeedMaterial.
    Sólo valida y empaqueta; nunca toca el estado de un generador.
    """
    if testing:
        if seed is None or (isinstance(seed, int) and not isinstance(seed, bool) and seed == 0):
            return ZERO_SEED
        raise SeedError("testing=True selects the unseeded reference state; do not pass a seed")

    if seed is None:
        cfg = config or RngConfig()
        return _from_bytes(system_seed(cfg.seed_bytes), ignore_bounds=False, form="system")

    if isinstance(seed, bool):
        raise SeedError("bool is not a valid seed")

    if isinstance(seed, (int, np.integer)):
        value = int(seed)
        if value == 0:
            if ignore_bounds:
                return ZERO_SEED
            raise SeedError("Rng seeded with 0; use testing=True for the unseeded reference state")
        if not 0 < value <= MASK64:
            raise SeedError(f"numeric seed out of 64-bit range: {value}")
        return SeedMaterial([value] + [0] * (SIZE - 1), "int")

    if isinstance(seed, (bytes, bytearray, memoryview)):
        return _from_bytes(bytes(seed), ignore_bounds)

    if isinstance(seed, np.ndarray):
        if seed.ndim != 1 or seed.dtype.kind not in "iu":
            raise SeedError("numpy seed must be a 1-D integer array")
        if seed.dtype.itemsize == 1 and seed.dtype.kind == "u":
            return _from_bytes(seed.tobytes(), ignore_bounds)
        return _from_words(seed.tolist(), ignore_bounds)

    if isinstance(seed, (list, tuple)):
        if any(isinstance(w, bool) or not isinstance(w, (int, np.integer)) for w in seed):
            raise SeedError("word seeds must contain only integers")
        return _from_words(seed, ignore_bounds)

    raise SeedError(f"unsupported seed type: {type(seed).__name__}")
