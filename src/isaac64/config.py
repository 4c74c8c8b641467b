import math, os
from dataclasses import dataclass

MAX_SEED_BYTES = 2048

@dataclass
class RngConfig:
    seed_bytes: int = MAX_SEED_BYTES   # entropía del sistema para Isaac64()
    min_zero: float = 1e-3             # épsilon por defecto de rand_double_raw

    def __post_init__(self):
        if not 0 < self.seed_bytes <= MAX_SEED_BYTES:
            raise ValueError(f"seed_bytes must be in 1..{MAX_SEED_BYTES}")
        if not (math.isfinite(self.min_zero) and self.min_zero > 0.0):
            raise ValueError("min_zero must be finite and > 0")

    @classmethod
    def from_env(cls) -> "RngConfig":
        return cls(
            seed_bytes=int(os.environ.get("ISAAC64_SEED_BYTES", str(MAX_SEED_BYTES))),
            min_zero=float(os.environ.get("ISAAC64_MIN_ZERO", "1e-3")),
        )
