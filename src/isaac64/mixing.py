
from __future__ import annotations
from typing import List

MASK64 = (1 << 64) - 1
MAGIC = 0x9E3779B97F4A7C13  # golden ratio

# even indices shift right, odd indices shift left
MIX_SHIFT = (9, 9, 23, 15, 14, 20, 17, 14)

# 4 rounds of mix() over [MAGIC] * 8; regenerate with magic_vector()
INIT_VECTOR = (
    0x647c4677a2884b7c, 0xb9f8b322c73ac862,
    0x8c0ea5053d4712a0, 0xb29b2e824a595524,
    0x82f053db8355e0ce, 0x48fe4a0fa5a09315,
    0xae985bf2cbfc89ed, 0x98f5704f6c44c0ab,
)

def mix(x: List[int]) -> None:
    """Avalanche 8 words in place."""
    for i in range(0, 8, 2):
        x[i] = (x[i] - x[(i + 4) & 7]) & MASK64
        x[(i + 5) & 7] ^= x[(i + 7) & 7] >> MIX_SHIFT[i]
        x[(i + 7) & 7] = (x[(i + 7) & 7] + x[i]) & MASK64
        j = i + 1
        x[j] = (x[j] - x[(j + 4) & 7]) & MASK64
        x[(j + 5) & 7] ^= (x[(j + 7) & 7] << MIX_SHIFT[j]) & MASK64
        x[(j + 7) & 7] = (x[(j + 7) & 7] + x[j]) & MASK64

def magic_vector(rounds: int = 4) -> List[int]:
    x = [MAGIC] * 8
    for _ in range(rounds):
        mix(x)
    return x
