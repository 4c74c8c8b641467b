
from __future__ import annotations
from typing import List, Optional, Sequence

from .mixing import INIT_VECTOR, MASK64, mix

LOG2_SIZE = 8
SIZE = 1 << LOG2_SIZE          # 256 words of state / output
HALF = SIZE // 2
IND_MASK = (SIZE - 1) << 3     # 0x7F8

def _ind(mm: List[int], x: int) -> int:
    # word-aligned byte offset into mm, as an index
    return mm[(x & IND_MASK) >> 3]

class Isaac64Core:
    """
    Estado ISAAC64 puro: state (mm), buffer (randrsl), aa/bb/cc y el cursor.
    No es thread-safe por sí mismo; Isaac64 (rng.py) lo protege con su lock.
    """
    def __init__(self):
        self.state: List[int] = [0] * SIZE
        self.buffer: List[int] = [0] * SIZE
        self.aa = 0
        self.bb = 0
        self.cc = 0
        self.cursor = SIZE
        # contadores para auditar el consumo de entropía
        self.words_consumed = 0
        self.shuffles = 0

    # ---------- núcleo ----------

    def shuffle(self) -> None:
        mm, rsl = self.state, self.buffer
        a = self.aa
        self.cc = (self.cc + 1) & MASK64
        b = (self.bb + self.cc) & MASK64
        r = 0
        for m, m2 in ((0, HALF), (HALF, 0)):
            for k in range(HALF):
                i = m + k
                x = mm[i]
                step = i & 3
                if step == 0:
                    a = ~(a ^ (a << 21)) & MASK64
                elif step == 1:
                    a = a ^ (a >> 5)
                elif step == 2:
                    a = (a ^ (a << 12)) & MASK64
                else:
                    a = a ^ (a >> 33)
                a = (a + mm[m2 + k]) & MASK64
                mm[i] = y = (_ind(mm, x) + a + b) & MASK64
                rsl[r] = b = (_ind(mm, y >> LOG2_SIZE) + x) & MASK64
                r += 1
        self.aa = a
        self.bb = b
        self.shuffles += 1

    def reset_cursor(self) -> None:
        self.cursor = SIZE

    def next_word(self) -> int:
        self.cursor -= 1
        if self.cursor < 0:
            self.shuffle()
            self.cursor = SIZE - 1
        self.words_consumed += 1
        return self.buffer[self.cursor]

    # ---------- seeding ----------

    def initialize(self, seed_words: Optional[Sequence[int]]) -> None:
        """
        Rellena el estado a partir de 256 palabras de semilla.
        seed_words=None es la forma cero (estado de referencia sin semilla).
        """
        zero = seed_words is None
        if not zero and len(seed_words) != SIZE:
            raise ValueError(f"seed material must be exactly {SIZE} words")
        self.state = [0] * SIZE
        self.buffer = [0] * SIZE if zero else [w & MASK64 for w in seed_words]
        self.aa = self.bb = self.cc = 0
        self.words_consumed = 0
        self.shuffles = 0

        x = list(INIT_VECTOR)
        self._fold(x, None if zero else self.buffer)
        if not zero:
            # segunda pasada: reparte la entropía de semillas pequeñas
            self._fold(x, self.state)
        self.shuffle()
        self.reset_cursor()

    def _fold(self, x: List[int], source: Optional[List[int]]) -> None:
        mm = self.state
        for i in range(0, SIZE, 8):
            if source is not None:
                for j in range(8):
                    x[j] = (x[j] + source[i + j]) & MASK64
            mix(x)
            mm[i:i + 8] = x

    def clone(self) -> "Isaac64Core":
        copy = Isaac64Core.__new__(Isaac64Core)
        copy.state = self.state[:]
        copy.buffer = self.buffer[:]
        copy.aa, copy.bb, copy.cc = self.aa, self.bb, self.cc
        copy.cursor = self.cursor
        copy.words_consumed = self.words_consumed
        copy.shuffles = self.shuffles
        return copy
