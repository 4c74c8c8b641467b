
from typing import List, Optional

class SubwordBank:
    """
    Pila LIFO de fragmentos sobrantes para un ancho (32, 16 u 8 bits).
    Al partir una palabra de 64 bits se devuelve el trozo bajo y el resto
    se apila de más a menos significativo, así salen de menor a mayor.
    """
    def __init__(self, bits: int):
        if bits not in (8, 16, 32):
            raise ValueError("bank width must be 8, 16 or 32 bits")
        self.bits = bits
        self.mask = (1 << bits) - 1
        self.cap = 64 // bits - 1
        self.items: List[int] = []

    def push(self, value: int) -> None:
        if len(self.items) >= self.cap:
            raise OverflowError(f"{self.bits}-bit bank holds at most {self.cap} fragments")
        self.items.append(value & self.mask)

    def pop(self) -> Optional[int]:
        if not self.items:
            return None
        return self.items.pop()

    def bank_word(self, word: int) -> int:
        # descendente: la rodaja más alta queda al fondo
        for i in range(self.cap, 0, -1):
            self.push(word >> (i * self.bits))
        return word & self.mask

    def clear(self) -> None:
        self.items.clear()

    def clone(self) -> "SubwordBank":
        copy = SubwordBank(self.bits)
        copy.items = self.items[:]
        return copy

    def __len__(self) -> int:
        return len(self.items)
