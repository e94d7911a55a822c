"""
Storage primitives for the pool machine.

Models the two pieces of mutable storage: the operand stack and the
fixed-size memory bank. Both hold unsigned 64-bit words.
"""

from __future__ import annotations

import numpy as np

from .errors import MemoryFault, StackUnderflow

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1
MEMORY_SIZE = 1024


class OperandStack:
    """LIFO of 64-bit words. The top is the last element."""

    def __init__(self):
        self.data: list[int] = []
        self.peak = 0

    def push(self, val: int):
        self.data.append(val & WORD_MASK)
        if len(self.data) > self.peak:
            self.peak = len(self.data)

    def pop(self) -> int:
        if not self.data:
            raise StackUnderflow("empty stack")
        return self.data.pop()

    def peek(self) -> int:
        if not self.data:
            raise StackUnderflow("empty stack")
        return self.data[-1]

    def require(self, count: int):
        """Fail before mutating anything if fewer than `count` words are held."""
        if len(self.data) < count:
            raise StackUnderflow(
                f"empty stack (need {count}, have {len(self.data)})")

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self):
        return iter(self.data)


class MemoryBank:
    """Fixed-size word-addressed RAM. Out-of-range addresses fault."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self.data = np.zeros(size, dtype=np.uint64)
        self.reads = 0
        self.writes = 0

    def _check(self, addr: int):
        if addr >= self.size:
            raise MemoryFault(
                f"out of bounds: address {addr} (bank holds {self.size} words)")

    def read(self, addr: int) -> int:
        self._check(addr)
        self.reads += 1
        return int(self.data[addr])

    def write(self, addr: int, val: int):
        self._check(addr)
        self.writes += 1
        self.data[addr] = val & WORD_MASK

    def nonzero(self) -> int:
        return int(np.count_nonzero(self.data))

    def __len__(self) -> int:
        return self.size
