"""
Fault taxonomy for the pool machine.

Every fault ends the current run. They are raised inside the engine and
turned into a Fault outcome by machine.step().
"""

from __future__ import annotations


class PoolFault(Exception):
    """Base class for unrecoverable machine faults."""

    kind = "fault"


class StructuralFault(PoolFault):
    """The pointer left the grid."""

    kind = "structural"


class StackUnderflow(PoolFault):
    """An opcode popped from an empty stack."""

    kind = "stack-underflow"


class ArithmeticFault(PoolFault):
    """Division or modulo by zero."""

    kind = "arithmetic"


class MemoryFault(PoolFault):
    """Store or recall outside the memory bank."""

    kind = "memory"
