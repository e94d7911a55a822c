"""
pool machine — single-step execution engine for the pool 2D language.

The grid is read-only; all mutable state lives in MachineState. Each call
to step() advances the pointer one cell, decodes that cell and applies its
effect, returning one of four outcomes: Continue, Output, Terminated, Fault.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .chips import MEMORY_SIZE, WORD_BITS, WORD_MASK, MemoryBank, OperandStack
from .errors import ArithmeticFault, PoolFault, StructuralFault
from .grid import Grid
from .opcodes import BINARY_OPS, DIRECTIONS, Instruction, Op, decode, unescape

# Process exit status used when a run ends in a fault.
FAULT_EXIT_CODE = 101

SIGN_BIT = 1 << (WORD_BITS - 1)


# ---------------------------------------------------------------------------
# Vectors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Vec:
    x: int
    y: int

    def __add__(self, other: Vec) -> Vec:
        return Vec(self.x + other.x, self.y + other.y)

    def __mul__(self, k: int) -> Vec:
        return Vec(self.x * k, self.y * k)


RIGHTWARD = Vec(1, 0)


# ---------------------------------------------------------------------------
# Word helpers
# ---------------------------------------------------------------------------

def encode_word(value: int) -> bytes:
    """Serialize a word as the eight bytes `,` emits, low byte first."""
    return (value & WORD_MASK).to_bytes(8, "little")


def to_signed64(value: int) -> int:
    value &= WORD_MASK
    return value - (1 << WORD_BITS) if value & SIGN_BIT else value


def exit_status(code: int) -> int:
    """Low 32 bits of a result code, as a signed int for sys.exit()."""
    code &= 0xFFFFFFFF
    return code - (1 << 32) if code & 0x80000000 else code


# ---------------------------------------------------------------------------
# Step outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Continue:
    pass


CONTINUE = Continue()


@dataclass(frozen=True)
class Output:
    value: int

    @property
    def data(self) -> bytes:
        return encode_word(self.value)


@dataclass(frozen=True)
class Terminated:
    code: int


@dataclass(frozen=True)
class Fault:
    error: PoolFault

    @property
    def message(self) -> str:
        return f"{self.error.kind}: {self.error}"


StepOutcome = Union[Continue, Output, Terminated, Fault]


def is_terminal(outcome: StepOutcome) -> bool:
    return isinstance(outcome, (Terminated, Fault))


# ---------------------------------------------------------------------------
# Machine state
# ---------------------------------------------------------------------------

@dataclass
class MachineState:
    pointer: Vec
    velocity: Vec = RIGHTWARD
    in_string: bool = False
    escape_pending: bool = False
    stack: OperandStack = field(default_factory=OperandStack)
    memory: MemoryBank = field(default_factory=lambda: MemoryBank(MEMORY_SIZE))
    exit_code: Optional[int] = None
    fault: Optional[PoolFault] = None

    # --- Counters ---
    steps: int = 0
    outputs: int = 0

    @classmethod
    def fresh(cls, grid: Grid) -> MachineState:
        row, col = grid.start
        return cls(pointer=Vec(col, row))

    @property
    def finished(self) -> bool:
        return self.exit_code is not None or self.fault is not None

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "outputs": self.outputs,
            "stack_depth": len(self.stack),
            "stack_peak": self.stack.peak,
            "memory_reads": self.memory.reads,
            "memory_writes": self.memory.writes,
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"Outputs: {s['outputs']}\n"
            f"Stack: {s['stack_depth']} (peak {s['stack_peak']})\n"
            f"Memory: {s['memory_reads']}R/{s['memory_writes']}W"
        )


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

def step(grid: Grid, state: MachineState) -> StepOutcome:
    """Execute exactly one cell. A finished state keeps its outcome."""
    if state.fault is not None:
        return Fault(state.fault)
    if state.exit_code is not None:
        return Terminated(state.exit_code)

    try:
        outcome = _advance(grid, state)
    except PoolFault as e:
        state.fault = e
        return Fault(e)

    if isinstance(outcome, Terminated):
        state.exit_code = outcome.code
    return outcome


def _advance(grid: Grid, state: MachineState) -> StepOutcome:
    pos = state.pointer + state.velocity
    if not grid.contains(pos.x, pos.y):
        raise StructuralFault(f"pointer left the grid at x={pos.x} y={pos.y}")
    state.pointer = pos
    state.steps += 1

    ch = grid.at(pos.x, pos.y)
    if state.in_string:
        _string_char(state, ch)
        return CONTINUE
    return execute(decode(ch), state)


def _string_char(state: MachineState, ch: str):
    if state.escape_pending:
        state.stack.push(unescape(ch))
        state.escape_pending = False
    elif ch == '"':
        state.in_string = False
    elif ch == "\\":
        state.escape_pending = True
    else:
        state.stack.push(ord(ch))


def execute(instr: Instruction, state: MachineState) -> StepOutcome:
    """Apply one decoded instruction to the state (pointer already moved)."""
    op = instr.op
    stack = state.stack
    vel = state.velocity

    if op is Op.NOP:
        return CONTINUE

    if op in DIRECTIONS:
        dx, dy = DIRECTIONS[op]
        # Turns only cross axes; same-axis turns are ignored.
        if (dy and vel.y == 0) or (dx and vel.x == 0):
            state.velocity = Vec(dx, dy)
        return CONTINUE

    if op is Op.H_MIRROR or op is Op.V_MIRROR:
        active = vel.x != 0 if op is Op.H_MIRROR else vel.y != 0
        if active and stack.pop() != 0:
            state.velocity = vel * -1
        return CONTINUE

    stack.require(instr.arity)

    if op in BINARY_OPS:
        a = stack.pop()
        b = stack.pop()
        stack.push(_arith(op, b, a))
    elif op is Op.DIGIT:
        stack.push(instr.operand)
    elif op is Op.OUTPUT:
        state.outputs += 1
        return Output(stack.pop())
    elif op is Op.STRING:
        state.in_string = True
    elif op is Op.EXIT:
        return Terminated(to_signed64(stack.pop()))
    elif op is Op.NOT:
        stack.push(int(stack.pop() == 0))
    elif op is Op.GREATER:
        a = stack.pop()
        b = stack.pop()
        stack.push(int(b > a))
    elif op is Op.DUP:
        stack.push(stack.peek())
    elif op is Op.DROP:
        stack.pop()
    elif op is Op.SWAP:
        a = stack.pop()
        b = stack.pop()
        stack.push(a)
        stack.push(b)
    elif op is Op.STORE:
        addr = stack.pop()
        val = stack.pop()
        state.memory.write(addr, val)
    elif op is Op.RECALL:
        addr = stack.pop()
        stack.push(state.memory.read(addr))
    elif op is Op.SQRT:
        stack.push(int(math.sqrt(stack.pop())))
    elif op is Op.OVER:
        a = stack.pop()
        b = stack.pop()
        stack.push(b)
        stack.push(a)
        stack.push(b)
    else:
        raise ValueError(f"unhandled opcode {op!r}")

    return CONTINUE


def _arith(op: Op, b: int, a: int) -> int:
    if op is Op.ADD:
        return b + a
    if op is Op.SUB:
        return b - a
    if op is Op.MUL:
        return b * a
    if a == 0:
        raise ArithmeticFault("division by zero" if op is Op.DIV else "modulo by zero")
    if op is Op.DIV:
        return b // a
    return b % a


# ---------------------------------------------------------------------------
# Run to completion
# ---------------------------------------------------------------------------

def run(grid: Grid, state: MachineState,
        on_output: Callable[[int], None] | None = None,
        trace: Callable[[MachineState, StepOutcome], None] | None = None
        ) -> StepOutcome:
    """Step until Terminated or Fault and return that outcome."""
    while True:
        outcome = step(grid, state)
        if trace is not None:
            trace(state, outcome)
        if isinstance(outcome, Output):
            if on_output is not None:
                on_output(outcome.value)
        elif is_terminal(outcome):
            return outcome
