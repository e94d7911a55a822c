"""
Opcode table for the pool language.

Each grid character decodes to an Instruction: an Op tag, the number of
stack words it consumes, and an optional immediate operand (hex digit value).
Characters missing from OPCODES are no-ops.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class Op(Enum):
    NOP = "nop"
    DOWN = "down"
    UP = "up"
    LEFT = "left"
    RIGHT = "right"
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    DIGIT = "digit"
    OUTPUT = "output"
    STRING = "string"
    EXIT = "exit"
    NOT = "not"
    GREATER = "greater"
    DUP = "dup"
    DROP = "drop"
    SWAP = "swap"
    H_MIRROR = "h-mirror"
    V_MIRROR = "v-mirror"
    STORE = "store"
    RECALL = "recall"
    SQRT = "sqrt"
    OVER = "over"


class Instruction(NamedTuple):
    op: Op
    arity: int = 0
    operand: int = 0


# Unit velocities for the four turn opcodes.
DIRECTIONS = {
    Op.DOWN: (0, 1),
    Op.UP: (0, -1),
    Op.LEFT: (-1, 0),
    Op.RIGHT: (1, 0),
}

BINARY_OPS = frozenset({Op.ADD, Op.SUB, Op.MUL, Op.DIV, Op.MOD})

NOP = Instruction(Op.NOP)

OPCODES: dict[str, Instruction] = {
    "v": Instruction(Op.DOWN),
    "^": Instruction(Op.UP),
    "<": Instruction(Op.LEFT),
    ">": Instruction(Op.RIGHT),
    "+": Instruction(Op.ADD, 2),
    "-": Instruction(Op.SUB, 2),
    "*": Instruction(Op.MUL, 2),
    "/": Instruction(Op.DIV, 2),
    "%": Instruction(Op.MOD, 2),
    ",": Instruction(Op.OUTPUT, 1),
    '"': Instruction(Op.STRING),
    ";": Instruction(Op.EXIT, 1),
    "!": Instruction(Op.NOT, 1),
    "`": Instruction(Op.GREATER, 2),
    ":": Instruction(Op.DUP, 1),
    "$": Instruction(Op.DROP, 1),
    "&": Instruction(Op.SWAP, 2),
    # Mirrors only pop while moving along their axis; see machine.step.
    "|": Instruction(Op.H_MIRROR, 1),
    "_": Instruction(Op.V_MIRROR, 1),
    "s": Instruction(Op.STORE, 2),
    "r": Instruction(Op.RECALL, 1),
    "n": Instruction(Op.SQRT, 1),
    "√": Instruction(Op.SQRT, 1),
    "o": Instruction(Op.OVER, 2),
}

HEX_DIGITS = "0123456789abcdef"
OPCODES.update(
    {ch: Instruction(Op.DIGIT, 0, value) for value, ch in enumerate(HEX_DIGITS)})

# String-mode escapes: the character after a backslash.
ESCAPES = {
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
}


def decode(ch: str) -> Instruction:
    return OPCODES.get(ch, NOP)


def unescape(ch: str) -> int:
    """Code point pushed for `ch` when it follows a backslash in a string."""
    return ord(ESCAPES.get(ch, ch))
