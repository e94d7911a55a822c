"""Opcode table tests."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pool.opcodes import (
    HEX_DIGITS, NOP, OPCODES, Instruction, Op, decode, unescape,
)


def test_hex_digits_carry_their_value():
    for value, ch in enumerate(HEX_DIGITS):
        assert decode(ch) == Instruction(Op.DIGIT, 0, value)


def test_uppercase_hex_is_not_a_digit():
    assert decode("A") is NOP
    assert decode("F") is NOP


def test_unknown_characters_are_nops():
    for ch in " .#xyzZ?@\t\n":
        assert decode(ch) is NOP


def test_sqrt_glyph_aliases_n():
    assert decode("√") == decode("n")
    assert decode("n").op is Op.SQRT


def test_arity():
    expected = {
        "+": 2, "-": 2, "*": 2, "/": 2, "%": 2, "`": 2, "&": 2, "s": 2, "o": 2,
        ",": 1, ";": 1, "!": 1, ":": 1, "$": 1, "r": 1, "n": 1, "|": 1, "_": 1,
        "v": 0, "^": 0, "<": 0, ">": 0, '"': 0,
    }
    for ch, arity in expected.items():
        assert OPCODES[ch].arity == arity, ch


def test_escape_table():
    assert unescape("\\") == ord("\\")
    assert unescape("n") == 10
    assert unescape("t") == 9
    assert unescape("r") == 13
    assert unescape('"') == ord('"')
    assert unescape("q") == ord("q")
