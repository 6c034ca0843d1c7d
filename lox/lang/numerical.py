"""Lox numbers. Every Lox number is a double precision float; this module converts scanned lexemes into numbers and
numbers back into the text that print and string concatenation produce.
"""

import math


def number(lexeme):
    """Returns the float value of a scanned NUMBER lexeme (digits, optionally followed by '.' and digits)."""
    return float(lexeme)


def stringify_number(value):
    """Returns str(value) the way Lox prints it: integral values lose their trailing '.0'."""
    if math.isnan(value) or math.isinf(value):
        return str(value)

    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text
