"""
General purpose character parsers.

These are the building blocks that the rest of a grammar is made of.
Combine them with `Parser.map()`, `Parser.bind()` (`>>`) and `Parser.or_do()` (`|`).
"""

from __future__ import annotations
from typing import Callable, Final

from collections.abc import Iterable

import inkcomb.const as const
from inkcomb.main import (
    CharStream,
    Outcome,
    ParseFailure,
    Parser,
    Result,
)

END_OF_INPUT: Final[str] = "Unexpected end of input."


def satisfy(pred: Callable[[str], bool], expected: str) -> Parser[str]:
    """
    Parses one character that matches `pred`.

    Doesn't consume anything if it fails. `expected` describes the character for the failure message.
    """
    def run(stream: CharStream) -> Outcome[str]:
        char = stream.peek()
        if char is None:
            return ParseFailure(f"Expected {expected} but reached end of input.")
        if not pred(char):
            return ParseFailure(f"Expected {expected} but found {char!r}.")
        stream.take()
        return Result(char)
    return Parser(run)

def any_char() -> Parser[str]:
    """
    Parses any one character.

    Can only fail if the end of the input has been reached.
    """
    def run(stream: CharStream) -> Outcome[str]:
        char = stream.take()
        if char is None:
            return ParseFailure(END_OF_INPUT)
        return Result(char)
    return Parser(run)

def parse_char(c: str) -> Parser[str]:
    """Parses the character `c`. Fails if the next character is anything else."""
    if len(c) != 1:
        raise ValueError(f"Expected a single character, got {c!r}.")
    return satisfy(lambda char: char == c, repr(c))

def not_char(c: str) -> Parser[str]:
    """Parses any character except `c`. Fails if the next character *is* `c`."""
    if len(c) != 1:
        raise ValueError(f"Expected a single character, got {c!r}.")
    return satisfy(lambda char: char != c, f"any character except {c!r}")

def one_of(chars: str | Iterable[str]) -> Parser[str]:
    """
    Parses one of the characters in `chars`.

    `chars` can be a string or any collection of single characters, such as the sets in `inkcomb.const`.
    """
    if isinstance(chars, str):
        members = frozenset(chars)
        shown = chars
    else:
        members = frozenset(chars)
        for member in members:
            if not isinstance(member, str) or len(member) != 1:
                raise ValueError(f"Expected single characters, got {member!r}.")
        shown = "".join(sorted(members))
    if not members:
        raise ValueError("At least one character required.")
    return satisfy(lambda char: char in members, f'one of "{shown}"')

def eof() -> Parser[None]:
    """Succeeds only at the end of the input. Never consumes."""
    def run(stream: CharStream) -> Outcome[None]:
        char = stream.peek()
        if char is not None:
            return ParseFailure(f"Expected end of input but found {char!r}.")
        return Result(None)
    return Parser(run)

def digit() -> Parser[str]:
    """Parses one ASCII decimal digit."""
    return satisfy(lambda char: char in const.DECIMAL, "a digit")

def letter() -> Parser[str]:
    """Parses one ASCII letter."""
    return satisfy(lambda char: char in const.ALPHABETIC, "a letter")

def whitespace() -> Parser[str]:
    """Parses one whitespace character."""
    return satisfy(lambda char: char in const.WHITESPACES, "whitespace")


def _text(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError(f"many() and many1() need a parser that yields strings, got {type(value).__name__} {value!r}.")
    return value

def many(p: Parser[str]) -> Parser[str]:
    """
    Greedily parses 0 or more of `p` and joins the results into a string.

    `p` must yield strings (usually single characters). Any other value raises a `ValueError` when run.
    Map the joined string instead, e.g. `many1(digit()).map(int)`.

    Cannot fail. If `p` fails on the first attempt, the result is an empty string.

    Stops at the first failure of `p`. Whatever that last attempt consumed isn't given back.
    Also stops if `p` succeeds without consuming anything, which would otherwise repeat forever.
    """
    def run(stream: CharStream) -> Outcome[str]:
        data: list[str] = []
        while True:
            start_pos = stream.pos
            r = p._fn(stream)
            if not r or stream.pos == start_pos:
                break
            data.append(_text(r.data))
        return Result("".join(data))
    return Parser(run)

def many1(p: Parser[str]) -> Parser[str]:
    """
    Greedily parses 1 or more of `p`. Like `many()`, `p` must yield strings.

    Fails with `p`'s failure if the first attempt fails.
    """
    rest = many(p)
    def run(stream: CharStream) -> Outcome[str]:
        first = p._fn(stream)
        if not first:
            return ParseFailure(first.msg)
        head = _text(first.data)
        return rest._fn(stream).map(lambda tail: head + tail)
    return Parser(run)
