"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import Any, Callable, Final, Generic, Literal, Protocol, TextIO, TypeVar, Union

import logging

log = logging.getLogger("inkcomb")

_T = TypeVar("_T")
_U = TypeVar("_U")
_DataCovT = TypeVar("_DataCovT", covariant=True)

UNKNOWN_ERROR: Final[str] = "Unknown parse error."
"""The message of the parser returned by `fail()`."""



class CharStream(Protocol):
    """
    A forward-only input cursor that yields one character at a time.

    Parsers only read through this interface, and nothing in this library moves a cursor backward.
    """
    pos: int
    """The number of characters consumed so far."""

    def peek(self) -> str | None:
        """The next character without consuming it. `None` at the end of the input."""
        ...

    def take(self) -> str | None:
        """Consumes and returns the next character. `None` (and nothing consumed) at the end of the input."""
        ...

    def is_eof(self) -> bool: ...


class StringIterator:
    """
    `CharStream` over an in-memory string.

    There is intentionally no way to save and restore the position.
    """
    def __init__(self, src: str, starting_pos: int = 0) -> None:
        self.src: Final[str] = src
        """The string that's being parsed."""
        self.pos: int = starting_pos
        """The current position."""

    def __len__(self) -> int:
        return len(self.src)

    def has_chars(self, amount: int) -> bool:
        """Whether there are at least that many characters left."""
        return self.pos+amount <= len(self.src)

    def is_eof(self) -> bool:
        """Whether the end of the input has been reached. The opposite of `__bool__()`"""
        return self.pos >= len(self.src)

    def __bool__(self) -> bool:
        """Whether there are any characters left to parse. The opposite of `is_eof()`"""
        return self.pos < len(self.src)

    def peek(self, amount: int = 1) -> str | None:
        """
        Retrieves the specified amount of characters without consuming.

        If there aren't enough characters, returns `None`.
        """
        if not self.has_chars(amount):
            return None
        return self.src[self.pos:self.pos+amount]

    def take(self, amount: int = 1) -> str | None:
        """
        Consumes and retrieves the specified amount of characters.

        If there aren't enough characters, returns `None` and consumes nothing.
        """
        if not self.has_chars(amount):
            return None
        start_pos = self.pos
        self.pos += amount
        return self.src[start_pos:self.pos]

    def remaining(self) -> str:
        """The part of the input that hasn't been consumed yet. Doesn't consume."""
        return self.src[self.pos:]

    def error(self, msg: str | None = None) -> ParseError:
        """Creates a `ParseError` at the current position."""
        return ParseError(self.src, self.pos, msg)


class TextIOIterator:
    """
    `CharStream` over a text file object, such as an open file or `sys.stdin`.

    Reads with `fp.read(1)` and buffers at most one character for `peek()`. Never seeks.
    """
    def __init__(self, fp: TextIO) -> None:
        self.fp: Final[TextIO] = fp
        self.pos: int = 0
        self._lookahead: str | None = None
        self._exhausted: bool = False

    def peek(self) -> str | None:
        if self._lookahead is None and not self._exhausted:
            char = self.fp.read(1)
            if char:
                self._lookahead = char
            else:
                self._exhausted = True
        return self._lookahead

    def take(self) -> str | None:
        char = self.peek()
        if char is not None:
            self._lookahead = None
            self.pos += 1
        return char

    def is_eof(self) -> bool:
        return self.peek() is None

    def __bool__(self) -> bool:
        return self.peek() is not None



class ParseFailure:
    """
    Returned from a parser when it has failed.

    ```
    r = parser.run(si)
    if r:
        ... # `r` is a `Result` object
    else:
        ... # `r` is a `ParseFailure` object, `r.msg` says why
    ```
    """

    def __init__(self, msg: str) -> None:
        self.msg: Final[str] = msg
        """The reason for the failure."""

    def map(self, f: Callable[[Any], Any]) -> ParseFailure:
        """Failures have no data to map, so this returns the same failure."""
        return self

    def error(self, si: StringIterator) -> ParseError:
        """Converts this to a `ParseError` positioned at the iterator's current position."""
        return si.error(self.msg)

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ParseFailure) and self.msg == other.msg

    def __hash__(self) -> int:
        return hash(self.msg)

    def __repr__(self) -> str:
        return f"ParseFailure({self.msg!r})"

class Result(Generic[_DataCovT]):
    """
    Returned from a parser when it has succeeded.

    ```
    r = parser.run(si)
    if r:
        output = r.data
    else:
        ... # failed
    ```
    """
    def __init__(self, data: _DataCovT) -> None:
        self.data: Final[_DataCovT] = data

    def map(self, f: Callable[[_DataCovT], _U]) -> Result[_U]:
        """Creates a new result by applying `f` to the data."""
        return Result(f(self.data))

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Result) and self.data == other.data

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"Result({self.data!r})"

Outcome = Union[Result[_T], ParseFailure]
"""What running a `Parser[T]` produces."""

class ParseError(Exception):
    """
    The exception that's raised when a failure can't be handled, e.g. by `Parser.parse()`.

    Carries a note with the line, column and an excerpt of the source.
    """

    def __init__(self, src: str, pos: int, msg: str | None = None) -> None:
        """
        `src`: The string that was being parsed.
        `pos`: The position of the error.
        `msg`: The reason for the error.
        """
        if msg is None:
            super().__init__()
        else:
            super().__init__(msg)
        self.src: Final[str] = src
        self.pos: Final[int] = pos
        self.msg: Final[str | None] = msg
        self.append_pos_note(pos)

    def append_pos_note(self, pos: int, msg: str | None = None) -> ParseError:
        note: list[str] = [] if msg is None else [msg]

        pos = min(pos, len(self.src))
        line = self.src.count("\n", 0, pos) + 1
        column = pos - self.src.rfind("\n", 0, pos) # rfind gives -1 on the first line
        note.append(f"At position {pos} (line {line}, column {column})")

        lines = self.src.splitlines()
        if len(lines) > line-1:
            line_str = lines[line-1]
            if len(line_str) >= column:
                if column <= 20:
                    note.append(f"{line_str[:40]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-20):(column+20)]}\n{' '*19}^")
        self.add_note("\n".join(note))
        return self



class Parser(Generic[_T]):
    """
    A parser of `T`s. Wraps a function from a `CharStream` to an `Outcome[T]`.

    Parsers are immutable. Building one never touches a stream. Only `run()` (and the helpers built on it) does.

    The constructor is internal. Build parsers with the functions of this library:
    ```
    digits = many1(one_of("0123456789"))
    number = digits.map(int)
    pair = number >> (lambda a: parse_char(",").then(number).map(lambda b: (a, b)))
    sign = parse_char("+") | parse_char("-")
    ```

    `or_do()` (`|`) doesn't rewind the stream. If the left parser consumed some input and then failed, the right parser
    starts where the left one stopped. Order the alternatives so that they fail before consuming.
    """

    __slots__ = ("_fn", "name")

    def __init__(self, fn: Callable[[CharStream], Outcome[_T]], name: str | None = None) -> None:
        self._fn: Final[Callable[[CharStream], Outcome[_T]]] = fn
        self.name: Final[str | None] = name

    def run(self, stream: CharStream) -> Outcome[_T]:
        """Runs the parser, reading characters from the stream."""
        return self._fn(stream)

    def __call__(self, stream: CharStream) -> Outcome[_T]:
        """Same as `Parser.run()`."""
        return self._fn(stream)

    def parse(self, text: str) -> _T:
        """
        Runs the parser on a string and returns the parsed value.

        Raises a `ParseError` if it fails. Doesn't require the whole string to be consumed, use `eof()` for that.
        """
        si = StringIterator(text)
        r = self._fn(si)
        if not r:
            raise r.error(si)
        return r.data

    def named(self, name: str) -> Parser[_T]:
        """
        Returns the same parser with a name.

        Named parsers log their attempts to the `inkcomb` logger at the `DEBUG` level.
        """
        fn = self._fn
        def run_named(stream: CharStream) -> Outcome[_T]:
            log.debug("trying %s at %d", name, stream.pos)
            r = fn(stream)
            if r:
                log.debug("%s matched %r", name, r.data)
            else:
                log.debug("%s failed: %s", name, r.msg)
            return r
        return Parser(run_named, name)

    def map(self, f: Callable[[_T], _U]) -> Parser[_U]:
        """Same as `fmap(f, self)`."""
        return fmap(f, self)

    def bind(self, f: Callable[[_T], Parser[_U]]) -> Parser[_U]:
        """Same as `bind(self, f)`. Also available as `self >> f`."""
        return bind(self, f)

    def or_do(self, other: Parser[_T]) -> Parser[_T]:
        """Same as `or_do(self, other)`. Also available as `self | other`."""
        return or_do(self, other)

    def then(self, other: Parser[_U]) -> Parser[_U]:
        """Runs both in sequence, keeping the value of `other`."""
        return bind(self, lambda _: other)

    def skip(self, other: Parser[Any]) -> Parser[_T]:
        """Runs both in sequence, keeping the value of `self`."""
        return bind(self, lambda value: fmap(lambda _: value, other))

    def __rshift__(self, f: Callable[[_T], Parser[_U]]) -> Parser[_U]:
        return bind(self, f)

    def __or__(self, other: Parser[_T]) -> Parser[_T]:
        return or_do(self, other)

    def __repr__(self) -> str:
        return "<Parser>" if self.name is None else f"<Parser {self.name}>"



# monad

def pure(a: _T) -> Parser[_T]:
    """Consumes no input, always succeeds with `a`."""
    return Parser(lambda stream: Result(a))

def fmap(f: Callable[[_T], _U], p: Parser[_T]) -> Parser[_U]:
    """
    Maps a function to the result of a parser.

    Failures are passed through unchanged. Useful to turn parsed text into the value it stands for, e.g. `fmap(int, digits)`.
    """
    def run(stream: CharStream) -> Outcome[_U]:
        return p._fn(stream).map(f)
    return Parser(run)

def bind(p: Parser[_T], f: Callable[[_T], Parser[_U]]) -> Parser[_U]:
    """
    Runs `p`, then runs the parser that `f` makes out of its value, on the same stream.

    Whatever `p` consumed stays consumed. If `p` fails, `f` isn't called and the failure's message is kept.
    """
    def run(stream: CharStream) -> Outcome[_U]:
        r = p._fn(stream)
        if not r:
            return ParseFailure(r.msg)
        return f(r.data)._fn(stream)
    return Parser(run)


# alternative

def fail() -> Parser[Any]:
    """Consumes no input, always fails with `UNKNOWN_ERROR`."""
    return Parser(lambda stream: ParseFailure(UNKNOWN_ERROR))

def or_do(p1: Parser[_T], p2: Parser[_T]) -> Parser[_T]:
    """
    Tries `p1`, and if it fails, tries `p2`.

    `p2` is never run if `p1` succeeds. If both fail, the failure message is `"<p1's message> or <p2's message>"`.

    Note: `p2` continues from wherever `p1` left the stream. If `p1` consumed input before failing, that input is gone.
    """
    def run(stream: CharStream) -> Outcome[_T]:
        r1 = p1._fn(stream)
        if r1:
            return r1
        r2 = p2._fn(stream)
        if r2:
            return r2
        return ParseFailure(f"{r1.msg} or {r2.msg}")
    return Parser(run)


def lazy(thunk: Callable[[], Parser[_T]]) -> Parser[_T]:
    """
    Runs the parser made by `thunk`, calling it only when the returned parser is run.

    Use it for grammars that refer to themselves. Also works as a decorator:
    ```
    @lazy
    def nested() -> Parser[str]:
        return parse_char("(").then(nested).skip(parse_char(")")) | pure("")
    ```

    Each level of recursion is a few Python stack frames deep, so the depth a recursive grammar reaches grows with
    the input and is capped by `sys.getrecursionlimit()`. Past that, running raises `RecursionError`.
    For plain repetition use `many()`/`many1()`, which loop and handle input of any length.
    """
    def run(stream: CharStream) -> Outcome[_T]:
        return thunk()._fn(stream)
    return Parser(run)
