"""
Composable character parsers.

See the objects for more explanations.

See the `inkcomb.general` module for the character parsers everything else is built from.

Defining parsers:
```
digits = many1(one_of("0123456789"))
number = digits.map(int)
signed = (parse_char("-").then(number).map(lambda n: -n)) | number
pair = number >> (lambda a: parse_char(",").then(number).map(lambda b: (a, b)))

@lazy
def parens() -> Parser[str]:
    return parse_char("(").then(parens).skip(parse_char(")")) | pure("")
```

Using parsers:
```
si = StringIterator("12,34")

result = pair.run(si)
if result:
    ... # `result` is a `Result` object, the value is `result.data`
else:
    ... # `result` is a `ParseFailure` object, the reason is `result.msg`

pair.parse("12,34")     # (12, 34), raises `ParseError` on failure
```

Parsers read one character at a time and never rewind. If the left side of `|` consumes input and then fails,
the right side starts from where it stopped.
"""

import inkcomb.const as const
import inkcomb.main
from inkcomb.main import (
    UNKNOWN_ERROR,
    CharStream,
    StringIterator,
    TextIOIterator,
    ParseFailure,
    Result,
    Outcome,
    ParseError,
    Parser,
    pure,
    fmap,
    bind,
    fail,
    or_do,
    lazy,
)
import inkcomb.general as general
from inkcomb.general import (
    satisfy,
    any_char,
    parse_char,
    not_char,
    one_of,
    eof,
    digit,
    letter,
    whitespace,
    many,
    many1,
)
