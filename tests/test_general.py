import pytest

import inkcomb.const as const
from inkcomb import (
    StringIterator,
    ParseFailure,
    Result,
    pure,
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


def test_hello_end_to_end():
    si = StringIterator("hello")
    assert parse_char("h").run(si) == Result("h")
    assert si.remaining() == "ello"
    r = one_of("xyz").run(si)
    assert not r
    assert "'e'" in r.msg
    assert '"xyz"' in r.msg
    assert si.remaining() == "ello"


class TestAnyChar:

    def test_consumes_one(self):
        si = StringIterator("ab")
        assert any_char().run(si) == Result("a")
        assert si.pos == 1

    def test_end_of_input(self):
        assert any_char().run(StringIterator("")) == ParseFailure("Unexpected end of input.")


class TestParseChar:

    def test_match(self):
        si = StringIterator("xy")
        assert parse_char("x").run(si) == Result("x")
        assert si.pos == 1

    def test_mismatch_does_not_consume(self):
        si = StringIterator("yx")
        assert parse_char("x").run(si) == ParseFailure("Expected 'x' but found 'y'.")
        assert si.pos == 0

    def test_end_of_input(self):
        assert parse_char("x").run(StringIterator("")) == ParseFailure("Expected 'x' but reached end of input.")

    @pytest.mark.parametrize("arg", ["", "ab"])
    def test_needs_single_character(self, arg):
        with pytest.raises(ValueError):
            parse_char(arg)


class TestNotChar:

    def test_other_character(self):
        si = StringIterator("ab")
        assert not_char("b").run(si) == Result("a")
        assert si.pos == 1

    def test_excluded_character(self):
        si = StringIterator("b")
        assert not_char("b").run(si) == ParseFailure("Expected any character except 'b' but found 'b'.")
        assert si.pos == 0

    def test_end_of_input(self):
        r = not_char("b").run(StringIterator(""))
        assert r == ParseFailure("Expected any character except 'b' but reached end of input.")

    def test_needs_single_character(self):
        with pytest.raises(ValueError):
            not_char("bc")


class TestOneOf:

    def test_member(self):
        assert one_of("xyz").run(StringIterator("zz")) == Result("z")

    def test_set(self):
        assert one_of(const.HEXADECIMAL).run(StringIterator("F")) == Result("F")
        r = one_of({"b", "a"}).run(StringIterator("c"))
        assert r == ParseFailure("Expected one of \"ab\" but found 'c'.")

    def test_end_of_input(self):
        assert one_of("xyz").run(StringIterator("")) == ParseFailure('Expected one of "xyz" but reached end of input.')

    def test_empty(self):
        with pytest.raises(ValueError):
            one_of("")
        with pytest.raises(ValueError):
            one_of(set())


class TestCharacterClasses:

    def test_digit(self):
        assert digit().run(StringIterator("7")) == Result("7")
        assert digit().run(StringIterator("x")) == ParseFailure("Expected a digit but found 'x'.")

    def test_letter(self):
        assert letter().run(StringIterator("Q")) == Result("Q")
        assert letter().run(StringIterator("9")) == ParseFailure("Expected a letter but found '9'.")

    def test_whitespace(self):
        assert whitespace().run(StringIterator("\t")) == Result("\t")
        assert whitespace().run(StringIterator("")) == ParseFailure("Expected whitespace but reached end of input.")

    def test_satisfy(self):
        upper = satisfy(str.isupper, "an uppercase letter")
        assert upper.run(StringIterator("A")) == Result("A")
        assert upper.run(StringIterator("a")) == ParseFailure("Expected an uppercase letter but found 'a'.")

    def test_eof(self):
        si = StringIterator("a")
        assert eof().run(si) == ParseFailure("Expected end of input but found 'a'.")
        si.take()
        assert eof().run(si) == Result(None)
        assert si.pos == 1


class TestMany:

    @pytest.mark.parametrize("text", ["", "a", "abc"])
    def test_never_fails(self, text):
        si = StringIterator(text)
        assert many(parse_char("z")).run(si) == Result("")
        assert si.pos == 0

    def test_greedy(self):
        si = StringIterator("zzzy")
        assert many(parse_char("z")).run(si) == Result("zzz")
        assert si.remaining() == "y"

    def test_consumes_everything(self):
        si = StringIterator("hello")
        assert many(any_char()).run(si) == Result("hello")
        assert si.is_eof()

    def test_failed_attempt_is_not_rolled_back(self):
        pair = parse_char("a").then(parse_char("b"))
        si = StringIterator("abac")
        assert many(pair).run(si) == Result("b")
        assert si.remaining() == "c"

    def test_stops_on_empty_success(self):
        si = StringIterator("abc")
        assert many(pure("x")).run(si) == Result("")
        assert si.pos == 0


class TestMany1:

    def test_requires_one(self):
        si = StringIterator("aab")
        assert many1(parse_char("a")).run(si) == Result("aa")
        assert si.peek() == "b"

    def test_fails_without_match(self):
        si = StringIterator("b")
        r = many1(parse_char("a")).run(si)
        assert r == ParseFailure("Expected 'a' but found 'b'.")
        assert si.pos == 0

    def test_single(self):
        assert many1(digit()).run(StringIterator("5")) == Result("5")

    def test_end_of_input(self):
        assert not many1(any_char()).run(StringIterator(""))


def test_many_needs_string_values():
    with pytest.raises(ValueError, match="yields strings"):
        many(one_of("12").map(int)).run(StringIterator("12"))
    with pytest.raises(ValueError, match="yields strings"):
        many1(one_of("12").map(int)).run(StringIterator("12"))
    assert many1(one_of("12")).map(int).run(StringIterator("12")) == Result(12)


@pytest.mark.parametrize("chars", [["ab"], ["a", ""], {"x", "yz"}, [1]])
def test_one_of_needs_single_characters(chars):
    with pytest.raises(ValueError):
        one_of(chars)
