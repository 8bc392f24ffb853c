"""A parser for Perl-style regular expressions, producing a syntax tree."""

import enum
import functools
import re
from dataclasses import dataclass, field
from typing import Optional

MAX_RUNE = 0x10FFFF
MAX_REPEAT = 1000
# No code point above this has a case mapping.
_MAX_CASED = 0x1E943


class ParseError(ValueError):
    """Raised when a regular expression cannot be parsed."""


class Op(enum.Enum):
    NO_MATCH = enum.auto()
    EMPTY_MATCH = enum.auto()
    LITERAL = enum.auto()
    CHAR_CLASS = enum.auto()
    ANY_CHAR_NOT_NL = enum.auto()
    ANY_CHAR = enum.auto()
    BEGIN_LINE = enum.auto()
    END_LINE = enum.auto()
    BEGIN_TEXT = enum.auto()
    END_TEXT = enum.auto()
    WORD_BOUNDARY = enum.auto()
    NO_WORD_BOUNDARY = enum.auto()
    CAPTURE = enum.auto()
    STAR = enum.auto()
    PLUS = enum.auto()
    QUEST = enum.auto()
    REPEAT = enum.auto()
    CONCAT = enum.auto()
    ALTERNATE = enum.auto()


class Flags(enum.IntFlag):
    FOLD_CASE = 1
    LITERAL = 2
    CLASS_NL = 4
    DOT_NL = 8
    ONE_LINE = 16
    NON_GREEDY = 32
    PERL_X = 64
    UNICODE_GROUPS = 128
    WAS_DOLLAR = 256


PERL = Flags.CLASS_NL | Flags.ONE_LINE | Flags.PERL_X | Flags.UNICODE_GROUPS


@dataclass
class Node:
    """One node of a parsed regular expression.

    ``runes`` holds the code points of a literal, or the inclusive
    ``lo, hi`` pairs of a character class.
    """

    op: Op
    flags: Flags = Flags(0)
    runes: list[int] = field(default_factory=list)
    sub: list["Node"] = field(default_factory=list)
    min: int = 0
    max: int = 0
    name: Optional[str] = None


@functools.lru_cache(maxsize=None)
def _fold_table() -> dict[int, tuple[int, ...]]:
    groups: dict[str, list[int]] = {}
    for c in range(_MAX_CASED + 1):
        if 0xD800 <= c <= 0xDFFF:
            continue
        up = chr(c).upper()
        if len(up) != 1:
            continue
        key = up.lower()
        if len(key) != 1:
            continue
        groups.setdefault(key, []).append(c)
    table: dict[int, tuple[int, ...]] = {}
    for members in groups.values():
        if len(members) > 1:
            orbit = tuple(sorted(members))
            for c in orbit:
                table[c] = orbit
    return table


def simple_fold(r: int) -> int:
    """Return the next larger code point equivalent under case folding, wrapping round."""
    orbit = _fold_table().get(r)
    if orbit is None:
        return r
    for c in orbit:
        if c > r:
            return c
    return orbit[0]


def _normalize(ranges: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for lo, hi in sorted(ranges):
        if merged and lo <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], hi))
        else:
            merged.append((lo, hi))
    return merged


def _negate(ranges: list[tuple[int, int]]) -> list[tuple[int, int]]:
    result = []
    nxt = 0
    for lo, hi in _normalize(ranges):
        if lo > nxt:
            result.append((nxt, lo - 1))
        nxt = hi + 1
    if nxt <= MAX_RUNE:
        result.append((nxt, MAX_RUNE))
    return result


def _add_folds(ranges: list[tuple[int, int]]) -> list[tuple[int, int]]:
    table = _fold_table()
    extra = list(ranges)
    for lo, hi in ranges:
        for c in range(lo, min(hi, _MAX_CASED) + 1):
            for f in table.get(c, ()):
                extra.append((f, f))
    return _normalize(extra)


_PERL_CLASSES = {
    "d": [(0x30, 0x39)],
    "s": [(0x09, 0x0A), (0x0C, 0x0D), (0x20, 0x20)],
    "w": [(0x30, 0x39), (0x41, 0x5A), (0x5F, 0x5F), (0x61, 0x7A)],
}

_POSIX_CLASSES = {
    "alnum": [(0x30, 0x39), (0x41, 0x5A), (0x61, 0x7A)],
    "alpha": [(0x41, 0x5A), (0x61, 0x7A)],
    "ascii": [(0x00, 0x7F)],
    "blank": [(0x09, 0x09), (0x20, 0x20)],
    "cntrl": [(0x00, 0x1F), (0x7F, 0x7F)],
    "digit": [(0x30, 0x39)],
    "graph": [(0x21, 0x7E)],
    "lower": [(0x61, 0x7A)],
    "print": [(0x20, 0x7E)],
    "punct": [(0x21, 0x2F), (0x3A, 0x40), (0x5B, 0x60), (0x7B, 0x7E)],
    "space": [(0x09, 0x0D), (0x20, 0x20)],
    "upper": [(0x41, 0x5A)],
    "word": [(0x30, 0x39), (0x41, 0x5A), (0x5F, 0x5F), (0x61, 0x7A)],
    "xdigit": [(0x30, 0x39), (0x41, 0x46), (0x61, 0x66)],
}

_SIMPLE_ESCAPES = {"a": 7, "f": 12, "n": 10, "r": 13, "t": 9, "v": 11}
_REPEAT_RE = re.compile(r"\{(\d+)(,(\d*))?\}")
_NAME_RE = re.compile(r"[A-Za-z0-9_]+")


class _Parser:
    def __init__(self, expr: str):
        self.s = expr
        self.pos = 0
        self.flags = PERL

    def peek(self, offset: int = 0) -> Optional[str]:
        i = self.pos + offset
        return self.s[i] if i < len(self.s) else None

    def take(self) -> str:
        if self.pos >= len(self.s):
            raise ParseError("unexpected end of expression")
        ch = self.s[self.pos]
        self.pos += 1
        return ch

    def parse(self) -> Node:
        node = self.alternation()
        if self.pos < len(self.s):
            raise ParseError(f"unexpected ): {self.s!r}")
        return node

    def alternation(self) -> Node:
        branches = [self.concat()]
        while self.peek() == "|":
            self.pos += 1
            branches.append(self.concat())
        if len(branches) == 1:
            return branches[0]
        return Node(Op.ALTERNATE, flags=self.flags, sub=branches)

    def concat(self) -> Node:
        items: list[Node] = []
        repeated = False
        while self.pos < len(self.s) and self.peek() not in "|)":
            ch = self.peek()
            if ch in "*+?{":
                node = self.quantifier(items, repeated)
                if node is None:
                    self.pos += 1
                    items.append(self.literal(ord("{")))
                    repeated = False
                    continue
                items[-1] = node
                repeated = True
                continue
            atom = self.atom()
            repeated = False
            if atom is not None:
                items.append(atom)
        merged: list[Node] = []
        for item in items:
            if (
                merged
                and item.op is Op.LITERAL
                and merged[-1].op is Op.LITERAL
                and (item.flags & Flags.FOLD_CASE) == (merged[-1].flags & Flags.FOLD_CASE)
            ):
                merged[-1] = Node(Op.LITERAL, flags=merged[-1].flags,
                                  runes=merged[-1].runes + item.runes)
            else:
                merged.append(item)
        if not merged:
            return Node(Op.EMPTY_MATCH, flags=self.flags)
        if len(merged) == 1:
            return merged[0]
        return Node(Op.CONCAT, flags=self.flags, sub=merged)

    def quantifier(self, items: list[Node], repeated: bool) -> Optional[Node]:
        start = self.pos
        ch = self.peek()
        lo = hi = 0
        if ch == "{":
            m = _REPEAT_RE.match(self.s, self.pos)
            if m is None:
                return None
            lo = int(m.group(1))
            if m.group(2) is None:
                hi = lo
            elif m.group(3) == "":
                hi = -1
            else:
                hi = int(m.group(3))
            if lo > MAX_REPEAT or hi > MAX_REPEAT or (hi != -1 and hi < lo):
                raise ParseError(f"invalid repeat count: {m.group(0)}")
            self.pos = m.end()
            op = Op.REPEAT
        else:
            self.pos += 1
            op = {"*": Op.STAR, "+": Op.PLUS, "?": Op.QUEST}[ch]
        lazy = False
        if self.peek() == "?":
            self.pos += 1
            lazy = True
        text = self.s[start:self.pos]
        if not items:
            raise ParseError(f"missing argument to repetition operator: {text}")
        if repeated:
            raise ParseError(f"invalid nested repetition operator: {text}")
        flags = self.flags
        if lazy != bool(flags & Flags.NON_GREEDY):
            flags |= Flags.NON_GREEDY
        else:
            flags &= ~Flags.NON_GREEDY
        return Node(op, flags=flags, sub=[items[-1]], min=lo, max=hi)

    def literal(self, r: int) -> Node:
        return Node(Op.LITERAL, flags=self.flags, runes=[r])

    def class_node(self, ranges: list[tuple[int, int]], negate: bool = False) -> Node:
        if self.flags & Flags.FOLD_CASE:
            ranges = _add_folds(ranges)
        ranges = _negate(ranges) if negate else _normalize(ranges)
        if not ranges:
            return Node(Op.NO_MATCH, flags=self.flags)
        runes = [v for pair in ranges for v in pair]
        return Node(Op.CHAR_CLASS, flags=self.flags & Flags.FOLD_CASE, runes=runes)

    def atom(self) -> Optional[Node]:
        ch = self.take()
        if ch == "(":
            return self.group()
        if ch == "[":
            return self.char_class()
        if ch == ".":
            op = Op.ANY_CHAR if self.flags & Flags.DOT_NL else Op.ANY_CHAR_NOT_NL
            return Node(op, flags=self.flags)
        if ch == "^":
            op = Op.BEGIN_TEXT if self.flags & Flags.ONE_LINE else Op.BEGIN_LINE
            return Node(op, flags=self.flags)
        if ch == "$":
            if self.flags & Flags.ONE_LINE:
                return Node(Op.END_TEXT, flags=self.flags | Flags.WAS_DOLLAR)
            return Node(Op.END_LINE, flags=self.flags)
        if ch == "\\":
            return self.escape_atom()
        return self.literal(ord(ch))

    def group(self) -> Optional[Node]:
        name = None
        if self.peek() == "?":
            self.pos += 1
            if self.s.startswith("P<", self.pos) or self.peek() == "<":
                self.pos += 2 if self.peek() == "P" else 1
                m = _NAME_RE.match(self.s, self.pos)
                if m is None or self.peek(m.end() - self.pos) != ">":
                    raise ParseError("invalid named capture")
                name = m.group(0)
                self.pos = m.end() + 1
            else:
                flags = self.flags
                negated = False
                seen = False
                while True:
                    c = self.take()
                    if c == "-":
                        if negated:
                            raise ParseError("invalid or unsupported Perl syntax")
                        negated = True
                        seen = False
                        continue
                    if c in ":)":
                        if negated and not seen:
                            raise ParseError("invalid or unsupported Perl syntax")
                        break
                    bit = {"i": Flags.FOLD_CASE, "m": Flags.ONE_LINE,
                           "s": Flags.DOT_NL, "U": Flags.NON_GREEDY}.get(c)
                    if bit is None:
                        raise ParseError("invalid or unsupported Perl syntax")
                    seen = True
                    # 'm' clears one-line mode, so its sense is inverted
                    on = negated if c == "m" else not negated
                    flags = flags | bit if on else flags & ~bit
                if c == ")":
                    self.flags = flags
                    return None
                saved = self.flags
                self.flags = flags
                inner = self.alternation()
                self.close_group()
                self.flags = saved
                return inner
        saved = self.flags
        inner = self.alternation()
        self.close_group()
        self.flags = saved
        return Node(Op.CAPTURE, flags=self.flags, sub=[inner], name=name)

    def close_group(self) -> None:
        if self.peek() != ")":
            raise ParseError(f"missing closing ): {self.s!r}")
        self.pos += 1

    def escape_atom(self) -> Node:
        c = self.peek()
        if c is None:
            raise ParseError("trailing backslash at end of expression")
        ops = {"b": Op.WORD_BOUNDARY, "B": Op.NO_WORD_BOUNDARY,
               "A": Op.BEGIN_TEXT, "z": Op.END_TEXT}
        if c in ops:
            self.pos += 1
            return Node(ops[c], flags=self.flags)
        if c.lower() in _PERL_CLASSES:
            self.pos += 1
            return self.class_node(_PERL_CLASSES[c.lower()], negate=c.isupper())
        return self.literal(self.escape_rune())

    def escape_rune(self) -> int:
        c = self.take()
        if c == "0":
            digits = ""
            while len(digits) < 2 and self.peek() is not None and self.peek() in "01234567":
                digits += self.take()
            return int(digits or "0", 8)
        if c == "x":
            if self.peek() == "{":
                end = self.s.find("}", self.pos)
                text = self.s[self.pos + 1:end] if end != -1 else ""
                if end == -1 or not text or not all(h in "0123456789abcdefABCDEF" for h in text):
                    raise ParseError("invalid escape sequence: \\x")
                value = int(text, 16)
                if value > MAX_RUNE:
                    raise ParseError("invalid escape sequence: \\x")
                self.pos = end + 1
                return value
            text = self.s[self.pos:self.pos + 2]
            if len(text) != 2 or not all(h in "0123456789abcdefABCDEF" for h in text):
                raise ParseError("invalid escape sequence: \\x")
            self.pos += 2
            return int(text, 16)
        if c in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[c]
        if c.isascii() and not c.isalnum() and c != "_":
            return ord(c)
        raise ParseError(f"invalid escape sequence: \\{c}")

    def char_class(self) -> Node:
        negate = False
        if self.peek() == "^":
            self.pos += 1
            negate = True
        ranges: list[tuple[int, int]] = []
        first = True
        while True:
            c = self.peek()
            if c is None:
                raise ParseError(f"missing closing ]: {self.s!r}")
            if c == "]" and not first:
                self.pos += 1
                break
            first = False
            if c == "[" and self.peek(1) == ":":
                end = self.s.find(":]", self.pos + 2)
                if end != -1:
                    name = self.s[self.pos + 2:end]
                    neg = name.startswith("^")
                    table = _POSIX_CLASSES.get(name.lstrip("^"))
                    if table is None:
                        raise ParseError(f"invalid character class range: [:{name}:]")
                    ranges.extend(_negate(table) if neg else table)
                    self.pos = end + 2
                    continue
            if c == "\\" and self.peek(1) is not None and self.peek(1).lower() in _PERL_CLASSES:
                letter = self.peek(1)
                self.pos += 2
                table = _PERL_CLASSES[letter.lower()]
                ranges.extend(_negate(table) if letter.isupper() else table)
                continue
            lo = self.class_rune()
            hi = lo
            if self.peek() == "-" and self.peek(1) not in (None, "]"):
                self.pos += 1
                hi = self.class_rune()
                if hi < lo:
                    raise ParseError("invalid character class range")
            ranges.append((lo, hi))
        return self.class_node(ranges, negate)

    def class_rune(self) -> int:
        c = self.take()
        if c == "\\":
            return self.escape_rune()
        return ord(c)


def parse(expr: str) -> Node:
    """Parse ``expr`` with Perl syntax; raise :class:`ParseError` if invalid."""
    return _Parser(expr).parse()