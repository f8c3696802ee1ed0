"""
Table-driven command-line flag parser with typed destinations.
"""

from __future__ import annotations
import dataclasses as _dc, enum, logging, re, sys
from typing import (Any, ClassVar, IO, NewType, Protocol, Sequence, Union,
                    Annotated, get_args, get_origin, get_type_hints)
import types

__version__ = '0.1.0'

__all__ = [
    'FlagKind', 'ParseOutcome', 'Cell', 'Destination', 'BoolDest', 'CharDest',
    'StrDest', 'IntDest', 'DoubleDest', 'Flag', 'parse', 'placeholder',
    'render_help', 'print_help', 'duplicate_names', 'check_unique_names',
    'Char', 'Arg', 'DataclassFlags',
]

logger = logging.getLogger(__name__)

INT_MIN = -2**31
INT_MAX = 2**31 - 1


class FlagKind(enum.IntEnum):
    BOOL = 0
    CHAR = 1
    STR = 2
    INT = 3
    DOUBLE = 4


class ParseOutcome(enum.IntEnum):
    OK = 0
    UNKNOWN_TYPE = 1
    MISSING_CHAR = 2
    MISSING_STR = 3
    MISSING_INT = 4
    MISSING_DOUBLE = 5
    CHAR_WRONG_ARG = 6
    UNKNOWN_FLAG = 7
    NOT_AN_INT = 8
    NOT_A_DOUBLE = 9

    @property
    def ok(self) -> bool:
        return self is ParseOutcome.OK


# --------------------------------------------------------------------------- #
class Cell:
    """Single mutable slot for a value that does not live on another object."""
    __slots__: tuple[str, ...] = ('value',)
    value: object

    def __init__(self, value: object = None):
        self.value = value

    def __repr__(self) -> str:
        return f'Cell({self.value!r})'


@_dc.dataclass(frozen=True)
class Destination:
    """Where a matched flag writes its value: ``target.<attr>``.

    Subclasses fix the kind, so a flag can never pair a kind with storage
    of another shape. The current value of the attribute, when set and not
    ``None``, is checked against that shape on construction.

    String values are stored as the very ``str`` objects found in the
    argument vector; nothing is copied.
    """
    kind: ClassVar[FlagKind]
    target: object
    attr: str = 'value'

    def __post_init__(self) -> None:
        current = getattr(self.target, self.attr, None)
        if current is not None and not self.accepts(current):
            raise TypeError(
                f"{type(self).__name__} cannot hold {current!r} "
                f"(in {type(self.target).__name__}.{self.attr})")

    @staticmethod
    def accepts(value: object) -> bool:
        raise NotImplementedError

    def read(self) -> object:
        return getattr(self.target, self.attr)

    def write(self, value: object) -> None:
        setattr(self.target, self.attr, value)


class BoolDest(Destination):
    kind = FlagKind.BOOL

    @staticmethod
    def accepts(value: object) -> bool:
        return isinstance(value, bool)


class CharDest(Destination):
    kind = FlagKind.CHAR

    @staticmethod
    def accepts(value: object) -> bool:
        return isinstance(value, str) and len(value) == 1


class StrDest(Destination):
    kind = FlagKind.STR

    @staticmethod
    def accepts(value: object) -> bool:
        return isinstance(value, str)


class IntDest(Destination):
    kind = FlagKind.INT

    @staticmethod
    def accepts(value: object) -> bool:
        return (isinstance(value, int) and not isinstance(value, bool)
                and INT_MIN <= value <= INT_MAX)


class DoubleDest(Destination):
    kind = FlagKind.DOUBLE

    @staticmethod
    def accepts(value: object) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)


@_dc.dataclass(frozen=True)
class Flag:
    dest: Destination
    short_name: str | None = None
    long_name: str | None = None
    description: str = ''

    @property
    def kind(self) -> FlagKind:
        return self.dest.kind

    def matches(self, token: str) -> bool:
        return token == self.short_name or token == self.long_name

    def names(self) -> str:
        """Short and long name, comma separated only when both exist."""
        return ','.join(n for n in (self.short_name, self.long_name) if n is not None)


# --------------------------------------------------------------------------- #
# Converters return the parsed value, or None when the token is rejected.

_INT_RE = re.compile(r'\s*[+-]?[0-9]+')
_DOUBLE_RE = re.compile(r'\s*[+-]?(?P<mant>[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def _to_char(token: str) -> str | None:
    return token if len(token) == 1 else None


def _to_str(token: str) -> str:
    return token


def _to_int(token: str) -> int | None:
    if not _INT_RE.fullmatch(token):
        return None
    text = token.strip()
    sign = -1 if text.startswith('-') else 1
    digits = text.lstrip('+-').lstrip('0') or '0'
    # longer than any 32-bit value; int() also refuses very long strings
    if len(digits) > 10:
        return None
    value = sign * int(digits)
    if not INT_MIN <= value <= INT_MAX:
        return None
    return value


def _to_double(token: str) -> float | None:
    m = _DOUBLE_RE.fullmatch(token)
    if m is None:
        return None
    value = float(token)
    if value in (float('inf'), float('-inf')):
        return None
    # underflow: a non-zero literal that rounds to zero or to a subnormal
    if value == 0.0 and re.search('[1-9]', m.group('mant')):
        return None
    if 0.0 < abs(value) < sys.float_info.min:
        return None
    return value


# kind -> (converter, missing-value error, bad-value error, usage word)
_DISPATCH: dict[FlagKind, tuple[Any, ParseOutcome, ParseOutcome, str]] = { # pyright: ignore[reportExplicitAny]
    FlagKind.CHAR: (_to_char, ParseOutcome.MISSING_CHAR, ParseOutcome.CHAR_WRONG_ARG, '<char>'),
    # _to_str never rejects
    FlagKind.STR: (_to_str, ParseOutcome.MISSING_STR, ParseOutcome.OK, '<string>'),
    FlagKind.INT: (_to_int, ParseOutcome.MISSING_INT, ParseOutcome.NOT_AN_INT, '<integer>'),
    FlagKind.DOUBLE: (_to_double, ParseOutcome.MISSING_DOUBLE, ParseOutcome.NOT_A_DOUBLE, '<double>'),
}

_PLACEHOLDERS: dict[FlagKind, str] = {
    FlagKind.BOOL: '',
    FlagKind.CHAR: '<char>',
    FlagKind.STR: '<str>',
    FlagKind.INT: '<int>',
    FlagKind.DOUBLE: '<double>',
}


def placeholder(kind: FlagKind) -> str:
    try:
        return _PLACEHOLDERS[kind]
    except KeyError:
        raise ValueError(f"Unknown flag kind: {kind!r}") from None


def _fail(outcome: ParseOutcome, message: str, out: IO[str]) -> ParseOutcome:
    print(message, file=out)
    logger.debug("parse failed: %s", outcome.name)
    return outcome


# --------------------------------------------------------------------------- #
def parse(flags: Sequence[Flag], argv: Sequence[str] | None = None,
          out: IO[str] | None = None) -> ParseOutcome:
    """Match ``argv[1:]`` against ``flags`` and write values to their destinations.

    Every flag whose name equals the token is triggered, not only the first
    one. On error a usage line is printed to ``out`` (stdout by default) and
    the error is returned; values written before the error are kept.
    """
    if argv is None:
        argv = sys.argv
    if out is None:
        out = sys.stdout

    i = 1
    while i < len(argv):
        token = argv[i]
        found = False
        takes_value = False
        for flag in flags:
            if not flag.matches(token):
                continue
            found = True
            if flag.kind is FlagKind.BOOL:
                flag.dest.write(True)
                logger.debug("%s -> True", token)
                continue
            if flag.kind not in _DISPATCH:
                logger.debug("flag %s has unknown kind %r", token, flag.kind)
                return _fail(ParseOutcome.UNKNOWN_TYPE,
                             f"Usage: {flag.names()} <unknown type>", out)

            convert, missing, invalid, word = _DISPATCH[flag.kind]
            usage = f"Usage: {flag.names()} {word}"
            if i + 1 >= len(argv):
                return _fail(missing, usage, out)
            value = convert(argv[i + 1])
            if value is None:
                return _fail(invalid, usage, out)
            flag.dest.write(value)
            logger.debug("%s -> %r", token, value)
            takes_value = True

        if not found:
            return _fail(ParseOutcome.UNKNOWN_FLAG,
                         f'Error parsing flags: unknown flag "{token}"', out)
        i += 2 if takes_value else 1

    return ParseOutcome.OK


def render_help(prog_name: str, description: str, flags: Sequence[Flag]) -> str:
    lines = [prog_name, description, '', 'Options:']
    for flag in flags:
        lines.append(f"    {flag.names()} {placeholder(flag.kind)}")
        lines.append(f"        {flag.description}")
    return '\n'.join(lines) + '\n'


def print_help(prog_name: str, description: str, flags: Sequence[Flag],
               out: IO[str] | None = None) -> ParseOutcome:
    if out is None:
        out = sys.stdout
    out.write(render_help(prog_name, description, flags))
    return ParseOutcome.OK


def duplicate_names(flags: Sequence[Flag]) -> list[str]:
    seen: set[str] = set()
    dups: list[str] = []
    for flag in flags:
        for name in (flag.short_name, flag.long_name):
            if name is None:
                continue
            if name in seen and name not in dups:
                dups.append(name)
            seen.add(name)
    return dups


def check_unique_names(flags: Sequence[Flag]) -> None:
    dups = duplicate_names(flags)
    if dups:
        raise ValueError(f"Flag names declared more than once: {', '.join(dups)}")


# --------------------------------------------------------------------------- #
# Dataclass bridge

# Define a protocol capturing 'dataclass-ness'
class DataclassType(Protocol):
    __dataclass_fields__: ClassVar[dict[str, _dc.Field[Any]]] # pyright: ignore[reportExplicitAny]


Char = NewType('Char', str)


class Arg:
    """Attach flag names and help text to a dataclass field via `Annotated[..., Arg(...)]`."""
    __slots__: tuple[str, ...] = ('short_name', 'long_name', 'description')
    short_name: str | None
    long_name: str | None
    description: str

    def __init__(self, short_name: str | None = None, long_name: str | None = None,
                 description: str = ''):
        self.short_name = short_name
        self.long_name = long_name
        self.description = description


_DEST_BY_TYPE: dict[object, type[Destination]] = {
    bool: BoolDest,
    Char: CharDest,
    str: StrDest,
    int: IntDest,
    float: DoubleDest,
}


def _extract_field_options(ann: object) -> tuple[object, Arg | None]:
    """Return (base_type, arg)."""
    if get_origin(ann) is Annotated:
        base, *meta = get_args(ann) # pyright: ignore[reportAny]
        arg_meta = next((m for m in meta if isinstance(m, Arg)), None) # pyright: ignore[reportAny]
        return base, arg_meta
    return ann, None


def _unwrap_optional(typ: object) -> object:
    if get_origin(typ) in (Union, types.UnionType):
        typ_args = [a for a in get_args(typ) if a is not type(None)]
        if len(typ_args) != 1:
            raise TypeError(f"Union types must be a single type or None: {typ}")
        return typ_args[0]
    return typ


def DataclassFlags(instance: DataclassType) -> list[Flag]:
    """Build a flag table whose destinations are the fields of ``instance``.

    Field annotations are resolved with ``get_type_hints`` against the
    defining module, so a class declared inside a function of a module using
    ``from __future__ import annotations`` cannot be resolved (NameError).
    """
    if not _dc.is_dataclass(instance) or isinstance(instance, type):
        raise TypeError(f"Expected dataclass instance, got {instance!r}")

    hints = get_type_hints(type(instance), include_extras=True)
    table: list[Flag] = []
    for f in _dc.fields(instance):
        typ, arg = _extract_field_options(hints.get(f.name, f.type))
        if arg is None:
            continue
        typ = _unwrap_optional(typ)
        dest_cls = _DEST_BY_TYPE.get(typ)
        if dest_cls is None:
            raise TypeError(f"Unsupported flag type for field {f.name!r}: {typ!r}")
        table.append(Flag(dest_cls(instance, f.name), arg.short_name,
                          arg.long_name, arg.description))
    return table
