"""
Commandeer conversions: the pluggable type-coercion provider.

What this module provides
- Converter: per-type conversion capability with two directions:
  • source-driven: can_convert_to(value, type) / convert_to(value, type)
    ("can this value render itself as that type?")
  • target-driven: can_convert_from(source, type) / convert_from(value, type)
    ("can that type build itself from a value of this source type?")
- Conversions: a registry of converters keyed by class. Lookups walk the MRO so
  a converter registered for a base class (Enum, PurePath) serves subclasses.
- default_conversions: the process-wide default provider, preloaded with converters for
  str, numbers, bool, bytes, paths, UUIDs, enums and date/time types.

Coercion policy (Conversions.coerce)
1. None is never converted.
2. The annotation is resolved to candidate classes; unannotated parameters,
   Any and object accept anything as-is.
3. A value that is already an instance of a candidate is returned unchanged.
4. For each candidate, in order: source-driven conversion, then target-driven
   conversion. A conversion that raises counts as inapplicable.
5. When nothing applies, the value is returned unchanged and the target decides.

Example
    from commandeer.conversions import Converter, default_conversions

    @default_conversions.register(Point)
    class PointConverter(Converter):
        def can_convert_from(self, source, type, /):
            return issubclass(source, str)

        def convert_from(self, value, type, /):
            x, y = map(float, value.split(","))
            return type(x, y)
"""
import builtins
import datetime
import decimal
import enum
import fractions
import inspect
import logging
import pathlib
import types
import typing
import uuid

from .utils import Unset

logger = logging.getLogger(__name__)


class Converter:
    """
    Base converter; the fallback for classes without a registered converter.

    Every value can render itself as a string (str(value)); nothing else is
    supported until a subclass says so.
    """

    def can_convert_to(self, value, type, /):
        return type is str

    def convert_to(self, value, type, /):
        if type is str:
            return str(value)
        raise TypeError(f"{self!r} cannot convert {value!r} to {type.__qualname__}")

    def can_convert_from(self, source, type, /):
        return False

    def convert_from(self, value, type, /):
        raise TypeError(f"{self!r} cannot build {type.__qualname__} from {value!r}")

    def __repr__(self):
        return f"{type(self).__name__}()"


class ParsingConverter(Converter):
    """
    Converter for classes whose constructor parses the accepted sources.

    Parameters
    - sources: tuple of classes accepted by convert_from (str by default).
    - factory: callable (value, type) -> object; defaults to type(value).
    """

    def __init__(self, sources=(str,), factory=None):
        self._sources = tuple(sources)
        self._factory = factory

    def can_convert_from(self, source, type, /):
        # bool is an int subclass but never a number to parse.
        if issubclass(source, bool) and bool not in self._sources:
            return False
        return issubclass(source, self._sources)

    def convert_from(self, value, type, /):
        if isinstance(value, str):
            value = value.strip()
        if self._factory is not None:
            return self._factory(value, type)
        return type(value)


class NumberConverter(ParsingConverter):
    """
    Numbers parse from text and convert between numeric types without loss.

    Lossy conversions (2.5 -> int) raise ValueError and are therefore skipped by
    the coercion policy.
    """
    __numeric__ = (int, float, complex, decimal.Decimal, fractions.Fraction)

    def can_convert_to(self, value, type, /):
        return type is str or (type in self.__numeric__ and not isinstance(value, bool))

    def convert_to(self, value, type, /):
        if type is str:
            return str(value)
        if isinstance(value, complex) and type is not complex:
            raise ValueError(f"cannot convert complex {value!r} to {type.__qualname__}")
        if (result := type(value)) != value:
            raise ValueError(f"converting {value!r} to {type.__qualname__} loses precision")
        return result


_TRUTHS = {
    "true": True, "yes": True, "on": True, "1": True,
    "false": False, "no": False, "off": False, "0": False,
}


def _parse_bool(value, type, /):
    try:
        return _TRUTHS[value.casefold()]
    except KeyError:
        raise ValueError(f"invalid truth value {value!r}") from None


def _parse_enum(value, type, /):
    """
    Resolve an enum member by name (exact, then case-insensitive) or by value.
    """
    if isinstance(value, str):
        if value in type.__members__:
            return type.__members__[value]
        for name, member in type.__members__.items():
            if name.casefold() == value.casefold():
                return member
        try:
            return type(value)
        except ValueError:
            # Members with integer values spelled as text ("2").
            return type(int(value))
    return type(value)


class EnumConverter(ParsingConverter):
    """
    Enum members render as their name and parse from names or values.
    """

    def __init__(self):
        super().__init__((str, int), _parse_enum)

    def convert_to(self, value, type, /):
        if type is str:
            return value.name
        return super().convert_to(value, type)


class BytesConverter(ParsingConverter):
    """
    Bytes decode to text (UTF-8) and encode from it.
    """

    def __init__(self):
        super().__init__((str,), lambda value, type: type(value.encode("utf-8")))

    def convert_from(self, value, type, /):
        # Leading/trailing whitespace is data for bytes.
        return self._factory(value, type)

    def convert_to(self, value, type, /):
        if type is str:
            return bytes(value).decode("utf-8")
        return super().convert_to(value, type)


def _parse_seconds(value, type, /):
    return type(seconds=float(value))


def _parse_iso(value, type, /):
    return type.fromisoformat(value)


def _candidates(annotation):
    """
    Resolve a parameter annotation to a tuple of candidate classes.

    Returns None when any value is acceptable (no annotation, Any, object, type
    variables, string annotations that could not be evaluated, Literal...).
    """
    if annotation in (inspect.Parameter.empty, typing.Any, object):
        return None
    if isinstance(annotation, type):
        return (annotation,)

    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        return _candidates(typing.get_args(annotation)[0])

    if origin in (typing.Union, types.UnionType):
        candidates = []
        for argument in typing.get_args(annotation):
            if argument is type(None):
                continue
            if (resolved := _candidates(argument)) is None:
                return None
            candidates.extend(resolved)
        return tuple(candidates) or None

    if isinstance(origin, type):
        return (origin,)

    return None


class Conversions:
    """
    Registry of converters keyed by class.

    Lookup
    - lookup(cls) walks cls.__mro__ and returns the first registered converter,
      or the base Converter when none is registered.

    Registration
    - register(cls, converter) -> converter
    - @register(cls) on a Converter subclass (instantiated without arguments) or
      on a Converter instance.
    - unregister(cls) removes an entry; unknown classes are ignored.

    Notes
    - copy() returns an independent registry with the same entries, convenient
      to extend the defaults for one Registry only.
    """
    __default__ = Converter()

    def __init__(self, converters=None, /):
        self._converters = dict(converters or {})

    def register(self, type, converter=Unset, /):
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a class")
        if converter is Unset:
            def wrapper(converter):
                self.register(type, converter() if isinstance(converter, builtins.type) else converter)
                return converter
            return wrapper
        if not isinstance(converter, Converter):
            raise TypeError("register() second argument must be a converter")
        self._converters[type] = converter
        return converter

    def unregister(self, type, /):
        self._converters.pop(type, None)

    def lookup(self, type, /):
        for base in type.__mro__:
            if base in self._converters:
                return self._converters[base]
        return self.__default__

    def copy(self):
        return type(self)(self._converters)

    def __contains__(self, type, /):
        return type in self._converters

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(cls.__qualname__ for cls in self._converters)})"

    def coerce(self, value, annotation=inspect.Parameter.empty, /):
        """
        Coerce `value` to `annotation` following the module-level policy.

        Never raises for inapplicable or failing conversions; the value is then
        returned unchanged.
        """
        if value is None:
            return None
        if (candidates := _candidates(annotation)) is None:
            return value

        try:
            if isinstance(value, candidates):
                return value
        except TypeError:
            # Classes that refuse isinstance checks (non-runtime protocols).
            return value

        for target in candidates:
            if (converted := self.convert(value, target)) is not Unset:
                return converted

        return value

    def convert(self, value, type, /):
        """
        Try the source-driven then the target-driven conversion of `value` to `type`.

        Returns Unset when neither applies (or both raised).
        """
        source = self.lookup(builtins.type(value))
        try:
            if source.can_convert_to(value, type):
                return source.convert_to(value, type)
        except Exception:
            logger.debug("%r failed to convert %r to %s", source, value, type.__qualname__, exc_info=True)

        target = self.lookup(type)
        try:
            if target.can_convert_from(builtins.type(value), type):
                return target.convert_from(value, type)
        except Exception:
            logger.debug("%r failed to build %s from %r", target, type.__qualname__, value, exc_info=True)

        return Unset


default_conversions = Conversions()

default_conversions.register(int, NumberConverter((str,)))
default_conversions.register(float, NumberConverter((str, int)))
default_conversions.register(complex, NumberConverter((str, int, float)))
default_conversions.register(decimal.Decimal, NumberConverter((str, int)))
default_conversions.register(fractions.Fraction, NumberConverter((str, int, float, decimal.Decimal)))
default_conversions.register(bool, ParsingConverter((str,), _parse_bool))
default_conversions.register(bytes, BytesConverter())
default_conversions.register(enum.Enum, EnumConverter())
default_conversions.register(pathlib.PurePath, ParsingConverter((str,)))
default_conversions.register(uuid.UUID, ParsingConverter((str,)))
default_conversions.register(datetime.datetime, ParsingConverter((str,), _parse_iso))
default_conversions.register(datetime.date, ParsingConverter((str,), _parse_iso))
default_conversions.register(datetime.time, ParsingConverter((str,), _parse_iso))
default_conversions.register(datetime.timedelta, ParsingConverter((str, int, float), _parse_seconds))


__all__ = (
    "Converter",
    "ParsingConverter",
    "NumberConverter",
    "EnumConverter",
    "BytesConverter",
    "Conversions",
    "default_conversions",
)
