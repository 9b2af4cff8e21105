"""
Commandeer utilities (internal helpers shared by the registry layers).

Overview
- UnsetType / Unset
  • Singleton marker for "not provided", distinct from None (None is a valid
    instance handle or help text in several places).

- coalesce(value, default=None)
  • Materialize Unset into a default; every other value, falsey or not, is kept.

- blank(value)
  • True for Unset, None, non-strings and whitespace-only strings. Drives the
    name/group defaulting rules of Registry.bind.

- rename(callable, name) / @rename("name")
  • Give generated wrappers a stable __name__/__qualname__.

- mirror("attr")
  • Read-only property over a private backing field (self._attr).

- mglob(pattern)
  • Expand "pkg.*" / "pkg.**.tools" module globs into importable module names
    (used by discovery.bind_modules).
"""
import functools
import importlib
import pkgutil
import re
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters that were not provided.

    Characteristics
    - Falsey, printable as "Unset", sealed against subclassing.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` unchanged.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def blank(object, /):
    """
    Tell whether a metadata string should be replaced by its default.

    Unset, None, non-strings and strings made only of whitespace are blank.
    """
    return not isinstance(object, str) or not object.strip()


def _rename(target, name, /):
    if not callable(target):
        raise TypeError(f"cannot rename non-callable {type(target).__name__!r}")
    try:
        target.__name__ = target.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {target!r}") from None
    return target


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or build a decorator that will.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Raises
    - TypeError on a non-callable target, a non-string name, a callable whose
      names cannot be updated, or a wrong number of arguments.
    """
    match parameters:
        case (target, str() as name):
            return _rename(target, name)
        case (str() as name,):
            return _rename(lambda target, /: _rename(target, name), "rename")
        case _:
            raise TypeError(f"rename() expects (callable, name) or (name), got {len(parameters)} argument(s)")


def mirror(name, /):
    """
    Build a read-only property serving the backing attribute "_{name}".

    The value is returned as-is and the property has no setter.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


@functools.cache
def _translate(segment):
    """
    translate one glob segment into a regex snippet that never crosses a dot.
      *      → any run of non-dot chars
      ?      → a single non-dot char
      [...]  → character class, [!...] negated
      \\x     → literal x
    """
    parts = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "\\" and index + 1 < len(segment):
            parts.append(re.escape(segment[index + 1]))
            index += 2
            continue
        if char == "*":
            parts.append(r"[^.]*")
        elif char == "?":
            parts.append(r"[^.]")
        elif char == "[" and (close := segment.find("]", index + 1)) != -1:
            body = segment[index + 1:close]
            if body[:1] in ("!", "^"):
                body = "^" + body[1:]
            parts.append(f"[{body}]")
            index = close
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@functools.cache
def _compile(pattern):
    """
    compile a dotted module glob; '**' spans zero or more whole segments.
    """
    body = ""
    for position, segment in enumerate(pattern.split(".")):
        if segment == "**":
            body += r"(?:\.[A-Za-z_]\w*)*"
        else:
            body += ("" if not position else r"\.") + _translate(segment)
    return re.compile(body)


def mglob(source, /):
    """
    Expand a dotted module glob into sorted, fully-qualified module names.

    Rules
    - The pattern must start with at least one concrete package segment; that
      prefix is imported and its package tree walked with pkgutil.
    - A pattern without wildcards is returned as a one-element list untouched.
    - An unimportable prefix yields an empty list.

    Examples
    - "pkg.*"        → direct children of pkg
    - "pkg.**.tools" → every tools module below pkg
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    if not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    identifier = re.compile(r"(?!\d)\w+")

    if all(map(identifier.fullmatch, source.split("."))):
        return [source]

    prefixes = []
    for segment in source.split("."):
        if not identifier.fullmatch(segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    pattern = _compile(source)
    matches = {prefix} if pattern.fullmatch(prefix) else set()

    if hasattr(package, "__path__"):
        for info in pkgutil.walk_packages(package.__path__, prefix + "."):
            if pattern.fullmatch(info.name):
                matches.add(info.name)

    return sorted(matches)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "blank",
    "rename",
    "mirror",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
