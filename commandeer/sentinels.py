"""
Resolution sentinels returned instead of raising.

This module defines two process-wide singletons:

- NotFound: returned by Registry.resolve/Registry.execute when a name is blank,
  unknown, or resolves to more than one command after the "global" narrowing.
- NoMatch: returned by Command.invoke when the supplied argument count does not
  fit the target's parameters; Registry.execute reports it as NotFound.

Both are distinct from None (a target may legitimately return None), so callers
must compare by identity:

    result = registry.execute("ping")
    if result is NotFound:
        ...

Semantics
- Falsy: bool(NotFound) is False.
- Stable string form: repr(NotFound) == "NotFound" (Rich renders it dim).
- Identity: NotFoundType() always returns the same instance; copy, deepcopy and
  pickle preserve it.
"""
import functools

from rich.text import Text


class _Sentinel:
    """
    Shared behavior of the resolution sentinels.

    Each concrete subclass names itself through __label__ and is final.
    """
    __slots__ = ()
    __label__ = "sentinel"

    @functools.cache
    def __new__(cls):
        """
        Return the unique instance of the concrete sentinel type (per process).
        """
        if cls is _Sentinel:
            raise TypeError("cannot instantiate the abstract sentinel type")
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __rich__(self):
        """
        Rich protocol hook: render the label dimmed.
        """
        return Text(repr(self), style="dim")

    def __repr__(self):
        return type(self).__label__

    def __init_subclass__(cls, **options):
        # Only direct subclasses are allowed; concrete sentinels are final.
        if _Sentinel not in cls.__bases__:
            raise TypeError(f"type {cls.__mro__[1].__name__!r} is not an acceptable base type")
        super().__init_subclass__(**options)


class NotFoundType(_Sentinel):
    """
    Type of the NotFound singleton: no command could be resolved unambiguously.
    """
    __slots__ = ()
    __label__ = "NotFound"


class NoMatchType(_Sentinel):
    """
    Type of the NoMatch singleton: the arguments do not fit the command's target.
    """
    __slots__ = ()
    __label__ = "NoMatch"


NotFound = NotFoundType()
NoMatch = NoMatchType()


__all__ = (
    "NotFoundType",
    "NoMatchType",
    "NotFound",
    "NoMatch",
)
