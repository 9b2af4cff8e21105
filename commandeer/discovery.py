"""
Commandeer discovery: declare commands on functions and bind them in bulk.

Everything here is a convenience on top of Registry.bind; a caller can always
build CommandInfo entries by hand and bind targets one by one instead.

What this module provides
- command(...): decorator attaching a CommandInfo to a function (stackable, so a
  single target may declare several commands). Works on plain functions and on
  staticmethod/classmethod objects, with or without arguments:

      class Shell:
          @command(help_text="answer with pong")
          def ping(self):
              return "pong"

          @command("add", group="math")
          @command("plus", group="math")
          @staticmethod
          def add(a: int, b: int):
              return a + b

- metadata_of(target): the CommandInfo entries attached to a target.
- members(source): (target, metadata) pairs for the decorated members of a
  class or of an instance's class, walking the MRO (overrides hide base members).
- bind_members / unbind_members: feed members(...) into Registry.bind/unbind.
- bind_modules(registry, pattern): import the modules matched by a dotted
  module glob and bind their decorated top-level functions.
"""
import importlib
import inspect
import logging

from .commands import CommandInfo
from .utils import Unset, mglob, rename

logger = logging.getLogger(__name__)

_ATTRIBUTE = "__commands__"


def _unwrap(target):
    if isinstance(target, staticmethod | classmethod) or inspect.ismethod(target):
        return target.__func__
    return target


def command(source=Unset, /, name=Unset, group=Unset, help_text=Unset):
    """
    Declare a command on a function.

    Invocation modes
    - Bare decorator: @command
    - With metadata: @command(name=..., group=..., help_text=...)
    - Name shortcut: @command("name", group=...)

    Entries accumulate in declaration order (top decorator first). The function
    is returned unchanged apart from the attached metadata.

    Raises
    - TypeError: applied to something that is not a function or a
      staticmethod/classmethod object, or given non-string metadata.
    """
    if isinstance(source, str):
        source, name = Unset, source

    info = CommandInfo(name, group, help_text)

    @rename("command")
    def wrapper(source, /):
        function = _unwrap(source)
        if not inspect.isfunction(function):
            raise TypeError("@command() must be applied to a function, a staticmethod or a classmethod")
        setattr(function, _ATTRIBUTE, (info,) + getattr(function, _ATTRIBUTE, ()))
        return source

    return wrapper(source) if source is not Unset else wrapper


def metadata_of(target, /):
    """
    Return the CommandInfo entries declared on `target` (empty tuple when none).
    """
    return tuple(getattr(_unwrap(target), _ATTRIBUTE, ()))


def members(source, /):
    """
    Yield (target, metadata) for every decorated member of a class or instance.

    Targets are yielded as stored in the class body (functions, staticmethod and
    classmethod objects), so they can later be passed to Registry.unbind.
    """
    owner = source if isinstance(source, type) else type(source)
    seen = set()

    for cls in owner.__mro__:
        for name, member in vars(cls).items():
            if name in seen:
                continue
            seen.add(name)
            if metadata := metadata_of(member):
                yield member, metadata


def bind_members(registry, source, /):
    """
    Bind every decorated member of `source` (a class or an instance).

    - For an instance, the instance is passed along to every bind.
    - For a class, classmethods bind to the class itself and staticmethods need
      nothing; decorated instance methods raise MissingInstanceError.
    """
    instance = Unset if isinstance(source, type) else source

    for target, metadata in members(source):
        if isinstance(target, classmethod) and instance is Unset:
            registry.bind(target, metadata, source)
        else:
            registry.bind(target, metadata, instance)


def unbind_members(registry, source, /):
    """
    Unbind every decorated member of `source` (a class or an instance).

    Targets are shared by all instances of a class, so this removes the
    commands of any instance bound through the same members.
    """
    for target, _ in members(source):
        registry.unbind(target)


def bind_modules(registry, pattern, /):
    """
    Import the modules matching `pattern` and bind their decorated functions.

    Only functions defined in the module itself are considered (imported
    helpers are skipped).

    Raises
    - TypeError: pattern is not a string, or a matched module cannot be imported.
    - ValueError: pattern is empty or starts with a wildcard.
    """
    for name in mglob(pattern):
        try:
            module = importlib.import_module(name)
        except ImportError:
            raise TypeError(f"unable to import module {name!r}") from None

        for member in vars(module).values():
            if not inspect.isfunction(member) or member.__module__ != module.__name__:
                continue
            if metadata := metadata_of(member):
                registry.bind(member, metadata)

        logger.debug("Scanned module %r for commands", name)


__all__ = (
    "command",
    "metadata_of",
    "members",
    "bind_members",
    "unbind_members",
    "bind_modules",
)
