"""
Commandeer command layer: the immutable record behind every registered operation.

What this module provides
- CommandInfo: the metadata a caller (or the @command decorator) attaches to a
  target: optional name override, optional group override, help text.
- Command: binds a qualified name ("{group}.{name}") to an invocable target and
  knows how to invoke it with positional, already-tokenized values:
  • arity check against the target's positional parameters (NoMatch on mismatch),
  • per-parameter coercion through the conversions provider,
  • failures of the target returned as InvocationError values.
- requires_instance(target): whether a target must be bound to an instance
  before it can be called (the analogue of a non-static method).

Identity
- name and group are lowercased at construction; group defaults to "global".
- Two commands are equal when their full names match case-insensitively; the
  target, the instance and the help text play no part.
- Commands order by full name (ordinal string comparison); None sorts first.

Targets
- plain functions and any other callables are called as-is;
- staticmethod objects are unwrapped;
- classmethod objects are bound to the instance's class (or to the instance when
  it is itself a class);
- functions defined in a class body are bound to the supplied instance through
  the descriptor protocol;
- bound methods already carry their instance.

Example
    def add(a: int, b: int):
        return a + b

    cmd = Command(add, "Add", "Math")
    cmd.full_name           # "math.add"
    cmd.invoke(("2", "3"))  # 5
    cmd.invoke(("2",))      # NoMatch
"""
import functools
import inspect
import logging
import operator
import re
import sys
from collections import namedtuple
from inspect import Parameter

from .conversions import default_conversions
from .faults import InvocationError, MissingInstanceError, MissingTargetError
from .sentinels import NoMatch
from .utils import Unset, UnsetType, blank, coalesce, mirror, rename

logger = logging.getLogger(__name__)

GLOBAL = "global"
SEPARATOR = "."


class CommandInfo(namedtuple("CommandInfo", ("name", "group", "help_text"), defaults=(Unset, Unset, Unset))):
    """
    Metadata describing one command declared on a target.

    Fields
    - name: str | None | Unset, blank means "use the target's own name".
    - group: str | None | Unset, blank means "global".
    - help_text: str | None | Unset, free-form documentation.

    A target may carry several CommandInfo entries; each one becomes a Command.
    """
    __slots__ = ()

    def __new__(cls, name=Unset, group=Unset, help_text=Unset):
        for field, value in zip(cls._fields, (name, group, help_text)):
            if not isinstance(value, str | UnsetType | None):
                raise TypeError(f"command info {field!r} must be a string")
        return super().__new__(cls, name, group, help_text)


def _declared(target):
    """
    Return the static class attribute a function was declared as, or Unset.

    Walks the function's __qualname__ from its module; classes created inside a
    function body (with <locals> in the path) cannot be reached.
    """
    *path, name = target.__qualname__.split(".")
    if not path or "<locals>" in path:
        return Unset
    owner = sys.modules.get(target.__module__)
    for part in path:
        if (owner := getattr(owner, part, None)) is None:
            return Unset
    try:
        return inspect.getattr_static(owner, name)
    except AttributeError:
        return Unset


def requires_instance(target, /):
    """
    Tell whether `target` must be bound to an instance before being called.

    Rules
    - staticmethod objects, bound methods and non-function callables: False.
    - classmethod objects: True (they bind to the instance's class).
    - plain functions declared directly in a class body: True, unless the class
      declares them as a staticmethod.
    - other plain functions (module level, nested): False.
    """
    if isinstance(target, staticmethod):
        return False
    if isinstance(target, classmethod):
        return True
    if not inspect.isfunction(target):
        return False

    scope = target.__qualname__.rsplit(".", 2)
    if len(scope) < 2 or scope[-2] == "<locals>":
        return False
    return not isinstance(_declared(target), staticmethod)


def check_target(target, instance=Unset, /):
    """
    Enforce the registration preconditions on a target.

    Raises
    - MissingTargetError: target is None or not invocable.
    - MissingInstanceError: target requires an instance and none was supplied.
    """
    if target is None:
        raise MissingTargetError("target must not be None", hint="pass the function or method to register")
    if not callable(target) and not isinstance(target, staticmethod | classmethod):
        raise MissingTargetError(
            f"target {target!r} is not invocable",
            hint="pass a function, a method, or a callable object",
        )
    if requires_instance(target) and coalesce(instance) is None:
        raise MissingInstanceError(
            f"target {_target_name(target)!r} requires an instance",
            hint="pass the owning object as 'instance'",
        )


def _target_name(target):
    if isinstance(target, staticmethod | classmethod):
        target = target.__func__
    return getattr(target, "__name__", type(target).__name__)


def _namespace(call):
    """
    Globals used to evaluate the string annotations of a callable.
    """
    function = inspect.unwrap(getattr(call, "__func__", call))
    if not inspect.isfunction(function):
        function = getattr(type(call), "__call__", None)
    if (namespace := getattr(function, "__globals__", None)) is not None:
        return namespace
    if (module := sys.modules.get(getattr(call, "__module__", None))) is not None:
        return vars(module)
    return {}


def _callable(target, instance):
    """
    Produce the callable actually invoked for a target/instance pair.
    """
    if isinstance(target, staticmethod):
        return target.__func__
    owner = instance if isinstance(instance, type) else type(instance)
    if isinstance(target, classmethod):
        return target.__get__(None, owner)
    if requires_instance(target):
        # Classes built inside a function body are unreachable by qualified
        # name; their staticmethods show up on the instance's type instead.
        declared = inspect.getattr_static(owner, target.__name__, None)
        if isinstance(declared, staticmethod) and declared.__func__ is target:
            return target
        return target.__get__(instance, owner)
    return target


class CommandType(type):
    """
    Metaclass giving commands read-only fields and stable representations.

    - Every name listed in __introspectable__ becomes a read-only property over
      the private "_{name}" attribute (see mirror()).
    - __repr__ and __rich_repr__ list the __displayable__ fields, or the
      __introspectable__ ones when __displayable__ is unset.
    - __typename__ is the hyphenated, lowercased class name used in messages.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    """
    One registered, invocable operation.

    Fields (read-only)
    - name, group, full_name: lowercased identity; full_name is "{group}.{name}".
    - help_text: documentation only, may be empty.
    - target: the invocable exactly as supplied (identity used by unbind).
    - instance: the owning instance for instance-bound targets, else None.
    - registry: the Registry that created this command, or None.

    Construction
        Command(target, name=Unset, group=Unset, help_text=Unset, *,
                instance=Unset, registry=None, conversions=Unset)

    - blank name → the target's own __name__; blank group → "global".
    - conversions defaults to the registry's provider, then to the process-wide
      default.

    Raises
    - MissingTargetError / MissingInstanceError as described in check_target().
    """

    __introspectable__ = (
        "name",
        "group",
        "full_name",
        "help_text",
        "target",
        "instance",
        "registry",
    )

    __displayable__ = (
        "name",
        "group",
        "full_name",
        "help_text",
    )

    def __init__(
            self,
            target,
            /,
            name=Unset,
            group=Unset,
            help_text=Unset,
            *,
            instance=Unset,
            registry=None,
            conversions=Unset,
    ):
        check_target(target, instance)
        CommandInfo(name, group, help_text)  # Validates field types.

        self._name = (_target_name(target) if blank(name) else name).lower()
        self._group = (GLOBAL if blank(group) else group).lower()
        self._full_name = f"{self._group}{SEPARATOR}{self._name}"
        self._help_text = coalesce(help_text, "") or ""
        self._target = target
        self._instance = coalesce(instance)
        self._registry = registry
        self._conversions = coalesce(conversions, getattr(registry, "conversions", default_conversions))
        self._call = _callable(target, self._instance)

    @functools.cached_property
    def _layout(self):
        """
        Positional parameter annotations plus the *args annotation (Unset when
        there is no *args). None when the callable exposes no signature.
        """
        try:
            signature = inspect.signature(self._call)
        except ValueError:
            return None

        namespace = _namespace(self._call)
        positional = []
        variadic = Unset
        for parameter in signature.parameters.values():
            if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD):
                positional.append(self._annotation(parameter, namespace))
            elif parameter.kind is Parameter.VAR_POSITIONAL:
                variadic = self._annotation(parameter, namespace)
        return tuple(positional), variadic

    def _annotation(self, parameter, namespace, /):
        """
        Evaluate a string annotation on its own; unresolvable ones accept any value.
        """
        if not isinstance(annotation := parameter.annotation, str):
            return annotation
        try:
            return eval(annotation, namespace)
        except Exception:
            logger.debug(
                "command %r: cannot resolve annotation %r of %r",
                self._full_name,
                annotation,
                parameter.name,
            )
            return Parameter.empty

    @property
    def arity(self):
        """
        Number of positional values the target takes (None when unknown).
        """
        return None if self._layout is None else len(self._layout[0])

    def accepts(self, count, /):
        """
        Tell whether `count` positional values fit the target.
        """
        if self._layout is None:
            return True
        positional, variadic = self._layout
        if variadic is Unset:
            return count == len(positional)
        return count >= len(positional)

    def invoke(self, args=None, /):
        """
        Coerce `args` and call the target.

        Returns
        - the target's return value;
        - NoMatch when the number of values does not fit (the target is not called);
        - InvocationError when the target raises (never re-raised).
        """
        args = () if args is None else tuple(args)

        if not self.accepts(len(args)):
            logger.debug("command %r takes %s values, %d given", self._full_name, self.arity, len(args))
            return NoMatch

        if self._layout is not None:
            positional, variadic = self._layout
            annotations = positional + (variadic,) * (len(args) - len(positional))
            args = tuple(map(self._conversions.coerce, args, annotations))

        try:
            return self._call(*args)
        except Exception as exception:
            logger.debug("command %r failed", self._full_name, exc_info=True)
            return InvocationError(self, exception)

    def __call__(self, *args):
        return self.invoke(args)

    def compare(self, other, /):
        """
        Three-way ordinal comparison of full names; None sorts before any command.
        """
        if other is None:
            return 1
        if not isinstance(other, Command):
            raise TypeError(f"compare() argument must be a command, not {type(other).__name__}")
        return (self._full_name > other._full_name) - (self._full_name < other._full_name)

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._full_name == other._full_name

    def __hash__(self):
        return hash(self._full_name)

    def __lt__(self, other):
        if other is None:
            return False
        if not isinstance(other, Command):
            return NotImplemented
        return self._full_name < other._full_name

    def __le__(self, other):
        if other is None:
            return False
        if not isinstance(other, Command):
            return NotImplemented
        return self._full_name <= other._full_name

    def __gt__(self, other):
        if other is None:
            return True
        if not isinstance(other, Command):
            return NotImplemented
        return self._full_name > other._full_name

    def __ge__(self, other):
        if other is None:
            return True
        if not isinstance(other, Command):
            return NotImplemented
        return self._full_name >= other._full_name


__all__ = (
    "GLOBAL",
    "SEPARATOR",
    "CommandInfo",
    "Command",
    "requires_instance",
    "check_target",
)

# The metaclass is an implementation detail of Command.
del CommandType
