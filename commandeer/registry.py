"""
Commandeer registry: registration, name resolution and dispatch.

What this module provides
- Registry: owns an insertion-ordered list of Commands.
  • bind(target, metadata, instance): wrap each metadata entry into a Command
    and store it unless an equal command (same full name, any casing) exists.
  • unbind(target): drop every command bound to that target.
  • resolve(name) / execute(name, *args): find exactly one command by short or
    qualified name and invoke it.
  • commands: live, read-only view of the stored commands.
- CommandsView: the Sequence returned by Registry.commands.

Resolution (resolve/execute)
1. A blank name resolves to NotFound.
2. A name containing "." is matched against full names, any other name against
   short names; both comparisons ignore case.
3. Several candidates are narrowed to those of the "global" group.
4. Anything but exactly one remaining candidate resolves to NotFound.

Errors
- bind/unbind raise MissingTargetError / MissingInstanceError on programmer
  errors (missing target, missing instance).
- execute never raises for lookup problems: NotFound is returned for unknown or
  ambiguous names and for argument-count mismatches, and an InvocationError
  value is returned when the target fails.

Concurrency
- No locking: share a Registry between threads only behind an external lock.

Example
    registry = Registry()

    def ping():
        return "pong"

    registry.bind(ping, [CommandInfo(help_text="answer with pong")])
    registry.execute("ping")         # "pong"
    registry.execute("global.ping")  # "pong"
    registry.execute("bar.ping")     # NotFound
"""
import inspect
import logging
from collections.abc import Iterable, Sequence

from rich.table import Table
from rich.text import Text

from .commands import GLOBAL, SEPARATOR, Command, CommandInfo, check_target
from .conversions import default_conversions
from .discovery import metadata_of
from .faults import MissingTargetError
from .sentinels import NoMatch, NotFound
from .utils import Unset, blank, coalesce

logger = logging.getLogger(__name__)


def _same_target(stored, target):
    """
    Target identity: the same object, or bound methods of the same function on
    the same instance (each attribute access builds a new bound method).
    """
    if stored is target:
        return True
    return (
        inspect.ismethod(stored) and
        inspect.ismethod(target) and
        stored.__func__ is target.__func__ and
        stored.__self__ is target.__self__
    )


class CommandsView(Sequence):
    """
    Read-only, live view over a registry's commands in insertion order.

    Iteration is lazy and reflects later binds/unbinds; it is not protected
    against mutation of the registry while iterating.
    """
    __slots__ = ("_commands",)

    def __init__(self, commands, /):
        self._commands = commands

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._commands[index])
        return self._commands[index]

    def __len__(self):
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def __contains__(self, command):
        return command in self._commands

    def __repr__(self):
        return f"{type(self).__name__}({self._commands!r})"


class Registry:
    """
    Command registry and dispatcher.

    Parameters
    - conversions: Conversions provider used to coerce arguments of the commands
      created by this registry (keyword-only). Defaults to the process-wide
      commandeer.conversions.default_conversions.

    Notes
    - Commands keep a back reference to their registry (Command.registry).
    - The registry holds plain references to targets and instances; it never
      manages their lifetime.
    """

    def __init__(self, *, conversions=Unset):
        self._commands = []
        self._conversions = coalesce(conversions, default_conversions)

    @property
    def conversions(self):
        return self._conversions

    @property
    def commands(self):
        return CommandsView(self._commands)

    def bind(self, target, metadata=Unset, instance=Unset):
        """
        Register one command per metadata entry declared for `target`.

        Parameters
        - target: function, method, staticmethod/classmethod object, or callable.
        - metadata: iterable of CommandInfo (a single CommandInfo is accepted).
          When Unset, the entries attached by the @command decorator are used.
          An empty iterable registers nothing.
        - instance: owning object, required when the target is an instance
          member (see commands.requires_instance).

        Behavior
        - Blank names default to the target's name, blank groups to "global".
        - An entry whose full name is already registered (any casing) is skipped.
        - The target is never called.

        Raises
        - MissingTargetError: target is None or not invocable.
        - MissingInstanceError: target needs an instance and none was given.
        - TypeError: a metadata entry is not a CommandInfo.
        """
        check_target(target, instance)

        if metadata is Unset:
            metadata = metadata_of(target)
        elif isinstance(metadata, CommandInfo):
            metadata = (metadata,)
        elif not isinstance(metadata, Iterable):
            raise TypeError("bind() metadata must be an iterable of command info")

        for info in metadata:
            if not isinstance(info, CommandInfo):
                raise TypeError(f"bind() metadata entries must be command info, not {type(info).__name__}")

            command = Command(
                target,
                *info,
                instance=instance,
                registry=self,
                conversions=self._conversions,
            )

            if command in self._commands:
                logger.debug("Skipped duplicate command %r", command.full_name)
                continue

            self._commands.append(command)
            logger.debug("Bound command %r", command.full_name)

    def unbind(self, target):
        """
        Remove every command bound to `target` (identity, not name).

        Raises
        - MissingTargetError: target is None.
        """
        if target is None:
            raise MissingTargetError("target must not be None", hint="pass the function or method to unregister")

        kept = [command for command in self._commands if not _same_target(command.target, target)]
        removed = len(self._commands) - len(kept)
        self._commands[:] = kept

        if removed:
            logger.debug("Unbound %d command(s) from %r", removed, target)

    def resolve(self, name):
        """
        Return the single command designated by `name`, or NotFound.
        """
        if blank(name):
            return NotFound

        key = name.lower()

        if SEPARATOR in name:
            candidates = [command for command in self._commands if command.full_name == key]
        else:
            candidates = [command for command in self._commands if command.name == key]

        if len(candidates) > 1:
            candidates = [command for command in candidates if command.group == GLOBAL]

        if len(candidates) != 1:
            logger.debug("Could not resolve %r (%d candidates)", name, len(candidates))
            return NotFound

        return candidates[0]

    def execute(self, name, /, *args):
        """
        Resolve `name` and invoke the command with `args`.

        Returns
        - the target's return value;
        - NotFound for blank, unknown or ambiguous names and for argument-count
          mismatches;
        - an InvocationError value when the target raised.
        """
        if (command := self.resolve(name)) is NotFound:
            return NotFound

        if (result := command.invoke(args)) is NoMatch:
            return NotFound

        return result

    def __len__(self):
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def __contains__(self, item):
        if isinstance(item, Command):
            return item in self._commands
        return self.resolve(item) is not NotFound

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(command.full_name for command in self._commands)})"

    def __rich__(self):
        """
        Render the registered commands as a help table (insertion order).

        Styles come from __main__.__styles__ when defined: "table-title",
        "table-header", "group", "name", "help".
        """
        styles = {
            "table-title": "bold #E6E6F0",
            "table-header": "bold #00E5FF",
            "group": "#9CE19C",
            "name": "bold #FF4DA6",
            "help": "#C8C8D0",
        } | getattr(__import__("__main__"), "__styles__", {})

        table = Table(
            title=Text("commands", styles["table-title"]),
            header_style=styles["table-header"],
            title_justify="left",
        )
        table.add_column("group", style=styles["group"], no_wrap=True)
        table.add_column("name", style=styles["name"], no_wrap=True)
        table.add_column("help", style=styles["help"])

        for command in self._commands:
            table.add_row(command.group, command.name, command.help_text)

        return table


__all__ = (
    "Registry",
    "CommandsView",
)
