"""
Commandeer faults (precondition errors and returned invocation failures).

Scope
- FaultCode: stable numeric identifiers for every fault the registry produces.
- RegistryError: base type carrying a message plus read-only options, with a
  Rich rendering (header, message, hint).
- MissingTargetError / MissingInstanceError: precondition violations raised by
  Registry.bind and Registry.unbind. Both are also TypeErrors.
- InvocationError: the value returned (never raised) by Command.invoke and
  Registry.execute when the target itself fails. The original exception is kept
  in .cause and chained as __cause__.
- getdoc(): optional description lookup for a code from the host application.

Host hooks (read from __main__ when present)
- __codes__: mapping FaultCode -> label, used by FaultCode.normalize().
- __docs__: mapping FaultCode -> short description, used by getdoc().
- __styles__: mapping style-name -> rich style, merged over the defaults below.
- __prog__: program name shown in rendered headers.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (211xx): MISSING_TARGET, MISSING_INSTANCE
    - invocation (213xx): INVOCATION_FAILED
    """
    # --- registration errors (211xx) ---
    MISSING_TARGET              = 21101
    MISSING_INSTANCE            = 21102

    # --- invocation failures (213xx) ---
    INVOCATION_FAILED           = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host may map codes to labels through a __codes__ mapping in __main__;
        without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class RegistryError(Exception):
    """
    Base class of every commandeer fault.

    Class attributes
    - __code__: FaultCode of the fault.
    - __title__: short human title used in rendered headers.
    - __palette__: default styles for rendering, overridable via __main__.__styles__.

    Options
    - arbitrary keyword context (hint, command, cause, target...) exposed through
      the read-only .options mapping.
    """
    __code__ = None
    __title__ = "registry error"
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | UnsetType):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return type(self).__code__

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        styles = defaultdict(str, type(self).__palette__ | getattr(main, "__styles__", {}))

        header = Text.assemble(
            "[ ",
            (getattr(main, "__prog__", "commandeer"), styles["prog-name"]),
            " — ",
            (self.code.normalize() if self.code is not None else "-", styles["code"]),
            " | ",
            (type(self).__title__.title(), styles["title"]),
            " ]",
        )
        body = [Text(self.message, styles["message"])]
        if self.hint:
            body.append(Text.assemble((" → ", styles["hint-arrow"]), (self.hint, styles["hint"])))

        return Panel(Group(*body), title=header, title_align="left")


class MissingTargetError(RegistryError, TypeError):
    __code__ = FaultCode.MISSING_TARGET
    __title__ = "missing target"


class MissingInstanceError(RegistryError, TypeError):
    __code__ = FaultCode.MISSING_INSTANCE
    __title__ = "missing instance"


class InvocationError(RegistryError):
    """
    A command's target raised while being invoked.

    Instances are returned as values by Command.invoke and Registry.execute.
    Check for them with isinstance(result, InvocationError).

    Attributes
    - command: the Command whose target failed.
    - cause: the exception raised by the target (also available as __cause__).
    """
    __code__ = FaultCode.INVOCATION_FAILED
    __title__ = "invocation failed"

    def __init__(self, command, cause, /, **options):
        name = getattr(command, "full_name", repr(command))
        super().__init__(
            f"command {name!r} failed: {type(cause).__name__}: {cause}",
            command=command,
            cause=cause,
            **options,
        )
        self.__cause__ = cause

    @property
    def command(self):
        return self.options["command"]

    @property
    def cause(self):
        return self.options["cause"]


def getdoc(code, /):
    """
    optional documentation lookup for a fault code.

    the host may expose a __docs__ mapping in __main__ keyed by FaultCode;
    unknown codes yield None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "RegistryError",
    "MissingTargetError",
    "MissingInstanceError",
    "InvocationError",
    "getdoc",
)
