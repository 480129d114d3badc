"""
Modli faults (user-facing errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type that carries a message plus context options and
  knows how to render itself through rich.
- trigger(): central entry point to surface a fault on an error console.
- SchemaError: configuration bug (unsupported schema); never rendered, always raised.
- Success / Failure: the two shapes of a parse outcome (the failure carries the
  fault and whether command help should follow it).

UX goals
- Short, literal, one-line messages ("Unknown option: --nme") that scripts and
  tests can match exactly.
- Validation failures are aggregated: every issue reported in one message.

Integration
- The resolver builds faults and returns them inside a Failure outcome.
- The dispatcher surfaces them with trigger(fault, console=...) and then shows help.
"""
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple, Any

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

stderr = Console(stderr=True, highlight=False)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, MISSING_OPTION_VALUE
    - arguments (1112x)
      • UNKNOWN_ARGUMENT
    - delegated (1113x)
      • HANDLER_ERROR
    - validation (1115x)
      • VALIDATION_FAILED

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors ---
    UNKNOWN_COMMAND      = 11101

    # --- option errors ---
    UNKNOWN_OPTION       = 11112
    MISSING_OPTION_VALUE = 11117

    # --- argument errors ---
    UNKNOWN_ARGUMENT     = 11121

    # --- delegated errors ---
    HANDLER_ERROR        = 11131

    # --- validation errors ---
    VALIDATION_FAILED    = 11151


class SchemaError(TypeError):
    """
    raised when a command schema cannot be introspected.

    this is a programming error in the host application (e.g., registering a
    plain dict or a dataclass as a schema), so it is raised instead of rendered.
    """


class CommandException(Exception):
    """
    base class of every fault produced while parsing or dispatching.

    attributes
    - message: the exact line(s) shown to the user.
    - options: read-only context (the offending token, the original exception, ...).
    - code: the FaultCode of the concrete subclass.
    """
    code = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return Text(self.message)

    def __trigger__(self, console, /):
        console.print(self, soft_wrap=True)

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r})"


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND


class UnknownOptionError(CommandException):
    code = FaultCode.UNKNOWN_OPTION


class MissingOptionValueError(CommandException):
    code = FaultCode.MISSING_OPTION_VALUE


class UnknownArgumentError(CommandException):
    code = FaultCode.UNKNOWN_ARGUMENT


class HandlerRuntimeError(CommandException):
    code = FaultCode.HANDLER_ERROR


class SchemaValidationError(CommandException):
    """
    aggregate of one or more field-level or refinement-level issues.

    issues
    - ordered (path, message) pairs exactly as reported by the schema layer;
      an empty path means the issue concerns the whole input.
    """
    code = FaultCode.VALIDATION_FAILED

    def __init__(self, issues, /, **options):
        self.issues = tuple(issues)
        lines = ["Argument validation failed:"]
        for path, message in self.issues:
            lines.append("  - %s: %s" % (".".join(map(str, path)) or "Input", message))
        super().__init__("\n".join(lines), **options)


class Success(NamedTuple):
    """
    outcome of a clean resolution: the validated record, ready for the handler.
    """
    value: Any


class Failure(NamedTuple):
    """
    outcome of a failed resolution.

    - fault: the CommandException to surface on the error console.
    - help: whether the command help should follow the fault.
    """
    fault: CommandException
    help: bool = True


def trigger(fault, /, console=Unset):
    """
    surface a fault on an error console.

    contract
    - fault must provide a __trigger__ method (see CommandException).
    - console defaults to the module-level stderr console.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must have a __trigger__ method")
    fault.__trigger__(coalesce(console, stderr))


__all__ = (
    "FaultCode",
    "SchemaError",
    "CommandException",
    "UnknownCommandError",
    "UnknownOptionError",
    "MissingOptionValueError",
    "UnknownArgumentError",
    "HandlerRuntimeError",
    "SchemaValidationError",
    "Success",
    "Failure",
    "trigger",
)
