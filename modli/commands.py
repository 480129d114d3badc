r"""
Modli commands: registry, help rendering and dispatch.

Overview
- CommandDefinition
  • Immutable record (name, aliases, schema, handler) owned by a registry.

- CommandRegistry
  • Ordered name → definition store. Registering an existing name overwrites it
    in place (help output keeps the original position). Schemas are not inspected
    at registration time; an unsupported schema surfaces on first use.

- global_help(registry) / command_help(definition, prog=Unset)
  • Pure renderers returning rich Text; printing is the caller's concern.

- Cli
  • The dispatcher. parse(args) routes the first token to a command, resolves
    the rest against its schema and calls the handler with the validated model.
    Faults go to the error console, help to the output console; nothing but
    SchemaError (a configuration bug) escapes parse().

Quick example:
    >>> from pydantic import BaseModel
    >>> class Greet(BaseModel):
    ...     '''Greets someone'''
    ...     name: str
    >>> cli = Cli("demo")
    >>> @cli.command("greet", Greet, "g")
    ... def greet(options):
    ...     print(f"Hello, {options.name}!")
    >>> cli.parse("g --name=Alice")
    Hello, Alice!
"""
import shlex
import sys
from collections.abc import Iterable
from typing import NamedTuple, Any

from rich.console import Console
from rich.text import Text

from .arguments import resolve
from .faults import *
from .schemas import Schema
from .utils import Unset, coalesce

_FALLBACK = "No description available"


class CommandDefinition(NamedTuple):
    """
    One registered command.

    - name: primary token routing to this command.
    - aliases: alternative tokens, in declaration order.
    - schema: the option schema (pydantic model, optionally Annotated).
    - handler: callable receiving the validated model instance.
    """
    name: str
    aliases: tuple[str, ...]
    schema: Any
    handler: Any


class CommandRegistry:
    """
    Ordered collection of CommandDefinition objects.

    Iteration yields definitions in registration order; len() counts them.
    """

    def __init__(self):
        self._definitions = {}

    def add(self, name, schema, handler, *aliases):
        """
        Register (or overwrite) the command called name.

        Raises
        - TypeError: when name or an alias is not a string, or handler is not callable.
        - ValueError: when name or an alias is empty.

        Returns
        - The stored CommandDefinition.
        """
        for token in (name, *aliases):
            if not isinstance(token, str):
                raise TypeError("command names and aliases must be strings")
            if not token.strip():
                raise ValueError("command names and aliases cannot be empty")
        if not callable(handler):
            raise TypeError(f"handler of command {name!r} must be callable")

        definition = CommandDefinition(name, aliases, schema, handler)
        self._definitions[name] = definition
        return definition

    def find(self, token):
        """
        Return the first definition whose name or aliases contain token, else None.
        """
        for definition in self._definitions.values():
            if token == definition.name or token in definition.aliases:
                return definition
        return None

    def __iter__(self):
        return iter(self._definitions.values())

    def __len__(self):
        return len(self._definitions)

    def __repr__(self):
        return f"CommandRegistry({', '.join(map(repr, self._definitions))})"


def _aliased(name, aliases):
    return f"{name} ({', '.join(aliases)})" if aliases else name


def global_help(registry, /):
    """
    Render the list of available commands.

    Layout
        Available commands:
          <name>[ (<alias>, ...)]: <description>

        Use --help with a command for more details.
    """
    lines = ["Available commands:"]
    for definition in registry:
        description = Schema(definition.schema).description or _FALLBACK
        lines.append(f"  {_aliased(definition.name, definition.aliases)}: {description}")
    lines += ["", "Use --help with a command for more details."]
    return Text("\n".join(lines))


def command_help(definition, /, prog=Unset):
    """
    Render the usage, description and options of one command.

    Layout
        Usage: [<prog> ]<name> [options]

        <description>

        Options:
          --<key>[ (<alias>, ...)] (required|optional): <description>

        Examples:

    Options follow field declaration order.
    """
    schema = Schema(definition.schema)
    usage = " ".join(filter(None, (coalesce(prog, ""), definition.name)))

    lines = [f"Usage: {usage} [options]", "", schema.description or _FALLBACK, "", "Options:"]
    for field in schema.fields:
        presence = "optional" if field.optional else "required"
        lines.append(f"  {_aliased('--' + field.key, field.aliases)} ({presence}): {field.description or _FALLBACK}")
    lines += ["", "Examples:"]
    return Text("\n".join(lines))


def _tokenize(args):
    if args is Unset:
        return sys.argv[1:]
    if isinstance(args, str):
        return shlex.split(args)
    if isinstance(args, Iterable):
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class Cli:
    """
    Command-line front end: command registration and dispatch.

    Parameters
    - prog: str | Unset
      Program name shown in command usage lines ("Usage: <prog> <name> [options]").
    - stdout / stderr: rich.console.Console | Unset (keyword-only)
      Output channel (help) and error channel (faults). Default to plain consoles
      on the process streams, without syntax highlighting.

    Behavior
    - Single-threaded; the registry is the only mutable state and parse() keeps
      nothing between calls.
    """

    def __init__(self, prog=Unset, *, stdout=Unset, stderr=Unset):
        if prog is not Unset and not isinstance(prog, str):
            raise TypeError("Cli() prog must be a string")
        for channel in (stdout, stderr):
            if channel is not Unset and not isinstance(channel, Console):
                raise TypeError("Cli() stdout and stderr must be rich consoles")

        self._prog = prog
        self._stdout = Console(highlight=False) if stdout is Unset else stdout
        self._stderr = Console(stderr=True, highlight=False) if stderr is Unset else stderr
        self._registry = CommandRegistry()

    @property
    def prog(self):
        return self._prog

    @property
    def stdout(self):
        return self._stdout

    @property
    def stderr(self):
        return self._stderr

    @property
    def registry(self):
        return self._registry

    def add_command(self, name, schema, handler, *aliases):
        """
        Register a command; see CommandRegistry.add. Returns self for chaining.
        """
        self._registry.add(name, schema, handler, *aliases)
        return self

    def command(self, name, schema, *aliases):
        """
        Decorator form of add_command; the decorated handler is returned unchanged.

            @cli.command("add", AddOptions, "a")
            def add(options): ...
        """
        def wrapper(handler, /):
            self.add_command(name, schema, handler, *aliases)
            return handler
        return wrapper

    def _show(self, help):
        self._stdout.print(help, soft_wrap=True)

    def parse(self, args=Unset):
        """
        Parse a token stream and run the selected command.

        Parameters
        - args:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split with shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Routing
        - no tokens, or "--help" first → global help.
        - unknown first token → "Unknown command: <token>" then global help.
        - "--help" anywhere after the command → command help (nothing is resolved).
        - resolution failure → the fault, then command help.
        - success → handler(model); any exception it raises is reported as
          "An error occurred while executing the command: <message>".

        Raises
        - TypeError: when args is not Unset/str/Iterable[str].
        - SchemaError: when the selected command's schema is unsupported.
        """
        tokens = _tokenize(args)

        if not tokens or tokens[0] == "--help":
            return self._show(global_help(self._registry))

        token, *rest = tokens
        definition = self._registry.find(token)
        if definition is None:
            trigger(UnknownCommandError("Unknown command: %s" % token, token=token), console=self._stderr)
            return self._show(global_help(self._registry))

        if "--help" in rest:
            return self._show(command_help(definition, self._prog))

        match resolve(rest, definition.schema):
            case Failure(fault, help):
                trigger(fault, console=self._stderr)
                if help:
                    self._show(command_help(definition, self._prog))
            case Success(value):
                try:
                    definition.handler(value)
                except Exception as exception:
                    trigger(HandlerRuntimeError(
                        "An error occurred while executing the command: %s" % exception,
                        command=definition.name,
                        exception=exception,
                    ), console=self._stderr)

    def __repr__(self):
        return f"Cli(prog={self._prog!r}, commands={len(self._registry)})"


__all__ = (
    "CommandDefinition",
    "CommandRegistry",
    "global_help",
    "command_help",
    "Cli",
)
