r"""
Modli argument resolution: raw option tokens to a validated record.

Overview
- coerce(token, kind)
  • Converts one raw string to the value a field of the given Kind expects.
    Unparseable input is passed through unchanged on purpose: the schema layer
    then reports it with its own message (e.g., "Input should be a valid number").

- tabulate(fields)
  • Builds the alias table (token → FieldDescriptor) for one parse call:
    "--<key>" for every field, then every declared alias. A token claimed
    twice resolves to the last claimant.

- resolve(tokens, schema)
  • Scans tokens left to right, assembles a record keyed by field key, and
    hands it to Schema.validate(). Returns a ParseOutcome (Success | Failure);
    nothing is printed and no state survives the call.

Token classes
- long option:     --key, --key=value
- short option:    -k, -k=value
- combined flags:  -abc  (each letter resolved as -a, -b, -c)
- bare token:      only legal as a value consumed by the preceding option.

Per-kind handling
- BOOLEAN: presence → True; "=true"/"=false" → literal; other values coerced.
- ARRAY:   "=a,b,c" → ["a", "b", "c"]; spaced form consumes every following
           token up to the next flag-shaped one (possibly none).
- STRING / NUMBER: inline value, or the next token when it is not flag-shaped.
- An empty inline value ("--name=") counts as no inline value.
- Repeated options overwrite earlier ones (last write wins).

Quick example:
    >>> from pydantic import BaseModel
    >>> class Add(BaseModel):
    ...     name: str
    ...     tags: list[str] = []
    >>> resolve(["--name=Alice", "--tags", "x", "y"], Add)
    Success(value=Add(name='Alice', tags=['x', 'y']))
"""
import math
from typing import get_origin

from .faults import *
from .schemas import Kind, Schema
from .utils import flagged


def coerce(token, kind, /):
    """
    Convert a raw token for a field of the given kind.

    - NUMBER: int when the token is an integer literal, else a finite float,
      else the token unchanged. Python number syntax applies, so digit
      separators are accepted ("1_000" → 1000), as pydantic accepts them.
    - BOOLEAN: "true"/"false" to the literal booleans, else the token unchanged.
    - STRING (and anything else): the token unchanged.

    ARRAY values never reach this function; their elements stay strings.
    """
    match kind:
        case Kind.NUMBER:
            try:
                return int(token)
            except ValueError:
                pass
            try:
                number = float(token)
            except ValueError:
                return token
            return number if math.isfinite(number) else token
        case Kind.BOOLEAN:
            return {"true": True, "false": False}.get(token, token)
        case _:
            return token


def tabulate(fields, /):
    """
    Build the alias table of a command from its field descriptors.

    Returns
    - dict[str, FieldDescriptor] mapping each accepted token to its field.
    """
    table = {}
    for field in fields:
        table["--" + field.key] = field
        for alias in field.aliases:
            table[alias] = field
    return table


def _lookup(table, input):
    try:
        return table[input]
    except KeyError:
        raise UnknownOptionError("Unknown option: %s" % input, token=input) from None


def _take(field, input, value, tokens, index):
    """
    read the value of one resolved option.

    parameters
    - field: the resolved FieldDescriptor.
    - input: the option token as typed (without its inline value), for messages.
    - value: the inline value, or None when there is none.
    - tokens / index: the token list and the position right after the option.

    returns
    - (value, index) where index points at the first token not consumed.
    """
    match field.kind:
        case Kind.BOOLEAN:
            return (True if value is None else coerce(value, Kind.BOOLEAN)), index
        case Kind.ARRAY:
            if value is not None:
                return value.split(","), index
            start = index
            while index < len(tokens) and not flagged(tokens[index]):
                index += 1
            return tokens[start:index], index
        case _:
            if value is None:
                if index >= len(tokens) or flagged(tokens[index]):
                    raise MissingOptionValueError("Option %s requires a value" % input, token=input)
                value, index = tokens[index], index + 1
            return coerce(value, field.kind), index


def _scan(tokens, table):
    """
    assemble the record from the token list (first fault aborts the scan).
    """
    record = {}
    index = 0

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if not flagged(token):
            # values are consumed by their option; anything left here is stray
            raise UnknownArgumentError("Unknown argument: %s" % token, token=token)

        if token.startswith("--") or len(token) <= 2 or "=" in token:
            input, _, value = token.partition("=")
            field = _lookup(table, input)
            record[field.key], index = _take(field, input, value or None, tokens, index)
        else:
            for letter in token[1:]:
                field = _lookup(table, input := "-" + letter)
                record[field.key], index = _take(field, input, None, tokens, index)

    return record


def _capable(schema):
    return hasattr(schema, "fields") and callable(getattr(schema, "validate", None))


def resolve(tokens, schema, /):
    """
    Resolve option tokens against a command schema.

    Parameters
    - tokens: Iterable[str]
      The options following the command token.
    - schema: schema-like object | pydantic model (optionally Annotated)
      Any object exposing fields and validate(record) (e.g., Schema) is used
      as-is; models and Annotated aliases are adapted with Schema(...) here.

    Returns
    - Success(instance) with the validated model instance.
    - Failure(fault, help=True) for unknown options/arguments, missing values
      and validation failures.

    Raises
    - SchemaError: when the schema is not supported (configuration bug).
    """
    if isinstance(schema, type) or get_origin(schema) is not None or not _capable(schema):
        schema = Schema(schema)

    try:
        record = _scan(list(tokens), tabulate(schema.fields))
    except CommandException as fault:
        return Failure(fault, help=True)

    return schema.validate(record)


__all__ = (
    "coerce",
    "tabulate",
    "resolve",
)
