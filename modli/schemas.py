r"""
Modli schema adapter: read-only introspection and validation of option schemas.

Overview
- Option schemas are pydantic models. A command may register either a plain
  BaseModel subclass or that model wrapped in one or more Annotated layers that
  carry refinements (e.g., an AfterValidator checking that two flags are not
  used together).

- Aliases
  • Annotated marker declaring extra option spellings for a field:
        name: Annotated[str, Aliases("n", "fullname")]
    Single-character aliases become "-n", longer ones "--fullname"; spellings
    that already start with '-' are kept as written.

- Kind / FieldDescriptor
  • Kind classifies a field as STRING, NUMBER, BOOLEAN or ARRAY after stripping
    Optional[...] / X | None.
  • FieldDescriptor is the immutable per-option view used by the resolver and
    the help renderer: key, attribute name, kind, optionality, aliases, description.

- Schema
  • unwraps the refinement layers down to the model (field-shape) while keeping
    the original object for validation, so refinements still run.
  • validate(record) is a safe-validate: it returns Success(model) or a
    Failure carrying a SchemaValidationError with every reported issue.

Errors
- SchemaError is raised when the object is not a model (optionally Annotated).
  It is a configuration bug and surfaces when the schema is first used.

Quick example:
    >>> from typing import Annotated
    >>> from pydantic import BaseModel, Field
    >>> class Add(BaseModel):
    ...     '''Adds a new user to the database'''
    ...     name: Annotated[str, Aliases("n")] = Field(description="The name of the user")
    ...     verbose: Annotated[bool | None, Aliases("v")] = None
    >>> [(field.key, field.kind.name, field.optional) for field in Schema(Add).fields]
    [('name', 'STRING', False), ('verbose', 'BOOLEAN', True)]
"""
import inspect
from collections.abc import Sequence, Set
from enum import Enum
from types import NoneType, UnionType
from typing import Annotated, NamedTuple, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.fields import FieldInfo

from .faults import SchemaError, SchemaValidationError, Success, Failure


class Aliases:
    """
    Annotated marker carrying the extra option tokens of a field.

    Parameters
    - *aliases: str
      Bare names ("n", "fullname") or explicit tokens ("-n", "--fullname").
      Empty names and duplicates are rejected.

    Properties
    - tokens: tuple[str, ...] in declaration order, already dash-prefixed.
    """
    __slots__ = ("_tokens",)

    def __init__(self, *aliases):
        tokens = []
        for alias in aliases:
            if not isinstance(alias, str):
                raise TypeError("aliases must be strings")
            elif not (alias := alias.strip()) or not alias.strip("-"):
                raise ValueError("aliases cannot be empty")
            if not alias.startswith("-"):
                alias = ("-" if len(alias) == 1 else "--") + alias
            if alias in tokens:
                raise ValueError("aliases cannot contain duplicates")
            tokens.append(alias)
        self._tokens = tuple(tokens)

    @property
    def tokens(self):
        return self._tokens

    def __eq__(self, other):
        if not isinstance(other, Aliases):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self):
        return hash((Aliases, self._tokens))

    def __repr__(self):
        return f"Aliases({', '.join(map(repr, self._tokens))})"


class Kind(Enum):
    """
    value kind of an option, as far as token handling is concerned.
    """
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


class FieldDescriptor(NamedTuple):
    """
    Per-option metadata derived from a model field (never mutated).

    - key: the validation key (the pydantic alias when declared, else the name);
      "--<key>" is always an accepted token.
    - name: the attribute name on the model.
    - kind: Kind of the value, Optional[...] stripped.
    - optional: True when the field has a default (omitting it is legal).
    - aliases: extra accepted tokens, dash-prefixed.
    - description: FieldInfo.description or None.
    """
    key: str
    name: str
    kind: Kind
    optional: bool
    aliases: tuple[str, ...]
    description: str | None


def _kindof(annotation):
    """
    classify a field annotation into a Kind.

    rules
    - Annotated[T, ...] and Optional[T] / T | None are looked through.
    - bool → BOOLEAN (checked before int, bool being an int subclass).
    - int, float → NUMBER. Decimal → STRING: its digits reach pydantic unchanged.
    - list/tuple/set/frozenset and abstract sequences/sets, bare or
      parametrised → ARRAY.
    - anything else (str, Literal, enums, paths, unions) → STRING; pydantic
      validates the raw string later.
    """
    origin = get_origin(annotation)

    if origin is Annotated:
        return _kindof(get_args(annotation)[0])

    if origin is Union or origin is UnionType:
        members = [member for member in get_args(annotation) if member is not NoneType]
        return _kindof(members[0]) if len(members) == 1 else Kind.STRING

    if annotation is bool:
        return Kind.BOOLEAN
    if annotation in (int, float):
        return Kind.NUMBER

    container = origin if origin is not None else annotation
    if isinstance(container, type) and issubclass(container, Sequence | Set) and not issubclass(container, str | bytes):
        return Kind.ARRAY

    return Kind.STRING


def describe(name, field, /):
    """
    Build the FieldDescriptor of one model field.

    Parameters
    - name: str
      Attribute name of the field on the model.
    - field: pydantic.fields.FieldInfo
      The field as found in Model.model_fields.

    Notes
    - Only Aliases markers found at the top level of the field's Annotated
      metadata are honored; when several are given, the last one wins.
    """
    if not isinstance(field, FieldInfo):
        raise TypeError("describe() second argument must be a pydantic field")

    aliases = ()
    for metadata in field.metadata:
        if isinstance(metadata, Aliases):
            aliases = metadata.tokens

    return FieldDescriptor(
        key=field.alias if isinstance(field.alias, str) else name,
        name=name,
        kind=_kindof(field.annotation),
        optional=not field.is_required(),
        aliases=aliases,
        description=field.description,
    )


def unwrap(schema, /):
    """
    Peel Annotated refinement layers until the underlying model is reached.

    Returns
    - tuple (model, description) where description is the outermost layer's
      Field(description=...) if any, else None.

    Raises
    - SchemaError: when what remains after unwrapping is not a BaseModel subclass.
    """
    description = None
    while get_origin(schema) is Annotated:
        schema, *metadata = get_args(schema)
        for layer in metadata:
            if description is None and isinstance(layer, FieldInfo):
                description = layer.description

    if not isinstance(schema, type) or not issubclass(schema, BaseModel):
        raise SchemaError(f"unsupported schema type {schema!r} (expected a pydantic model)")

    return schema, description


class Schema:
    """
    Adapter exposing a command schema through the capabilities the core needs.

    Capabilities
    - source: the schema exactly as registered (validated as-is).
    - model: the unwrapped BaseModel subclass (the field shape).
    - description: command-level description, or None.
    - fields: FieldDescriptor tuple in declaration order.
    - validate(record): safe-validate returning Success or Failure.

    Description lookup
    - Field(description=...) on an outer Annotated layer wins; otherwise the
      model's own docstring (inherited docstrings are ignored).
    """

    def __init__(self, schema, /):
        self._source = schema
        self._model, description = unwrap(schema)

        if description is None and (docstring := vars(self._model).get("__doc__")):
            description = inspect.cleandoc(docstring)

        self._description = description or None
        self._fields = tuple(describe(name, field) for name, field in self._model.model_fields.items())
        self._adapter = TypeAdapter(schema)

    @property
    def source(self):
        return self._source

    @property
    def model(self):
        return self._model

    @property
    def description(self):
        return self._description

    @property
    def fields(self):
        return self._fields

    def validate(self, record, /):
        """
        Submit an assembled record to the schema's full validation pass.

        Behavior
        - On success: Success(instance), the instance being the validated model.
        - On failure: Failure(SchemaValidationError(issues), help=True) where
          issues are the (loc, msg) pairs of every reported error, in order.

        This never raises for invalid input; only pydantic configuration errors
        (which are bugs) propagate.
        """
        try:
            return Success(self._adapter.validate_python(record))
        except ValidationError as error:
            issues = [(issue["loc"], issue["msg"]) for issue in error.errors()]
            return Failure(SchemaValidationError(issues, schema=self._source), help=True)

    def __repr__(self):
        return f"Schema({self._model.__name__})"


__all__ = (
    "Aliases",
    "Kind",
    "FieldDescriptor",
    "describe",
    "unwrap",
    "Schema",
)
