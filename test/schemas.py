# python
"""
Schemas module behavioral tests (aliases, field descriptors, unwrapping, validation).

Scope
- Validate Aliases normalization and rejection rules.
- Validate Kind classification and FieldDescriptor derivation from pydantic fields.
- Validate unwrap() over Annotated refinement layers and its SchemaError.
- Validate Schema.validate() outcome shapes.

Conventions
- Test method names follow CamelCase per project convention.
"""

import decimal
import unittest
from collections.abc import Sequence
from typing import Annotated, Literal
from unittest import TestCase

from pydantic import AfterValidator, BaseModel, Field

from modli import Aliases, Kind, Schema, SchemaError, Success, Failure, unwrap


class Sample(BaseModel):
    """
    Adds a new user
    to the database
    """
    name: Annotated[str, Aliases("n", "fullname")] = Field(description="The name of the user")
    age: int | None = None
    ratio: float = 1.0
    amount: decimal.Decimal = decimal.Decimal(0)
    verbose: Annotated[bool | None, Aliases("v")] = None
    tags: list[str] = Field(default_factory=list)
    pair: tuple[str, ...] = ()
    unique: frozenset[str] = frozenset()
    items: Sequence[str] = ()
    mode: Literal["fast", "slow"] = "fast"
    long_option_name: str = Field("x", alias="long-option-name")


def _positive(sample):
    if sample.ratio <= 0:
        raise ValueError("ratio must be positive")
    return sample


class TestAliases(TestCase):
    """Behavioral tests for the Aliases marker."""

    def testBareNamesArePrefixed(self):
        self.assertEqual(Aliases("n", "fullname").tokens, ("-n", "--fullname"))

    def testDashedNamesAreKept(self):
        self.assertEqual(Aliases("-x", "--extra").tokens, ("-x", "--extra"))

    def testEmptyAliasRejected(self):
        with self.assertRaises(ValueError):
            Aliases(" ")
        with self.assertRaises(ValueError):
            Aliases("--")

    def testDuplicateAliasRejected(self):
        with self.assertRaises(ValueError):
            Aliases("n", "-n")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            Aliases(1)  # type: ignore[arg-type]

    def testEquality(self):
        self.assertEqual(Aliases("n"), Aliases("-n"))
        self.assertEqual(hash(Aliases("n")), hash(Aliases("-n")))
        self.assertEqual(repr(Aliases("n")), "Aliases('-n')")


class TestDescriptors(TestCase):
    """Behavioral tests for FieldDescriptor derivation."""

    def setUp(self):
        self.fields = {field.name: field for field in Schema(Sample).fields}

    def testDeclarationOrder(self):
        self.assertEqual(list(self.fields), list(Sample.model_fields))

    def testKinds(self):
        kinds = {name: field.kind for name, field in self.fields.items()}
        self.assertEqual(kinds, {
            "name": Kind.STRING,
            "age": Kind.NUMBER,
            "ratio": Kind.NUMBER,
            "amount": Kind.STRING,
            "verbose": Kind.BOOLEAN,
            "tags": Kind.ARRAY,
            "pair": Kind.ARRAY,
            "unique": Kind.ARRAY,
            "items": Kind.ARRAY,
            "mode": Kind.STRING,
            "long_option_name": Kind.STRING,
        })

    def testOptionality(self):
        self.assertFalse(self.fields["name"].optional)
        self.assertTrue(self.fields["age"].optional)
        self.assertTrue(self.fields["tags"].optional)

    def testAliasesAndDescription(self):
        self.assertEqual(self.fields["name"].aliases, ("-n", "--fullname"))
        self.assertEqual(self.fields["name"].description, "The name of the user")
        self.assertEqual(self.fields["age"].aliases, ())
        self.assertIsNone(self.fields["age"].description)

    def testValidationAliasBecomesKey(self):
        self.assertEqual(self.fields["long_option_name"].key, "long-option-name")
        self.assertEqual(self.fields["name"].key, "name")


class TestUnwrap(TestCase):
    """Behavioral tests for refinement layer unwrapping."""

    def testPlainModel(self):
        self.assertEqual(unwrap(Sample), (Sample, None))

    def testNestedLayers(self):
        refined = Annotated[Annotated[Sample, AfterValidator(_positive)], Field(description="Refined")]
        self.assertEqual(unwrap(refined), (Sample, "Refined"))

    def testUnsupportedSchemaRaises(self):
        for schema in (dict, int, "Sample", Annotated[int, Field(description="number")]):
            with self.subTest(schema=schema), self.assertRaises(SchemaError):
                unwrap(schema)


class TestSchema(TestCase):
    """Behavioral tests for the schema adapter."""

    def testDocstringDescription(self):
        self.assertEqual(Schema(Sample).description, "Adds a new user\nto the database")

    def testInheritedDocstringIgnored(self):
        class Child(Sample):
            pass

        self.assertIsNone(Schema(Child).description)

    def testModelIsUnwrapped(self):
        refined = Annotated[Sample, AfterValidator(_positive)]
        schema = Schema(refined)
        self.assertIs(schema.model, Sample)
        self.assertIs(schema.source, refined)

    def testValidateSuccess(self):
        outcome = Schema(Sample).validate({"name": "Alice", "age": 30})
        self.assertIsInstance(outcome, Success)
        self.assertEqual(outcome.value.model_fields_set, {"name", "age"})

    def testValidateFailure(self):
        outcome = Schema(Sample).validate({"age": "x"})
        self.assertIsInstance(outcome, Failure)
        self.assertTrue(outcome.help)
        self.assertEqual([path for path, _ in outcome.fault.issues], [("name",), ("age",)])

    def testRefinementRunsOnValidation(self):
        outcome = Schema(Annotated[Sample, AfterValidator(_positive)]).validate({"name": "Alice", "ratio": -1})
        self.assertIsInstance(outcome, Failure)
        self.assertIn("  - Input: Value error, ratio must be positive", outcome.fault.message)


if __name__ == "__main__":
    unittest.main()
