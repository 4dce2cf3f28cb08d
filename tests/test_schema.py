"""Tests for structure declarations and payload validation."""

import pytest

from jsonfile_db.errors import MissingFieldError, StructureError, TypeMismatchError, UnknownFieldError
from jsonfile_db.schema import StructureValidator, type_tag, validate_structure_declaration


class TestTypeTag:
    @pytest.mark.parametrize(
        "value, tag",
        [
            ("x", "string"),
            (1, "integer"),
            (1.5, "float"),
            (True, "boolean"),
            ([1], "array"),
            ({"a": 1}, "object"),
            (None, "null"),
        ],
    )
    def test_tags(self, value, tag):
        assert type_tag(value) == tag


class TestDeclaration:
    def test_accepts_alternatives_and_aliases(self):
        structure = {"name": "str", "age": "integer|null", "score": "double", "tags": "array"}
        assert validate_structure_declaration(structure) == structure

    def test_rejects_unknown_type(self):
        with pytest.raises(StructureError, match="Unsupported type"):
            validate_structure_declaration({"name": "text"})

    def test_rejects_reserved_field(self):
        with pytest.raises(StructureError, match="reserved"):
            validate_structure_declaration({"id": "string"})


class TestValidator:
    def setup_method(self):
        self.validator = StructureValidator({"name": "string", "age": "integer|null", "score": "number"})

    def test_insert_requires_every_field(self):
        with pytest.raises(MissingFieldError, match="score"):
            self.validator.validate({"name": "a", "age": 1}, is_insert=True)

    def test_update_checks_only_supplied_fields(self):
        self.validator.validate({"age": None}, is_insert=False)

    def test_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            self.validator.validate({"nickname": "x"})

    def test_numeric_string_is_not_a_number(self):
        with pytest.raises(TypeMismatchError) as exc:
            self.validator.validate({"score": "10"})
        assert "'number'" in str(exc.value)
        assert "'string'" in str(exc.value)

    def test_number_accepts_integer_and_float(self):
        self.validator.validate({"score": 1})
        self.validator.validate({"score": 1.5})

    def test_boolean_is_not_integer(self):
        with pytest.raises(TypeMismatchError):
            self.validator.validate({"age": True})

    def test_mismatch_lists_all_alternatives(self):
        with pytest.raises(TypeMismatchError, match="'integer', 'null'"):
            self.validator.validate({"age": 1.5})
