"""
tests/test_validators.py
Unit tests for expressgen.validators.

Tests cover:
- Resource-name acceptance and rejection codes
- Column-schema checks
- Configuration sanity checks
- ValidationResult bookkeeping
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from expressgen.models import GeneratorConfig, ResourceSchema
from expressgen.validators import (
    ValidationResult,
    validate_config,
    validate_resource_name,
    validate_resource_schema,
)


# ===========================================================================
# Resource names
# ===========================================================================


class TestResourceName:

    @pytest.mark.parametrize("name", ["Products", "orders", "order_items", "_tmp", "v2"])
    def test_accepts_plain_identifiers(self, name: str) -> None:
        result = validate_resource_name(name)
        assert result.is_valid, result.format_report()

    @pytest.mark.parametrize(
        "name, code",
        [
            ("../x", "NAME_PATH"),
            ("src/evil", "NAME_PATH"),
            ("a;drop", "NAME_SQL"),
            ("x'--", "NAME_SQL"),
            ("my-res", "NAME_IDENTIFIER"),
            ("1abc", "NAME_IDENTIFIER"),
            ("has space", "NAME_IDENTIFIER"),
            ("select", "NAME_RESERVED_SQL"),
            ("Auth", "NAME_AUTH_CLASH"),
            ("", "NAME_EMPTY"),
            ("   ", "NAME_EMPTY"),
        ],
    )
    def test_rejections(self, name: str, code: str) -> None:
        result = validate_resource_name(name)
        assert not result.is_valid
        assert code in [e.code for e in result.errors]

    def test_none_is_empty(self) -> None:
        assert validate_resource_name(None).codes == ["NAME_EMPTY"]

    def test_too_long(self) -> None:
        result = validate_resource_name("a" * 65)
        assert "NAME_TOO_LONG" in result.codes
        assert validate_resource_name("a" * 64).is_valid

    def test_path_check_stops_further_checks(self) -> None:
        assert validate_resource_name("../select").codes == ["NAME_PATH"]

    def test_inner_capitals_warn(self) -> None:
        result = validate_resource_name("orderItems")
        assert result.is_valid
        assert [w.code for w in result.warnings] == ["NAME_MIXED_CASE"]


# ===========================================================================
# Column schemas
# ===========================================================================


class TestResourceSchema:

    def test_default_schema_is_valid(self) -> None:
        result = validate_resource_schema(ResourceSchema())
        assert result.is_valid
        assert len(result) == 0

    def test_bad_column(self) -> None:
        result = validate_resource_schema(ResourceSchema(columns=["title", "price;"]))
        assert [e.code for e in result.errors] == ["COLUMN_SQL"]

    def test_reserved_column(self) -> None:
        result = validate_resource_schema(ResourceSchema(columns=["order"]))
        assert "COLUMN_RESERVED_SQL" in result.codes

    def test_id_column_warns(self) -> None:
        result = validate_resource_schema(ResourceSchema(columns=["id", "name"]))
        assert result.is_valid
        assert "COLUMN_IS_ID" in result.codes

    def test_model_rejects_duplicates(self) -> None:
        with pytest.raises(PydanticValidationError):
            ResourceSchema(columns=["a", "a"])

    def test_model_rejects_empty_list(self) -> None:
        with pytest.raises(PydanticValidationError):
            ResourceSchema(columns=[])

    def test_from_csv_strips(self) -> None:
        assert ResourceSchema.from_csv(" title , price,").columns == ["title", "price"]


# ===========================================================================
# Configuration
# ===========================================================================


class TestConfig:

    def test_default_config_is_valid(self) -> None:
        assert validate_config(GeneratorConfig()).is_valid

    def test_multiline_anchor(self) -> None:
        result = validate_config(GeneratorConfig(anchor_marker="// a\n// b"))
        assert "CONFIG_ANCHOR" in result.codes

    @pytest.mark.parametrize("field", ["src_dir", "entry_point"])
    def test_escaping_paths(self, field: str) -> None:
        result = validate_config(GeneratorConfig(**{field: "../elsewhere"}))
        assert "CONFIG_PATH" in result.codes

    def test_non_js_entry_point_warns(self) -> None:
        result = validate_config(GeneratorConfig(entry_point="index.ts"))
        assert result.is_valid
        assert "CONFIG_ENTRY_POINT" in result.codes

    def test_default_columns_checked(self) -> None:
        result = validate_config(GeneratorConfig(default_columns=["ok", "bad-col"]))
        assert "COLUMN_IDENTIFIER" in result.codes


# ===========================================================================
# ValidationResult
# ===========================================================================


class TestValidationResult:

    def test_truthiness_and_counts(self) -> None:
        result = ValidationResult()
        assert result
        result.add_warning("W", "just a warning")
        assert result and result.has_warnings
        result.add_error("E", "broken")
        assert not result
        assert len(result) == 2
        assert result.summary() == "Validation: 1 error(s), 1 warning(s)."

    def test_merge_and_report(self) -> None:
        a = ValidationResult()
        a.add_error("A", "first")
        b = ValidationResult()
        b.add_warning("B", "second")
        a.merge(b)
        report = a.format_report()
        assert "✗ [A] first" in report
        assert "⚠ [B] second" in report
