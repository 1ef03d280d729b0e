# SPDX-License-Identifier: MIT
"""Tests for schema error reporting."""

import pytest

from pub_publish.schema import CREDENTIALS_SCHEMA, field_path, schema_errors


class TestFieldPath:
    """Tests for field_path function."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ([], "<root>"),
            (["analyze"], "analyze"),
            (["test_config", "concurrency"], "test_config.concurrency"),
            (["exclude", 1], "exclude[1]"),
            (["scopes", 0], "scopes[0]"),
        ],
    )
    def test_paths(self, path, expected):
        assert field_path(path) == expected


class TestSchemaErrors:
    """Tests for schema_errors function."""

    def test_root_type_error(self):
        """A document of the wrong type is reported at the root."""
        errors = schema_errors([], CREDENTIALS_SCHEMA)
        assert len(errors) == 1
        assert errors[0].field == "<root>"
        assert errors[0].message == "Expected object, got list"
        assert errors[0].value is None

    def test_nullable_field(self):
        """Union types are joined in the message."""
        errors = schema_errors({"refreshToken": 5}, CREDENTIALS_SCHEMA)
        assert errors[0].field == "refreshToken"
        assert errors[0].message == "Expected string or null, got int"
        assert errors[0].value == 5

    def test_list_item(self):
        """Errors inside arrays carry the item position."""
        errors = schema_errors({"scopes": ["openid", 7]}, CREDENTIALS_SCHEMA)
        assert [error.field for error in errors] == ["scopes[1]"]
