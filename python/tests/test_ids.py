"""Tests for object id generation and parsing."""

import pytest

from vidtube.errors import ApiErrorCode, ValidationError
from vidtube.ids import OBJECT_ID_LENGTH, is_valid_object_id, new_object_id, parse_object_id


class TestNewObjectId:
    def test_is_24_hex_chars(self):
        object_id = new_object_id()

        assert len(object_id) == OBJECT_ID_LENGTH
        assert is_valid_object_id(object_id)

    def test_ids_are_unique(self):
        assert len({new_object_id() for _ in range(200)}) == 200

    def test_ids_sort_by_creation_second(self):
        """The leading 8 hex digits encode the creation timestamp."""
        first = new_object_id()
        second = new_object_id()

        assert first[:8] <= second[:8]


class TestParseObjectId:
    def test_lowercases_valid_id(self):
        assert parse_object_id("65A1B2C3D4E5F60718293A4B") == "65a1b2c3d4e5f60718293a4b"

    @pytest.mark.parametrize(
        "value",
        ["", "not-an-id", "65a1b2c3d4e5f60718293a4", "65a1b2c3d4e5f60718293a4bz", None, 12345],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_object_id(value, "Invalid video id")

        assert exc_info.value.code == ApiErrorCode.E_INVALID_ID
        assert exc_info.value.message == "Invalid video id"
        assert exc_info.value.status_code == 400
