# tests/unit/test_walker.py
"""
Unit tests for the structured-payload walker.

Covers:
- opaque keys (ids, timestamps) are never repaired
- opaque values (object ids, ISO date-times) are never repaired
- structure, key set and ordering are preserved
- non-string leaves and binary blobs pass through
"""

from notifier.services.text_repair.engine import repair_text
from notifier.services.text_repair.walker import (
    is_opaque_key,
    is_opaque_value,
    iter_repairable,
    walk,
)

OBJECT_ID = "507f1f77bcf86cd799439011"


def _record(**overrides):
    record = {
        "_id": OBJECT_ID,
        "userId": "voce",
        "title": "reuni%o",
        "message": "voce tem uma reuniao",
        "isRead": False,
        "createdAt": "2024-01-15T14:30:00.000Z",
        "updatedAt": "2024-01-15T14:30:00.000Z",
        "__v": 0,
    }
    record.update(overrides)
    return record


class TestOpaquePolicy:
    def test_opaque_keys(self):
        for key in ("_id", "id", "__v", "userId", "createdAt", "deletedAt", "ownerId", "sentAt"):
            assert is_opaque_key(key)

    def test_text_keys(self):
        for key in ("title", "message", "data", "type", "identity"):
            assert not is_opaque_key(key)

    def test_non_string_key(self):
        assert not is_opaque_key(1)

    def test_opaque_values(self):
        assert is_opaque_value(OBJECT_ID)
        assert is_opaque_value("2024-01-15T14:30:00Z")
        assert is_opaque_value("")

    def test_text_values(self):
        assert not is_opaque_value("voce")
        assert not is_opaque_value("2024-01-15")


class TestWalk:
    """Tests for walk()."""

    def test_repairs_text_fields_only(self):
        result = walk(_record(), repair_text)

        assert result["title"] == "reunião"
        assert result["message"] == "você tem uma reunião"
        assert result["_id"] == OBJECT_ID
        assert result["userId"] == "voce"
        assert result["createdAt"] == "2024-01-15T14:30:00.000Z"
        assert result["__v"] == 0
        assert result["isRead"] is False

    def test_preserves_keys_and_order(self):
        record = _record()
        assert list(walk(record, repair_text)) == list(record)

    def test_does_not_mutate_input(self):
        record = _record()
        walk(record, repair_text)
        assert record["title"] == "reuni%o"

    def test_nested_envelope(self):
        payload = {
            "success": True,
            "data": [_record(), _record(title="voce")],
            "pagination": {"currentPage": 1, "totalPages": 1},
        }
        result = walk(payload, repair_text)

        assert [item["title"] for item in result["data"]] == ["reunião", "você"]
        assert result["pagination"] == {"currentPage": 1, "totalPages": 1}
        assert result["success"] is True

    def test_everything_below_opaque_key_untouched(self):
        payload = {"metadata": {"sourceId": {"label": "voce"}, "label": "voce"}}
        result = walk(payload, repair_text)

        assert result["metadata"]["sourceId"] == {"label": "voce"}
        assert result["metadata"]["label"] == "você"

    def test_object_id_value_under_text_key(self):
        assert walk({"message": OBJECT_ID}, repair_text) == {"message": OBJECT_ID}

    def test_tuple_and_list_types_kept(self):
        result = walk({"tags": ("voce", "modulo"), "more": ["versao"]}, repair_text)
        assert result["tags"] == ("você", "módulo")
        assert result["more"] == ["versão"]

    def test_binary_and_scalars_pass_through(self):
        blob = b"voce"
        payload = {"blob": blob, "count": 3, "ratio": 0.5, "missing": None}
        result = walk(payload, repair_text)

        assert result["blob"] is blob
        assert result["count"] == 3
        assert result["ratio"] == 0.5
        assert result["missing"] is None

    def test_bare_string(self):
        assert walk("voce", repair_text) == "você"


class TestIterRepairable:
    def test_yields_what_walk_would_repair(self):
        payload = {"data": [_record(), {"title": "ok", "blob": b"x"}]}
        assert list(iter_repairable(payload)) == ["reuni%o", "voce tem uma reuniao", "ok"]

    def test_empty_payload(self):
        assert list(iter_repairable({})) == []
