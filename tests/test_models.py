"""Tests for hunt records, ids and operations."""

from datetime import datetime, timezone

import pytest

from shinytracker.models.hunt import (
    HuntRecord,
    NewHunt,
    PendingId,
    ServerId,
    hunt_id_from_json,
    hunt_id_to_json,
)
from shinytracker.models.operation import (
    OperationKind,
    PendingOperation,
    completion_payload,
    counter_payload,
)

FOUND_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestHuntIds:
    def test_pending_ids_must_be_negative(self) -> None:
        with pytest.raises(ValueError):
            PendingId(0)

    def test_id_spaces_never_compare_equal(self) -> None:
        assert ServerId(1) != PendingId(-1)
        assert ServerId(1) == ServerId(1)

    def test_ids_are_hashable(self) -> None:
        assert {ServerId(1), ServerId(1), PendingId(-1)} == {ServerId(1), PendingId(-1)}

    def test_string_form_used_in_urls(self) -> None:
        assert str(ServerId(42)) == "42"
        assert str(PendingId(-3)) == "pending-3"

    def test_tagged_json(self) -> None:
        assert hunt_id_to_json(ServerId(5)) == {"server": 5}
        assert hunt_id_from_json({"pending": -2}) == PendingId(-2)

    @pytest.mark.parametrize("data", [5, {"server": "5"}, {"other": 1}, {}])
    def test_invalid_tagged_json(self, data: object) -> None:
        with pytest.raises(ValueError):
            hunt_id_from_json(data)


class TestNewHunt:
    def test_requires_species_and_game(self) -> None:
        with pytest.raises(ValueError):
            NewHunt(species_name="", game="Yellow")

    def test_rejects_non_positive_target(self) -> None:
        with pytest.raises(ValueError):
            NewHunt(species_name="pikachu", game="Yellow", target_count=0)

    def test_to_api(self) -> None:
        body = NewHunt(species_name="pikachu", game="Yellow", types=["electric"]).to_api()

        assert body["species_name"] == "pikachu"
        assert body["types"] == ["electric"]
        assert body["target_count"] is None


class TestHuntRecord:
    def test_from_new_hunt_defaults(self) -> None:
        new_hunt = NewHunt(species_name="pikachu", game="Yellow", target_count=100)

        record = HuntRecord.from_new_hunt(PendingId(-1), new_hunt)

        assert record.is_local_only
        assert record.encounter_count == 0
        assert record.completed is False
        assert record.completed_at is None
        assert record.target_count == 100
        assert record.started_at.tzinfo is not None

    def test_from_api(self) -> None:
        """Server payloads become server-backed records."""
        record = HuntRecord.from_api(
            {
                "id": 9,
                "species_name": "ralts",
                "game": "Emerald",
                "sprite_url": None,
                "types": ["psychic", "fairy"],
                "encounter_count": 20,
                "completed": True,
                "completed_at": "2024-05-01T12:00:00Z",
                "started_at": "2024-04-01T08:00:00+00:00",
            }
        )

        assert record.id == ServerId(9)
        assert not record.is_local_only
        assert record.sprite_url == ""
        assert record.completed_at == FOUND_AT

    def test_from_api_rejects_bad_types(self) -> None:
        with pytest.raises(ValueError):
            HuntRecord.from_api({"id": 1, "species_name": "x", "game": "y", "types": "fire"})

    def test_apply_payload_clamps_count(self) -> None:
        record = HuntRecord(id=ServerId(1), species_name="eevee", game="X/Y")

        record.apply_payload({"encounter_count": -4})

        assert record.encounter_count == 0

    def test_apply_completion_payload(self) -> None:
        record = HuntRecord(id=ServerId(1), species_name="eevee", game="X/Y")

        record.apply_payload({"completed": True, "completed_at": FOUND_AT.isoformat()})

        assert record.completed is True
        assert record.completed_at == FOUND_AT

    def test_wire_fields_picks_named_fields(self) -> None:
        record = HuntRecord(
            id=ServerId(1),
            species_name="eevee",
            game="X/Y",
            encounter_count=3,
            completed=True,
            completed_at=FOUND_AT,
        )

        assert record.wire_fields(["completed", "completed_at"]) == {
            "completed": True,
            "completed_at": FOUND_AT.isoformat(),
        }
        assert record.wire_fields(["species_name"]) == {}

    def test_dict_roundtrip_keeps_pending_id(self) -> None:
        record = HuntRecord(id=PendingId(-4), species_name="eevee", game="X/Y", types=["normal"])

        assert HuntRecord.from_dict(record.to_dict()) == record


class TestPendingOperation:
    def test_update_requires_payload(self) -> None:
        with pytest.raises(ValueError):
            PendingOperation.update(ServerId(1), {})

    def test_delete_has_no_fields(self) -> None:
        op = PendingOperation.delete(ServerId(1))

        assert op.kind is OperationKind.DELETE
        assert op.fields == frozenset()

    def test_dict_roundtrip(self) -> None:
        op = PendingOperation.update(PendingId(-1), {"encounter_count": 3})
        op.attempts = 2

        assert PendingOperation.from_dict(op.to_dict()) == op

    def test_payload_builders(self) -> None:
        record = HuntRecord(
            id=ServerId(1), species_name="eevee", game="X/Y", encounter_count=12
        )

        assert counter_payload(record) == {"encounter_count": 12}
        assert completion_payload(record) == {"completed": False, "completed_at": None}
