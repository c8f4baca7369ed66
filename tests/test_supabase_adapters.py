"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from uuid import uuid4

from nutriscan.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
    profile_from_row,
    profile_to_row,
)
from nutriscan.domain.profile import DietPreference, FitnessGoal
from nutriscan.services.goals import ensure_goals
from tests.conftest import make_profile


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_on_conflict: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, on_conflict: str | None = None) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_on_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_save_profile_upserts_row_with_goals() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseProfileRepository(client)  # type: ignore[arg-type]
    user_id = uuid4()

    repository.save_profile(user_id, ensure_goals(make_profile(is_diabetic=True)))

    table = client.table("health_profiles")
    assert table.last_on_conflict == "user_id"
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["user_id"] == str(user_id)
    assert table.last_payload["is_diabetic"] is True
    assert table.last_payload["nutrition_goals"]["macros"]["protein"] == 151
    assert "updated_at" in table.last_payload


def test_get_profile_reads_row() -> None:
    client = FakeSupabaseClient()
    stored = ensure_goals(make_profile(allergies="peanuts, soy"))
    row = profile_to_row(stored)
    row["user_id"] = "ignored"
    client.table("health_profiles").queue("select", [row])
    repository = SupabaseProfileRepository(client)  # type: ignore[arg-type]
    user_id = uuid4()

    fetched = repository.get_profile(user_id)

    assert fetched == stored
    assert ("user_id", str(user_id)) in client.table("health_profiles").last_filters


def test_get_profile_missing_returns_none() -> None:
    repository = SupabaseProfileRepository(FakeSupabaseClient())  # type: ignore[arg-type]

    assert repository.get_profile(uuid4()) is None


def test_delete_profile_filters_by_user() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseProfileRepository(client)  # type: ignore[arg-type]
    user_id = uuid4()

    repository.delete_profile(user_id)

    assert client.table("health_profiles").last_filters == [("user_id", str(user_id))]


def test_row_defaults_for_missing_columns() -> None:
    profile = profile_from_row(
        {
            "gender": "female",
            "age": 30,
            "height_cm": 165,
            "weight_kg": 60,
            "activity_level": "lightly_active",
            "diet_preference": None,
            "fitness_goal": None,
            "allergies": None,
            "nutrition_goals": None,
        }
    )

    assert profile.diet_preference is DietPreference.NONE
    assert profile.fitness_goal is FitnessGoal.MAINTAIN_WEIGHT
    assert profile.allergies == ""
    assert profile.nutrition_goals is None
    assert profile.is_pregnant is False
