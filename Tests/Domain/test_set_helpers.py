# test_set_helpers.py
#
#
# Imports
#
# Third-Party Imports
import pytest
from pydantic import TypeAdapter, ValidationError
#
# Local Imports
from lifti_sync.Domain.domain_types import (
    EXERCISE_MODES,
    BodyweightRepsSet,
    CardioDistanceSet,
    CardioDurationSet,
    ExerciseSet,
    SessionSet,
    SessionStrengthRepsSet,
    SessionTimedHoldSet,
    StrengthRepsSet,
    TimedHoldSet,
)
from lifti_sync.Domain.set_helpers import (
    create_default_set,
    duplicate_set,
    get_set_primary_label,
    get_set_primary_value,
    get_set_weight,
    mode_has_weight,
    plan_set_to_session_set,
    set_volume,
    set_with_primary_value,
    set_with_rest,
    set_with_weight,
)
#
#######################################################################################################################
#
# Functions:

exercise_set_adapter = TypeAdapter(ExerciseSet)
session_set_adapter = TypeAdapter(SessionSet)


class TestDefaults:
    @pytest.mark.parametrize("mode", EXERCISE_MODES)
    def test_default_set_matches_mode(self, mode):
        created = create_default_set(mode)
        assert created.mode == mode
        assert created.rest_sec == 60
        assert created.id

    def test_default_values(self):
        assert get_set_primary_value(create_default_set("strength_reps")) == 10
        assert get_set_weight(create_default_set("strength_reps")) == 20
        assert get_set_primary_value(create_default_set("bodyweight_reps")) == 10
        assert get_set_primary_value(create_default_set("timed_hold")) == 30
        assert get_set_primary_value(create_default_set("cardio_duration")) == 20
        assert get_set_primary_value(create_default_set("cardio_distance")) == 5

    def test_default_ids_are_unique(self):
        assert create_default_set("timed_hold").id != create_default_set("timed_hold").id


class TestTaggedVariants:
    def test_discriminator_picks_variant(self):
        parsed = exercise_set_adapter.validate_python({"id": "x", "mode": "cardio_distance", "distanceKm": 3.5})
        assert isinstance(parsed, CardioDistanceSet)
        assert parsed.distance_km == 3.5

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            exercise_set_adapter.validate_python({"id": "x", "mode": "swimming", "laps": 3})

    def test_session_set_defaults(self):
        parsed = session_set_adapter.validate_python({"id": "x", "mode": "timed_hold", "durationSec": 45})
        assert isinstance(parsed, SessionTimedHoldSet)
        assert isinstance(parsed, TimedHoldSet)
        assert parsed.is_completed is False
        assert parsed.save_to_plan is False

    def test_wire_format_is_camel_case(self):
        wire = StrengthRepsSet(id="s", reps=5, weight_kg=100).to_wire()
        assert wire == {"id": "s", "restSec": 60, "mode": "strength_reps", "reps": 5, "weightKg": 100}


class TestConversions:
    def test_plan_set_to_session_set(self):
        plan_set = StrengthRepsSet(id="s", reps=5, weight_kg=80, rest_sec=90)
        session_set = plan_set_to_session_set(plan_set)
        assert isinstance(session_set, SessionStrengthRepsSet)
        assert (session_set.id, session_set.reps, session_set.weight_kg, session_set.rest_sec) == ("s", 5, 80, 90)
        assert session_set.is_completed is False
        assert session_set.completed_at is None

    def test_duplicate_set_gets_new_id(self):
        original = CardioDurationSet(id="c", duration_min=30)
        copy = duplicate_set(original)
        assert copy.id != original.id
        assert copy.duration_min == 30


class TestAccessors:
    @pytest.mark.parametrize("mode,label", [
        ("strength_reps", "Reps"), ("bodyweight_reps", "Reps"), ("timed_hold", "Sec"),
        ("cardio_duration", "Min"), ("cardio_distance", "Km"),
    ])
    def test_primary_label(self, mode, label):
        assert get_set_primary_label(mode) == label

    @pytest.mark.parametrize("mode,expected", [
        ("strength_reps", True), ("bodyweight_reps", True), ("timed_hold", True),
        ("cardio_duration", False), ("cardio_distance", False),
    ])
    def test_mode_has_weight(self, mode, expected):
        assert mode_has_weight(mode) is expected

    def test_cardio_has_no_weight(self):
        assert get_set_weight(CardioDistanceSet(id="c", distance_km=5)) is None

    def test_optional_weight(self):
        assert get_set_weight(BodyweightRepsSet(id="b", reps=12)) is None
        assert get_set_weight(BodyweightRepsSet(id="b", reps=12, weight_kg=10)) == 10


class TestUpdates:
    def test_set_with_primary_value(self):
        updated = set_with_primary_value(TimedHoldSet(id="t", duration_sec=30), 60)
        assert updated.duration_sec == 60

    def test_set_with_primary_value_does_not_modify_original(self):
        original = StrengthRepsSet(id="s", reps=5, weight_kg=50)
        set_with_primary_value(original, 8)
        assert original.reps == 5

    def test_set_with_weight_ignored_for_cardio(self):
        cardio = CardioDurationSet(id="c", duration_min=25)
        assert set_with_weight(cardio, 10) is cardio

    def test_set_with_weight(self):
        assert set_with_weight(StrengthRepsSet(id="s", reps=5, weight_kg=50), 55).weight_kg == 55

    def test_set_with_rest(self):
        assert set_with_rest(CardioDistanceSet(id="c", distance_km=5), 0).rest_sec == 0


class TestVolume:
    def test_strength_volume(self):
        assert set_volume(StrengthRepsSet(id="s", reps=5, weight_kg=100)) == 500

    def test_bodyweight_volume_without_weight(self):
        assert set_volume(BodyweightRepsSet(id="b", reps=12)) == 12

    def test_bodyweight_volume_with_weight(self):
        assert set_volume(BodyweightRepsSet(id="b", reps=10, weight_kg=20)) == 200

    def test_hold_and_cardio_volume(self):
        assert set_volume(TimedHoldSet(id="t", duration_sec=45)) == 45
        assert set_volume(CardioDurationSet(id="c", duration_min=30)) == 30
        assert set_volume(CardioDistanceSet(id="d", distance_km=5.5)) == 5.5

#
# End of test_set_helpers.py
#######################################################################################################################
