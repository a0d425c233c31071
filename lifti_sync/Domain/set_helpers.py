# set_helpers.py
# Description: Mode-aware helpers over the tagged exercise set variants.
#
# Imports
import uuid
from typing import Optional, assert_never
#
# Third-Party Imports
#
# Local Imports
from lifti_sync.Domain.domain_types import (
    DEFAULT_REST_SEC,
    BodyweightRepsSet,
    CardioDistanceSet,
    CardioDurationSet,
    ExerciseMode,
    ExerciseSet,
    PlanSet,
    SessionBodyweightRepsSet,
    SessionCardioDistanceSet,
    SessionCardioDurationSet,
    SessionSet,
    SessionStrengthRepsSet,
    SessionTimedHoldSet,
    StrengthRepsSet,
    TimedHoldSet,
)
#
########################################################################################################################
#
# Functions:

def _new_id() -> str:
    return str(uuid.uuid4())


def create_default_set(mode: ExerciseMode) -> PlanSet:
    """Create a default PlanSet for a given exercise mode."""
    set_id = _new_id()
    match mode:
        case 'strength_reps':
            return StrengthRepsSet(id=set_id, reps=10, weight_kg=20, rest_sec=DEFAULT_REST_SEC)
        case 'bodyweight_reps':
            return BodyweightRepsSet(id=set_id, reps=10, rest_sec=DEFAULT_REST_SEC)
        case 'timed_hold':
            return TimedHoldSet(id=set_id, duration_sec=30, rest_sec=DEFAULT_REST_SEC)
        case 'cardio_duration':
            return CardioDurationSet(id=set_id, duration_min=20, rest_sec=DEFAULT_REST_SEC)
        case 'cardio_distance':
            return CardioDistanceSet(id=set_id, distance_km=5, rest_sec=DEFAULT_REST_SEC)
        case _:
            assert_never(mode)


def duplicate_set(exercise_set: ExerciseSet) -> ExerciseSet:
    """Duplicate a set with a new id."""
    return exercise_set.model_copy(update={'id': _new_id()})


def plan_set_to_session_set(plan_set: PlanSet) -> SessionSet:
    """Convert a PlanSet into an uncompleted SessionSet carrying the same values."""
    values = plan_set.model_dump()
    match plan_set:
        case StrengthRepsSet():
            return SessionStrengthRepsSet(**values)
        case BodyweightRepsSet():
            return SessionBodyweightRepsSet(**values)
        case TimedHoldSet():
            return SessionTimedHoldSet(**values)
        case CardioDurationSet():
            return SessionCardioDurationSet(**values)
        case CardioDistanceSet():
            return SessionCardioDistanceSet(**values)
        case _:
            assert_never(plan_set)


def get_set_primary_value(exercise_set: ExerciseSet) -> float:
    """Get the primary numeric value from a set (for display)."""
    match exercise_set:
        case StrengthRepsSet() | BodyweightRepsSet():
            return exercise_set.reps
        case TimedHoldSet():
            return exercise_set.duration_sec
        case CardioDurationSet():
            return exercise_set.duration_min
        case CardioDistanceSet():
            return exercise_set.distance_km
        case _:
            assert_never(exercise_set)


def get_set_primary_label(mode: ExerciseMode) -> str:
    match mode:
        case 'strength_reps' | 'bodyweight_reps':
            return 'Reps'
        case 'timed_hold':
            return 'Sec'
        case 'cardio_duration':
            return 'Min'
        case 'cardio_distance':
            return 'Km'
        case _:
            assert_never(mode)


def get_set_weight(exercise_set: ExerciseSet) -> Optional[float]:
    """Get the optional weight of a set. Cardio sets never carry one."""
    match exercise_set:
        case StrengthRepsSet() | BodyweightRepsSet() | TimedHoldSet():
            return exercise_set.weight_kg
        case CardioDurationSet() | CardioDistanceSet():
            return None
        case _:
            assert_never(exercise_set)


def mode_has_weight(mode: ExerciseMode) -> bool:
    match mode:
        case 'strength_reps' | 'bodyweight_reps' | 'timed_hold':
            return True
        case 'cardio_duration' | 'cardio_distance':
            return False
        case _:
            assert_never(mode)


def set_with_primary_value(exercise_set: ExerciseSet, value: float) -> ExerciseSet:
    """Return a copy of the set with its primary value replaced."""
    match exercise_set:
        case StrengthRepsSet() | BodyweightRepsSet():
            return exercise_set.model_copy(update={'reps': int(value)})
        case TimedHoldSet():
            return exercise_set.model_copy(update={'duration_sec': int(value)})
        case CardioDurationSet():
            return exercise_set.model_copy(update={'duration_min': value})
        case CardioDistanceSet():
            return exercise_set.model_copy(update={'distance_km': value})
        case _:
            assert_never(exercise_set)


def set_with_weight(exercise_set: ExerciseSet, weight_kg: float) -> ExerciseSet:
    """Return a copy with a new weight; sets whose mode has no weight come back unchanged."""
    match exercise_set:
        case StrengthRepsSet() | BodyweightRepsSet() | TimedHoldSet():
            return exercise_set.model_copy(update={'weight_kg': weight_kg})
        case CardioDurationSet() | CardioDistanceSet():
            return exercise_set
        case _:
            assert_never(exercise_set)


def set_with_rest(exercise_set: ExerciseSet, rest_sec: int) -> ExerciseSet:
    return exercise_set.model_copy(update={'rest_sec': rest_sec})


def set_volume(exercise_set: ExerciseSet) -> float:
    """Compute volume for one set (feeds the muscle heatmap)."""
    match exercise_set:
        case StrengthRepsSet():
            return exercise_set.reps * exercise_set.weight_kg
        case BodyweightRepsSet():
            weight = exercise_set.weight_kg if exercise_set.weight_kg is not None else 1
            return exercise_set.reps * weight
        case TimedHoldSet():
            return exercise_set.duration_sec
        case CardioDurationSet():
            return exercise_set.duration_min
        case CardioDistanceSet():
            return exercise_set.distance_km
        case _:
            assert_never(exercise_set)

#
# End of set_helpers.py
########################################################################################################################
