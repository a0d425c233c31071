# domain_types.py
# Description: Entity models for exercise templates, plans and workout sessions.
#
"""
domain_types.py
---------------

Pydantic models for the three synced entity collections and the tagged set
variants they carry.

Wire format is camelCase (what the backup file and older clients expect) while
Python code works with snake_case attributes. Fields that this version does not
know about are kept on the model, so a snapshot written by a newer client
survives a round trip through an older one.

Set variants are discriminated on `mode`. A session set is the matching plan
set plus completion tracking, so `isinstance(session_set, StrengthRepsSet)`
holds for both and the helpers in `set_helpers` can match on the plan classes.
"""
# Imports
from typing import Annotated, List, Literal, Optional, Union, get_args
#
# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
#
# Local Imports
#
########################################################################################################################
#
# Constants:

ExerciseMode = Literal[
    'strength_reps', 'bodyweight_reps', 'timed_hold',
    'cardio_duration', 'cardio_distance',
]
EXERCISE_MODES = get_args(ExerciseMode)

MuscleId = Literal[
    'Biceps', 'Triceps', 'Forearms', 'Deltoids', 'RotatorCuff',
    'Pectorals', 'UpperBack', 'Trapezius', 'Paravertebrals',
    'Abdominals', 'LowerBack', 'Oblique', 'AbdomenTransverse',
    'Diaphragm', 'Adductors', 'Gluteus', 'Hamstrings',
    'Calves', 'Quadriceps', 'Ileopsoas',
]

EquipmentId = Literal[
    'Barbell', 'Dumbbell', 'Kettlebell', 'Machine', 'Cable',
    'Band', 'Bodyweight', 'Bench', 'PullUpBar', 'None',
]

MediaLoopMode = Literal['forward', 'pingpong']

DEFAULT_REST_SEC = 60

#
# Functions:

class LiftiModel(BaseModel):
    """Base model: camelCase aliases, snake_case attributes, unknown fields preserved."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='allow',
    )

    def to_wire(self) -> dict:
        """Serializes to the camelCase dict stored locally and uploaded remotely."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


# --- Exercise Sets (tagged by mode) ---

class BaseSet(LiftiModel):
    id: str
    rest_sec: int = DEFAULT_REST_SEC


class StrengthRepsSet(BaseSet):
    mode: Literal['strength_reps'] = 'strength_reps'
    reps: int
    weight_kg: float


class BodyweightRepsSet(BaseSet):
    mode: Literal['bodyweight_reps'] = 'bodyweight_reps'
    reps: int
    weight_kg: Optional[float] = None


class TimedHoldSet(BaseSet):
    mode: Literal['timed_hold'] = 'timed_hold'
    duration_sec: int
    weight_kg: Optional[float] = None


class CardioDurationSet(BaseSet):
    mode: Literal['cardio_duration'] = 'cardio_duration'
    duration_min: float


class CardioDistanceSet(BaseSet):
    mode: Literal['cardio_distance'] = 'cardio_distance'
    distance_km: float


ExerciseSet = Annotated[
    Union[StrengthRepsSet, BodyweightRepsSet, TimedHoldSet, CardioDurationSet, CardioDistanceSet],
    Field(discriminator='mode'),
]
PlanSet = ExerciseSet


class SessionTracking(LiftiModel):
    is_completed: bool = False
    save_to_plan: bool = False
    completed_at: Optional[int] = None


class SessionStrengthRepsSet(StrengthRepsSet, SessionTracking):
    pass


class SessionBodyweightRepsSet(BodyweightRepsSet, SessionTracking):
    pass


class SessionTimedHoldSet(TimedHoldSet, SessionTracking):
    pass


class SessionCardioDurationSet(CardioDurationSet, SessionTracking):
    pass


class SessionCardioDistanceSet(CardioDistanceSet, SessionTracking):
    pass


SessionSet = Annotated[
    Union[SessionStrengthRepsSet, SessionBodyweightRepsSet, SessionTimedHoldSet,
          SessionCardioDurationSet, SessionCardioDistanceSet],
    Field(discriminator='mode'),
]


# --- Exercise Template ---

class ExerciseMedia(LiftiModel):
    images: List[str] = Field(default_factory=list)
    loop_mode: MediaLoopMode = 'forward'
    sequence: Optional[List[int]] = None
    frame_timing_ms: Optional[int] = None


class ExerciseTemplate(LiftiModel):
    id: str
    name: str
    description: Optional[str] = None
    mode: ExerciseMode
    muscles_primary: List[MuscleId] = Field(default_factory=list)
    muscles_secondary: Optional[List[MuscleId]] = None
    equipment: List[EquipmentId] = Field(default_factory=list)
    media: Optional[ExerciseMedia] = None
    is_custom: bool = False
    # Templates historically carried no timestamp; absent means 0 for ordering.
    updated_at: Optional[int] = None


# --- Plan ---

class PlanExercise(LiftiModel):
    id: str
    template_id: str
    sets: List[PlanSet] = Field(default_factory=list)


class Plan(LiftiModel):
    id: str
    name: str
    description: Optional[str] = None
    exercises: List[PlanExercise] = Field(default_factory=list)
    created_at: int
    updated_at: int = 0


# --- Workout Session ---

class SessionExercise(LiftiModel):
    id: str
    template_id: str
    sets: List[SessionSet] = Field(default_factory=list)


class WorkoutSession(LiftiModel):
    id: str
    plan_id: str
    name: str
    started_at: int
    finished_at: Optional[int] = None
    exercises: List[SessionExercise] = Field(default_factory=list)
    updated_at: int = 0


Entity = Union[ExerciseTemplate, Plan, WorkoutSession]

#
# End of domain_types.py
########################################################################################################################
