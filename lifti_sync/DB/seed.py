# seed.py
# Description: Built-in exercise catalogue, written into an empty database on first start.
#
# Imports
import logging
from typing import List, Optional
#
# Third-Party Imports
#
# Local Imports
from lifti_sync.DB.Lifti_DB import LiftiDB
from lifti_sync.Domain.domain_types import ExerciseTemplate
#
########################################################################################################################
#
# Functions:

logger = logging.getLogger(__name__)


def _t(template_id: str, name: str, mode: str, primary: List[str],
       secondary: Optional[List[str]], equipment: List[str]) -> ExerciseTemplate:
    return ExerciseTemplate(id=template_id, name=name, mode=mode, muscles_primary=primary,
                            muscles_secondary=secondary, equipment=equipment, is_custom=False)


DEFAULT_EXERCISES: List[ExerciseTemplate] = [
    # CHEST
    _t("bench-press", "Bench Press", "strength_reps", ["Pectorals"], ["Triceps", "Deltoids"], ["Barbell", "Bench"]),
    _t("incline-bench", "Incline Bench Press", "strength_reps", ["Pectorals"], ["Deltoids", "Triceps"], ["Barbell", "Bench"]),
    _t("db-fly", "Dumbbell Fly", "strength_reps", ["Pectorals"], ["Deltoids"], ["Dumbbell", "Bench"]),
    _t("push-up", "Push Up", "bodyweight_reps", ["Pectorals"], ["Triceps", "Deltoids"], ["Bodyweight"]),
    _t("dips", "Dips", "bodyweight_reps", ["Pectorals", "Triceps"], None, ["Bodyweight"]),
    # BACK
    _t("pull-up", "Pull Up", "bodyweight_reps", ["UpperBack"], ["Biceps", "Forearms"], ["PullUpBar"]),
    _t("barbell-row", "Barbell Row", "strength_reps", ["UpperBack"], ["Biceps", "Trapezius"], ["Barbell"]),
    _t("lat-pulldown", "Lat Pulldown", "strength_reps", ["UpperBack"], ["Biceps"], ["Cable"]),
    _t("seated-cable-row", "Seated Cable Row", "strength_reps", ["UpperBack"], ["Biceps", "Trapezius"], ["Cable"]),
    _t("face-pull", "Face Pull", "strength_reps", ["RotatorCuff", "Trapezius"], ["Deltoids"], ["Cable"]),
    # SHOULDERS
    _t("ohp", "Overhead Press", "strength_reps", ["Deltoids"], ["Triceps", "Trapezius"], ["Barbell"]),
    _t("lateral-raise", "Lateral Raise", "strength_reps", ["Deltoids"], None, ["Dumbbell"]),
    _t("rear-delt-fly", "Rear Delt Fly", "strength_reps", ["Deltoids", "RotatorCuff"], None, ["Dumbbell"]),
    # ARMS
    _t("barbell-curl", "Barbell Curl", "strength_reps", ["Biceps"], ["Forearms"], ["Barbell"]),
    _t("db-curl", "Dumbbell Curl", "strength_reps", ["Biceps"], None, ["Dumbbell"]),
    _t("tricep-pushdown", "Tricep Pushdown", "strength_reps", ["Triceps"], None, ["Cable"]),
    _t("skull-crusher", "Skull Crusher", "strength_reps", ["Triceps"], None, ["Barbell", "Bench"]),
    _t("hammer-curl", "Hammer Curl", "strength_reps", ["Biceps", "Forearms"], None, ["Dumbbell"]),
    # LEGS
    _t("squat", "Squat", "strength_reps", ["Quadriceps"], ["Gluteus", "Hamstrings"], ["Barbell"]),
    _t("deadlift", "Deadlift", "strength_reps", ["Hamstrings", "Gluteus"], ["LowerBack", "Quadriceps"], ["Barbell"]),
    _t("rdl", "Romanian Deadlift", "strength_reps", ["Hamstrings"], ["Gluteus", "LowerBack"], ["Barbell"]),
    _t("leg-press", "Leg Press", "strength_reps", ["Quadriceps"], ["Gluteus"], ["Machine"]),
    _t("leg-curl", "Leg Curl", "strength_reps", ["Hamstrings"], None, ["Machine"]),
    _t("leg-extension", "Leg Extension", "strength_reps", ["Quadriceps"], None, ["Machine"]),
    _t("lunge", "Walking Lunge", "strength_reps", ["Quadriceps", "Gluteus"], ["Hamstrings"], ["Dumbbell"]),
    _t("calf-raise", "Calf Raise", "strength_reps", ["Calves"], None, ["Machine"]),
    _t("hip-thrust", "Hip Thrust", "strength_reps", ["Gluteus"], ["Hamstrings"], ["Barbell", "Bench"]),
    # CORE
    _t("plank", "Plank", "timed_hold", ["Abdominals", "Paravertebrals"], None, ["Bodyweight"]),
    _t("dead-hang", "Dead Hang", "timed_hold", ["Forearms"], ["UpperBack"], ["PullUpBar"]),
    _t("ab-roller", "Ab Roller", "bodyweight_reps", ["Abdominals"], ["Oblique"], ["Bodyweight"]),
    _t("russian-twist", "Russian Twist", "bodyweight_reps", ["Oblique", "Abdominals"], None, ["Bodyweight"]),
    _t("cable-crunch", "Cable Crunch", "strength_reps", ["Abdominals"], None, ["Cable"]),
    # CARDIO
    _t("treadmill-run", "Treadmill Run", "cardio_duration", ["Quadriceps", "Calves"], None, ["Machine"]),
    _t("outdoor-run", "Outdoor Run", "cardio_distance", ["Quadriceps", "Calves"], None, ["None"]),
    _t("rowing-machine", "Rowing Machine", "cardio_duration", ["UpperBack", "Quadriceps"], ["Biceps"], ["Machine"]),
]


def seed_exercises(db: LiftiDB) -> int:
    """Writes the built-in catalogue if the exercises table is empty. Returns the number written."""
    if db.count_exercises() > 0:
        return 0
    written = db.bulk_put_exercises(DEFAULT_EXERCISES, track_changes=False)
    logger.info(f"Seeded {written} built-in exercise templates.")
    return written

#
# End of seed.py
########################################################################################################################
