# Workouts_Library.py
# Description: Service layer for exercise templates, workout plans and workout sessions.
#
# Imports
import logging
import uuid
from typing import List, Optional
#
# Third-Party Imports
#
# Local Imports
from lifti_sync.DB.Lifti_DB import InputError, LiftiDB
from lifti_sync.Domain.domain_types import (
    ExerciseTemplate,
    Plan,
    PlanExercise,
    PlanSet,
    SessionExercise,
    WorkoutSession,
)
from lifti_sync.Domain.set_helpers import create_default_set, plan_set_to_session_set, set_volume
#
#######################################################################################################################
#
# Functions:

logger = logging.getLogger(__name__)


class WorkoutsService:
    """
    Plan and session edits expressed as full-object puts on LiftiDB.

    Every method returns the new object; the argument is never modified. Each
    write stamps `updatedAt` and leaves a pending operation behind, so the next
    sync picks it up.
    """

    def __init__(self, db: LiftiDB):
        self.db = db

    def _new_id(self) -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _check_index(items: list, index: int, what: str):
        if not 0 <= index < len(items):
            raise InputError(f"{what} index {index} out of range (0..{len(items) - 1}).")

    # --- Exercise templates ---
    def list_exercises(self) -> List[ExerciseTemplate]:
        return self.db.list_exercises()

    def add_exercises(self, templates: List[ExerciseTemplate]) -> int:
        """Stores templates and tracks each one for sync."""
        return self.db.bulk_put_exercises(templates, track_changes=True)

    def create_custom_exercise(self, template: ExerciseTemplate) -> ExerciseTemplate:
        custom = template.model_copy(update={'is_custom': True})
        return self.db.put_exercise(custom)

    # --- Plans ---
    def create_plan(self, name: str, description: Optional[str] = None) -> Plan:
        if not name or not name.strip():
            raise InputError("Plan name cannot be empty.")
        now = self.db.clock()
        plan = Plan(id=self._new_id(), name=name.strip(), description=description,
                    exercises=[], created_at=now, updated_at=now)
        stored = self.db.put_plan(plan, touch=False)
        logger.info(f"Created plan '{stored.name}' with ID: {stored.id}.")
        return stored

    def get_plan(self, plan_id: str) -> Optional[Plan]:
        return self.db.get_plan(plan_id)

    def list_plans(self) -> List[Plan]:
        return self.db.list_plans()

    def rename_plan(self, plan: Plan, name: str) -> Plan:
        if not name or not name.strip():
            raise InputError("Plan name cannot be empty.")
        return self.db.put_plan(plan.model_copy(update={'name': name.strip()}))

    def add_exercise_to_plan(self, plan: Plan, template: ExerciseTemplate) -> Plan:
        """Appends the template to the plan with one default set for its mode."""
        instance = PlanExercise(id=self._new_id(), template_id=template.id,
                                sets=[create_default_set(template.mode)])
        return self.db.put_plan(plan.model_copy(update={'exercises': [*plan.exercises, instance]}))

    def remove_exercise_from_plan(self, plan: Plan, exercise_index: int) -> Plan:
        self._check_index(plan.exercises, exercise_index, "Exercise")
        exercises = [ex for i, ex in enumerate(plan.exercises) if i != exercise_index]
        return self.db.put_plan(plan.model_copy(update={'exercises': exercises}))

    def reorder_plan_exercises(self, plan: Plan, from_index: int, to_index: int) -> Plan:
        self._check_index(plan.exercises, from_index, "Exercise")
        exercises = list(plan.exercises)
        moved = exercises.pop(from_index)
        exercises.insert(to_index, moved)
        return self.db.put_plan(plan.model_copy(update={'exercises': exercises}))

    def update_plan_sets(self, plan: Plan, exercise_index: int, sets: List[PlanSet]) -> Plan:
        self._check_index(plan.exercises, exercise_index, "Exercise")
        exercises = [ex.model_copy(deep=True) for ex in plan.exercises]
        exercises[exercise_index] = exercises[exercise_index].model_copy(update={'sets': list(sets)})
        return self.db.put_plan(plan.model_copy(update={'exercises': exercises}))

    def delete_plan(self, plan_id: str) -> bool:
        return self.db.delete_plan(plan_id)

    # --- Sessions ---
    def start_session(self, plan: Plan) -> WorkoutSession:
        """Creates a session from a plan; every plan set becomes an uncompleted session set."""
        now = self.db.clock()
        session = WorkoutSession(
            id=self._new_id(),
            plan_id=plan.id,
            name=plan.name,
            started_at=now,
            updated_at=now,
            exercises=[
                SessionExercise(id=ex.id, template_id=ex.template_id,
                                sets=[plan_set_to_session_set(s) for s in ex.sets])
                for ex in plan.exercises
            ],
        )
        stored = self.db.put_session(session, touch=False)
        logger.info(f"Started session {stored.id} from plan {plan.id}.")
        return stored

    def create_session(self, session: WorkoutSession) -> WorkoutSession:
        """Stores a new session keeping its own `updatedAt`."""
        return self.db.put_session(session, touch=False)

    def update_session(self, session: WorkoutSession) -> WorkoutSession:
        return self.db.put_session(session)

    def complete_set(self, session: WorkoutSession, exercise_index: int, set_index: int) -> WorkoutSession:
        self._check_index(session.exercises, exercise_index, "Exercise")
        exercises = [ex.model_copy(deep=True) for ex in session.exercises]
        sets = exercises[exercise_index].sets
        self._check_index(sets, set_index, "Set")
        sets[set_index] = sets[set_index].model_copy(update={'is_completed': True, 'completed_at': self.db.clock()})
        return self.db.put_session(session.model_copy(update={'exercises': exercises}))

    def finish_session(self, session: WorkoutSession) -> WorkoutSession:
        now = self.db.clock()
        finished = session.model_copy(update={'finished_at': now, 'updated_at': now})
        stored = self.db.put_session(finished, touch=False)
        logger.info(f"Finished session {stored.id}.")
        return stored

    def list_sessions(self) -> List[WorkoutSession]:
        return self.db.list_sessions()

    def delete_session(self, session_id: str) -> bool:
        return self.db.delete_session(session_id)

    @staticmethod
    def session_volume(session: WorkoutSession) -> float:
        """Total volume of the completed sets of a session."""
        return sum(set_volume(s) for ex in session.exercises for s in ex.sets if s.is_completed)

#
# End of Workouts_Library.py
#######################################################################################################################
