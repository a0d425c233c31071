# test_lifti_db_properties.py
#
# Property-based tests for the pending-operation accounting of LiftiDB using Hypothesis.
#
# Imports
#
# Third-Party Imports
from hypothesis import HealthCheck, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule
#
# Local Imports
from lifti_sync.DB.Change_Tracker import ChangeTracker
from lifti_sync.DB.Lifti_DB import LiftiDB
from lifti_sync.Domain.domain_types import Plan, WorkoutSession
#
########################################################################################################################
#
# Functions:

settings.register_profile(
    "db_friendly",
    deadline=1000,
    suppress_health_check=[
        HealthCheck.too_slow,
        HealthCheck.function_scoped_fixture
    ]
)
settings.load_profile("db_friendly")

st_entity_id = st.sampled_from(["a", "b", "c", "d", "e"])


class PendingOpsMachine(RuleBasedStateMachine):
    """
    Random sequences of puts, deletes and clears against an in-memory DB.
    The pending count must always equal the number of distinct (type, id)
    pairs touched since the last clear.
    """

    def __init__(self):
        super().__init__()
        self.db = LiftiDB(":memory:")
        self.tracker = ChangeTracker(self.db)
        self.expected = set()

    @rule(entity_id=st_entity_id, name=st.text(min_size=1, max_size=20))
    def put_plan(self, entity_id, name):
        self.db.put_plan(Plan(id=entity_id, name=name, created_at=0))
        self.expected.add(("plan", entity_id))

    @rule(entity_id=st_entity_id)
    def put_session(self, entity_id):
        self.db.put_session(WorkoutSession(id=entity_id, plan_id="p", name="S", started_at=0))
        self.expected.add(("session", entity_id))

    @rule(entity_id=st_entity_id)
    def delete_plan(self, entity_id):
        self.db.delete_plan(entity_id)
        self.expected.add(("plan", entity_id))

    @rule()
    def clear(self):
        self.tracker.clear()
        self.expected.clear()

    @invariant()
    def pending_count_matches(self):
        assert self.tracker.count() == len(self.expected)
        assert set(self.tracker.list_pending()) == {f"{t}:{i}" for t, i in self.expected}

    def teardown(self):
        self.db.close_connection()


TestPendingOpsMachine = PendingOpsMachine.TestCase

#
# End of test_lifti_db_properties.py
########################################################################################################################
