import threading

import pytest

from grade_engine.core.exceptions import ProtectedDefinitionError, VersionConflictError
from grade_engine.services.definition_store import GradeDefinitionStore
from grade_engine.services.grade_definition_service import GradeDefinitionService

from .conftest import SCHOOL_ID, make_candidate


@pytest.fixture()
def store():
    return GradeDefinitionStore()


class TestSnapshot:
    def test_first_access_seeds_standards(self, store):
        snapshot = store.snapshot(SCHOOL_ID)
        assert snapshot.version == 0
        assert [d.id for d in snapshot.definitions] == [
            "grade-cbse-default", "grade-state-default", "grade-icse-default"
        ]

    def test_without_seeding(self):
        store = GradeDefinitionStore(seed_on_first_access=False)
        assert store.snapshot(SCHOOL_ID).definitions == ()

    def test_schools_are_separate(self, store, service, pass_fail):
        store.apply(SCHOOL_ID, lambda defs: service.create(defs, pass_fail))
        assert len(store.snapshot(SCHOOL_ID).definitions) == 4
        assert len(store.snapshot("school-002").definitions) == 3

    def test_get(self, store):
        assert store.get(SCHOOL_ID, "grade-icse-default").code == "ICSE"
        assert store.get(SCHOOL_ID, "grade-missing") is None


class TestCommit:
    def test_compare_and_swap(self, store, service):
        snapshot = store.snapshot(SCHOOL_ID)
        change = service.set_default(list(snapshot.definitions), "grade-state-default")
        committed = store.commit(SCHOOL_ID, snapshot.version, change.definitions)
        assert committed.version == 1
        assert store.get(SCHOOL_ID, "grade-state-default").is_default

    def test_stale_commit_is_refused(self, store, service):
        first = store.snapshot(SCHOOL_ID)
        second = store.snapshot(SCHOOL_ID)
        store.commit(SCHOOL_ID, first.version,
                     service.set_default(list(first.definitions), "grade-state-default").definitions)
        with pytest.raises(VersionConflictError) as exc_info:
            store.commit(SCHOOL_ID, second.version,
                         service.set_default(list(second.definitions), "grade-icse-default").definitions)
        assert exc_info.value.status_code == 409
        assert store.get(SCHOOL_ID, "grade-state-default").is_default
        assert not store.get(SCHOOL_ID, "grade-icse-default").is_default


class TestApply:
    def test_failed_operation_stores_nothing(self, store, service):
        with pytest.raises(ProtectedDefinitionError):
            store.apply(SCHOOL_ID, lambda defs: service.delete(defs, "grade-cbse-default"))
        assert store.snapshot(SCHOOL_ID).version == 0

    def test_concurrent_writers_do_not_lose_updates(self, store):
        service = GradeDefinitionService(SCHOOL_ID)
        store.snapshot(SCHOOL_ID)

        def add(index):
            candidate = make_candidate([("S", 0, 100, 0)], name=f"Scale {index}")
            store.apply(SCHOOL_ID, lambda defs: service.create(defs, candidate))

        threads = [threading.Thread(target=add, args=(i,)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = store.snapshot(SCHOOL_ID)
        assert snapshot.version == 10
        assert len(snapshot.definitions) == 13
        assert sum(1 for d in snapshot.definitions if d.is_default) == 1
