# grade_engine/services/definition_store.py
"""In-memory holder of each school's grade definitions."""
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple
import logging
import threading

from ..core.exceptions import VersionConflictError
from ..schemas.grade_definition_schemas import DefinitionChange, GradeDefinition
from .grade_definition_service import GradeDefinitionService

logger = logging.getLogger(__name__)

Operation = Callable[[List[GradeDefinition]], DefinitionChange]


class StoreSnapshot(NamedTuple):
    version: int
    definitions: Tuple[GradeDefinition, ...]


class GradeDefinitionStore:
    """Versioned per-school collections with a single writer at a time.

    ``apply`` runs a read-modify-write under the store lock. Callers that read
    and commit in separate steps use ``snapshot`` and ``commit``, which refuses
    a commit based on a stale version.
    """

    def __init__(self, seed_on_first_access: bool = True):
        self.seed_on_first_access = seed_on_first_access
        self._lock = threading.Lock()
        self._schools: Dict[str, StoreSnapshot] = {}

    def _load(self, school_id: str) -> StoreSnapshot:
        snapshot = self._schools.get(school_id)
        if snapshot is None:
            definitions: Sequence[GradeDefinition] = ()
            if self.seed_on_first_access:
                definitions = GradeDefinitionService(school_id).seed_standard_definitions()
                logger.info("Seeded %d standard grade definitions for school %s", len(definitions), school_id)
            snapshot = StoreSnapshot(0, tuple(definitions))
            self._schools[school_id] = snapshot
        return snapshot

    def snapshot(self, school_id: str) -> StoreSnapshot:
        with self._lock:
            return self._load(school_id)

    def get(self, school_id: str, definition_id: str) -> Optional[GradeDefinition]:
        for definition in self.snapshot(school_id).definitions:
            if definition.id == definition_id:
                return definition
        return None

    def commit(
        self,
        school_id: str,
        expected_version: int,
        definitions: Sequence[GradeDefinition]
    ) -> StoreSnapshot:
        with self._lock:
            current = self._load(school_id)
            if current.version != expected_version:
                logger.warning(
                    "Stale commit for school %s: expected version %d, found %d",
                    school_id, expected_version, current.version
                )
                raise VersionConflictError(school_id, expected_version, current.version)
            snapshot = StoreSnapshot(current.version + 1, tuple(definitions))
            self._schools[school_id] = snapshot
            return snapshot

    def apply(self, school_id: str, operation: Operation) -> DefinitionChange:
        """Run ``operation`` on the current collection and store its result.

        Nothing is stored when the operation raises.
        """
        with self._lock:
            current = self._load(school_id)
            change = operation(list(current.definitions))
            self._schools[school_id] = StoreSnapshot(current.version + 1, tuple(change.definitions))
            return change
