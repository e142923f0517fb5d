"""
Content-addressed task store.

A task is an immutable payload submitted against a profile. The store keeps
the payload bytes verbatim next to their multihash digest.

Creation resolves the profile and inserts the task inside one transaction on
one pooled connection:

    ::

        create_task(profile_id, file_name, data)
            │
            ▼
        adapter.transaction()  ─── one connection checked out ───┐
            │                                                     │
            ├─ profiles.fetch_profile_with(conn, profile_id)      │
            │     └─ missing → ProfileNotFoundError (no row)      │
            ├─ compute_digest(data)                               │
            ├─ INSERT INTO tasks ... (FK still enforced)          │
            └─ COMMIT ────────────────────────────────────────────┘

Examples:
    >>> store = TaskStore(adapter, ProfileRegistry(adapter))
    >>> store.create_task(ProfileId(1), "out.log", b"hello")
    1
    >>> store.fetch_task(TaskId(1)).digest.hex()[:4]
    '1220'

Tags:
    tasks, content-addressing, repository, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from coordinator.core.adapters.base import DatabaseAdapter
from coordinator.core.errors import DigestMismatchError, TaskNotFoundError, ValidationError
from coordinator.core.hashing import DEFAULT_ALGORITHM, compute_digest, get_algorithm, verify_digest
from coordinator.core.logging import get_logger
from coordinator.core.profiles import ProfileRegistry
from coordinator.core.repository import BaseRepository
from coordinator.core.schema import TABLES
from coordinator.core.types import ProfileId, Task, TaskId

logger = get_logger(__name__)

_TABLE = TABLES["tasks"]


class TaskStore(BaseRepository):
    """Create, enumerate and fetch tasks.

    Parameters:
        adapter: Shared database adapter.
        profiles: Registry used to resolve the owning profile.
        digest_algorithm: Multihash name for new digests.
        verify_on_fetch: Recompute the digest of every fetched payload.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        profiles: ProfileRegistry,
        *,
        digest_algorithm: str = DEFAULT_ALGORITHM,
        verify_on_fetch: bool = False,
    ) -> None:
        super().__init__(adapter)
        get_algorithm(digest_algorithm)
        self.profiles = profiles
        self.digest_algorithm = digest_algorithm
        self.verify_on_fetch = verify_on_fetch

    def create_task(self, profile_id: ProfileId, file_name: str, data: bytes) -> TaskId:
        """
        Store a task for an existing profile and return its new id.

        Raises:
            ProfileNotFoundError: the profile does not exist; nothing is written.
            MissingReferenceError: the insert itself hit the foreign key.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValidationError("Task data must be bytes", field="data", value=type(data).__name__)
        payload = bytes(data)

        with self.adapter.transaction() as conn:
            self.profiles.fetch_profile_with(conn, profile_id)
            digest = compute_digest(payload, self.digest_algorithm)
            new_id = self.adapter.insert_returning_id(
                conn,
                _TABLE,
                ("profile_id", "file_name", "data", "digest"),
                (int(profile_id), file_name, payload, digest),
            )

        task_id = TaskId(new_id)
        logger.info(
            "task_created",
            task_id=task_id,
            profile_id=profile_id,
            file_name=file_name,
            size=len(payload),
            digest=digest.hex(),
        )
        return task_id

    def list_tasks(self, by_profile: ProfileId | None = None) -> list[TaskId]:
        """All task ids, or those belonging to *by_profile*, ascending."""
        if by_profile is None:
            rows = self.adapter.query(f"SELECT id FROM {_TABLE} ORDER BY id")
        else:
            rows = self.adapter.query(
                f"SELECT id FROM {_TABLE} WHERE profile_id = {self.ph(1)} ORDER BY id",
                (int(by_profile),),
            )
        return [TaskId(int(row["id"])) for row in rows]

    def fetch_task(self, task_id: TaskId) -> Task:
        """
        Fetch the full task record, payload included.

        Raises:
            TaskNotFoundError: no task has this id.
            DigestMismatchError: verification is on and the payload changed.
        """
        row = self.adapter.query_one(
            f"SELECT id, profile_id, file_name, data, digest FROM {_TABLE} WHERE id = {self.ph(1)}",
            (int(task_id),),
        )
        if row is None:
            raise TaskNotFoundError(task_id)

        task = Task.from_row(row)
        if self.verify_on_fetch and not self._digest_matches(task):
            logger.error(
                "task_digest_mismatch",
                task_id=task.id,
                profile_id=task.profile_id,
                stored_digest=task.digest.hex(),
                size=len(task.data),
            )
            raise DigestMismatchError(
                f"Task {task.id} payload does not match its stored digest"
            ).with_context(task_id=task.id, profile_id=task.profile_id)
        return task

    @staticmethod
    def _digest_matches(task: Task) -> bool:
        try:
            return verify_digest(task.data, task.digest)
        except ValidationError:
            # unreadable multihash header
            return False


__all__ = [
    "TaskStore",
]
