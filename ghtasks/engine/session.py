"""In-memory task document plus its remote sync state.

A TaskSession holds the Document and the VersionTag from the last successful
load/save. Every mutation is applied in memory first and then the complete
document is saved. The in-memory document stays authoritative when a save
fails: the caller reloads (losing unsaved edits) or saves again later.

Saves are never queued. Starting a save while another one is running raises
SaveInProgressError, because the second write would carry a stale VersionTag.
"""

import logging
import threading
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Tuple

from ghtasks.engine import projects as project_ops
from ghtasks.engine import subtasks as subtask_ops
from ghtasks.engine import tags as tag_ops
from ghtasks.engine import task_operations as ops
from ghtasks.engine.errors import SaveInProgressError
from ghtasks.integrations.github_store import SyncError, SyncErrorKind, SyncResult
from ghtasks.models.document import Document, VersionTag
from ghtasks.models.recurring import Frequency, RecurringTaskRecord
from ghtasks.models.task import TaskId, TaskRecord
from ghtasks.models.task_factory import create_recurring_task, create_task_from_draft
from ghtasks.parser.text_parser import TaskDraft, parse_task_text

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    def load(self, token: str) -> SyncResult: ...

    def save(self, token: str, version: Optional[VersionTag], document: Document) -> SyncResult: ...


class CredentialSource(Protocol):
    def get(self) -> Optional[str]: ...


class TaskSession:
    """Caller-side state for one remote task document."""

    def __init__(self, store: RemoteStore, credentials: CredentialSource, document: Optional[Document] = None):
        self.store = store
        self.credentials = credentials
        self.document = document or Document()
        self.version: Optional[VersionTag] = None
        self._save_lock = threading.Lock()

    def _missing_token(self, kind: SyncErrorKind) -> SyncResult:
        return SyncResult(error=SyncError(kind, "No GitHub token stored"))

    def load(self, *, create_if_missing: bool = False) -> SyncResult:
        """Replace the in-memory document with the remote one.

        Args:
            create_if_missing: Treat a 404 as an empty document that the next
                save will create (no version precondition).
        """
        token = self.credentials.get()
        if not token:
            return self._missing_token(SyncErrorKind.LOAD_FAILED)

        result = self.store.load(token)
        if result.ok:
            self.document, self.version = result.unwrap()
            logger.debug(f"Session loaded version {self.version}")
            return result

        if create_if_missing and result.error.status_code == 404:
            logger.info("Remote task document not found; starting with seed data")
            self.document = Document()
            self.version = None
            return SyncResult(document=self.document, version=None)
        return result

    def save(self) -> SyncResult:
        """Write the full in-memory document, conditional on the last known version."""
        token = self.credentials.get()
        if not token:
            return self._missing_token(SyncErrorKind.SAVE_FAILED)

        if not self._save_lock.acquire(blocking=False):
            raise SaveInProgressError("A save of this document is already in progress")
        try:
            result = self.store.save(token, self.version, self.document)
        finally:
            self._save_lock.release()

        if result.ok:
            self.version = result.version
        else:
            logger.warning(f"Save failed; keeping in-memory document: {result.error}")
        return result

    def apply(self, change: Callable[[Document], Document]) -> SyncResult:
        """Apply a whole-document change in memory, then save."""
        self.document = change(self.document)
        return self.save()

    def _replace_tasks(self, tasks) -> SyncResult:
        return self.apply(lambda doc: doc.model_copy(update={"tasks": tasks}))

    def _replace_recurring(self, recurring) -> SyncResult:
        return self.apply(lambda doc: doc.model_copy(update={"recurring_tasks": recurring}))

    # Tasks

    def parse(self, text: str, *, now: Optional[datetime] = None) -> TaskDraft:
        return parse_task_text(text, self.document.projects, self.document.themes, now=now)

    def add_task(self, text: str, *, now: Optional[datetime] = None) -> Tuple[TaskRecord, SyncResult]:
        """Parse quick-capture text, append the task and save.

        Raises:
            ValueError: If nothing is left for a title once markers are stripped
        """
        task = create_task_from_draft(self.parse(text, now=now))
        return task, self._replace_tasks([*self.document.tasks, task])

    def toggle_task(self, task_id: TaskId) -> SyncResult:
        return self._replace_tasks(ops.toggle_task_completion(self.document.tasks, task_id))

    def update_task(self, task_id: TaskId, updates: dict) -> SyncResult:
        return self._replace_tasks(
            ops.update_task(
                self.document.tasks,
                task_id,
                updates,
                projects=self.document.projects,
                themes_by_project=self.document.themes,
            )
        )

    def delete_task(self, task_id: TaskId) -> SyncResult:
        return self._replace_tasks(ops.delete_task(self.document.tasks, task_id))

    def reorder_task(self, task_id: TaskId, new_index: int) -> SyncResult:
        return self._replace_tasks(ops.reorder(self.document.tasks, task_id, new_index))

    def change_task(self, task_id: TaskId, change: Callable[[TaskRecord], TaskRecord]) -> SyncResult:
        tasks = list(self.document.tasks)
        index = ops.index_of(tasks, task_id)
        tasks[index] = change(tasks[index])
        return self._replace_tasks(tasks)

    def add_subtask(self, task_id: TaskId, title: str) -> SyncResult:
        return self.change_task(task_id, lambda t: subtask_ops.add_subtask(t, title))

    def toggle_subtask(self, task_id: TaskId, subtask_id: str) -> SyncResult:
        return self.change_task(task_id, lambda t: subtask_ops.toggle_subtask(t, subtask_id))

    def update_subtask(
        self, task_id: TaskId, subtask_id: str, *, title: Optional[str] = None, notes: Optional[str] = None
    ) -> SyncResult:
        return self.change_task(
            task_id, lambda t: subtask_ops.update_subtask(t, subtask_id, title=title, notes=notes)
        )

    def delete_subtask(self, task_id: TaskId, subtask_id: str) -> SyncResult:
        return self.change_task(task_id, lambda t: subtask_ops.delete_subtask(t, subtask_id))

    def reorder_subtasks(self, task_id: TaskId, drag_index: int, drop_index: int) -> SyncResult:
        return self.change_task(task_id, lambda t: subtask_ops.reorder_subtasks(t, drag_index, drop_index))

    # Recurring tasks

    def add_recurring_task(
        self, title: str, project: Optional[str] = None, frequency: Frequency = Frequency.DAILY
    ) -> Tuple[RecurringTaskRecord, SyncResult]:
        if project is not None and project not in self.document.projects:
            raise ValueError(f"Unknown project: {project}")
        task = create_recurring_task(title, project=project, frequency=frequency)
        return task, self._replace_recurring([*self.document.recurring_tasks, task])

    def toggle_recurring(self, task_id: TaskId, *, today: Optional[date] = None) -> SyncResult:
        return self._replace_recurring(
            ops.toggle_recurring_completion(self.document.recurring_tasks, task_id, today=today)
        )

    def update_recurring(self, task_id: TaskId, updates: dict) -> SyncResult:
        return self._replace_recurring(
            ops.update_recurring_task(
                self.document.recurring_tasks, task_id, updates, projects=self.document.projects
            )
        )

    def delete_recurring(self, task_id: TaskId) -> SyncResult:
        return self._replace_recurring(ops.delete_recurring_task(self.document.recurring_tasks, task_id))

    # Taxonomy

    def add_project(self, name: str) -> SyncResult:
        return self.apply(lambda doc: project_ops.add_project(doc, name))

    def delete_project(self, name: str) -> SyncResult:
        return self.apply(lambda doc: project_ops.delete_project(doc, name))

    def add_theme(self, project: str, theme: str) -> SyncResult:
        return self.apply(lambda doc: project_ops.add_theme(doc, project, theme))

    def delete_theme(self, project: str, theme: str) -> SyncResult:
        return self.apply(lambda doc: project_ops.delete_theme(doc, project, theme))

    # Tags

    def rename_tag(self, old_name: str, new_name: str) -> SyncResult:
        return self._replace_tasks(tag_ops.rename_tag_in_tasks(self.document.tasks, old_name, new_name))

    def delete_tag(self, name: str) -> SyncResult:
        return self._replace_tasks(tag_ops.delete_tag_from_tasks(self.document.tasks, name))
