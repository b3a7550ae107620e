"""FastAPI web application for ghtasks.

Thin HTTP layer over a TaskSession: every mutating endpoint changes the
in-memory document and then saves the full document to GitHub. A failed save
is reported in the response's ``sync`` block; it does not undo the change.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ghtasks.config import GitHubStoreSettings
from ghtasks.engine.errors import SaveInProgressError, TaskNotFoundError
from ghtasks.engine.recurring_stats import calculate_recurring_stats, get_score_color
from ghtasks.engine.session import TaskSession
from ghtasks.engine.tags import build_tag_registry, filter_tasks_by_tags, get_frequent_tags, search_tags
from ghtasks.engine.task_operations import filter_tasks, find_task
from ghtasks.integrations.credentials import TokenStore
from ghtasks.integrations.github_issues import GitHubIssueClient
from ghtasks.integrations.github_store import GitHubContentsStore, SyncResult
from ghtasks.models.recurring import Frequency

logger = logging.getLogger(__name__)


# Request models
class TokenRequest(BaseModel):
    token: str = Field(..., min_length=1, description="GitHub personal access token")


class TextRequest(BaseModel):
    text: str = Field(..., description="Quick-capture text, e.g. 'Call dentist p0 tomorrow #health @Personal'")


class ReorderRequest(BaseModel):
    new_index: int = Field(..., ge=0, description="Target position in the task list")


class RecurringTaskRequest(BaseModel):
    title: str
    project: Optional[str] = None
    frequency: Frequency = Frequency.DAILY


class NameRequest(BaseModel):
    name: str = Field(..., min_length=1)


class SubtaskRequest(BaseModel):
    title: str = Field(..., min_length=1)


class SubtaskUpdateRequest(BaseModel):
    title: Optional[str] = None
    notes: Optional[str] = None


class SubtaskReorderRequest(BaseModel):
    drag_index: int = Field(..., ge=0)
    drop_index: int = Field(..., ge=0)


class TagRenameRequest(BaseModel):
    old_name: str = Field(..., min_length=1)
    new_name: str = Field(..., min_length=1)


def _sync_block(result: SyncResult) -> Dict[str, Any]:
    if result.ok:
        return {"status": "success", "version": result.version, "detail": None}
    return {"status": "error", "version": None, "detail": str(result.error)}


def _document_body(session: TaskSession, result: SyncResult) -> Dict[str, Any]:
    return {"document": session.document.to_json_dict(), "sync": _sync_block(result)}


def create_app(
    session: Optional[TaskSession] = None, settings: Optional[GitHubStoreSettings] = None
) -> FastAPI:
    """Create the API around a session.

    Args:
        session: Session to serve; built from the environment on first use when omitted
        settings: Repository settings (owner/repo are also used for issue sync);
            read from the environment when omitted
    """
    app = FastAPI(
        title="ghtasks API",
        description="Task manager that keeps its data in a JSON file in a GitHub repository",
        version="0.1.0",
    )
    app.state.session = session
    app.state.settings = settings

    def get_settings(request: Request) -> GitHubStoreSettings:
        if request.app.state.settings is None:
            try:
                request.app.state.settings = GitHubStoreSettings.from_env()
            except ValueError as e:
                raise HTTPException(status_code=500, detail=str(e))
        return request.app.state.settings

    def get_session(request: Request) -> TaskSession:
        if request.app.state.session is None:
            store = GitHubContentsStore(get_settings(request))
            request.app.state.session = TaskSession(store, TokenStore())
        return request.app.state.session

    def require_token(session: TaskSession = Depends(get_session)) -> TaskSession:
        if not session.credentials.get():
            raise HTTPException(status_code=401, detail="No GitHub token stored. POST /token first.")
        return session

    def run(action):
        try:
            return action()
        except TaskNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except SaveInProgressError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except (ValueError, IndexError) as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/token")
    def store_token(body: TokenRequest, session: TaskSession = Depends(get_session)):
        """Store the token and load the document with it."""
        session.credentials.set(body.token)
        result = session.load(create_if_missing=True)
        if not result.ok:
            raise HTTPException(status_code=502, detail=str(result.error))
        return _document_body(session, result)

    @app.delete("/token", status_code=204)
    def remove_token(session: TaskSession = Depends(get_session)):
        session.credentials.remove()

    @app.post("/sync/load")
    def load_document(session: TaskSession = Depends(require_token)):
        result = session.load()
        if not result.ok:
            raise HTTPException(status_code=502, detail=str(result.error))
        return _document_body(session, result)

    @app.get("/document")
    def get_document(session: TaskSession = Depends(get_session)):
        return {"document": session.document.to_json_dict(), "version": session.version}

    @app.post("/parse")
    def parse_text(body: TextRequest, session: TaskSession = Depends(get_session)):
        draft = session.parse(body.text)
        data = asdict(draft)
        data["priority"] = draft.priority.value
        data["due_date"] = draft.due_date.isoformat() if draft.due_date else None
        return {"draft": data}

    @app.get("/tasks")
    def list_tasks(
        view: str = "all",
        show_completed: bool = False,
        priority: str = "all",
        project: str = "all",
        tags: Optional[List[str]] = Query(None),
        session: TaskSession = Depends(get_session),
    ):
        tasks = run(lambda: filter_tasks(session.document.tasks, view, show_completed, priority, project))
        tasks = filter_tasks_by_tags(tasks, tags or [])
        return {
            "tasks": [t.model_dump(mode="json", by_alias=True) for t in tasks],
            "count": len(tasks),
        }

    @app.post("/tasks", status_code=201)
    def create_task(body: TextRequest, session: TaskSession = Depends(require_token)):
        task, result = run(lambda: session.add_task(body.text))
        return {"task": task.model_dump(mode="json", by_alias=True), "sync": _sync_block(result)}

    @app.post("/tasks/{task_id}/toggle")
    def toggle_task(task_id: str, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.toggle_task(_task_key(session, task_id))))

    @app.patch("/tasks/{task_id}")
    def update_task(task_id: str, updates: Dict[str, Any], session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.update_task(_task_key(session, task_id), updates)))

    @app.delete("/tasks/{task_id}")
    def delete_task(task_id: str, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.delete_task(_task_key(session, task_id))))

    @app.post("/tasks/{task_id}/reorder")
    def reorder_task(task_id: str, body: ReorderRequest, session: TaskSession = Depends(require_token)):
        return _document_body(
            session, run(lambda: session.reorder_task(_task_key(session, task_id), body.new_index))
        )

    @app.post("/tasks/{task_id}/subtasks", status_code=201)
    def add_subtask(task_id: str, body: SubtaskRequest, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.add_subtask(_task_key(session, task_id), body.title)))

    @app.post("/tasks/{task_id}/subtasks/reorder")
    def reorder_subtasks(task_id: str, body: SubtaskReorderRequest, session: TaskSession = Depends(require_token)):
        key = _task_key(session, task_id)
        return _document_body(session, run(lambda: session.reorder_subtasks(key, body.drag_index, body.drop_index)))

    @app.patch("/tasks/{task_id}/subtasks/{subtask_id}")
    def update_subtask(
        task_id: str, subtask_id: str, body: SubtaskUpdateRequest, session: TaskSession = Depends(require_token)
    ):
        key = _task_key(session, task_id)
        return _document_body(
            session, run(lambda: session.update_subtask(key, subtask_id, title=body.title, notes=body.notes))
        )

    @app.post("/tasks/{task_id}/subtasks/{subtask_id}/toggle")
    def toggle_subtask(task_id: str, subtask_id: str, session: TaskSession = Depends(require_token)):
        return _document_body(
            session, run(lambda: session.toggle_subtask(_task_key(session, task_id), subtask_id))
        )

    @app.delete("/tasks/{task_id}/subtasks/{subtask_id}")
    def delete_subtask(task_id: str, subtask_id: str, session: TaskSession = Depends(require_token)):
        return _document_body(
            session, run(lambda: session.delete_subtask(_task_key(session, task_id), subtask_id))
        )

    @app.post("/tasks/{task_id}/issue-sync")
    def sync_issue(
        task_id: str,
        session: TaskSession = Depends(require_token),
        settings: GitHubStoreSettings = Depends(get_settings),
    ):
        """Write the task's description and subtask checklist into its linked GitHub issue."""
        task = run(lambda: find_task(session.document.tasks, _task_key(session, task_id)))
        client = GitHubIssueClient(session.credentials.get(), api_base=settings.api_base,
                                   timeout_sec=settings.timeout_sec)
        try:
            issue = run(lambda: client.sync_task(settings.owner, settings.repo, task))
        except RuntimeError as e:
            logger.error(f"Issue sync failed for task {task.id}: {str(e)}")
            raise HTTPException(status_code=502, detail=str(e))
        return {"issue_number": task.github_issue_number, "issue": issue}

    @app.post("/recurring", status_code=201)
    def create_recurring(body: RecurringTaskRequest, session: TaskSession = Depends(require_token)):
        task, result = run(lambda: session.add_recurring_task(body.title, body.project, body.frequency))
        return {"recurring_task": task.model_dump(mode="json", by_alias=True), "sync": _sync_block(result)}

    @app.post("/recurring/{task_id}/toggle")
    def toggle_recurring(task_id: str, session: TaskSession = Depends(require_token)):
        key = _recurring_key(session, task_id)
        return _document_body(session, run(lambda: session.toggle_recurring(key)))

    @app.patch("/recurring/{task_id}")
    def update_recurring(task_id: str, updates: Dict[str, Any], session: TaskSession = Depends(require_token)):
        key = _recurring_key(session, task_id)
        return _document_body(session, run(lambda: session.update_recurring(key, updates)))

    @app.delete("/recurring/{task_id}")
    def delete_recurring(task_id: str, session: TaskSession = Depends(require_token)):
        key = _recurring_key(session, task_id)
        return _document_body(session, run(lambda: session.delete_recurring(key)))

    @app.post("/projects", status_code=201)
    def add_project(body: NameRequest, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.add_project(body.name)))

    @app.delete("/projects/{name}")
    def delete_project(name: str, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.delete_project(name)))

    @app.post("/projects/{name}/themes", status_code=201)
    def add_theme(name: str, body: NameRequest, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.add_theme(name, body.name)))

    @app.delete("/projects/{name}/themes/{theme}")
    def delete_theme(name: str, theme: str, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.delete_theme(name, theme)))

    @app.get("/tags")
    def list_tags(session: TaskSession = Depends(get_session)):
        registry = build_tag_registry(session.document.tasks)
        return {
            "tags": [{"name": name, **info} for name, info in sorted(registry.items())],
            "frequent": get_frequent_tags(registry),
        }

    @app.get("/tags/search")
    def find_tags(q: str = "", session: TaskSession = Depends(get_session)):
        return {"tags": search_tags(build_tag_registry(session.document.tasks), q)}

    @app.post("/tags/rename")
    def rename_tag(body: TagRenameRequest, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.rename_tag(body.old_name, body.new_name)))

    @app.delete("/tags/{name}")
    def delete_tag(name: str, session: TaskSession = Depends(require_token)):
        return _document_body(session, run(lambda: session.delete_tag(name)))

    @app.get("/stats/recurring")
    def recurring_stats(session: TaskSession = Depends(get_session)):
        stats = calculate_recurring_stats(session.document.recurring_tasks)
        return {**asdict(stats), "color": get_score_color(stats.percentage)}

    return app


def _match_id(ids: List[Any], raw: str):
    """Path ids are strings; documents written by older clients use integer ids."""
    for item_id in ids:
        if str(item_id) == raw:
            return item_id
    return raw


def _task_key(session: TaskSession, raw: str):
    return _match_id([t.id for t in session.document.tasks], raw)


def _recurring_key(session: TaskSession, raw: str):
    return _match_id([t.id for t in session.document.recurring_tasks], raw)


app = create_app()
