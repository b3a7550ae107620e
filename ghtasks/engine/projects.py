"""Project and theme taxonomy management.

Each function returns a new Document. Removing a project or theme also removes
every reference to it from tasks, keeping the document's referential invariant.
"""

from ghtasks.models.document import Document


def add_project(document: Document, name: str) -> Document:
    """Add a project with an empty theme list. Blank or existing names are a no-op."""
    name = (name or "").strip()
    if not name or name in document.projects:
        return document
    return document.model_copy(
        update={
            "projects": [*document.projects, name],
            "themes": {**document.themes, name: []},
        }
    )


def delete_project(document: Document, name: str) -> Document:
    """Remove a project, its themes, and every task/recurring-task reference to it."""
    if name not in document.projects:
        return document
    themes = {project: list(values) for project, values in document.themes.items() if project != name}
    tasks = [
        t.model_copy(update={"project": None, "themes": []}) if t.project == name else t
        for t in document.tasks
    ]
    recurring = [
        t.model_copy(update={"project": None}) if t.project == name else t
        for t in document.recurring_tasks
    ]
    return document.model_copy(
        update={
            "projects": [p for p in document.projects if p != name],
            "themes": themes,
            "tasks": tasks,
            "recurring_tasks": recurring,
        }
    )


def add_theme(document: Document, project: str, theme: str) -> Document:
    theme = (theme or "").strip()
    if not theme:
        return document
    if project not in document.projects:
        raise ValueError(f"Unknown project: {project}")
    current = document.themes.get(project, [])
    if theme in current:
        return document
    return document.model_copy(update={"themes": {**document.themes, project: [*current, theme]}})


def delete_theme(document: Document, project: str, theme: str) -> Document:
    """Remove a theme from a project and from every task tagged with it."""
    current = document.themes.get(project, [])
    if theme not in current:
        return document
    tasks = [
        t.model_copy(update={"themes": [th for th in t.themes if th != theme]})
        if t.project == project and theme in t.themes else t
        for t in document.tasks
    ]
    return document.model_copy(
        update={
            "themes": {**document.themes, project: [th for th in current if th != theme]},
            "tasks": tasks,
        }
    )
