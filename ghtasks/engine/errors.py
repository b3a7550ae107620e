"""Errors raised by in-memory task operations."""


class TaskNotFoundError(KeyError):
    """No task, recurring task or subtask with the given id."""

    def __init__(self, item_id):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"No item with id {self.item_id!r}"


class SaveInProgressError(RuntimeError):
    """A save was requested while another save of the same document is still running."""
