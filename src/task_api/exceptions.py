"""Errors raised by the task repository."""


class TaskNotFoundError(LookupError):
    """
    No task with the given id is visible to the requesting owner.

    Raised both when the id does not exist and when it belongs to another
    owner; the message is identical in both cases.
    """

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f'Task with ID "{task_id}" not found')
