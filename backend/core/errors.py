from fastapi import status


class TasksmithError(Exception):
    """Base class for errors the API layer maps onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EntityNotFoundError(TasksmithError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity_type: str | None = None, entity_id: int | None = None):
        super().__init__("Entity not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(TasksmithError):
    """Payload does not satisfy the entity kind's descriptor."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(TasksmithError):
    status_code = status.HTTP_409_CONFLICT


class StorageError(TasksmithError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
