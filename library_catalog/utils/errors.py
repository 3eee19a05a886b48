"""Custom exception hierarchy for the library catalogue.

All application exceptions inherit from :class:`LibraryCatalogError`, which
carries an optional ``entity_name`` so error handlers can tell which part of
the catalogue (e.g. "author", "book", "report") the failure concerns.

The hierarchy is organized by the layer that raises it:

    LibraryCatalogError  (base -- catch-all for any catalogue error)
    +-- NotFoundError                (unknown entity id / empty search)
    |   +-- TaskNotFoundError        (unknown report task id)
    +-- AlreadyExistsError           (unique-name constraint)
    +-- InvalidReferenceError        (association to a missing entity)
    +-- InvalidTaskTransitionError   (backward or post-terminal transition)
    +-- CapacityInvariantViolation   (internal: cache exceeded its bound)
    +-- ReportGenerationError        (worker failure, stored on the task)
    +-- ConfigurationError           (startup / invalid config)

The HTTP middleware maps these to status codes, so route handlers can raise
them freely without building responses themselves.
"""


class LibraryCatalogError(Exception):
    """Base exception for all library catalogue errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``entity_name`` identifying the kind of entity involved.  The
    ``__str__`` method prefixes the entity name in brackets for structured
    log output, e.g. ``[author] Author not found with id: 7``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        entity_name: str | None = None,
    ) -> None:
        self._message = message
        self._entity_name = entity_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def entity_name(self) -> str | None:
        return self._entity_name

    def __str__(self) -> str:
        if self._entity_name:
            return f"[{self._entity_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Lookup / persistence errors
# ---------------------------------------------------------------------------

class NotFoundError(LibraryCatalogError):
    """Raised when an entity id is unknown or a search matched nothing."""

    def __init__(
        self,
        message: str = "Entity not found",
        entity_name: str | None = None,
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)


class TaskNotFoundError(NotFoundError):
    """Raised when a report task identifier was never registered."""

    def __init__(self, task_id: str) -> None:
        self._task_id = task_id
        super().__init__(
            message=f"Log generation task not found with ID: {task_id}",
            entity_name="report",
        )

    @property
    def task_id(self) -> str:
        return self._task_id


class AlreadyExistsError(LibraryCatalogError):
    """Raised when a create/update would violate a unique-name constraint."""

    def __init__(
        self,
        message: str = "Entity already exists",
        entity_name: str | None = None,
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)


class InvalidReferenceError(LibraryCatalogError):
    """Raised when an association points at ids that do not exist.

    Carries the offending ids so the API can echo them back.
    """

    def __init__(
        self,
        message: str = "Referenced entities not found",
        entity_name: str | None = None,
        missing_ids: list[int] | None = None,
    ) -> None:
        self._missing_ids = list(missing_ids or [])
        super().__init__(message=message, entity_name=entity_name)

    @property
    def missing_ids(self) -> list[int]:
        return list(self._missing_ids)


# ---------------------------------------------------------------------------
# Report task errors
# ---------------------------------------------------------------------------

class InvalidTaskTransitionError(LibraryCatalogError):
    """Raised when a status change would move a task backwards or out of a terminal state."""

    def __init__(
        self,
        message: str = "Invalid task status transition",
        entity_name: str | None = "report",
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)


class ReportGenerationError(LibraryCatalogError):
    """Describes why a report task failed.

    The worker never lets this escape; its message is stored on the task's
    FAILED record and surfaced through status polling.
    """

    def __init__(
        self,
        message: str = "Report generation failed",
        entity_name: str | None = "report",
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)


# ---------------------------------------------------------------------------
# Internal / configuration errors
# ---------------------------------------------------------------------------

class CapacityInvariantViolation(LibraryCatalogError):
    """Raised if a bounded cache ever holds more entries than its capacity.

    Internal only: a correct cache evicts before inserting, so this
    signals a defect rather than a runtime condition.
    """

    def __init__(
        self,
        message: str = "Cache capacity exceeded",
        entity_name: str | None = None,
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)


class ConfigurationError(LibraryCatalogError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        entity_name: str | None = None,
    ) -> None:
        super().__init__(message=message, entity_name=entity_name)
