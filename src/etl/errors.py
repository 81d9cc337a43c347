"""ETL exception taxonomy.

Record-level problems are recovered where they occur (skip + log).
File-level and run-level problems propagate as the errors below.
"""


class ETLError(Exception):
    """Base exception for ETL errors."""

    pass


class StructuralParseError(ETLError):
    """Malformed or unreadable XML, or no discoverable row element.

    Fatal to one file only: the orchestrator logs it and the file
    contributes no records.
    """

    def __init__(self, path: object, message: str) -> None:
        """Initialize with offending file and reason.

        Args:
            path: Source file path.
            message: Human readable reason.
        """
        self.path = path
        super().__init__(f"{path}: {message}")


class ValidationRejection(ETLError):
    """A candidate record failed a quality rule.

    Quality gates never raise this. It describes a rejection so it can be
    formatted into the quality log.
    """

    def __init__(
        self,
        entity: str,
        reason: str,
        field_name: str = "value",
        value: object = None,
    ) -> None:
        """Initialize rejection details.

        Args:
            entity: Entity kind (movie, star, ...).
            reason: Description of the failed rule.
            field_name: Field blamed for the rejection.
            value: Offending value.
        """
        self.entity = entity
        self.reason = reason
        self.field_name = field_name
        self.value = value
        super().__init__(f"[{entity}] {field_name}: {reason}")


class PersistenceConflict(ETLError):
    """A single row write violated a constraint or raised a database error."""

    def __init__(self, table: str, key: object, cause: Exception) -> None:
        """Initialize with failing row identity.

        Args:
            table: Target table name.
            key: Row identity (primary key value or tuple).
            cause: Underlying database exception.
        """
        self.table = table
        self.key = key
        self.cause = cause
        super().__init__(f"{table} {key!r}: {type(cause).__name__}: {cause}")


class ConfigurationError(ETLError):
    """Missing or invalid configuration: connection, driver, input directory."""

    pass
