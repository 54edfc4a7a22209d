"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class RemoteStoreError(DomainError):
    """A call to the remote store failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction '{transaction_id}' not found"


def recurrence_not_found(recurrence_id: str) -> str:
    """Return message for missing recurrence."""
    return f"Recurrence '{recurrence_id}' not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category."""
    return f"Category '{category_id}' not found"


def category_delete_blocked(category_id: str, transaction_count: int) -> str:
    """Return message when a category is still referenced by transactions."""
    return (
        f"Cannot delete category '{category_id}': it is used by "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please recategorize them first."
    )


def nothing_to_import() -> str:
    """Return message when an import has no new transactions."""
    return "No new transactions to import"


def import_blocked(errors: list[str]) -> str:
    """Return message when a preview carries blocking errors."""
    return f"Import blocked by {len(errors)} error{'s' if len(errors) != 1 else ''}: {'; '.join(errors)}"


def recurrence_exists(recurrence_id: str) -> str:
    """Return message for a duplicate recurrence id."""
    return f"Recurrence '{recurrence_id}' already exists"


def category_exists(category_id: str) -> str:
    """Return message for a duplicate category id."""
    return f"Category '{category_id}' already exists"
