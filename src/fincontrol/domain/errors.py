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


class ImportRejectedError(ValidationError):
    """A statement import was rejected before anything was persisted.

    Raised for request-level validation failures (percentages, missing
    category path, CSV configuration) and for unreadable statement files.
    """


class DuplicateImportError(ImportRejectedError):
    """Duplicate entry found while the duplicate strategy is FAIL."""


class ImportCommitError(DomainError):
    """Persisting an already validated import failed and was rolled back."""


def responsible_not_found(responsible_id: int) -> str:
    """Return message for missing responsible party."""
    return f"Responsible {responsible_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def subcategory_not_found(subcategory_id: int) -> str:
    """Return message for missing subcategory by ID."""
    return f"Subcategory {subcategory_id} not found"


def source_entity_not_found(source_entity_id: int) -> str:
    """Return message for missing source entity by ID."""
    return f"Source entity {source_entity_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def percentages_must_total_100(total) -> str:
    """Return message for a responsibility split that is not 100%."""
    return f"The sum of responsibility percentages must total 100% (got {total}%)"


def duplicate_entry(line_number: int, reference: str) -> str:
    """Return message for a duplicate rejected by the FAIL strategy."""
    return f"Line {line_number}: entry '{reference}' duplicates an existing transaction"
