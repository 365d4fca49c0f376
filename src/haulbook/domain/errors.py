"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or business key does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ReferenceNotFound(NotFoundError):
    """A source document points at a document or master that does not resolve."""


class DuplicateSource(ConflictError):
    """A source document already exists for the same business key or loading slip."""


class InvalidCategory(ValidationError):
    """A cash entry category requires data that is not present."""


class InsufficientWalletBalance(ValidationError):
    """A fuel wallet cannot cover a debit."""


class PostingReconciliationFailure(DomainError):
    """Re-deriving postings failed after the old postings were being removed.

    The surrounding transaction is rolled back, so the previous postings stay
    in place, but the failure is recorded so readers can flag affected
    balances as stale.
    """

    def __init__(self, source_type: str, source_id: str, cause: Exception):
        self.source_type = source_type
        self.source_id = source_id
        self.cause = cause
        super().__init__(
            f"Could not re-derive postings for {source_type} {source_id}: {cause}"
        )


def document_not_found(kind: str, document_id: str) -> str:
    """Return message for a missing document by ID."""
    return f"{kind} {document_id} not found"


def business_key_not_found(kind: str, key: str) -> str:
    """Return message for a missing document or master by business key."""
    return f"{kind} '{key}' not found"


def duplicate_business_key(kind: str, key: str) -> str:
    """Return message for a business key that is already taken."""
    return f"{kind} '{key}' already exists"


def duplicate_for_slip(kind: str, existing_number: str, slip_number: str) -> str:
    """Return message when a memo or bill already exists for a loading slip."""
    return f"{kind} {existing_number} already exists for loading slip {slip_number}"


def category_requires(category: str, field: str) -> str:
    """Return message when a category is missing a required field."""
    return f"Category '{category}' requires {field}"


def insufficient_wallet_balance(wallet_name: str, needed, available) -> str:
    """Return message when a wallet cannot cover a debit."""
    return (
        f"Insufficient balance in fuel wallet '{wallet_name}': "
        f"needed {needed}, available {available}"
    )


def delete_blocked(kind: str, key: str, dependents: dict[str, int]) -> str:
    """Return message when a document has dependents that must go first."""
    parts = []
    for name, count in dependents.items():
        if count > 0:
            parts.append(f"{count} {name}{'s' if count != 1 else ''}")
    return (
        f"Cannot delete {kind} {key}: it has {', '.join(parts)}. "
        "Please delete them first."
    )


def renumber_blocked(kind: str, key: str) -> str:
    """Return message when a referenced document's business key would change."""
    return (
        f"Cannot renumber {kind} {key}: cash entries refer to it by number. "
        "Please delete them first."
    )
