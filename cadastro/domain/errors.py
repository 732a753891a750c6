"""
Error kinds raised by the client services and stores.

Every error carries a short ``code`` so that outer layers (router, console)
can map it without matching on classes one by one.
"""

from __future__ import annotations


class ClientError(Exception):
    """Base class for client registry errors."""

    code = "client_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientValidationError(ClientError):
    """Raised when a field value does not satisfy the record rules."""

    code = "invalid"


class MissingFieldError(ClientValidationError):
    code = "missing_field"

    def __init__(self, field: str):
        super().__init__(f"Campo obrigatorio: {field}")
        self.field = field


class InvalidNameError(ClientValidationError):
    code = "invalid_name"


class InvalidTaxIdError(ClientValidationError):
    code = "invalid_tax_id"


class InvalidEmailError(ClientValidationError):
    code = "invalid_email"


class InvalidAddressError(ClientValidationError):
    code = "invalid_address"


class UnknownFieldError(ClientValidationError):
    code = "unknown_field"

    def __init__(self, fields):
        names = ", ".join(sorted(fields))
        super().__init__(f"Campos nao permitidos: {names}")
        self.fields = tuple(sorted(fields))


class DuplicateTaxIdError(ClientError):
    """Raised when another record already holds the canonical CPF."""

    code = "duplicate_tax_id"

    def __init__(self, tax_id: str, message: str | None = None):
        super().__init__(message or f"CPF ja cadastrado: {tax_id}")
        self.tax_id = tax_id


class ClientNotFoundError(ClientError):
    code = "not_found"


class AlreadyActiveError(ClientError):
    code = "already_active"


class AlreadyInactiveError(ClientError):
    code = "already_inactive"


class StoreUnavailableError(ClientError):
    """Raised when the file or the database cannot be reached."""

    code = "store_unavailable"


class ConfirmationRequiredError(ClientError):
    """Raised when a destructive bulk operation is called without confirmation."""

    code = "confirmation_required"
