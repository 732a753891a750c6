"""
Client record model and field-level rules.

The same rules run for create and update so that both backends store
records in one shape: trimmed name, canonical CPF, lower-cased e-mail,
optional phone and address with ``None`` for absent values.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from cadastro.core.utils import format_timestamp, parse_timestamp
from cadastro.domain import cpf
from cadastro.domain.errors import (
    ClientValidationError,
    InvalidAddressError,
    InvalidEmailError,
    InvalidNameError,
    InvalidTaxIdError,
    MissingFieldError,
)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
NAME_MIN_LENGTH = 2

# fields accepted by ClientService.update
PATCHABLE_FIELDS = ("name", "tax_id", "email", "phone", "address")


@dataclass(frozen=True)
class Address:
    street: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    @classmethod
    def keys(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Address":
        unknown = set(data) - set(cls.keys())
        if unknown:
            raise InvalidAddressError(f"Campos de endereco desconhecidos: {', '.join(sorted(unknown))}")
        return cls(**{key: _clean_address_part(key, value) for key, value in data.items()})

    def merged(self, data: Mapping[str, Any]) -> "Address":
        """Return a copy with the given parts replaced; other parts are kept."""
        patch = Address.from_mapping(data)
        return replace(self, **{key: getattr(patch, key) for key in data})

    def is_empty(self) -> bool:
        return all(getattr(self, key) is None for key in self.keys())

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.keys()}


def _clean_address_part(key: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise InvalidAddressError(f"Valor invalido para {key}")
    text = str(value).strip()
    return text or None


@dataclass
class ClientRecord:
    """A registered client. ``id`` is None until the store assigns one."""

    name: str
    tax_id: str
    registered_at: datetime
    id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    active: bool = True
    updated_at: Optional[datetime] = None
    deactivated_at: Optional[datetime] = field(default=None)

    def copy(self, **changes) -> "ClientRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tax_id": self.tax_id,
            "email": self.email,
            "phone": self.phone,
            "address": self.address.to_dict() if self.address else None,
            "active": self.active,
            "registered_at": format_timestamp(self.registered_at),
            "updated_at": format_timestamp(self.updated_at),
            "deactivated_at": format_timestamp(self.deactivated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientRecord":
        address = data.get("address")
        raw_id = data.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            name=data.get("name") or "",
            tax_id=data.get("tax_id") or "",
            email=data.get("email"),
            phone=data.get("phone"),
            address=clean_address(address),
            active=bool(data.get("active", True)),
            registered_at=parse_timestamp(data.get("registered_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            deactivated_at=parse_timestamp(data.get("deactivated_at")),
        )


# -------------------------- field rules --------------------------
def _text(value: Any, error: type, label: str) -> str:
    """Trimmed text of a field; ``None`` reads as blank, other non-strings raise ``error``."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise error(f"{label} deve ser texto")
    return value.strip()


def require_name(value: Optional[str]) -> str:
    name = _text(value, InvalidNameError, "Nome")
    if not name:
        raise MissingFieldError("name")
    return name


def clean_name(value: Optional[str]) -> str:
    name = require_name(value)
    if len(name) < NAME_MIN_LENGTH:
        raise InvalidNameError(f"Nome deve ter pelo menos {NAME_MIN_LENGTH} caracteres")
    return name


def require_tax_id(value: Optional[str]) -> str:
    raw = _text(value, InvalidTaxIdError, "CPF")
    if not raw:
        raise MissingFieldError("tax_id")
    return raw


def clean_tax_id(value: Optional[str]) -> str:
    """Validate a CPF and return its canonical form."""
    raw = require_tax_id(value)
    if not cpf.is_valid(raw):
        raise InvalidTaxIdError(f"CPF invalido: {raw}")
    return cpf.canonicalize(raw)


def clean_email(value: Optional[str]) -> Optional[str]:
    email = _text(value, InvalidEmailError, "Email").lower()
    if not email:
        return None
    if not EMAIL_PATTERN.fullmatch(email):
        raise InvalidEmailError(f"Email invalido: {email}")
    return email


def clean_phone(value: Optional[str]) -> Optional[str]:
    return _text(value, ClientValidationError, "Telefone") or None


def clean_address(value: Any, current: Optional[Address] = None) -> Optional[Address]:
    """
    Build the address to store. Mappings are merged over ``current``;
    empty values clear the address.
    """
    if value is None or value == "":
        return None
    if isinstance(value, Address):
        address = value
    elif isinstance(value, Mapping):
        address = current.merged(value) if current else Address.from_mapping(value)
    else:
        raise InvalidAddressError("Endereco deve ser um objeto")
    return None if address.is_empty() else address
