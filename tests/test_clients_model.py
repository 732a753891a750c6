from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cadastro.domain.clients import (
    Address,
    ClientRecord,
    clean_address,
    clean_email,
    clean_name,
    clean_phone,
    clean_tax_id,
)
from cadastro.domain.errors import (
    ClientValidationError,
    InvalidAddressError,
    InvalidEmailError,
    InvalidNameError,
    InvalidTaxIdError,
    MissingFieldError,
)


def test_clean_name_trims_and_requires_two_chars():
    assert clean_name("  Ana Costa ") == "Ana Costa"
    with pytest.raises(MissingFieldError) as exc:
        clean_name("   ")
    assert exc.value.field == "name"
    with pytest.raises(InvalidNameError):
        clean_name(" A ")


def test_clean_tax_id_returns_canonical_form():
    assert clean_tax_id("12345678909") == "123.456.789-09"
    with pytest.raises(MissingFieldError):
        clean_tax_id("")
    with pytest.raises(InvalidTaxIdError):
        clean_tax_id("555.666.777.88")


def test_clean_email():
    assert clean_email("  Ana@Example.COM ") == "ana@example.com"
    assert clean_email("") is None
    assert clean_email(None) is None
    for bad in ("ana", "ana@example", "ana @example.com", "@example.com"):
        with pytest.raises(InvalidEmailError):
            clean_email(bad)


def test_clean_phone():
    assert clean_phone(" (11) 99999-0000 ") == "(11) 99999-0000"
    assert clean_phone("  ") is None


def test_address_merge_keeps_untouched_parts():
    current = Address(street="Rua A", number="10", city="Recife", state="PE")
    merged = clean_address({"number": "20", "district": "Boa Vista"}, current)
    assert merged == Address(street="Rua A", number="20", district="Boa Vista", city="Recife", state="PE")


def test_address_rejects_unknown_keys_and_clears_on_empty():
    with pytest.raises(InvalidAddressError):
        clean_address({"planet": "Mars"})
    with pytest.raises(InvalidAddressError):
        clean_address("Rua A, 10")
    assert clean_address("") is None
    assert clean_address({"city": "  "}) is None


def test_record_dict_round_trip_uses_null_for_absent_fields():
    record = ClientRecord(
        id=7,
        name="Ana Costa",
        tax_id="123.456.789-09",
        registered_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        address=Address(city="Recife", postal_code="50000-000"),
    )
    data = record.to_dict()
    assert data["email"] is None
    assert data["updated_at"] is None
    assert data["registered_at"] == "2024-01-02T03:04:05+00:00"
    assert data["address"]["city"] == "Recife"
    assert data["address"]["street"] is None
    assert ClientRecord.from_dict(data) == record


@pytest.mark.parametrize(
    "rule, value, error",
    [
        (clean_name, 123, InvalidNameError),
        (clean_tax_id, 12345678909, InvalidTaxIdError),
        (clean_email, 5, InvalidEmailError),
        (clean_email, ["ana@example.com"], InvalidEmailError),
        (clean_phone, 81999990000, ClientValidationError),
    ],
)
def test_field_rules_reject_non_text_values(rule, value, error):
    with pytest.raises(error):
        rule(value)
