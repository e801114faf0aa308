"""Tests for the product scan service."""

import asyncio
from uuid import uuid4

import pytest

from allerwise.domain.allergens import AllergenVerdict
from allerwise.errors import InvalidInputError, NotFoundError
from allerwise.services.product_scan import (
    LOOKUP_FAILED_MESSAGE,
    PRODUCT_NOT_FOUND_MESSAGE,
    ProductScanService,
)
from tests.conftest import (
    FakeProductClient,
    InMemoryScanHistoryRepository,
    InMemoryUserRepository,
)

PEANUT_BAR = {
    "product_name": "Peanut Bar",
    "ingredients_text": "peanuts, sugar",
    "allergens_tags": ["en:peanuts"],
    "traces_tags": [],
}


def test_scan_risky_product_is_saved_to_history(
    product_scan_service: ProductScanService,
    product_client: FakeProductClient,
    scan_history_repository: InMemoryScanHistoryRepository,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Milk", "Peanuts"])
    product_client.products["123"] = PEANUT_BAR

    result = asyncio.run(product_scan_service.scan_barcode(user.id, " 123 "))

    assert result.verdict is AllergenVerdict.RISKY
    assert result.matched_allergens == ["Peanuts"]
    assert result.barcode == "123"
    entries = scan_history_repository.entries
    assert len(entries) == 1
    assert entries[0].user_id == user.id


def test_unknown_barcode_returns_unknown_verdict(
    product_scan_service: ProductScanService,
    scan_history_repository: InMemoryScanHistoryRepository,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Fish"])

    result = asyncio.run(product_scan_service.scan_barcode(user.id, "999"))

    assert result.verdict is AllergenVerdict.UNKNOWN
    assert not result.is_successful
    assert result.error_message == PRODUCT_NOT_FOUND_MESSAGE
    assert len(scan_history_repository.entries) == 1


def test_lookup_failure_retries_then_degrades(
    product_scan_service: ProductScanService,
    product_client: FakeProductClient,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Fish"])
    product_client.errors = [RuntimeError("timeout"), RuntimeError("timeout")]

    result = asyncio.run(product_scan_service.scan_barcode(user.id, "123"))

    assert result.verdict is AllergenVerdict.UNKNOWN
    assert result.error_message == LOOKUP_FAILED_MESSAGE
    assert product_client.calls == ["123", "123"]


def test_lookup_recovers_on_retry(
    product_scan_service: ProductScanService,
    product_client: FakeProductClient,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Fish"])
    product_client.errors = [RuntimeError("timeout")]
    product_client.products["123"] = PEANUT_BAR

    result = asyncio.run(product_scan_service.scan_barcode(user.id, "123"))

    assert result.verdict is AllergenVerdict.SAFE


def test_found_products_are_cached(
    product_scan_service: ProductScanService,
    product_client: FakeProductClient,
    scan_history_repository: InMemoryScanHistoryRepository,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Peanuts"])
    product_client.products["123"] = PEANUT_BAR

    asyncio.run(product_scan_service.scan_barcode(user.id, "123"))
    asyncio.run(product_scan_service.scan_barcode(user.id, "123"))

    assert product_client.calls == ["123"]
    assert len(scan_history_repository.entries) == 2


def test_scan_rejects_empty_barcode(product_scan_service: ProductScanService) -> None:
    with pytest.raises(InvalidInputError):
        asyncio.run(product_scan_service.scan_barcode(uuid4(), "   "))


def test_scan_requires_known_user(product_scan_service: ProductScanService) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(product_scan_service.scan_barcode(uuid4(), "123"))


def test_scan_requires_allergen_profile(
    product_scan_service: ProductScanService,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add([])

    with pytest.raises(InvalidInputError):
        asyncio.run(product_scan_service.scan_barcode(user.id, "123"))


def test_history_failure_does_not_fail_scan(
    product_scan_service: ProductScanService,
    product_client: FakeProductClient,
    scan_history_repository: InMemoryScanHistoryRepository,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Peanuts"])
    product_client.products["123"] = PEANUT_BAR
    scan_history_repository.fail = True

    result = asyncio.run(product_scan_service.scan_barcode(user.id, "123"))

    assert result.verdict is AllergenVerdict.RISKY
    assert scan_history_repository.entries == []


def test_history_list_delete_and_clear(
    product_scan_service: ProductScanService,
    user_repository: InMemoryUserRepository,
) -> None:
    user = user_repository.add(["Fish"])
    for barcode in ("1", "2", "3"):
        asyncio.run(product_scan_service.scan_barcode(user.id, barcode))

    entries = product_scan_service.list_history(user.id, limit=2)
    assert len(entries) == 2

    product_scan_service.delete_scan(entries[0].id)
    assert len(product_scan_service.list_history(user.id)) == 2

    product_scan_service.clear_history(user.id)
    assert product_scan_service.list_history(user.id) == []
