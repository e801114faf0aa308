"""Barcode scanning against OpenFoodFacts with allergen checks."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from allerwise.adapters.openfoodfacts_client import ProductClient
from allerwise.domain.scans import ProductScanResult, ScanHistoryEntry
from allerwise.errors import InvalidInputError, NotFoundError
from allerwise.services.allergen_matcher import (
    failed_scan_result,
    scan_result_from_product,
)
from allerwise.services.cache import Cache
from allerwise.services.users import UserService

PRODUCT_NOT_FOUND_MESSAGE = (
    "Product not found in database. "
    "Try scanning again or enter the barcode manually."
)
LOOKUP_FAILED_MESSAGE = "Couldn't reach the product database. Please try again."

_logger = logging.getLogger(__name__)


class ScanHistoryRepository(Protocol):
    """Persistence interface for scan history."""

    def add_entry(
        self, user_id: UUID, scan_result: ProductScanResult, created_at: datetime
    ) -> ScanHistoryEntry:
        """Store a scan result and return the history entry."""

    def list_entries(self, user_id: UUID, limit: int) -> list[ScanHistoryEntry]:
        """Return the most recent entries, newest first."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete one history entry."""

    def clear(self, user_id: UUID) -> None:
        """Delete every entry for a user."""


@dataclass
class ProductScanService:
    """Looks up scanned barcodes and checks them against the user's profile."""

    product_client: ProductClient
    history_repository: ScanHistoryRepository
    user_service: UserService
    cache: Cache
    product_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def scan_barcode(self, user_id: UUID, barcode: str) -> ProductScanResult:
        """Scan a barcode for a user and record it in their history."""
        code = barcode.strip()
        if not code:
            raise InvalidInputError("Please enter a valid barcode")

        user = await self.user_service.load_user(user_id)
        if user is None:
            raise NotFoundError("Please log in to scan products")
        if not user.allergies:
            raise InvalidInputError(
                "Please set up your allergen profile first in Settings"
            )

        try:
            product = await self._lookup_product(code)
        except Exception:
            _logger.exception("Product lookup failed for barcode %s", code)
            result = failed_scan_result(code, LOOKUP_FAILED_MESSAGE)
        else:
            if product is None:
                result = failed_scan_result(code, PRODUCT_NOT_FOUND_MESSAGE)
            else:
                result = scan_result_from_product(code, product, user.allergies)
                _logger.info(
                    "Scanned %s: verdict=%s matched=%s",
                    code,
                    result.verdict.value,
                    result.matched_allergens,
                )

        self._save_to_history(user.id, result)
        return result

    def list_history(self, user_id: UUID, limit: int = 50) -> list[ScanHistoryEntry]:
        """Return recent scans for a user, newest first."""
        return self.history_repository.list_entries(user_id, limit)

    def delete_scan(self, entry_id: UUID) -> None:
        """Remove a single scan from history."""
        self.history_repository.delete_entry(entry_id)

    def clear_history(self, user_id: UUID) -> None:
        """Remove all scans for a user."""
        self.history_repository.clear(user_id)

    async def _lookup_product(self, barcode: str) -> dict[str, object] | None:
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            return cached

        attempt = 0
        while True:
            try:
                product = await self.product_client.fetch_product(barcode)
                break
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Product lookup %s failed (attempt %s/%s): %s",
                    barcode,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)

        if product is not None:
            self.cache.set(cache_key, product, ttl_seconds=self.product_ttl_seconds)
        return product

    def _save_to_history(self, user_id: UUID, result: ProductScanResult) -> None:
        try:
            self.history_repository.add_entry(
                user_id, result, created_at=datetime.now(tz=UTC)
            )
        except Exception:
            _logger.exception("Failed to save scan %s to history", result.barcode)
