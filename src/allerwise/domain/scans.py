"""Domain models for barcode product scans."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from allerwise.domain.allergens import AllergenVerdict


@dataclass(frozen=True)
class ProductScanResult:
    """Immutable snapshot of one barcode lookup checked against a profile."""

    barcode: str
    is_successful: bool
    verdict: AllergenVerdict
    scanned_at: datetime
    product_name: str | None = None
    image_url: str | None = None
    ingredients: list[str] = field(default_factory=list)
    allergens: list[str] = field(default_factory=list)
    traces: list[str] = field(default_factory=list)
    matched_allergens: list[str] = field(default_factory=list)
    error_message: str | None = None

    def to_document(self) -> dict[str, object]:
        """Serialise the result for storage."""
        return {
            "barcode": self.barcode,
            "product_name": self.product_name,
            "image_url": self.image_url,
            "ingredients": list(self.ingredients),
            "allergens": list(self.allergens),
            "traces": list(self.traces),
            "is_successful": self.is_successful,
            "error_message": self.error_message,
            "verdict": self.verdict.value,
            "matched_allergens": list(self.matched_allergens),
            "scanned_at": self.scanned_at.isoformat(),
        }

    @classmethod
    def from_document(cls, data: dict[str, object]) -> "ProductScanResult":
        """Rebuild a result from a stored document."""
        return cls(
            barcode=str(data["barcode"]),
            product_name=data.get("product_name"),
            image_url=data.get("image_url"),
            ingredients=list(data.get("ingredients") or []),
            allergens=list(data.get("allergens") or []),
            traces=list(data.get("traces") or []),
            is_successful=bool(data.get("is_successful", False)),
            error_message=data.get("error_message"),
            verdict=AllergenVerdict.from_string(data.get("verdict")),
            matched_allergens=list(data.get("matched_allergens") or []),
            scanned_at=datetime.fromisoformat(str(data["scanned_at"])),
        )


@dataclass(frozen=True)
class ScanHistoryEntry:
    """A scan result stored in a user's history."""

    id: UUID
    user_id: UUID
    scan_result: ProductScanResult
    created_at: datetime
