"""Supabase-backed scan history repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from allerwise.domain.scans import ProductScanResult, ScanHistoryEntry
from allerwise.services.product_scan import ScanHistoryRepository


@dataclass
class SupabaseScanHistoryRepository(ScanHistoryRepository):
    """Stores scan results as JSON documents per user."""

    client: Client

    def add_entry(
        self, user_id: UUID, scan_result: ProductScanResult, created_at: datetime
    ) -> ScanHistoryEntry:
        response = (
            self.client.table("scan_history")
            .insert(
                {
                    "user_id": str(user_id),
                    "barcode": scan_result.barcode,
                    "scan_result": scan_result.to_document(),
                    "created_at": created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save scan history entry")
        return _row_to_entry(response.data[0])

    def list_entries(self, user_id: UUID, limit: int) -> list[ScanHistoryEntry]:
        response = (
            self.client.table("scan_history")
            .select("id, user_id, scan_result, created_at")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_row_to_entry(row) for row in response.data or []]

    def delete_entry(self, entry_id: UUID) -> None:
        self.client.table("scan_history").delete().eq("id", str(entry_id)).execute()

    def clear(self, user_id: UUID) -> None:
        self.client.table("scan_history").delete().eq(
            "user_id", str(user_id)
        ).execute()


def _row_to_entry(row: dict[str, object]) -> ScanHistoryEntry:
    return ScanHistoryEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        scan_result=ProductScanResult.from_document(row["scan_result"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
