"""
Booking service: resolves couple and vendor by name and writes the booking
together with its calendar event.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any

from .supabase_table_service import SupabaseTableService

logger = logging.getLogger(__name__)


async def create_booking(tables: SupabaseTableService, request: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create one booking from a build_booking_request() result.

    Returns the booking insert result. A failed event insert is logged and
    does not undo or fail the booking.
    """
    couple_name = request["couple_name"]
    vendor_name = request["vendor_name"]

    couple = await tables.find_by_name("couples", couple_name)
    vendor = await tables.find_by_name("vendors", vendor_name)
    if not couple or not vendor:
        return {
            "success": False,
            "error": f"Couple or Vendor not found: {couple_name}, {vendor_name}"
        }

    now = datetime.now(timezone.utc).isoformat()
    booking = await tables.insert("bookings", {
        "couple_id": couple["id"],
        "vendor_id": vendor["id"],
        "status": request["status"],
        "amount": request["amount"],
        "service_type": request["service_type"] or "Unknown",
        "created_at": now,
        "updated_at": now,
    })
    if not booking["success"]:
        return booking

    event = await tables.insert("events", {
        "couple_id": couple["id"],
        "vendor_id": vendor["id"],
        "start_time": request["start_time"],
        "end_time": request["end_time"],
        "type": request["service_type"] or "Event",
        "title": f"{couple_name} - {request['service_type'] or ''}",
        "created_at": now,
        "updated_at": now,
    })
    if not event["success"]:
        logger.warning(f"Booking for {couple_name} created without event: {event.get('error')}")

    return booking
