"""
Supabase REST (PostgREST) service for direct table inserts and lookups.

Venues, service packages and bookings have no edge function; their rows are
written straight into the tables.
"""
import logging
from typing import Dict, Any, Optional
import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class SupabaseTableService:
    """Service for the Supabase REST API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = f"{settings.supabase_url.rstrip('/')}/rest/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, table: str, **kwargs) -> Dict[str, Any]:
        """Send one request and normalize the result like EdgeFunctionService.invoke."""
        url = f"{self.base_url}/{table}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException:
            logger.error(f"Supabase {method} {table} timeout")
            return {
                "success": False,
                "error": "Supabase request timeout"
            }
        except httpx.HTTPError as e:
            logger.error(f"Supabase {method} {table} transport error: {e}")
            return {
                "success": False,
                "error": str(e)
            }

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            # PostgREST errors carry code, message, details and hint
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(f"Supabase {method} {table} failed: {response.status_code} - {message}")
            return {
                "success": False,
                "status_code": response.status_code,
                "error": message or f"Supabase request failed ({response.status_code})"
            }

        return {
            "success": True,
            "status_code": response.status_code,
            "data": data
        }

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it.

        Returns:
            Dictionary with success, status_code and either data (the inserted
            row) or error
        """
        result = await self._request(
            "POST",
            table,
            json=row,
            headers={"Prefer": "return=representation"},
        )
        if result["success"]:
            rows = result.get("data") or []
            result["data"] = rows[0] if isinstance(rows, list) and rows else rows
            logger.info(f"Inserted row into {table}")
        return result

    async def find_by_name(self, table: str, name: str) -> Optional[Dict[str, Any]]:
        """
        Case-insensitive exact name lookup.

        Returns the single matching row ({"id", "name"}), or None when there is
        no match, more than one match or the request failed.
        """
        result = await self._request(
            "GET",
            table,
            params={"select": "id,name", "name": f"ilike.{name}"},
        )
        if not result["success"]:
            return None
        rows = result.get("data") or []
        if len(rows) != 1:
            logger.info(f"Lookup of {name!r} in {table} matched {len(rows)} rows")
            return None
        return rows[0]


# Singleton instance
_table_service = None


def get_supabase_table_service() -> SupabaseTableService:
    """Get the singleton Supabase table service instance."""
    global _table_service
    if _table_service is None:
        _table_service = SupabaseTableService()
    return _table_service
