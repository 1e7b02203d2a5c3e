"""
Supabase edge function service for creating couples and vendors.
"""
import logging
from typing import Dict, Any, Optional
import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class EdgeFunctionService:
    """Service for invoking Supabase edge functions."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = f"{settings.supabase_url.rstrip('/')}/functions/v1"
        self.api_key = settings.supabase_anon_key
        self.transport = transport

    async def invoke(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload to an edge function.

        Args:
            function_name: Edge function name (e.g. "create-couple")
            payload: JSON body

        Returns:
            Dictionary with:
            - success: True only for a 2xx JSON response without an "error" field
            - status_code: HTTP status, when a response was received
            - data: decoded JSON body on success
            - error: message on failure
        """
        url = f"{self.base_url}/{function_name}"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Edge function {function_name} timeout")
            return {
                "success": False,
                "error": "Edge function timeout"
            }
        except httpx.HTTPError as e:
            logger.error(f"Edge function {function_name} transport error: {e}")
            return {
                "success": False,
                "error": str(e)
            }

        try:
            data = response.json()
        except ValueError:
            logger.error(
                f"Edge function {function_name} returned non-JSON body: "
                f"{response.status_code} - {response.text[:200]}"
            )
            return {
                "success": False,
                "status_code": response.status_code,
                "error": "Invalid response from edge function"
            }

        error = data.get("error") if isinstance(data, dict) else None

        if not response.is_success or error:
            logger.error(f"Edge function {function_name} failed: {response.status_code} - {error}")
            return {
                "success": False,
                "status_code": response.status_code,
                "error": str(error) if error else None
            }

        logger.info(f"Edge function {function_name} succeeded")
        return {
            "success": True,
            "status_code": response.status_code,
            "data": data
        }


# Singleton instance
_edge_function_service = None


def get_edge_function_service() -> EdgeFunctionService:
    """Get the singleton edge function service instance."""
    global _edge_function_service
    if _edge_function_service is None:
        _edge_function_service = EdgeFunctionService()
    return _edge_function_service
