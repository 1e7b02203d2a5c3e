"""
Single-record create: one validated record, one edge function call.
"""
import logging
from typing import Dict, Any, Callable, Optional

from .edge_function_service import EdgeFunctionService

logger = logging.getLogger(__name__)


async def create_single_record(
    creator: EdgeFunctionService,
    function_name: str,
    payload: Dict[str, Any],
    on_success: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Submit exactly one creation request.

    The payload must already be validated. on_success is called with the
    edge function result only when the record was created.
    """
    result = await creator.invoke(function_name, payload)

    if result.get("success"):
        logger.info(f"Created record via {function_name}")
        if on_success is not None:
            on_success(result)
    else:
        logger.error(f"Error creating record via {function_name}: {result.get('error')}")

    return result


def log_created(user_id: str, description: str) -> Callable[[Dict[str, Any]], None]:
    """Completion callback that writes an audit line for the created record."""
    def on_success(result: Dict[str, Any]) -> None:
        data = result.get("data")
        record_id = data.get("id") if isinstance(data, dict) else None
        logger.info(f"User {user_id} added {description} (id={record_id})")
    return on_success
