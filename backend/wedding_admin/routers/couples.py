"""
Couples router for single-record creation.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import get_settings
from ..dependencies import get_current_admin
from ..schemas.auth import AdminUser
from ..schemas.couple import CoupleCreate, RecordCreateResponse
from ..services.edge_function_service import EdgeFunctionService, get_edge_function_service
from ..services.record_service import create_single_record, log_created

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/couples", tags=["couples"])
settings = get_settings()


@router.post("", response_model=RecordCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_couple(
    couple: CoupleCreate,
    current_user: AdminUser = Depends(get_current_admin),
    edge_functions: EdgeFunctionService = Depends(get_edge_function_service),
):
    """
    Create one couple through the create-couple edge function.

    The edge function also sends the welcome email.
    """
    result = await create_single_record(
        edge_functions,
        settings.create_couple_function,
        couple.to_payload(),
        on_success=log_created(current_user.id, f"couple {couple.email}"),
    )

    if not result["success"]:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to add couple: {result.get('error') or 'Failed to add couple'}",
        )

    return RecordCreateResponse(
        message="Couple added and welcome email sent!",
        data=result.get("data"),
    )
