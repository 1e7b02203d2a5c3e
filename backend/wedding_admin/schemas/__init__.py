"""
Pydantic schemas for request/response validation.
"""
from .auth import AdminUser
from .couple import CoupleCreate, RecordCreateResponse
from .vendor import VendorCreate
from .csv_import import ImportSessionResponse, ImportOutcomeResponse, ImportHistoryResponse

__all__ = [
    "AdminUser",
    "CoupleCreate", "RecordCreateResponse",
    "VendorCreate",
    "ImportSessionResponse", "ImportOutcomeResponse", "ImportHistoryResponse",
]
