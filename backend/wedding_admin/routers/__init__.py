"""
API routers.
"""
from .csv_import import router as csv_import_router
from .couples import router as couples_router
from .vendors import router as vendors_router

__all__ = ["csv_import_router", "couples_router", "vendors_router"]
