"""
Business logic services.
"""
from .auth_service import AuthService
from .edge_function_service import EdgeFunctionService
from .row_importer import RowImporter, ImportSessionStore
from .supabase_table_service import SupabaseTableService

__all__ = ["AuthService", "EdgeFunctionService", "RowImporter", "ImportSessionStore", "SupabaseTableService"]
