"""
Pydantic schemas for authenticated operators.
"""
from typing import Optional
from pydantic import BaseModel


class AdminUser(BaseModel):
    """Operator resolved from a verified Supabase token."""
    id: str
    email: Optional[str] = None
