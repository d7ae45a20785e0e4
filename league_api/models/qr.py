"""
Pydantic models for QR attendance scanning.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class QrScanRequest(BaseModel):
    """Request model for registering attendance from a scanned QR code."""
    qr_data: Optional[Any] = Field(None, description="Scanned text, or an already-parsed JSON payload")
    game_id: Optional[int] = None
