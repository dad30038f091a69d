from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class DashboardSummaryModel(BaseModel):
    shop: str
    totalRules: int
    deliverableCount: int
    blockedCount: int
    # newest created_at, not updated_at
    lastUpdatedAt: Optional[datetime] = None
