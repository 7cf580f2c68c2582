from datetime import datetime

from pydantic import BaseModel

from app.schemas.common import SuccessResponse


class TransitionRunResponse(SuccessResponse):
    """Counts returned by one run of the automatic transition sweep."""

    organizations_processed: int
    leads_evaluated: int
    transitions_made: int
    substatuses_cleared: int
    timestamp: datetime


class SeedDefaultsResponse(BaseModel):
    created: int
