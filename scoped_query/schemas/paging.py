from pydantic import BaseModel, Field
from typing import Any, List, Optional


class PageMetadata(BaseModel):
    current: int = Field(ge=1)
    limit: int = Field(ge=1)
    records: int = Field(ge=0)
    pages: int = Field(ge=0)


class PagedResult(BaseModel):
    pagination: PageMetadata
    data: List[dict[str, Any]] = []


class WaitlistJoinPayload(BaseModel):
    appointment_id: str
    patient_id: Optional[str] = None
    status: Optional[str] = None
