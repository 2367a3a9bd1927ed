from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class IPRecordResponse(BaseModel):
    ip_address: str
    request_count: int
    threat_count: int
    first_seen: Optional[datetime]
    last_seen: Optional[datetime]
    status: str

    class Config:
        from_attributes = True


class IPTrackingResponse(BaseModel):
    ips: list[IPRecordResponse]
