from pydantic import BaseModel
from typing import Optional


class ThreatResponse(BaseModel):
    id: str
    timestamp: str
    source_ip: str
    threat_type: str
    severity: str
    request_method: Optional[str]
    request_path: Optional[str]
    payload: Optional[str]
    user_agent: Optional[str]
    status: str
    rule_id: Optional[int]

    class Config:
        from_attributes = True


class ThreatListResponse(BaseModel):
    threats: list[ThreatResponse]
    total: int
    limit: int
    offset: int
