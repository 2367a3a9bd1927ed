from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from ipsguard.api.dependencies import get_database
from ipsguard.models.ip_record import IPStatus
from ipsguard.schemas.ip_record import IPRecordResponse, IPTrackingResponse
from ipsguard.security.ip_tracker import IPReputationTracker

router = APIRouter(prefix="/admin/ip-tracking", tags=["ip-tracking"])

tracker = IPReputationTracker()


@router.get("", response_model=IPTrackingResponse)
async def get_tracked_ips(
    status_filter: Optional[IPStatus] = Query(None, alias="status"),
    db: Session = Depends(get_database)
):
    records = tracker.list_records(db, status_filter.value if status_filter else None)
    return IPTrackingResponse(ips=records)


@router.get("/{ip_address}", response_model=IPRecordResponse)
async def get_tracked_ip(
    ip_address: str,
    db: Session = Depends(get_database)
):
    record = tracker.get(db, ip_address)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="IP address not tracked"
        )
    return record
