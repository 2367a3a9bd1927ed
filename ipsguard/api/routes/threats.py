from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy import desc, func
from typing import Optional
from ipsguard.api.dependencies import get_database
from ipsguard.models.rule import Severity
from ipsguard.models.threat import Threat
from ipsguard.schemas.threat import ThreatResponse, ThreatListResponse
from ipsguard.core.logger import logger

router = APIRouter(prefix="/admin/threats", tags=["threats"])


@router.get("", response_model=ThreatListResponse)
async def get_threats(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    severity: Optional[Severity] = None,
    db: Session = Depends(get_database)
):
    query = db.query(Threat)

    if severity:
        query = query.filter(Threat.severity == severity.value)

    threats = query.order_by(desc(Threat.timestamp)).offset(offset).limit(limit).all()
    total = db.query(func.count(Threat.id)).scalar() or 0

    return ThreatListResponse(
        threats=threats,
        total=total,
        limit=limit,
        offset=offset
    )


@router.get("/{threat_id}", response_model=ThreatResponse)
async def get_threat(
    threat_id: str,
    db: Session = Depends(get_database)
):
    threat = db.query(Threat).filter(Threat.id == threat_id).first()
    if not threat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Threat not found"
        )

    return threat


@router.delete("")
async def clear_threats(db: Session = Depends(get_database)):
    deleted = db.query(Threat).delete(synchronize_session=False)
    db.commit()

    logger.info("threats_cleared", deleted=deleted)

    return {"message": "All threats cleared", "deleted": deleted}
