from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import case
from sqlalchemy.orm import Session
from ipsguard.api.dependencies import get_database, get_rule_engine
from ipsguard.models.rule import Rule
from ipsguard.schemas.rule import RuleCreate, RuleUpdate, RuleResponse
from ipsguard.security.rule_engine import RuleEngine
from ipsguard.core.logger import logger

router = APIRouter(prefix="/admin/rules", tags=["rules"])

SEVERITY_RANK = case(
    (Rule.severity == "critical", 4),
    (Rule.severity == "high", 3),
    (Rule.severity == "medium", 2),
    (Rule.severity == "low", 1),
    else_=0
)


def _get_rule_or_404(db: Session, rule_id: int) -> Rule:
    rule = db.query(Rule).filter(Rule.id == rule_id).first()
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Rule not found"
        )
    return rule


def _ensure_unique_name(db: Session, name: str, rule_id: int = None) -> None:
    query = db.query(Rule).filter(Rule.name == name)
    if rule_id is not None:
        query = query.filter(Rule.id != rule_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rule with this name already exists"
        )


@router.get("", response_model=list[RuleResponse])
async def get_rules(db: Session = Depends(get_database)):
    return db.query(Rule).order_by(SEVERITY_RANK.desc(), Rule.id.asc()).all()


@router.get("/{rule_id}", response_model=RuleResponse)
async def get_rule(
    rule_id: int,
    db: Session = Depends(get_database)
):
    return _get_rule_or_404(db, rule_id)


@router.post("", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    rule_data: RuleCreate,
    db: Session = Depends(get_database),
    rule_engine: RuleEngine = Depends(get_rule_engine)
):
    _ensure_unique_name(db, rule_data.name)

    rule = Rule(**rule_data.model_dump(mode="json"))
    db.add(rule)
    db.commit()
    db.refresh(rule)

    rule_engine.reload(db)
    logger.info("rule_created", rule_id=rule.id, rule=rule.name)

    return rule


@router.put("/{rule_id}", response_model=RuleResponse)
async def update_rule(
    rule_id: int,
    rule_data: RuleUpdate,
    db: Session = Depends(get_database),
    rule_engine: RuleEngine = Depends(get_rule_engine)
):
    rule = _get_rule_or_404(db, rule_id)
    _ensure_unique_name(db, rule_data.name, rule_id)

    exclude = {"enabled"} if rule_data.enabled is None else None
    for key, value in rule_data.model_dump(mode="json", exclude=exclude).items():
        setattr(rule, key, value)

    db.commit()
    db.refresh(rule)

    rule_engine.reload(db)
    logger.info("rule_updated", rule_id=rule.id)

    return rule


@router.patch("/{rule_id}/toggle", response_model=RuleResponse)
async def toggle_rule(
    rule_id: int,
    db: Session = Depends(get_database),
    rule_engine: RuleEngine = Depends(get_rule_engine)
):
    rule = _get_rule_or_404(db, rule_id)
    rule.enabled = not rule.enabled

    db.commit()
    db.refresh(rule)

    rule_engine.reload(db)
    logger.info("rule_toggled", rule_id=rule.id, enabled=rule.enabled)

    return rule


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(
    rule_id: int,
    db: Session = Depends(get_database),
    rule_engine: RuleEngine = Depends(get_rule_engine)
):
    rule = _get_rule_or_404(db, rule_id)

    db.delete(rule)
    db.commit()

    rule_engine.reload(db)
    logger.info("rule_deleted", rule_id=rule_id)

    return None
