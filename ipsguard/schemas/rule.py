from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
from ipsguard.models.rule import Severity
from ipsguard.security.rule_engine import compile_pattern
import re


class RuleCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    pattern: str = Field(min_length=1)
    severity: Severity

    @field_validator("pattern")
    @classmethod
    def pattern_must_compile(cls, value: str) -> str:
        try:
            compile_pattern(value)
        except re.error as e:
            raise ValueError(f"Invalid pattern: {e}")
        return value


class RuleUpdate(RuleCreate):
    enabled: Optional[bool] = None


class RuleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    pattern: str
    severity: str
    enabled: bool
    blocked_count: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class RuleSummary(BaseModel):
    name: str
    severity: str
    blocked_count: int
    enabled: bool

    class Config:
        from_attributes = True
