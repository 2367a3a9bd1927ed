from sqlalchemy.orm import Session
from ipsguard.models.rule import Rule
from ipsguard.core.logger import logger

DEFAULT_RULES = [
    {
        "name": "SQL Injection",
        "description": "Detects SQL injection attempts including UNION, OR statements, and DROP commands",
        "pattern": r"(\bOR\b.*=.*|UNION.*SELECT|DROP.*TABLE|INSERT.*INTO|DELETE.*FROM|UPDATE.*SET|EXEC\(|EXECUTE\()",
        "severity": "high",
    },
    {
        "name": "XSS Attack",
        "description": "Detects cross-site scripting attempts with script tags and event handlers",
        "pattern": r"(<script.*?>.*?</script>|javascript:|onerror=|onload=|onclick=|<iframe|eval\()",
        "severity": "high",
    },
    {
        "name": "Path Traversal",
        "description": "Detects directory traversal attempts using ../ patterns",
        "pattern": r"(\.\./|\.\.\\\\)",
        "severity": "medium",
    },
    {
        "name": "Command Injection",
        "description": "Detects attempts to chain or substitute shell commands",
        "pattern": r"([;&|]\s*(cat|ls|wget|curl|nc|bash|sh|rm|whoami)\b|`[^`]+`|\$\([^)]+\))",
        "severity": "high",
    },
    {
        "name": "LDAP Injection",
        "description": "Detects LDAP injection attempts",
        "pattern": r"(\(\||\(&|\*\)|\(!)",
        "severity": "medium",
    },
    {
        "name": "XML Injection",
        "description": "Detects XML/XXE injection attempts",
        "pattern": r"(<!ENTITY|<!DOCTYPE|SYSTEM\s+[\"']|PUBLIC\s+[\"'])",
        "severity": "high",
    },
    {
        "name": "NoSQL Injection",
        "description": "Detects NoSQL injection patterns",
        "pattern": r"(\$ne|\$gt|\$lt|\$or|\$and|\$where)",
        "severity": "medium",
    },
    {
        "name": "File Upload Attack",
        "description": "Detects suspicious file extensions",
        "pattern": r"\.(exe|bat|sh|php|asp|aspx|jsp|py)\b",
        "severity": "high",
    },
]


def seed_default_rules(db: Session) -> int:
    existing = {name for (name,) in db.query(Rule.name).all()}
    inserted = 0

    for data in DEFAULT_RULES:
        if data["name"] in existing:
            continue
        db.add(Rule(**data))
        inserted += 1

    db.commit()
    logger.info("default_rules_seeded", inserted=inserted)
    return inserted
