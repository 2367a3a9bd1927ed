import random
import time
from datetime import datetime, timezone
from typing import Any, Optional
from fastapi import APIRouter, Body, HTTPException, status
from ipsguard.core.logger import logger

router = APIRouter(prefix="/api", tags=["demo"])


@router.get("/users")
async def list_users():
    return {
        "users": [
            {"id": 1, "name": "Alice Johnson", "email": "alice@example.com"},
            {"id": 2, "name": "Bob Smith", "email": "bob@example.com"},
            {"id": 3, "name": "Charlie Brown", "email": "charlie@example.com"},
        ],
        "total": 3
    }


@router.post("/login")
async def login(payload: dict[str, Any] = Body(default_factory=dict)):
    username = payload.get("username")
    password = payload.get("password")
    logger.info("demo_login", username=username)

    if not username or not password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password required"
        )

    return {
        "message": "Login successful",
        "username": username,
        "token": f"demo-token-{int(time.time() * 1000)}"
    }


@router.get("/search")
async def search(q: Optional[str] = None):
    return {
        "query": q,
        "results": [
            {"id": 1, "title": "Result 1", "description": "First search result"},
            {"id": 2, "title": "Result 2", "description": "Second search result"},
        ],
        "total": 2
    }


@router.post("/comment")
async def post_comment(payload: dict[str, Any] = Body(default_factory=dict)):
    return {
        "message": "Comment posted successfully",
        "comment": payload.get("comment"),
        "id": int(time.time() * 1000)
    }


@router.get("/file")
async def read_file(path: Optional[str] = None):
    return {
        "message": "File access endpoint",
        "path": path,
        "content": "File content would be here"
    }


@router.post("/exec")
async def execute(payload: dict[str, Any] = Body(default_factory=dict)):
    return {
        "message": "Command execution endpoint (demo)",
        "command": payload.get("cmd"),
        "output": "Command output would be here"
    }


@router.get("/data")
async def get_data():
    return {
        "data": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "value": random.random() * 100,
            "status": "active"
        }
    }


@router.post("/upload")
async def upload(payload: dict[str, Any] = Body(default_factory=dict)):
    return {
        "message": "File upload endpoint (demo)",
        "filename": payload.get("filename"),
        "uploaded": True
    }
