"""
Transit Hub - Auth Router

Demo agent login and identity. Tokens only identify the agent recording a
milestone; there is no role-based authorization.
"""

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel
from datetime import datetime, timezone
from typing import Dict, Optional
import jwt as pyjwt
import os

from services.transit_config import JWT_ALGORITHM, JWT_SECRET, JWT_TTL_SECONDS

router = APIRouter(prefix="/auth", tags=["auth"])

DEMO_PASSWORD = os.environ.get("DEMO_PASSWORD", "demo")

# Agent roster (will be replaced with the user directory)
AGENTS = {
    "operations@hollytrans.com": {"id": "2", "name": "Cheikh Agent Operations", "role": "operations"},
    "customs@hollytrans.com": {"id": "3", "name": "Cheikh Customs Agent", "role": "customs"},
    "finance@hollytrans.com": {"id": "4", "name": "Cheikh Finance Manager", "role": "finance"},
    "supervisor@hollytrans.com": {"id": "5", "name": "Cheikh Logistics Supervisor", "role": "supervisor"},
    "admin@hollytrans.com": {"id": "6", "name": "Cheikh Admin User", "role": "admin"},
}


class LoginRequest(BaseModel):
    email: str
    password: str


def create_token(email: str) -> str:
    payload = {"sub": email, "exp": datetime.now(timezone.utc).timestamp() + JWT_TTL_SECONDS}
    return pyjwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_current_agent(authorization: Optional[str] = Header(None)) -> Dict[str, str]:
    """Resolve {id, name} of the agent behind the bearer token."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    token = authorization.split(" ", 1)[1]
    try:
        payload = pyjwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except pyjwt.PyJWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")

    agent = AGENTS.get(payload.get("sub"))
    if agent is None:
        raise HTTPException(status_code=401, detail="Unknown agent")
    return {"id": agent["id"], "name": agent["name"]}


@router.post("/login")
async def login(req: LoginRequest):
    """Authenticate an agent and return a JWT token."""
    agent = AGENTS.get(req.email.lower())
    if agent and req.password == DEMO_PASSWORD:
        return {
            "token": create_token(req.email.lower()),
            "user": {"email": req.email.lower(), **agent}
        }
    raise HTTPException(status_code=401, detail="Invalid credentials")


@router.get("/me")
async def get_me(authorization: Optional[str] = Header(None)):
    """Get the current agent from the bearer token."""
    return get_current_agent(authorization)
