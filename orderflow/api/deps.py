from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from orderflow.application.service import OrderService
from orderflow.auth_local import decode_access_token
from orderflow.core import set_request_context
from orderflow.domain.models import Role
from orderflow.infrastructure.db import get_db
from orderflow.infrastructure.stores import build_order_service

BEARER_PREFIX = "Bearer "

@dataclass(frozen=True)
class Caller:
    account_id: int
    role: str
    ip_address: Optional[str] = None
    browser_info: Optional[str] = None

    @property
    def is_privileged(self) -> bool:
        return self.role != Role.USER.value

async def get_caller(request: Request) -> Caller:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing token")
    token_data = decode_access_token(auth_header[len(BEARER_PREFIX):])
    if not token_data or not str(token_data.get("sub", "")).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token")

    set_request_context(user_id=token_data["sub"])
    return Caller(
        account_id=int(token_data["sub"]),
        role=token_data.get("role", Role.USER.value),
        ip_address=request.client.host if request.client else None,
        browser_info=request.headers.get("User-Agent"),
    )

def require_privileged(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_privileged:
        raise HTTPException(status_code=403, detail="Insufficient role")
    return caller

def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return build_order_service(db)
