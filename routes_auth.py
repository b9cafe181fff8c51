import logging

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy import select, insert

from db import engine, users, gen_id, now_ts, ensure_default_list
from errors import ValidationError
from schemas import AuthRegister, AuthLogin, AuthOut, UserOut, to_user_out
from security import hash_password, verify_password, create_token, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(payload: AuthRegister):
    username = payload.username.strip()
    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters")
    uid = gen_id()
    with engine.begin() as conn:
        if conn.execute(select(users.c.id).where(users.c.username == username)).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
        conn.execute(insert(users).values(id=uid, username=username, password_hash=hash_password(payload.password), created_at=now_ts()))
        ensure_default_list(conn, uid)
        u = conn.execute(select(users).where(users.c.id == uid)).mappings().first()
    logger.info("registered user %s", uid)
    return AuthOut(token=create_token(uid), user=to_user_out(u))

@router.post("/login", response_model=AuthOut)
def login(payload: AuthLogin):
    username = payload.username.strip()
    with engine.begin() as conn:
        u = conn.execute(select(users).where(users.c.username == username)).mappings().first()
        if not u or not verify_password(payload.password, u["password_hash"]):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
        ensure_default_list(conn, u["id"])
    return AuthOut(token=create_token(u["id"]), user=to_user_out(u))

@router.get("/me", response_model=UserOut)
def me(user=Depends(require_user)):
    return to_user_out(user)
