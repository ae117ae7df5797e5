# promptiq/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from .. import quota
from ..database import get_db
from ..errors import MissingFields
from ..models import User, as_utc
from ..plans import PLANS
from ..schemas import ProfileUpdateBody, UserCreateBody

router = APIRouter(tags=["users"])


def _profile(user: User) -> dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "name": user.name,
        "plan": user.plan,
        "plan_name": PLANS[user.plan]["name"],
        "generations_used": user.generations_used,
        "generations_limit": user.generations_limit,
        "created_at": as_utc(user.created_at).isoformat(),
        "payment_history": [
            {
                "order_id": p.order_id,
                "amount": p.amount,
                "plan": p.plan,
                "date": as_utc(p.date).isoformat(),
                "status": p.status,
            }
            for p in user.payment_history
        ],
    }


@router.post("/users")
def create_user(body: UserCreateBody, db: Session = Depends(get_db)):
    user = quota.create_user(db, body.uid, body.email, body.name)
    return {"success": True, "user": _profile(user)}


@router.get("/users/{uid}")
def read_user(uid: str, db: Session = Depends(get_db)):
    user = quota.get_user(db, uid)
    return {"success": True, "user": _profile(user), "usage": quota.usage(user)}


@router.patch("/users/{uid}")
def update_user(uid: str, body: ProfileUpdateBody, db: Session = Depends(get_db)):
    user = quota.update_profile(db, uid, body.name)
    return {"success": True, "user": _profile(user)}


@router.get("/user/usage")
def read_usage(
    x_user_id: str = Header(default="", alias="X-User-Id"),
    db: Session = Depends(get_db),
):
    if not x_user_id:
        raise MissingFields("Missing X-User-Id")
    user = quota.get_user(db, x_user_id)
    return quota.usage(user)
