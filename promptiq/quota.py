# promptiq/quota.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import PaymentError, QuotaExceeded, UserNotFound
from .models import PaymentRecord, User, utcnow
from .plans import DEFAULT_PLAN, PLANS, is_paid, plan_limit

logger = logging.getLogger(__name__)


# === Users ===================================================================
def create_user(s: Session, uid: str, email: str, name: str = "") -> User:
    """Create the profile row for a freshly signed-up account, or return the existing one."""
    found = s.get(User, uid)
    if found:
        return found
    user = User(
        uid=uid,
        email=email,
        name=name or "",
        plan=DEFAULT_PLAN,
        generations_used=0,
        generations_limit=plan_limit(DEFAULT_PLAN),
    )
    s.add(user)
    s.commit()
    logger.info("user created", extra={"user_id": uid})
    return user


def get_user(s: Session, uid: str) -> User:
    user = s.get(User, uid) if uid else None
    if user is None:
        raise UserNotFound()
    return user


def update_profile(s: Session, uid: str, name: str) -> User:
    user = get_user(s, uid)
    user.name = name
    s.commit()
    return user


def usage(user: User) -> dict:
    return {
        "plan": user.plan,
        "generations_used": user.generations_used,
        "generations_limit": user.generations_limit,
        "remaining": max(0, user.generations_limit - user.generations_used),
    }


# === Quota ===================================================================
def reserve_generation(s: Session, uid: str) -> None:
    """
    Take one unit of quota in a single conditional UPDATE.

    Concurrent requests from the same user can never push generations_used
    past generations_limit: the row only changes while used < limit.
    """
    result = s.execute(
        update(User)
        .where(User.uid == uid, User.generations_used < User.generations_limit)
        .values(generations_used=User.generations_used + 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    s.commit()

    if result.rowcount == 1:
        return

    # nothing updated: either no such user or the quota is exhausted
    if s.get(User, uid) is None:
        raise UserNotFound()
    logger.info("generation rejected: quota exhausted", extra={"user_id": uid})
    raise QuotaExceeded()


def release_generation(s: Session, uid: str) -> None:
    """Give back a reserved unit after a failed generation."""
    s.execute(
        update(User)
        .where(User.uid == uid, User.generations_used > 0)
        .values(generations_used=User.generations_used - 1, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    s.commit()


# === Plan upgrade ============================================================
def find_payment(s: Session, order_id: str) -> Optional[PaymentRecord]:
    return s.scalars(select(PaymentRecord).where(PaymentRecord.order_id == order_id)).first()


def upgrade(s: Session, uid: str, plan: str, order_id: str, amount: float) -> User:
    """
    spark -> architect / studio after a successful payment.

    Appends a PaymentRecord, switches the plan and its limit, and resets
    generations_used to 0. A second call with the same order_id (webhook and
    redirect both landing) changes nothing.
    """
    plan = (plan or "").strip().lower()
    if plan not in PLANS or not is_paid(plan):
        raise PaymentError(f"Cannot upgrade to plan: {plan or '(empty)'}")
    if not order_id:
        raise PaymentError("Missing order id")

    user = get_user(s, uid)

    if find_payment(s, order_id) is not None:
        logger.info("payment already applied", extra={"user_id": uid, "order_id": order_id})
        return user

    user.payment_history.append(
        PaymentRecord(order_id=order_id, amount=float(amount), plan=plan, status="success", date=utcnow())
    )
    user.plan = plan
    user.generations_limit = plan_limit(plan)
    user.generations_used = 0
    user.updated_at = utcnow()
    try:
        s.commit()
    except IntegrityError:
        # webhook and redirect raced on the same order_id; the other one applied it
        s.rollback()
        logger.info("payment already applied", extra={"user_id": uid, "order_id": order_id})
        s.expire_all()
        return get_user(s, uid)

    logger.info("plan upgraded", extra={"user_id": uid, "plan": plan, "order_id": order_id})
    return user
