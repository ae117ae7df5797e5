# promptiq/waitlist.py
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import WaitlistEntry

logger = logging.getLogger(__name__)

# marketing cap shown on the landing page; signups beyond it are still stored
TOTAL_SPOTS = 250


def signups(s: Session) -> int:
    return int(s.scalar(select(func.count()).select_from(WaitlistEntry)) or 0)


def remaining(s: Session) -> int:
    return max(0, TOTAL_SPOTS - signups(s))


def join(s: Session, email: str, source: str | None = None) -> dict:
    email = email.strip().lower()
    existing = s.scalars(select(WaitlistEntry).where(WaitlistEntry.email == email)).first()
    if existing:
        return {"success": True, "message": "You are already on the waitlist!", "alreadyExists": True}

    s.add(WaitlistEntry(email=email, source=(source or "unknown"), notified=False))
    try:
        s.commit()
    except IntegrityError:
        # lost a race with the same address
        s.rollback()
        return {"success": True, "message": "You are already on the waitlist!", "alreadyExists": True}

    logger.info("waitlist signup", extra={"source": source or "unknown"})
    return {"success": True, "message": "Successfully added to waitlist!", "remaining": remaining(s)}


def count(s: Session) -> dict:
    n = signups(s)
    return {"success": True, "total": TOTAL_SPOTS, "signups": n, "remaining": max(0, TOTAL_SPOTS - n)}
