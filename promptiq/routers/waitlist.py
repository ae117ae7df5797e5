# promptiq/routers/waitlist.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import waitlist
from ..database import get_db
from ..schemas import WaitlistBody

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.post("")
def join_waitlist(body: WaitlistBody, db: Session = Depends(get_db)):
    return waitlist.join(db, body.email, body.source)


@router.get("/count")
def waitlist_count(db: Session = Depends(get_db)):
    return waitlist.count(db)
