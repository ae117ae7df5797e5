# promptiq/routers/share.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import get_db
from ..schemas import PromptRefBody
from ..sharing import create_link, resolve_link, share_url
from .deps import get_settings

router = APIRouter(prefix="/share", tags=["share"])


@router.post("")
@router.post("/create")
def create_share_link(
    body: PromptRefBody,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    link = create_link(db, body.prompt_id, body.user_id)
    return {"success": True, "shareUrl": share_url(settings.public_url, link.code), "code": link.code}


@router.get("/{code}")
def read_shared_prompt(code: str, db: Session = Depends(get_db)):
    prompt, views = resolve_link(db, code)
    return {"success": True, "prompt": prompt.to_dict(), "views": views}
