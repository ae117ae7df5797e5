# promptiq/routers/prompts.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..history import DEFAULT_PAGE, MAX_PAGE, delete_prompt, list_prompts
from ..schemas import PromptRefBody

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.get("")
def read_prompts(
    user_id: str = Query(..., alias="userId", min_length=1),
    limit: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGE),
    db: Session = Depends(get_db),
):
    prompts = list_prompts(db, user_id, limit)
    return {"success": True, "prompts": [p.to_dict() for p in prompts]}


@router.delete("")
def remove_prompt(body: PromptRefBody, db: Session = Depends(get_db)):
    delete_prompt(db, body.prompt_id, body.user_id)
    return {"success": True}
