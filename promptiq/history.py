# promptiq/history.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import Forbidden, PromptNotFound
from .models import Prompt
from .sharing import delete_links_for_prompt

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 20
MAX_PAGE = 100


def list_prompts(s: Session, user_id: str, limit: int = DEFAULT_PAGE) -> List[Prompt]:
    limit = min(max(1, int(limit or DEFAULT_PAGE)), MAX_PAGE)
    stmt = (
        select(Prompt)
        .where(Prompt.user_id == user_id)
        .order_by(Prompt.created_at.desc(), Prompt.id.desc())
        .limit(limit)
    )
    return list(s.scalars(stmt))


def delete_prompt(s: Session, prompt_id: str, user_id: str) -> None:
    """Owner-only delete; share links pointing at the prompt go with it."""
    prompt = s.get(Prompt, prompt_id)
    if prompt is None:
        raise PromptNotFound()
    if prompt.user_id != user_id:
        raise Forbidden()

    removed = delete_links_for_prompt(s, prompt_id)
    s.delete(prompt)
    s.commit()
    logger.info("prompt deleted", extra={"user_id": user_id, "prompt_id": prompt_id, "links_removed": removed})
