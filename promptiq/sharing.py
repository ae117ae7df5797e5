# promptiq/sharing.py
from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from .errors import Forbidden, LinkExpired, LinkNotFound, PromptNotFound
from .models import Prompt, SharedLink, as_utc, utcnow

logger = logging.getLogger(__name__)

# no 0/O/o, 1/I/l
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789"
CODE_LENGTH = 6
LINK_TTL = timedelta(days=7)
MAX_CODE_ATTEMPTS = 5


def generate_short_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def share_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/p/{code}"


def _code_taken(s: Session, code: str) -> bool:
    return s.scalars(select(SharedLink.id).where(SharedLink.code == code)).first() is not None


def create_link(s: Session, prompt_id: str, user_id: str) -> SharedLink:
    """Issue a 7-day public link for one of the user's prompts."""
    prompt = s.get(Prompt, prompt_id)
    if prompt is None:
        raise PromptNotFound()
    if prompt.user_id != user_id:
        raise Forbidden()

    code: Optional[str] = None
    for _ in range(MAX_CODE_ATTEMPTS):
        candidate = generate_short_code()
        if not _code_taken(s, candidate):
            code = candidate
            break
    if code is None:
        # 56**6 codes; reaching this means the table is absurdly full
        raise RuntimeError("could not allocate a unique share code")

    now = utcnow()
    link = SharedLink(
        code=code,
        prompt_id=prompt_id,
        user_id=user_id,
        created_at=now,
        expires_at=now + LINK_TTL,
        views=0,
    )
    s.add(link)
    s.commit()

    logger.info("share link created", extra={"user_id": user_id, "prompt_id": prompt_id, "code": code})
    return link


def resolve_link(s: Session, code: str) -> tuple[Prompt, int]:
    """
    Look up a share code and count the view.

    Expired links are rejected without touching the view counter; the row
    itself is kept.
    """
    link = s.scalars(select(SharedLink).where(SharedLink.code == code)).first()
    if link is None:
        raise LinkNotFound()

    if utcnow() > as_utc(link.expires_at):
        raise LinkExpired()

    prompt = s.get(Prompt, link.prompt_id)
    if prompt is None:
        raise PromptNotFound()

    s.execute(
        update(SharedLink)
        .where(SharedLink.id == link.id)
        .values(views=SharedLink.views + 1)
        .execution_options(synchronize_session=False)
    )
    s.commit()
    s.refresh(link)

    logger.info("share link viewed", extra={"code": code, "views": link.views})
    return prompt, link.views


def delete_links_for_prompt(s: Session, prompt_id: str) -> int:
    result = s.execute(
        delete(SharedLink)
        .where(SharedLink.prompt_id == prompt_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
