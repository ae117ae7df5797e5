# promptiq/routers/generate.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..generator import PromptGenerator, run_generation
from ..plans import public_frameworks, public_plans
from ..schemas import ScoreBody, generation_body_adapter
from ..scoring import score
from .deps import get_generator

router = APIRouter(tags=["generate"])


@router.post("/generate")
def generate(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    generator: PromptGenerator = Depends(get_generator),
):
    """
    Generate a prompt from an idea, or refine an earlier one.

    - mode "generate" (default): {input, framework, userId}
    - mode "refine": {input, framework, userId, originalPrompt, parentId?}
    Each successful call consumes one generation from the user's quota.
    """
    body = generation_body_adapter.validate_python(payload)
    prompt, result = run_generation(db, generator, body.to_request())
    return {
        "success": True,
        "output": result.output,
        "qualityScore": result.quality.to_dict(),
        "promptId": prompt.id,
    }


@router.post("/score")
def score_text(body: ScoreBody):
    return score(body.text).to_dict()


@router.get("/frameworks")
def list_frameworks():
    return {"frameworks": public_frameworks()}


@router.get("/plans")
def list_plans():
    return {"plans": public_plans()}
