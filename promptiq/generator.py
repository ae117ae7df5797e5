# promptiq/generator.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from . import quota
from .errors import EmptyGeneration, MissingFields, PromptIQError
from .llm_client import LLMClient
from .models import Prompt
from .plans import FRAMEWORKS
from .scoring import QualityBreakdown, score

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = """You are PromptIQ's Legendary Prompt Architect, an expert AI that transforms simple user ideas into detailed, professional, immediately actionable prompts.

CRITICAL RULES:
- NO greetings, introductions, or pleasantries
- NO questions to the user or Socratic dialogue
- NO hypothetical scenarios or assumptions
- START IMMEDIATELY with the transformed prompt
- Output ONLY the final prompt, nothing else

YOUR TASK:
Take the user's input and DIRECTLY generate a comprehensive, detailed, legendary prompt that can be used immediately in AI tools (ChatGPT, Claude, Midjourney, etc).

OUTPUT STRUCTURE:
- Role: Define who the AI should act as
- Context: Provide background and constraints
- Task: Clearly state objectives with specifics
- Format: Specify exact output structure
- Examples: Include relevant examples when applicable
- Success Criteria: Define what good output looks like

LENGTH: 400-700 words
FORMAT: Professional markdown with clear sections
TONE: Authoritative, specific, actionable

Transform the user's input NOW. Output only the prompt."""

MAX_INPUT_CHARS = 2000


def build_system_instruction(framework: str) -> str:
    info = FRAMEWORKS.get(framework)
    if info is None:
        raise MissingFields(f"Unknown framework: {framework}")
    return BASE_SYSTEM_PROMPT + info["adjustment"]


def build_refinement_turn(original_prompt: str, refinement_request: str) -> str:
    return (
        f"Here is the current prompt:\n\n{original_prompt}\n\n"
        f"User refinement request: {refinement_request}\n\n"
        "Generate an improved version of the prompt based on this feedback. "
        "Output only the refined prompt."
    )


def estimate_tokens(text: str) -> int:
    # rough: ~4 characters per token
    return math.ceil(len(text) / 4)


@dataclass
class GenerationResult:
    output: str
    quality: QualityBreakdown


class PromptGenerator:
    """Framework-conditioned prompt generation and refinement on top of an LLM client."""

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    def _run(self, framework: str, user_text: str, empty_message: str) -> GenerationResult:
        system_instruction = build_system_instruction(framework)
        output = self.llm.generate(system_instruction, user_text)
        if not output or not output.strip():
            raise EmptyGeneration(empty_message)
        return GenerationResult(output=output, quality=score(output))

    def generate(self, idea: str, framework: str) -> GenerationResult:
        return self._run(framework, idea, "Generated prompt is empty")

    def refine(self, original_prompt: str, refinement_request: str, framework: str) -> GenerationResult:
        turn = build_refinement_turn(original_prompt, refinement_request)
        return self._run(framework, turn, "Refined prompt is empty")


@dataclass
class GenerationRequest:
    user_id: str
    input: str
    framework: str
    mode: str = "generate"
    original_prompt: Optional[str] = None
    parent_id: Optional[str] = None

    @property
    def is_refine(self) -> bool:
        return self.mode == "refine"


def run_generation(s: Session, generator: PromptGenerator, req: GenerationRequest) -> tuple[Prompt, GenerationResult]:
    """
    Quota-guarded generate/refine: reserve one unit, call the model, persist.

    The unit is handed back when the model call fails, so only successful
    generations (fresh or refined) are counted.
    """
    if not req.input or not req.framework or not req.user_id:
        raise MissingFields()
    if req.is_refine and not req.original_prompt:
        raise MissingFields("originalPrompt is required for refine")
    if req.framework not in FRAMEWORKS:
        raise MissingFields(f"Unknown framework: {req.framework}")

    quota.reserve_generation(s, req.user_id)

    try:
        if req.is_refine:
            result = generator.refine(req.original_prompt, req.input, req.framework)
        else:
            result = generator.generate(req.input, req.framework)
    except PromptIQError:
        quota.release_generation(s, req.user_id)
        raise
    except Exception:
        quota.release_generation(s, req.user_id)
        logger.exception("unexpected generation failure", extra={"user_id": req.user_id})
        raise

    prompt = Prompt(
        user_id=req.user_id,
        input_text=req.input,
        output_text=result.output,
        framework=req.framework,
        quality_score=result.quality.total,
        version=2 if req.is_refine else 1,
        parent_id=req.parent_id if req.is_refine else None,
        tokens_used=estimate_tokens(result.output),
    )
    s.add(prompt)
    s.commit()

    logger.info(
        "prompt generated",
        extra={"user_id": req.user_id, "prompt_id": prompt.id, "mode": req.mode, "score": result.quality.total},
    )
    return prompt, result
