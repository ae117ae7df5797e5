# promptiq/plans.py
from __future__ import annotations

from typing import Any, Dict

# === Plans: monthly generation quota and price (INR) =========================
PLANS: Dict[str, Dict[str, Any]] = {
    "spark": {
        "name": "Spark",
        "limit": 30,
        "price": 0,
        "features": [
            "30 prompts/month",
            "Quick Mode only",
            "Basic frameworks",
            "Standard quality",
        ],
    },
    "architect": {
        "name": "Architect",
        "limit": 500,
        "price": 299,
        "features": [
            "500 prompts/month",
            "Quick + Pro Mode",
            "All frameworks",
            "Priority quality",
            "Version history (10 versions)",
            "Export to PDF",
            "Email support",
        ],
    },
    "studio": {
        "name": "Studio",
        "limit": 2500,
        "price": 999,
        "features": [
            "2,500 prompts/month",
            "Everything in Architect",
            "Unlimited version history",
            "Team collaboration (coming soon)",
            "Priority support",
            "Custom frameworks",
            "API access (coming soon)",
        ],
    },
}

DEFAULT_PLAN = "spark"


def plan_limit(plan: str) -> int:
    return int(PLANS.get(plan, PLANS[DEFAULT_PLAN])["limit"])


def plan_price(plan: str) -> int:
    return int(PLANS.get(plan, PLANS[DEFAULT_PLAN])["price"])


def is_paid(plan: str) -> bool:
    return plan in PLANS and plan_price(plan) > 0


# === Frameworks: each one appends a fixed adjustment to the system instruction ===
FRAMEWORKS: Dict[str, Dict[str, str]] = {
    "chain-of-thought": {
        "name": "Chain of Thought",
        "description": "Step-by-step reasoning structure for complex problems",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Structure the prompt to include step-by-step reasoning. "
            'Add sections for "Thinking Process" and "Step-by-Step Approach".'
        ),
    },
    "rice": {
        "name": "RICE Framework",
        "description": "Reach, Impact, Confidence, Effort prioritization",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Focus on RICE framework - Reach, Impact, Confidence, Effort. "
            "Structure the prompt to evaluate these four dimensions."
        ),
    },
    "creative-brief": {
        "name": "Creative Brief",
        "description": "Brand voice, target audience, key messages",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Include sections for Brand Voice, Target Audience, "
            "Key Messages, Tone & Style, and Creative Direction."
        ),
    },
    "star": {
        "name": "STAR Method",
        "description": "Situation, Task, Action, Result structure",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Structure as STAR - Situation (context), Task (objective), "
            "Action (steps), Result (expected outcome)."
        ),
    },
    "socratic": {
        "name": "Socratic Questioning",
        "description": "Guided thinking through strategic questions",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Use Socratic questioning technique. Structure the prompt "
            "as a series of guiding questions that lead to deeper thinking."
        ),
    },
    "custom": {
        "name": "Custom",
        "description": "Define your own structure",
        "adjustment": (
            "\n\nFRAMEWORK ADJUSTMENT: Use a flexible, adaptable structure based on the "
            "user's specific needs."
        ),
    },
}


def public_plans() -> list[dict]:
    return [
        {"id": pid, "name": p["name"], "limit": p["limit"], "price": p["price"], "features": p["features"]}
        for pid, p in PLANS.items()
    ]


def public_frameworks() -> list[dict]:
    return [
        {"id": fid, "name": f["name"], "description": f["description"]}
        for fid, f in FRAMEWORKS.items()
    ]
