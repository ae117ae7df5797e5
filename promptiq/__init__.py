"""
promptiq package

Backend for PromptIQ: turns a free-text idea into a structured AI prompt,
scores it, keeps per-user generation quotas and issues share links.

Run with:
    uvicorn promptiq.main:create_app --factory

Do NOT put runtime logic here.
"""
