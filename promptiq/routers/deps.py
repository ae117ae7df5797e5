# promptiq/routers/deps.py
from __future__ import annotations

from fastapi import Request

from ..config import Settings
from ..generator import PromptGenerator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_generator(request: Request) -> PromptGenerator:
    return request.app.state.generator
