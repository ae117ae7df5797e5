# promptiq/schemas.py
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    EmailStr,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)

from .generator import MAX_INPUT_CHARS, GenerationRequest

Framework = Literal["chain-of-thought", "rice", "creative-brief", "star", "socratic", "custom"]


class _Body(BaseModel):
    # JSON uses camelCase (userId, promptId, ...); python code uses snake_case
    model_config = ConfigDict(populate_by_name=True)


# --- generate / refine (tagged on "mode") ------------------------------------
class _GenerateFields(_Body):
    input: str = Field(min_length=1, max_length=MAX_INPUT_CHARS)
    framework: Framework
    user_id: str = Field(alias="userId", min_length=1)

    @field_validator("input")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("input must not be blank")
        return v


class GenerateBody(_GenerateFields):
    mode: Literal["generate"] = "generate"

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(user_id=self.user_id, input=self.input, framework=self.framework)


class RefineBody(_GenerateFields):
    mode: Literal["refine"]
    original_prompt: str = Field(alias="originalPrompt", min_length=1)
    parent_id: Optional[str] = Field(default=None, alias="parentId")

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            user_id=self.user_id,
            input=self.input,
            framework=self.framework,
            mode="refine",
            original_prompt=self.original_prompt,
            parent_id=self.parent_id,
        )


def _mode_of(v: Any) -> str:
    if isinstance(v, dict):
        return v.get("mode") or "generate"
    return getattr(v, "mode", "generate")


GenerationBody = Annotated[
    Union[
        Annotated[GenerateBody, Tag("generate")],
        Annotated[RefineBody, Tag("refine")],
    ],
    Discriminator(_mode_of),
]

generation_body_adapter = TypeAdapter(GenerationBody)


# --- other request bodies ----------------------------------------------------
class ScoreBody(_Body):
    text: str


class UserCreateBody(_Body):
    uid: str = Field(min_length=1)
    email: EmailStr
    name: str = ""


class ProfileUpdateBody(_Body):
    name: str = Field(min_length=1, max_length=120)


class PromptRefBody(_Body):
    prompt_id: str = Field(alias="promptId", min_length=1)
    user_id: str = Field(alias="userId", min_length=1)


class WaitlistBody(_Body):
    email: EmailStr
    source: Optional[str] = None


class CheckoutBody(_Body):
    plan: str
    user_id: str = Field(alias="userId", min_length=1)


class VerifyBody(_Body):
    session_id: str = Field(alias="sessionId", min_length=1)
