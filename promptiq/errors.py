# promptiq/errors.py
from __future__ import annotations

from typing import Optional


class PromptIQError(Exception):
    """Base for failures that reach the HTTP boundary as {"error": ..., "message": ...}."""

    status_code = 500
    error = "internal_error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class MissingFields(PromptIQError):
    status_code = 400
    error = "missing_fields"
    default_message = "Missing required fields"


class UserNotFound(PromptIQError):
    status_code = 404
    error = "user_not_found"
    default_message = "User not found"


class QuotaExceeded(PromptIQError):
    status_code = 403
    error = "generation_limit_reached"
    default_message = "Generation limit reached. Please upgrade your plan."


class ProviderQuotaExceeded(PromptIQError):
    status_code = 429
    error = "quota_exceeded"
    default_message = (
        "PromptIQ is experiencing incredible demand! Our free tier is at capacity right now. "
        "Please try again in a few minutes, or upgrade to Pro to skip the queue and get priority access."
    )


class EmptyGeneration(PromptIQError):
    status_code = 502
    error = "empty_generation"
    default_message = "Generated prompt is empty"


class GenerationFailed(PromptIQError):
    status_code = 500
    error = "generation_failed"
    default_message = "Failed to generate prompt"


class PromptNotFound(PromptIQError):
    status_code = 404
    error = "prompt_not_found"
    default_message = "Prompt not found"


class Forbidden(PromptIQError):
    status_code = 403
    error = "forbidden"
    default_message = "Unauthorized"


class LinkNotFound(PromptIQError):
    status_code = 404
    error = "link_not_found"
    default_message = "Link not found"


class LinkExpired(PromptIQError):
    status_code = 410
    error = "link_expired"
    default_message = "Link expired"


class PaymentError(PromptIQError):
    status_code = 400
    error = "payment_error"
    default_message = "Payment could not be processed"


class BillingNotConfigured(PromptIQError):
    status_code = 500
    error = "billing_not_configured"
    default_message = "Stripe is not configured"
