# promptiq/billing_stripe.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import stripe
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from . import quota
from .config import Settings
from .database import get_db
from .errors import BillingNotConfigured, PaymentError
from .plans import PLANS, is_paid, plan_price
from .routers.deps import get_settings
from .schemas import CheckoutBody, VerifyBody

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])


# --- helpers -----------------------------------------------------------------
def configure_stripe(settings: Settings) -> None:
    if settings.stripe_secret_key:
        stripe.api_key = settings.stripe_secret_key


def _price_ids(settings: Settings) -> Dict[str, str]:
    return {
        "architect": settings.stripe_price_architect,
        "studio": settings.stripe_price_studio,
    }


def _ensure_stripe_ready(settings: Settings, plan: str) -> str:
    """Validate the plan and return its Stripe price id."""
    if plan not in PLANS:
        raise PaymentError(f"Unsupported plan: {plan}")
    if not is_paid(plan):
        raise PaymentError("Cannot create order for free plan")
    if not settings.stripe_secret_key:
        raise BillingNotConfigured("Stripe is not configured (missing STRIPE_SECRET_KEY)")
    price_id = _price_ids(settings).get(plan)
    if not price_id:
        raise BillingNotConfigured(f"Missing Stripe price id for plan: {plan}")
    return price_id


def _as_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


def _plan_from_amount(amount: float) -> str:
    # a session without our metadata: fall back to matching the charged amount
    for pid, p in PLANS.items():
        if p["price"] and float(p["price"]) == float(amount):
            return pid
    return "architect"


def apply_checkout_session(db: Session, session_obj: Any) -> Optional[str]:
    """
    Upgrade the user a paid Checkout Session belongs to.

    Returns the plan applied, or None when the session is not paid. Safe to
    call repeatedly for the same session (webhook + redirect).
    """
    data = _as_dict(session_obj)
    if data.get("payment_status") != "paid":
        return None

    md = _as_dict(data.get("metadata"))
    uid = data.get("client_reference_id") or md.get("user_id")
    if not uid:
        raise PaymentError("Checkout session has no user reference")

    amount = (data.get("amount_total") or 0) / 100
    plan = (md.get("plan") or "").strip().lower() or _plan_from_amount(amount)
    if not amount:
        amount = plan_price(plan)

    quota.upgrade(db, uid, plan, order_id=data["id"], amount=amount)
    return plan


# --- Checkout ----------------------------------------------------------------
@router.post("/checkout")
def create_checkout_session(
    body: CheckoutBody,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Create a one-off Stripe Checkout Session for a paid plan.
    The upgrade itself happens in /webhook or /verify once Stripe reports it paid.
    """
    plan = (body.plan or "").strip().lower()
    price_id = _ensure_stripe_ready(settings, plan)
    quota.get_user(db, body.user_id)

    base = settings.public_url
    try:
        sess = stripe.checkout.Session.create(
            mode="payment",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{base}/dashboard?payment=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base}/dashboard?payment=failed",
            client_reference_id=body.user_id,
            metadata={"plan": plan, "user_id": body.user_id},
        )
    except stripe.StripeError as e:
        logger.exception("stripe checkout failed", extra={"user_id": body.user_id})
        raise PaymentError(f"Create session failed: {e}") from e

    sess = _as_dict(sess)
    logger.info("checkout session created", extra={"user_id": body.user_id, "plan": plan})
    return {"success": True, "paymentUrl": sess.get("url"), "orderId": sess.get("id")}


# --- Webhook -----------------------------------------------------------------
@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Stripe Dashboard -> Developers -> Webhooks
    endpoint: <your domain>/api/billing/webhook
    events: checkout.session.completed
    """
    if not settings.stripe_webhook_secret:
        raise BillingNotConfigured("Stripe webhook is not configured (missing STRIPE_WEBHOOK_SECRET)")

    payload = await request.body()
    sig = request.headers.get("stripe-signature", "")
    try:
        evt = stripe.Webhook.construct_event(payload=payload, sig_header=sig, secret=settings.stripe_webhook_secret)
    except (ValueError, stripe.StripeError) as e:
        raise PaymentError(f"Invalid signature: {e}") from e

    evt = _as_dict(evt)
    etype = evt.get("type")
    if etype == "checkout.session.completed":
        data = _as_dict(evt.get("data")).get("object")
        plan = await run_in_threadpool(apply_checkout_session, db, data)
        logger.info("webhook processed", extra={"event_type": etype, "plan": plan})

    return {"success": True}


# --- Redirect verification ---------------------------------------------------
@router.post("/verify")
def verify_checkout(
    body: VerifyBody,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not settings.stripe_secret_key:
        raise BillingNotConfigured()
    try:
        sess = stripe.checkout.Session.retrieve(body.session_id)
    except stripe.StripeError as e:
        raise PaymentError(f"Payment verification failed: {e}") from e

    plan = apply_checkout_session(db, sess)
    if plan is None:
        return {"success": False, "message": "Payment not completed"}
    return {"success": True, "plan": plan}
