"""Stripe key storage for the admin settings page.

Values are stored as given and only ever returned masked.
"""

from __future__ import annotations

import logging

from coursehub.repos.settings_repo import SettingsRepo

logger = logging.getLogger(__name__)

PUBLISHABLE_KEY = "stripe_publishable_key"
SECRET_KEY = "stripe_secret_key"
WEBHOOK_SECRET = "stripe_webhook_secret"
STRIPE_KEYS = (PUBLISHABLE_KEY, SECRET_KEY, WEBHOOK_SECRET)


def mask_secret(value: str | None) -> str:
    """``sk_test***wxyz``: first 7 and last 4 characters; short values hide fully."""
    if not value or len(value) < 8:
        return ""
    return f"{value[:7]}***{value[-4:]}"


async def stripe_settings(repo: SettingsRepo) -> dict[str, object]:
    stored = await repo.get_many(STRIPE_KEYS)
    return {
        "stripePublishableKey": mask_secret(stored.get(PUBLISHABLE_KEY)),
        "stripeSecretKey": mask_secret(stored.get(SECRET_KEY)),
        "stripeWebhookSecret": mask_secret(stored.get(WEBHOOK_SECRET)),
        "configured": bool(stored.get(SECRET_KEY) and stored.get(WEBHOOK_SECRET)),
    }


async def update_stripe_settings(
    repo: SettingsRepo, updates: dict[str, str | None]
) -> dict[str, object]:
    """Store trimmed non-empty values; blank inputs leave the stored key alone."""
    changed = []
    for key in STRIPE_KEYS:
        value = (updates.get(key) or "").strip()
        if value:
            await repo.put(key, value)
            changed.append(key)
    if changed:
        logger.info("Stripe settings updated: %s", ", ".join(changed))
    return await stripe_settings(repo)
