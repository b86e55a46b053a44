"""Service settings for the storefront domain.

Values come from the ``[custom]`` table of ``domain.toml`` and can be
overridden per deployment with an environment variable of the same name.
"""

import os

from protean.utils.globals import current_domain

_DEFAULTS = {
    "DEFAULT_PAGE_SIZE": 10,
    "MAX_PAGE_SIZE": 100,
    "GATEWAY_TIMEOUT_SECONDS": 10.0,
    "GATEWAY_MAX_NETWORK_RETRIES": 2,
    "DEFAULT_CURRENCY": "usd",
    "STRIPE_API_KEY": None,
    "STRIPE_WEBHOOK_SECRET": None,
}


def get_setting(key: str, default=None):
    """Resolve a setting: environment, then domain config, then built-in default.

    Must be called with the storefront domain context active.
    """
    fallback = _DEFAULTS.get(key, default) if default is None else default

    raw = os.environ.get(key)
    if raw is not None:
        if isinstance(fallback, (int, float)) and not isinstance(fallback, bool):
            return type(fallback)(raw)
        return raw

    custom = current_domain.config.get("custom", {}) or {}
    return custom.get(key, fallback)


def pagination(page: int | None, size: int | None) -> tuple[int, int]:
    """Normalize paging input: page defaults to 1, size is clamped to the configured maximum."""
    default_size = get_setting("DEFAULT_PAGE_SIZE")
    max_size = get_setting("MAX_PAGE_SIZE")

    page = page if page and page >= 1 else 1
    if not size or size < 1:
        size = default_size
    return page, min(size, max_size)
