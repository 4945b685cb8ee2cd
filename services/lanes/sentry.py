"""
Sentry error reporting for the lane option tooling.
Only initialised when SENTRY_DSN is set.
"""

from typing import Any

import sentry_sdk

from services.lanes.config import settings

SENSITIVE_KEYS = {"database_url", "password", "dsn"}


def _strip_sensitive_data(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """before_send hook: filter connection strings out of captured locals and extra data."""
    extra = event.get("extra", {})
    if isinstance(extra, dict):
        for key in list(extra.keys()):
            if key.lower() in SENSITIVE_KEYS:
                extra[key] = "[FILTERED]"
    for exc in event.get("exception", {}).get("values", []):
        for frame in exc.get("stacktrace", {}).get("frames", []):
            frame_vars = frame.get("vars")
            if isinstance(frame_vars, dict):
                for key in list(frame_vars.keys()):
                    if key.lower() in SENSITIVE_KEYS:
                        frame_vars[key] = "[FILTERED]"
    return event


def setup_sentry() -> bool:
    """Initialise sentry-sdk. Returns False when no DSN is configured."""
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"{settings.app_name}@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        before_send=_strip_sensitive_data,
        send_default_pii=False,
    )
    return True
