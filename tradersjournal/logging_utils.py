"""
Logging utilities.

Primary goals:
- Avoid leaking secrets (API keys, session tokens, passwords) in logs.
- Reduce noisy third-party logs (e.g., httpx request lines from the Supabase client).
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


class RedactSecretsFilter(logging.Filter):
    """
    Best-effort redaction for secrets in log messages.

    Only common patterns are redacted: query-string keys, JSON-ish key/value
    pairs, bearer tokens, JWTs and OpenAI-style keys.
    """

    _query_param_re = re.compile(
        r"(?i)\b(apiKey|apikey|token|key|secret|password|access_token|refresh_token)=([^&\s]+)"
    )
    _json_kv_re = re.compile(
        r"(?i)(\"?(apiKey|token|key|secret|password|access_token|refresh_token)\"?\s*[:=]\s*)(\"?)[^\"\s,}]+(\3)"
    )
    _bearer_re = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9._\-]+)")
    _sk_re = re.compile(r"\bsk-[A-Za-z0-9]{10,}\b")
    _jwt_re = re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\b")

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (Filter.filter)
        try:
            msg = record.getMessage()
        except Exception:
            return True

        redacted = msg
        redacted = self._query_param_re.sub(lambda m: f"{m.group(1)}=REDACTED", redacted)
        redacted = self._json_kv_re.sub(
            lambda m: f"{m.group(1)}{m.group(3)}REDACTED{m.group(4)}", redacted
        )
        redacted = self._sk_re.sub("sk-REDACTED", redacted)
        redacted = self._bearer_re.sub("Bearer REDACTED", redacted)
        redacted = self._jwt_re.sub("JWT-REDACTED", redacted)

        if redacted != msg:
            # Replace the fully formatted message to avoid re-formatting with args.
            record.msg = redacted
            record.args = ()
        return True


_FILTER_NAME = "tradersjournal_redact_secrets"


def _has_filter(filters: Iterable[logging.Filter], name: str) -> bool:
    return any(getattr(f, "name", None) == name for f in filters)


def install_log_safety() -> None:
    """
    Install log safety defaults:
    - Redact common secrets in log messages
    - Quiet noisy library loggers that can leak query params (httpx)
    """
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)

    redact_filter = RedactSecretsFilter()
    redact_filter.name = _FILTER_NAME  # type: ignore[attr-defined]

    # Attach to root logger and any existing handlers.
    root = logging.getLogger()
    if not _has_filter(root.filters, _FILTER_NAME):
        root.addFilter(redact_filter)
    for handler in root.handlers:
        if not _has_filter(handler.filters, _FILTER_NAME):
            handler.addFilter(redact_filter)

    # Also attach to existing non-root handlers (e.g., uvicorn).
    for obj in logging.Logger.manager.loggerDict.values():
        if isinstance(obj, logging.Logger):
            for handler in obj.handlers:
                if not _has_filter(handler.filters, _FILTER_NAME):
                    handler.addFilter(redact_filter)


def configure_logging(level: int = logging.INFO) -> None:
    """Basic logging setup shared by the CLI and the web server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    install_log_safety()
