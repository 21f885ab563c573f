"""
Runtime configuration.

All settings come from the environment (optionally seeded from a ``.env`` file
by the entry point). Secrets such as SMTP and Mux credentials are never given
defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

SUGGESTION_MATCH_MODES = ("all", "any")


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"

    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "ticketron"
    mongo_transactions: bool = False

    cors_origins: Tuple[str, ...] = ("*",)

    suggestion_match: str = "all"
    suggestion_limit: int = 10

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "Ticketron <noreply@ticketron.com>"

    mux_token_id: str = ""
    mux_token_secret: str = ""
    mux_api_url: str = "https://api.mux.com"

    http_timeout: float = 10.0

    def __post_init__(self):
        if self.suggestion_match not in SUGGESTION_MATCH_MODES:
            raise ValueError(
                f"SUGGESTION_MATCH must be one of {', '.join(SUGGESTION_MATCH_MODES)}, got {self.suggestion_match!r}"
            )
        if self.suggestion_limit < 1:
            raise ValueError("SUGGESTION_LIMIT must be >= 1.")

    def mail_config(self) -> Dict[str, Any]:
        """Flask-Mail settings for ``app.config``."""
        return {
            "MAIL_SERVER": self.smtp_host or "localhost",
            "MAIL_PORT": self.smtp_port,
            "MAIL_USE_TLS": self.smtp_use_tls,
            "MAIL_USE_SSL": False,
            "MAIL_USERNAME": self.smtp_username or None,
            "MAIL_PASSWORD": self.smtp_password or None,
            "MAIL_DEFAULT_SENDER": self.mail_from,
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = tuple(o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip())
        return cls(
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            mongo_uri=env.get("MONGO_URI", cls.mongo_uri),
            mongo_db=env.get("MONGO_DB", cls.mongo_db),
            mongo_transactions=_flag(env.get("MONGO_TRANSACTIONS", "0")),
            cors_origins=origins or ("*",),
            suggestion_match=env.get("SUGGESTION_MATCH", cls.suggestion_match).strip().lower(),
            suggestion_limit=_int(env, "SUGGESTION_LIMIT", cls.suggestion_limit),
            smtp_host=env.get("SMTP_HOST", ""),
            smtp_port=_int(env, "SMTP_PORT", cls.smtp_port),
            smtp_username=env.get("SMTP_USERNAME", ""),
            smtp_password=env.get("SMTP_PASSWORD", ""),
            smtp_use_tls=_flag(env.get("SMTP_USE_TLS", "1")),
            mail_from=env.get("MAIL_FROM", cls.mail_from),
            mux_token_id=env.get("MUX_TOKEN_ID", ""),
            mux_token_secret=env.get("MUX_TOKEN_SECRET", ""),
            mux_api_url=env.get("MUX_API_URL", cls.mux_api_url).rstrip("/"),
            http_timeout=_float(env, "HTTP_TIMEOUT", cls.http_timeout),
        )
