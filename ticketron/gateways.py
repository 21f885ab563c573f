"""
Outbound gateways: verification email (Flask-Mail) and livestreams (Mux REST API).

Both are thin passthroughs. Credentials come from Settings; provider error
details are logged but never returned to the client.
"""
from __future__ import annotations

import logging
import smtplib
from typing import Any, Optional

import requests
from flask import Flask
from flask_mail import Mail, Message

from .errors import GatewayError

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Ticketron Organizer Account Email Verification"


class EmailGateway:
    """Sends mail through a Flask-Mail ``Mail`` bound to the app.

    ``send`` must run inside an application context (any request handler does).
    """

    def __init__(self, mail: Mail, sender: Optional[str] = None, enabled: bool = True):
        self.mail = mail
        self.sender = sender
        self.enabled = enabled

    @classmethod
    def init_app(cls, app: Flask, settings) -> "EmailGateway":
        app.config.update(settings.mail_config())
        return cls(Mail(app), settings.mail_from, enabled=bool(settings.smtp_host))

    @property
    def configured(self) -> bool:
        return self.enabled

    def send(self, to: str, subject: str, body: str) -> str:
        if not self.configured:
            raise GatewayError("Email delivery is not configured.")

        msg = Message(subject, recipients=[to], body=body, sender=self.sender)
        try:
            self.mail.send(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            raise GatewayError("Email could not be sent.")

        response = f"accepted for delivery to {to}"
        logger.info("Email sent: %s", response)
        return response

    def send_verification(self, email: str, code: str) -> str:
        body = (
            f"Your Ticketron account email verification code is {code}. "
            "Do not share it with anyone else."
        )
        return self.send(email, VERIFICATION_SUBJECT, body)


class LivestreamGateway:
    """Create, list, fetch and disable Mux live streams."""

    def __init__(self, token_id: str, token_secret: str, base_url: str = "https://api.mux.com", timeout: float = 10.0):
        self.token_id = token_id
        self.token_secret = token_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "LivestreamGateway":
        return cls(settings.mux_token_id, settings.mux_token_secret, settings.mux_api_url, settings.http_timeout)

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        if not (self.token_id and self.token_secret):
            raise GatewayError("Livestream provider is not configured.")
        try:
            resp = requests.request(
                method,
                f"{self.base_url}{path}",
                auth=(self.token_id, self.token_secret),
                json=json,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json() if resp.content else {}
        except requests.RequestException:
            logger.exception("Livestream provider call failed: %s %s", method, path)
            raise GatewayError("Livestream provider request failed.")

        return payload.get("data")

    def create(self, playback_policy: str = "public") -> Any:
        return self._request(
            "POST",
            "/video/v1/live-streams",
            json={
                "playback_policy": [playback_policy],
                "new_asset_settings": {"playback_policy": [playback_policy]},
                "reconnect_window": 10,
            },
        )

    def list(self) -> Any:
        return self._request("GET", "/video/v1/live-streams")

    def retrieve(self, stream_id: str) -> Any:
        return self._request("GET", f"/video/v1/live-streams/{stream_id}")

    def disable(self, stream_id: str) -> None:
        self._request("PUT", f"/video/v1/live-streams/{stream_id}/disable")
