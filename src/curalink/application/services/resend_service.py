from __future__ import annotations

import html
import logging
import os
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class ResendEmailService:
    """Send transactional emails via the Resend REST API (no SDK dependency)."""

    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: str, from_email: str, app_base_url: str):
        self.api_key = api_key
        self.from_email = from_email
        self.app_base_url = app_base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> Optional["ResendEmailService"]:
        api_key = os.getenv("CURALINK_RESEND_API_KEY", "").strip()
        if not api_key:
            return None
        from_email = os.getenv("CURALINK_RESEND_FROM", "CuraLink <noreply@curalink.app>")
        app_base_url = os.getenv("CURALINK_APP_URL", "http://localhost:3000")
        return cls(api_key=api_key, from_email=from_email, app_base_url=app_base_url)

    def send(self, *, to: List[str], subject: str, html_body: str, text: str) -> Dict[str, Any]:
        resp = requests.post(
            self.API_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "from": self.from_email,
                "to": to,
                "subject": subject,
                "html": html_body,
                "text": text,
            },
            timeout=15,
        )
        resp.raise_for_status()
        return resp.json()

    def send_verification(self, *, to: str, token: str) -> Dict[str, Any]:
        link = f"{self.app_base_url}/auth/verify?token={token}"
        return self._send_link(
            to=to,
            subject="Verify your email address",
            heading="Verify your email address",
            intro="Click the link below to verify your email address:",
            link=link,
        )

    def send_connection_request(self, *, to: str, requester_name: str) -> Dict[str, Any]:
        link = f"{self.app_base_url}/dashboard/researcher/connections"
        who = requester_name or "A researcher"
        return self._send_link(
            to=to,
            subject=f"[CuraLink] {who} wants to connect",
            heading="New connection request",
            intro=f"{who} sent you a connection request on CuraLink. Review it here:",
            link=link,
        )

    def _send_link(self, *, to: str, subject: str, heading: str, intro: str, link: str) -> Dict[str, Any]:
        html_body = (
            f"<h1>{html.escape(heading)}</h1>"
            f"<p>{html.escape(intro)}</p>"
            f'<a href="{html.escape(link, quote=True)}">{html.escape(link)}</a>'
        )
        text = f"{heading}\n\n{intro}\n{link}\n"
        return self.send(to=[to], subject=subject, html_body=html_body, text=text)


def deliver_quietly(action: str, fn, **kwargs) -> bool:
    """Run a mail send; failures are logged and reported as False, never raised."""
    try:
        fn(**kwargs)
        return True
    except Exception as exc:
        logger.warning("Email %s failed: %s", action, exc)
        return False
