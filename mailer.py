import logging
from typing import Optional, Dict, Any

import httpx
from jinja2 import Environment
from markupsafe import Markup

import config
from errors import ConfigurationError, UpstreamError


logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

_jinja_env = Environment(autoescape=True)
Template = _jinja_env.from_string

EMAIL_LAYOUT = """<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #000000;">
  <table role="presentation" style="width: 100%; border-collapse: collapse; background-color: #000000;">
    <tr><td align="center" style="padding: 40px 20px;">
      <table role="presentation" style="max-width: 600px; width: 100%; border-collapse: collapse; background: linear-gradient(135deg, #1a1a1a 0%, #2a2a2a 100%); border: 2px solid rgba(176, 33, 42, 0.3); border-radius: 8px;">
        <tr><td style="padding: 40px 30px; text-align: center; border-bottom: 1px solid rgba(176, 33, 42, 0.2);">
          <h1 style="margin: 0; color: {{ heading_color }}; font-family: Impact, 'Arial Black', sans-serif; font-size: 28px; letter-spacing: 2px; text-transform: uppercase;">{{ heading }}</h1>
        </td></tr>
        <tr><td style="padding: 40px 30px;">{{ body }}</td></tr>
        <tr><td style="padding: 30px; text-align: center; border-top: 1px solid rgba(176, 33, 42, 0.2);">
          <p style="margin: 0; color: #888888; font-size: 14px;">{{ footer }}</p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>
"""

CONTACT_BODY = Template("""
<p><strong style="color: #b0212a; text-transform: uppercase;">Name:</strong><br>
<span style="color: #e0e0e0;">{{ name }}</span></p>
<p><strong style="color: #b0212a; text-transform: uppercase;">Email:</strong><br>
<a href="mailto:{{ email }}" style="color: #e0e0e0; text-decoration: none;">{{ email }}</a></p>
<p><strong style="color: #b0212a; text-transform: uppercase;">Message:</strong></p>
<p style="color: #e0e0e0; line-height: 1.6; white-space: pre-wrap;">{{ message }}</p>
""")

WELCOME_BODY = Template("""
<h2 style="margin: 0 0 20px 0; color: #b0212a; text-transform: uppercase;">Welcome to the mosh pit!</h2>
<p style="color: #e0e0e0; line-height: 1.6;">Thanks for joining the LLP Events mailing list! You're now in the know for:</p>
<ul style="color: #e0e0e0; line-height: 1.8;">
  <li>Concert announcements &amp; presale access</li>
  <li>Exclusive merch drops</li>
  <li>Contests &amp; giveaways</li>
  <li>Band applications &amp; more</li>
</ul>
<p style="text-align: center;"><a href="{{ site_url }}" style="display: inline-block; padding: 15px 40px; background: #b0212a; color: #ffffff; text-decoration: none; font-weight: 700; text-transform: uppercase;">View upcoming shows</a></p>
""")

_layout = Template(EMAIL_LAYOUT)


def render_contact_email(name: str, email: str, message: str) -> str:
    """HTML for the contact notification; user input is escaped"""
    body = CONTACT_BODY.render(name=name, email=email, message=message)
    return _layout.render(
        heading="New contact form submission",
        heading_color="#b0212a",
        body=Markup(body),
        footer="Submitted from llp-events.com contact form",
    )


def render_welcome_email(site_url: str = config.SITE_URL) -> str:
    body = WELCOME_BODY.render(site_url=site_url)
    return _layout.render(
        heading="LLP Events",
        heading_color="#ffffff",
        body=Markup(body),
        footer="You're receiving this because you signed up for the LLP Events mailing list.",
    )


class ResendClient:
    """Sends transactional email through the Resend API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.RESEND_API_KEY
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def close(self):
        await self.client.aclose()

    async def send(self, payload: Dict[str, Any], failure_message: str) -> Dict[str, Any]:
        """Send one email; a rejected send raises UpstreamError with Resend's reply"""
        if not self.api_key:
            raise ConfigurationError("RESEND_API_KEY is not set")

        try:
            response = await self.client.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.RequestError as e:
            raise UpstreamError(
                f"Resend request failed: {e}", public_message=failure_message
            ) from e

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text}

        if response.is_error:
            logger.error("Resend API error: %s", data)
            raise UpstreamError(
                f"Resend returned HTTP {response.status_code}",
                payload=data,
                status_code=response.status_code,
                public_message=failure_message,
            )
        return data

    async def send_contact(self, name: str, email: str, message: str) -> Dict[str, Any]:
        return await self.send(
            {
                "from": config.CONTACT_FROM,
                "to": config.CONTACT_TO,
                "reply_to": email,
                "subject": f"Contact Form: {name}",
                "html": render_contact_email(name, email, message),
            },
            failure_message="Failed to send message. Please try again.",
        )

    async def send_welcome(self, email: str) -> Dict[str, Any]:
        return await self.send(
            {
                "from": config.SUBSCRIBE_FROM,
                "to": email,
                "subject": "Welcome to LLP Events! 🎸",
                "html": render_welcome_email(),
            },
            failure_message="Failed to subscribe. Please try again.",
        )


class TurnstileVerifier:
    """Checks Cloudflare Turnstile tokens submitted with forms"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = (
            secret_key if secret_key is not None else config.TURNSTILE_SECRET_KEY
        )
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    async def close(self):
        await self.client.aclose()

    async def verify(self, token: str) -> bool:
        if not self.secret_key:
            raise ConfigurationError("TURNSTILE_SECRET_KEY is not set")

        try:
            response = await self.client.post(
                TURNSTILE_VERIFY_URL,
                json={"secret": self.secret_key, "response": token},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"Turnstile verification failed: {e}",
                public_message="Verification failed. Please try again.",
            ) from e

        return bool(response.json().get("success"))
