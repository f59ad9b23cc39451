"""
Email templates for magic links and one-time codes.

Each message is rendered in plain text and HTML with a shared header
and footer.
"""

from html import escape

from .ports import EmailMessage

APP_NAME = "verigate"

_HEADER = (
    '<div style="font-family:Arial,sans-serif;max-width:480px;margin:0 auto">'
    '<h1 style="font-size:20px">{app}</h1>'
)
_FOOTER = (
    '<p style="color:#888;font-size:12px">If you didn\'t request this, '
    "you can safely ignore this email.</p></div>"
)
_TEXT_FOOTER = "If you didn't request this, you can safely ignore this email."


def _wrap_html(body: str) -> str:
    return _HEADER.format(app=escape(APP_NAME)) + body + _FOOTER


def magic_link_message(url: str, ttl_minutes: int) -> EmailMessage:
    """Render the sign-in link email."""
    text = (
        f"Click this link to sign in:\n\n{url}\n\n"
        f"This link expires in {ttl_minutes} minutes. {_TEXT_FOOTER}"
    )
    html = _wrap_html(
        f'<p><a href="{escape(url)}">Sign in to {escape(APP_NAME)}</a></p>'
        f"<p>This link expires in {ttl_minutes} minutes.</p>"
    )
    return EmailMessage(subject=f"Sign in to {APP_NAME}", text=text, html=html)


def otp_message(code: str, ttl_minutes: int) -> EmailMessage:
    """Render the one-time code email."""
    text = f"Your sign-in code is {code}\n\nIt expires in {ttl_minutes} minutes. {_TEXT_FOOTER}"
    html = _wrap_html(
        f'<p>Your sign-in code is</p><p style="font-size:28px;letter-spacing:4px">'
        f"<strong>{escape(code)}</strong></p>"
        f"<p>It expires in {ttl_minutes} minutes.</p>"
    )
    return EmailMessage(subject=f"Your {APP_NAME} sign-in code", text=text, html=html)
