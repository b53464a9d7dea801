"""SMTP delivery for verification codes, grind notices and support forms.

``send_email`` raises ``MailServiceError`` so callers that must report a
failure (support forms) can; ``send_best_effort`` is for notices whose loss
should never fail the request that triggered them.
"""

from __future__ import annotations

import re
import smtplib
from contextlib import contextmanager
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Iterable, Mapping

from flask import current_app


class MailServiceError(RuntimeError):
    """The SMTP server could not be reached or refused the message."""


_TAG_RULES = (
    (re.compile(r"(?is)<(script|style)\b.*?</\1\s*>"), ""),
    (re.compile(r"(?i)<br\s*/?>"), "\n"),
    (re.compile(r"(?i)</(p|div|h[1-6]|li)>"), "\n\n"),
    (re.compile(r"<[^>]+>"), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
)


def html_to_text(html: str | None) -> str:
    text = html or ""
    for pattern, replacement in _TAG_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def _recipients(to: str | Iterable[str] | None) -> list[str]:
    if not to:
        return []
    items = [to] if isinstance(to, str) else list(to)
    return [item.strip() for item in items if item and item.strip()]


def build_message(
    config: Mapping,
    *,
    recipients: list[str],
    subject: str,
    text: str | None,
    html: str | None,
    reply_to: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> EmailMessage:
    # Relays reject envelopes whose sender differs from the login.
    sender = config.get("MAIL_USERNAME") or config.get("MAIL_DEFAULT_SENDER")
    sender_name = config.get("MAIL_DEFAULT_NAME")

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = formataddr((sender_name, sender)) if sender_name else sender
    message["To"] = ", ".join(recipients)
    if reply_to or config.get("MAIL_REPLY_TO"):
        message["Reply-To"] = reply_to or config.get("MAIL_REPLY_TO")
    message["Message-ID"] = make_msgid(domain=sender.rpartition("@")[2] if sender else None)
    for name, value in (headers or {}).items():
        message[name] = value

    message.set_content(text or html_to_text(html) or " ")
    if html:
        message.add_alternative(html, subtype="html")
    return message


def send_email(
    *,
    to: str | Iterable[str],
    subject: str,
    text: str | None = None,
    html: str | None = None,
    reply_to: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> str | None:
    """Deliver one message and return its Message-ID.

    Returns None without connecting when ``MAIL_ENABLED`` is off. Raises
    ``ValueError`` for a message with no recipient or no body.
    """

    config = current_app.config
    if not config.get("MAIL_ENABLED", True):
        current_app.logger.info("Mail disabled; dropped %r for %s", subject, to)
        return None

    recipients = _recipients(to)
    if not recipients:
        raise ValueError("At least one recipient is required")
    if text is None and html is None:
        raise ValueError("Either text or html body must be provided")

    message = build_message(
        config,
        recipients=recipients,
        subject=subject,
        text=text,
        html=html,
        reply_to=reply_to,
        headers=headers,
    )
    try:
        with _smtp_connection(config) as smtp:
            smtp.send_message(message, to_addrs=recipients)
    except (OSError, smtplib.SMTPException, MailServiceError) as exc:
        current_app.logger.exception("SMTP delivery of %r failed", subject)
        raise MailServiceError(str(exc)) from exc

    current_app.logger.info("Mail %s sent to %s", message["Message-ID"], ", ".join(recipients))
    return message["Message-ID"]


def send_best_effort(**kwargs) -> bool:
    """``send_email`` that logs failures; True when handed off or mail is disabled."""

    try:
        send_email(**kwargs)
    except (MailServiceError, ValueError):
        current_app.logger.warning("Best-effort mail to %s failed", kwargs.get("to"), exc_info=True)
        return False
    return True


@contextmanager
def _smtp_connection(config):
    host, port = config.get("MAIL_SERVER"), config.get("MAIL_PORT")
    if not host or not port:
        raise MailServiceError("SMTP server or port is not configured")

    implicit_tls = bool(config.get("MAIL_USE_SSL"))
    factory = smtplib.SMTP_SSL if implicit_tls else smtplib.SMTP
    smtp = factory(host, port, timeout=config.get("MAIL_TIMEOUT", 30))
    try:
        if not implicit_tls and config.get("MAIL_USE_TLS", True):
            smtp.starttls()
        if config.get("MAIL_USERNAME"):
            smtp.login(config["MAIL_USERNAME"], config.get("MAIL_PASSWORD"))
        yield smtp
    finally:
        try:
            smtp.quit()
        except smtplib.SMTPException:  # pragma: no cover - already disconnected
            smtp.close()
