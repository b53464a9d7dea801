"""Inline bodies for transactional emails.

Each builder returns ``(subject, text, html)`` ready for ``mail_service.send_email``.
"""

from __future__ import annotations

from datetime import datetime
from html import escape

from flask import current_app


def _app_name() -> str:
    return current_app.config.get("APP_NAME", "Uncooked")


def _site_url() -> str:
    return current_app.config.get("SITE_URL", "").rstrip("/")


def _wrap(title: str, body_html: str, footer: str | None = None) -> str:
    app_name = escape(_app_name())
    footer_html = (
        f'<tr><td style="font-size:12px;color:#94a3b8;padding-top:24px;text-align:center;">{footer}</td></tr>'
        if footer
        else ""
    )
    return f"""
      <table width="100%" cellpadding="0" cellspacing="0" style="font-family:Arial,sans-serif;background:#f8fafc;padding:16px 0;">
        <tr>
          <td align="center">
            <table width="600" cellpadding="0" cellspacing="0" style="background:#fff;border-radius:12px;padding:24px;border:1px solid #e2e8f0;">
              <tr>
                <td style="text-align:center;padding-bottom:12px;">
                  <p style="margin:0;font-size:13px;letter-spacing:0.35em;text-transform:uppercase;color:#94a3b8;">{app_name}</p>
                  <h2 style="margin:8px 0 0;font-size:20px;color:#0f172a;">{escape(title)}</h2>
                </td>
              </tr>
              <tr>
                <td style="font-size:14px;color:#0f172a;line-height:1.6;">{body_html}</td>
              </tr>
              {footer_html}
            </table>
          </td>
        </tr>
      </table>
    """


def _multiline(value: str) -> str:
    return escape(value.strip()).replace("\n", "<br/>")


def _format_when(value: datetime) -> str:
    return f"{value:%A} {value.day} {value:%B %Y, %H:%M} UTC"


def verification_code(code: str, expires_minutes: int, *, purpose: str = "signup") -> tuple[str, str, str]:
    app_name = _app_name()
    if purpose == "email_change":
        subject = f"Confirm your {app_name} email change"
        lead = "Use this code to confirm your new email address."
    else:
        subject = f"Your {app_name} verification code"
        lead = "Use this code to finish creating your account."
    text = f"{lead}\n\n{code}\n\nThe code expires in {expires_minutes} minutes."
    html = _wrap(
        subject,
        f'<p style="margin:0;">{escape(lead)}</p>'
        f'<p style="font-size:28px;letter-spacing:0.3em;font-weight:bold;text-align:center;">{escape(code)}</p>'
        f'<p style="margin:0;color:#64748b;">The code expires in {expires_minutes} minutes.</p>',
        "If you did not request this, you can ignore this email.",
    )
    return subject, text, html


def email_change_notice(old_email: str, new_email: str) -> tuple[str, str, str]:
    subject = f"Your {_app_name()} email was updated"
    text = (
        f"The email on your account changed from {old_email} to {new_email}.\n"
        "If this wasn't you, contact support immediately."
    )
    html = _wrap(
        subject,
        f"<p>The email on your account changed from <strong>{escape(old_email)}</strong>"
        f" to <strong>{escape(new_email)}</strong>.</p>"
        "<p>If this wasn't you, contact support immediately.</p>",
    )
    return subject, text, html


def password_reset(reset_link: str, expires_minutes: int) -> tuple[str, str, str]:
    subject = f"Reset your {_app_name()} password"
    text = (
        f"Reset your password using the link below (valid for {expires_minutes} minutes):\n"
        f"{reset_link}"
    )
    html = _wrap(
        subject,
        f'<p>Reset your password using the link below (valid for {expires_minutes} minutes).</p>'
        f'<p><a href="{escape(reset_link)}" style="color:#2563eb;">Reset password</a></p>',
    )
    return subject, text, html


def grind_confirmation(name: str, grind) -> tuple[str, str, str]:
    subject = f"You're registered for {grind.title}"
    when = _format_when(grind.scheduled_at)
    link = grind.meeting_url or f"{_site_url()}/dashboard/grinds"
    text = (
        f"Hi {name},\n\n"
        f"You're registered for {grind.title} on {when} ({grind.duration_minutes} minutes).\n"
        f"Join here: {link}\n\n"
        "We'll send a reminder two hours before it starts."
    )
    html = _wrap(
        subject,
        f"<p>Hi {escape(name)},</p>"
        f"<p>You're registered for <strong>{escape(grind.title)}</strong> on {escape(when)}"
        f" ({grind.duration_minutes} minutes).</p>"
        f'<p><a href="{escape(link)}" style="color:#2563eb;">Join the session</a></p>',
        "We'll send a reminder two hours before it starts.",
    )
    return subject, text, html


def grind_reminder(name: str, grind) -> tuple[str, str, str]:
    subject = f"Reminder: {grind.title} starts in 2 hours"
    link = grind.meeting_url or f"{_site_url()}/dashboard/grinds"
    text = (
        f"Hi {name},\n\nYour session {grind.title} starts in 2 hours "
        f"({_format_when(grind.scheduled_at)}).\nJoin here: {link}"
    )
    html = _wrap(
        subject,
        f"<p>Hi {escape(name)},</p>"
        f"<p>Your session <strong>{escape(grind.title)}</strong> starts in 2 hours"
        f" ({escape(_format_when(grind.scheduled_at))}).</p>"
        f'<p><a href="{escape(link)}" style="color:#2563eb;">Join the session</a></p>',
    )
    return subject, text, html


DEFAULT_FEEDBACK_BODY = (
    "Thanks for attending the grind! We'd love to hear how it went. "
    "Your feedback helps make future sessions better for everyone."
)


def grind_feedback_request(name: str, grind, feedback_url: str, body: str | None = None) -> tuple[str, str, str]:
    subject = f"How was {grind.title}?"
    message = (body or "").strip() or DEFAULT_FEEDBACK_BODY
    greeting = name[:1].upper() + name[1:]
    text = f"Hi {greeting},\n\n{message}\n\nShare your feedback: {feedback_url}"
    html = _wrap(
        subject,
        f"<p>Hi {escape(greeting)},</p>"
        f"<p>{_multiline(message)}</p>"
        f'<p style="text-align:center;margin:24px 0;"><a href="{escape(feedback_url)}" '
        'style="background:#2563eb;color:#fff;padding:10px 20px;border-radius:8px;text-decoration:none;">'
        "Share Your Feedback</a></p>",
    )
    return subject, text, html


def grind_rescheduled(name: str, grind, previous: datetime) -> tuple[str, str, str]:
    subject = f"{grind.title} has been rescheduled"
    text = (
        f"Hi {name},\n\n{grind.title} moved from {_format_when(previous)} "
        f"to {_format_when(grind.scheduled_at)}. Your registration still stands."
    )
    html = _wrap(
        subject,
        f"<p>Hi {escape(name)},</p>"
        f"<p><strong>{escape(grind.title)}</strong> moved from {escape(_format_when(previous))}"
        f" to <strong>{escape(_format_when(grind.scheduled_at))}</strong>.</p>"
        "<p>Your registration still stands.</p>",
    )
    return subject, text, html


def contact_message(*, name: str, email: str, category: str, message: str, user_id: int | None) -> tuple[str, str, str]:
    subject = f"[Contact] {category} from {name}"
    account_line = f"User ID: {user_id}" if user_id else "User ID: (not signed in)"
    text = (
        f"{_app_name()} contact form\n"
        f"----------------------------------------\n"
        f"Name: {name}\nEmail: {email}\nCategory: {category}\n{account_line}\n"
        f"----------------------------------------\n"
        f"{message}"
    )
    html = _wrap(
        "Contact form",
        f'<p style="margin:0;"><strong>Name:</strong> {escape(name)}</p>'
        f'<p style="margin:4px 0;"><strong>Email:</strong> {escape(email)}</p>'
        f'<p style="margin:4px 0;"><strong>Category:</strong> {escape(category)}</p>'
        f'<p style="margin:4px 0;">{escape(account_line)}</p>'
        '<hr style="border:none;border-top:1px solid #e2e8f0;margin:16px 0;" />'
        f'<p style="margin:0;color:#334155;">{_multiline(message)}</p>',
    )
    return subject, text, html


def grind_feedback(*, name: str, email: str, grind, feedback: str) -> tuple[str, str, str]:
    subject = f"[Feedback] {grind.title}"
    text = (
        f"Grind feedback\n"
        f"----------------------------------------\n"
        f"Session: {grind.title} ({_format_when(grind.scheduled_at)})\n"
        f"Name: {name}\nEmail: {email}\n"
        f"----------------------------------------\n"
        f"{feedback}"
    )
    html = _wrap(
        "Grind feedback",
        f'<p style="margin:0;"><strong>Session:</strong> {escape(grind.title)}</p>'
        f'<p style="margin:4px 0;"><strong>Name:</strong> {escape(name)}</p>'
        f'<p style="margin:4px 0;"><strong>Email:</strong> {escape(email)}</p>'
        '<hr style="border:none;border-top:1px solid #e2e8f0;margin:16px 0;" />'
        f'<p style="margin:0;color:#334155;">{_multiline(feedback)}</p>',
    )
    return subject, text, html
