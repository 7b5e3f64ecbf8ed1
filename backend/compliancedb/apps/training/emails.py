"""
HTML bodies for training emails: invites, manual completion reminders and
certificate-expiry reminders.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from html import escape

from compliancedb.utils.dates import ensure_utc

APP_BASE_URL = os.getenv("APP_BASE_URL", "https://app.aihirelaw.com").rstrip("/")

BAND_NOTICE = "notice"
BAND_URGENT = "urgent"
BAND_TODAY = "today"
BAND_EXPIRED = "expired"

_HEADER_COLORS = {
    BAND_NOTICE: "#1e40af",
    BAND_URGENT: "#ea580c",
    BAND_TODAY: "#dc2626",
    BAND_EXPIRED: "#dc2626",
}

_SUBJECT_PREFIX = {
    BAND_NOTICE: "",
    BAND_URGENT: "URGENT: ",
    BAND_TODAY: "ACTION REQUIRED: ",
    BAND_EXPIRED: "EXPIRED: ",
}

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #1f2937; margin: 0; padding: 0; background: #f3f4f6; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .card { background: white; border-radius: 12px; overflow: hidden; }
    .content { padding: 24px; }
    .stat-box { background: #f9fafb; padding: 16px; border-radius: 8px; margin: 16px 0; border: 1px solid #e5e7eb; }
    .cta { display: inline-block; background: #1e40af; color: white !important; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 20px 0; font-weight: 500; }
    .footer { color: #6b7280; font-size: 13px; padding: 24px; text-align: center; }
"""


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def base_url(override: str | None = None) -> str:
    return (override or APP_BASE_URL).rstrip("/")


def training_link(token: str, *, override_base: str | None = None) -> str:
    return f"{base_url(override_base)}/training/start/{token}"


def _wrap(header: str, header_color: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>{_STYLE}    .header {{ background: {header_color}; color: white; padding: 24px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="card">
      <div class="header">
        <h1 style="margin: 0; font-size: 20px;">{header}</h1>
      </div>
      <div class="content">
{body}
      </div>
    </div>
    <div class="footer">
      <p>This training is powered by AIHireLaw.</p>
    </div>
  </div>
</body>
</html>"""


def _long_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def render_invite_email(
    *,
    name: str,
    track_label: str,
    org_name: str,
    training_url: str,
) -> RenderedEmail:
    body = f"""        <p>Hi {escape(name)},</p>
        <p><strong>{escape(org_name)}</strong> has assigned you AI Hiring Compliance Training.</p>
        <div class="stat-box">
          <strong>Track:</strong> {escape(track_label)}<br>
          <strong>Estimated Time:</strong> 30-60 minutes<br>
          <strong>Certificate:</strong> Valid for 12 months
        </div>
        <p>Complete every section and pass each quiz to earn your certificate.</p>
        <a href="{escape(training_url, quote=True)}" class="cta">Start Training</a>
        <p>This link is personal to you and works without a login.</p>"""
    return RenderedEmail(
        subject="You've been assigned AI Hiring Compliance Training",
        html=_wrap(f"Training Assigned: {escape(track_label)}", "#1e40af", body),
    )


def render_completion_reminder_email(
    *,
    name: str,
    track_label: str,
    org_name: str,
    training_url: str,
    completed_sections: int,
    total_sections: int,
) -> RenderedEmail:
    body = f"""        <p>Hi {escape(name)},</p>
        <p>This is a reminder from <strong>{escape(org_name)}</strong> to finish your
        <strong>{escape(track_label)}</strong> compliance training.</p>
        <div class="stat-box">
          <strong>Progress:</strong> {completed_sections} of {total_sections} sections complete
        </div>
        <a href="{escape(training_url, quote=True)}" class="cta">Continue Training</a>"""
    return RenderedEmail(
        subject=f"Reminder: complete your {track_label} training",
        html=_wrap("Training Reminder", "#1e40af", body),
    )


def expiry_band(expires_at: datetime, now: datetime) -> tuple[str, int]:
    """
    Urgency band and UTC calendar days left for a certificate.

    Bands: expired once `now` is past expiry, today when it expires later
    on the current UTC day, urgent up to 7 days out, notice beyond that.
    """
    expires_at = ensure_utc(expires_at)
    now = ensure_utc(now)
    if now > expires_at:
        return BAND_EXPIRED, 0
    days = (expires_at.date() - now.date()).days
    if days == 0:
        return BAND_TODAY, 0
    if days <= 7:
        return BAND_URGENT, days
    return BAND_NOTICE, days


def render_expiry_email(
    *,
    name: str,
    track_label: str,
    certificate_number: str,
    expires_at: datetime,
    org_name: str,
    now: datetime,
    recertify_url: str,
) -> RenderedEmail:
    band, days = expiry_band(expires_at, now)
    prefix = _SUBJECT_PREFIX[band]

    if band == BAND_EXPIRED:
        subject = f"{prefix}Your {track_label} certification has expired"
        header = "Certification Expired"
        lead = (
            f"Your <strong>{escape(track_label)}</strong> certification has expired. "
            "You may be out of compliance with AI hiring regulations."
        )
    elif band == BAND_TODAY:
        subject = f"{prefix}Your {track_label} certification expires today"
        header = "Certification Expires Today"
        lead = f"Your <strong>{escape(track_label)}</strong> certification expires today."
    else:
        subject = f"{prefix}Your {track_label} certification expires in {days} days"
        header = "Certification Expiring Soon"
        lead = f"Your <strong>{escape(track_label)}</strong> certification expires in {days} days."

    body = f"""        <p>Hi {escape(name)},</p>
        <p>{lead}</p>
        <div class="stat-box">
          <strong>Certificate:</strong> #{escape(certificate_number)}<br>
          <strong>Track:</strong> {escape(track_label)}<br>
          <strong>Expires:</strong> {_long_date(ensure_utc(expires_at))}<br>
          <strong>Organization:</strong> {escape(org_name)}
        </div>
        <p>Most state regulations require current training for teams using AI-assisted hiring.
        Recertification takes about 15 minutes and covers changes from the past year.</p>
        <a href="{escape(recertify_url, quote=True)}" class="cta">Recertify Now</a>
        <p>The {escape(org_name)} Compliance Team</p>"""
    return RenderedEmail(subject=subject, html=_wrap(f"{prefix}{header}", _HEADER_COLORS[band], body))
