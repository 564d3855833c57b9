"""
Badge email dispatch: one message per badge holder with the badge code
embedded in the body and attached as an SVG file.

Sends run one at a time with a short pause between them to stay under SMTP
rate limits. A failure for one badge is recorded in its result and the batch
carries on.
"""
import logging
import time
from html import escape
from typing import List, Optional

from checkin.core.config import settings
from checkin.core.email_service import EmailService
from checkin.schemas.badge import Badge, EmailResult
from checkin.services.codes import SVG_MEDIA_TYPE, render_code_svg, svg_data_uri

logger = logging.getLogger(__name__)


def access_text(badge: Badge) -> str:
    if badge.is_multiday:
        return f"Valid for days: {', '.join(str(day) for day in badge.days)}"
    return "Valid for all event days"


def usage_text(badge: Badge) -> str:
    if badge.is_multiday:
        return "This badge can only be used once per valid day"
    return "This badge can be used for all event days"


def build_badge_email_html(badge: Badge, code_uri: str) -> str:
    name = escape(badge.name)
    badge_id = escape(badge.badge_id)
    companion = (
        f"<p><strong>Companion:</strong> {escape(badge.companion)}</p>" if badge.companion else ""
    )
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <title>Your Event Badge</title>
        <style>
            body {{ font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }}
            .container {{ max-width: 600px; margin: 0 auto; background-color: white; border-radius: 8px; overflow: hidden; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }}
            .header {{ background-color: #6366f1; color: white; padding: 30px; text-align: center; }}
            .content {{ padding: 30px; }}
            .badge-info {{ background-color: #f8fafc; border-radius: 6px; padding: 20px; margin: 20px 0; }}
            .badge-id {{ font-family: 'Courier New', monospace; font-size: 24px; font-weight: bold; color: #374151; }}
            .code {{ text-align: center; margin: 20px 0; }}
            .note {{ color: #6b7280; font-size: 14px; margin-top: 10px; }}
            .footer {{ background-color: #f8fafc; padding: 20px; text-align: center; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Your Event Badge</h1>
            </div>
            <div class="content">
                <h2>Hello {name},</h2>
                <p>Your event badge is ready. Present the code below at the check-in station.</p>

                <div class="code">
                    <img src="{code_uri}" alt="Badge code {badge_id}" width="240" height="240">
                </div>

                <div class="badge-info">
                    <h3>Badge Details:</h3>
                    <p><strong>Badge ID:</strong> <span class="badge-id">{badge_id}</span></p>
                    <p><strong>Name:</strong> {name}</p>
                    <p><strong>Type:</strong> {escape(badge.type.value)}</p>
                    <p><strong>Access:</strong> {escape(access_text(badge))}</p>
                    {companion}
                </div>

                <div class="note">
                    <p><strong>Important:</strong></p>
                    <ul>
                        <li>Save the attached code to your phone or print it out</li>
                        <li>Present the code at check-in stations</li>
                        <li>{usage_text(badge)}</li>
                    </ul>
                </div>
            </div>
            <div class="footer">
                <p>If you have any questions, please contact event support.</p>
            </div>
        </div>
    </body>
    </html>
    """


def build_badge_email_text(badge: Badge) -> str:
    lines = [
        f"Hello {badge.name},",
        "",
        "Your event badge is ready. The badge code is attached to this email.",
        "",
        f"Badge ID: {badge.badge_id}",
        f"Name: {badge.name}",
        f"Type: {badge.type.value}",
        f"Access: {access_text(badge)}",
    ]
    if badge.companion:
        lines.append(f"Companion: {badge.companion}")
    lines += ["", usage_text(badge), "", "If you have any questions, please contact event support."]
    return "\n".join(lines)


class BadgeEmailDispatcher:
    def __init__(self, email_service: Optional[EmailService] = None, delay_seconds: Optional[float] = None):
        self.email_service = email_service or EmailService()
        if delay_seconds is None:
            delay_seconds = settings.EMAIL_SEND_DELAY_MS / 1000
        self.delay_seconds = delay_seconds

    def send_badge_email(self, badge: Badge) -> EmailResult:
        if not badge.has_valid_email:
            return EmailResult(success=False, email=badge.email, badge_id=badge.badge_id, error="Invalid email address")

        try:
            svg = render_code_svg(badge.badge_id)
        except Exception as e:
            return EmailResult(success=False, email=badge.email, badge_id=badge.badge_id, error=f"Could not render badge code: {e}")

        cc = [settings.BADGE_EMAIL_CC] if settings.BADGE_EMAIL_CC else None
        try:
            sent = self.email_service.send_email(
                to_emails=[badge.email],
                subject=f"Your Event Badge - {badge.badge_id}",
                html_content=build_badge_email_html(badge, svg_data_uri(svg)),
                text_content=build_badge_email_text(badge),
                attachments=[(f"badge-{badge.badge_id}.svg", svg, SVG_MEDIA_TYPE)],
                cc_emails=cc,
            )
        except Exception as e:
            logger.error(f"Unexpected error emailing badge {badge.badge_id}: {e}")
            return EmailResult(success=False, email=badge.email, badge_id=badge.badge_id, error=str(e) or "Failed to send email")
        if not sent:
            logger.warning(f"Badge email for {badge.badge_id} to {badge.email} failed")
            return EmailResult(success=False, email=badge.email, badge_id=badge.badge_id, error="Failed to send email")

        logger.info(f"Badge email for {badge.badge_id} sent to {badge.email}")
        return EmailResult(success=True, email=badge.email, badge_id=badge.badge_id)

    def send_badge_emails(self, badges: List[Badge]) -> List[EmailResult]:
        """Send to each badge in order, pausing between sends."""
        results = []
        for position, badge in enumerate(badges):
            if position and self.delay_seconds:
                time.sleep(self.delay_seconds)
            results.append(self.send_badge_email(badge))
        sent = sum(1 for r in results if r.success)
        logger.info(f"Badge email batch finished: {sent}/{len(results)} sent")
        return results
