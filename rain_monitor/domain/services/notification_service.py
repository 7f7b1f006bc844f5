"""
Rain alert notifications over Telegram and email.

Features:
- Plain text summary for Telegram (Bot API sendMessage)
- HTML report with colour-coded zone cards for email (authenticated SMTP)
- Channels are independent and best-effort: failures are logged, never
  retried and never raised
- Unconfigured channels are skipped silently
"""
import asyncio
import html
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import httpx

from .alert_evaluator import FLOOD_RISK_MESSAGES, AlertEvaluation, format_ist
from .interfaces import INotificationChannel
from rain_monitor.core.config import Settings, settings as default_settings
from rain_monitor.domain.models import NotificationResult, RainIntensity, ReconciledReading

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
NOTIFY_TIMEOUT_SECONDS = 10.0

INTENSITY_COLORS = {
    RainIntensity.NO_DATA: "#9ca3af",
    RainIntensity.NO_RAIN: "#10b981",
    RainIntensity.LIGHT: "#3b82f6",
    RainIntensity.MEDIUM: "#f59e0b",
    RainIntensity.HEAVY: "#ef4444",
    RainIntensity.VERY_HEAVY: "#7c3aed",
}


class TelegramNotifier(INotificationChannel):
    """Sends the text summary to a Telegram chat via the Bot API."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def is_configured(self) -> bool:
        return self.config.telegram_configured

    async def send(self, subject: str, text: str, html: str = "") -> bool:
        if not self.is_configured():
            logger.warning("[Telegram] Not configured - skipping message")
            return False

        url = f"{TELEGRAM_API_URL}/bot{self.config.TELEGRAM_BOT_TOKEN}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=NOTIFY_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    url,
                    json={
                        "chat_id": self.config.TELEGRAM_CHAT_ID,
                        "text": text,
                        "parse_mode": "HTML",
                    },
                )
            if not 200 <= response.status_code < 300:
                logger.error(f"📱 [Telegram] API returned status {response.status_code}")
                return False

            logger.info("📱 [Telegram] Notification sent successfully")
            return True

        except Exception as e:
            logger.error(f"📱 [Telegram] Send failed: {e}")
            return False


class EmailNotifier(INotificationChannel):
    """Sends the HTML report over authenticated SMTP (STARTTLS)."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def is_configured(self) -> bool:
        return self.config.email_configured

    async def send(self, subject: str, text: str, html: str) -> bool:
        if not self.is_configured():
            logger.warning("[Email] Not configured - skipping message")
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.config.EMAIL_FROM
        message["To"] = self.config.EMAIL_TO
        message.attach(MIMEText(text, "plain", "utf-8"))
        message.attach(MIMEText(html, "html", "utf-8"))

        try:
            # smtplib is blocking - keep it off the event loop
            await asyncio.to_thread(self._deliver, message)
            logger.info(f"📧 [Email] Report sent to {self.config.EMAIL_TO}")
            return True
        except Exception as e:
            logger.error(f"📧 [Email] Send failed: {e}")
            return False

    def _deliver(self, message: MIMEMultipart):
        recipients = [addr.strip() for addr in self.config.EMAIL_TO.split(",") if addr.strip()]
        with smtplib.SMTP(
            self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=NOTIFY_TIMEOUT_SECONDS
        ) as server:
            server.starttls()
            server.login(self.config.EMAIL_FROM, self.config.EMAIL_PASS)
            server.sendmail(self.config.EMAIL_FROM, recipients, message.as_string())


def build_summary_text(evaluation: AlertEvaluation, sent_at: datetime, threshold_mm: float = 1.0) -> str:
    """Plain text summary used for Telegram and the email text part."""
    zones = evaluation.triggering
    lines = [
        "🌧️ Mumbai Rain Alert Summary",
        f"{len(zones)} zone(s) experiencing rainfall ≥{threshold_mm:g}mm:",
        "",
    ]
    lines.extend(
        f"📍 {html.escape(r.zone)}: {r.rainfall_mm:.1f}mm/hr ({r.intensity.value})"
        for r in zones
    )
    if evaluation.flood_risk:
        lines.extend(["", FLOOD_RISK_MESSAGES[evaluation.flood_risk]])
    lines.extend(["", f"⏰ {format_ist(sent_at)}"])
    return "\n".join(lines)


def _zone_card(reading: ReconciledReading) -> str:
    color = INTENSITY_COLORS.get(reading.intensity, "#6b7280")
    details = []
    if reading.temperature_c is not None:
        details.append(f"🌡️ {reading.temperature_c}°C")
    if reading.humidity_pct is not None:
        details.append(f"💧 {reading.humidity_pct:.0f}%")
    if reading.condition_text:
        details.append(html.escape(reading.condition_text))
    return f"""
            <div style="border-left: 6px solid {color}; background: #ffffff; padding: 12px 16px; margin: 10px 0; border-radius: 6px; box-shadow: 0 1px 2px rgba(0,0,0,0.06);">
                <div style="font-size: 16px; font-weight: bold; color: #1f2937;">📍 {html.escape(reading.zone)}</div>
                <div style="font-size: 22px; font-weight: bold; color: {color};">{reading.rainfall_mm:.1f} mm/hr
                    <span style="font-size: 13px; font-weight: normal;">({reading.intensity.value})</span>
                </div>
                <div style="color: #6b7280; font-size: 13px;">{" · ".join(details)}</div>
            </div>"""


def build_report_html(evaluation: AlertEvaluation, sent_at: datetime) -> str:
    """HTML email report: one colour-coded card per alerting zone plus flood risk."""
    cards = "".join(_zone_card(r) for r in evaluation.triggering)
    risk_line = ""
    if evaluation.flood_risk:
        risk_line = f"""
            <p style="font-size: 16px; font-weight: bold; padding: 12px; background: #fef3c7; border-radius: 6px;">
                {FLOOD_RISK_MESSAGES[evaluation.flood_risk]}
            </p>"""

    return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>Mumbai Rain Alert</title>
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: linear-gradient(135deg, #1e3a8a 0%, #2563eb 100%); padding: 24px; text-align: center; border-radius: 10px 10px 0 0;">
                <h1 style="color: white; margin: 0; font-size: 26px;">🌧️ Mumbai Rain Alert</h1>
                <p style="color: rgba(255,255,255,0.9); margin-top: 8px;">{len(evaluation.triggering)} zone(s) reporting rainfall</p>
            </div>

            <div style="background: #f9fafb; padding: 20px; border: 1px solid #e5e7eb; border-top: none; border-radius: 0 0 10px 10px;">
                {risk_line}
                {cards}
            </div>

            <div style="text-align: center; padding: 20px; color: #9ca3af; font-size: 12px;">
                <p>Mumbai Rain Monitor - {format_ist(sent_at)}</p>
            </div>
        </body>
        </html>
        """


class NotificationService:
    """Dispatches alert summaries to every configured channel."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        telegram: Optional[INotificationChannel] = None,
        email: Optional[INotificationChannel] = None,
    ):
        self.config = config or default_settings
        self.telegram = telegram or TelegramNotifier(self.config)
        self.email = email or EmailNotifier(self.config)

    def get_channel_status(self) -> dict:
        return {
            "telegram": self.telegram.is_configured(),
            "email": self.email.is_configured(),
        }

    async def _dispatch(self, subject: str, text: str, html_body: str) -> NotificationResult:
        channels = {"telegram": self.telegram, "email": self.email}
        active = {name: ch for name, ch in channels.items() if ch.is_configured()}
        result = NotificationResult()

        if not active:
            logger.info("[Notifier] No notification channels configured")
            return result

        outcomes = await asyncio.gather(
            *(ch.send(subject, text, html_body) for ch in active.values()),
            return_exceptions=True,
        )
        for name, outcome in zip(active, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"[Notifier] {name} channel raised: {outcome}")
                outcome = False
            setattr(result, name, bool(outcome))
        return result

    async def notify_alerts(self, evaluation: AlertEvaluation, sent_at: datetime) -> NotificationResult:
        """Send the cycle summary. Callers only invoke this when alerts exist."""
        threshold = self.config.RAIN_ALERT_THRESHOLD_MM
        count = len(evaluation.triggering)
        subject = f"🌧️ Mumbai Rain Alert - {count} zone(s) ≥{threshold:g}mm/hr"
        if evaluation.flood_risk:
            subject += f" - {evaluation.flood_risk.value} flood risk"

        return await self._dispatch(
            subject,
            build_summary_text(evaluation, sent_at, threshold),
            build_report_html(evaluation, sent_at),
        )

    async def send_test_message(self, channel: str, sent_at: datetime) -> Optional[bool]:
        """
        Send a diagnostic message on one channel ('telegram' or 'email').

        Returns:
            Delivery outcome, or None if the channel is not configured
        """
        notifier = {"telegram": self.telegram, "email": self.email}.get(channel)
        if notifier is None:
            raise ValueError(f"Unknown notification channel: {channel}")
        if not notifier.is_configured():
            return None

        text = f"🧪 Test message from Mumbai Rain Monitor - System is online!\n⏰ {format_ist(sent_at)}"
        html_body = f"<p>{html.escape(text)}</p>"
        return await notifier.send("🧪 Mumbai Rain Monitor test", text, html_body)
