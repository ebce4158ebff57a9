"""
Notification service
Delivers alerts and analysis reports by console log, email and webhook
"""

import logging
import smtplib
import socket
import ssl
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional

import requests

from seo_toolkit.models import PageAnalysis

# Configure logging
logger = logging.getLogger(__name__)


class EmailSender:
    """
    SMTP email sender.

    Sending is enabled only when a user, password and recipient are all set.
    """

    def __init__(self, smtp_host: str = 'smtp.gmail.com', smtp_port: int = 587,
                 smtp_user: Optional[str] = None, smtp_password: Optional[str] = None,
                 recipient: Optional[str] = None):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.recipient = recipient
        self.enabled = all([smtp_user, smtp_password, recipient])

        if not self.enabled:
            logger.info("Email notifications disabled (missing SMTP_USER, SMTP_PASSWORD or ALERT_EMAIL)")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'EmailSender':
        return cls(
            smtp_host=settings.get('SMTP_HOST', 'smtp.gmail.com'),
            smtp_port=int(settings.get('SMTP_PORT', 587)),
            smtp_user=settings.get('SMTP_USER'),
            smtp_password=settings.get('SMTP_PASSWORD'),
            recipient=settings.get('ALERT_EMAIL'),
        )

    def send(self, subject: str, body: str, html: bool = False, to: Optional[str] = None) -> bool:
        """
        Send an email.

        Returns:
            True if the message was handed to the SMTP server
        """
        recipient = to or self.recipient
        if not self.enabled or not recipient:
            logger.info(f"Would send email '{subject}' but email is disabled")
            return False

        msg = MIMEMultipart()
        msg['From'] = self.smtp_user
        msg['To'] = recipient
        msg['Subject'] = f"[SEO MONITOR] {subject}"
        if not html:
            body = f"{body}\n\n---\nTimestamp: {datetime.now(timezone.utc).isoformat()}\nServer: {socket.gethostname()}"
        msg.attach(MIMEText(body, 'html' if html else 'plain'))

        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls(context=context)
                server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.smtp_user, recipient, msg.as_string())
            logger.info(f"Email sent - {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}': {e}")
            return False


def format_alert_text(alert: Dict[str, Any], website: str = '') -> str:
    return (
        f"Website: {website}\n"
        f"Alert type: {alert.get('type')}\n"
        f"Severity: {alert.get('severity')}\n"
        f"Metric: {alert.get('metric')}\n"
        f"Value: {alert.get('value')}\n"
        f"Threshold: {alert.get('threshold')}\n"
        f"Message: {alert.get('message')}\n"
        f"Time: {alert.get('timestamp')}"
    )


def format_analysis_text(analysis: PageAnalysis) -> str:
    lines = [
        f"SEO analysis for {analysis.url}",
        f"Score: {analysis.score}/100",
        f"Analyzed at: {analysis.timestamp.isoformat()}",
        '',
        'Issues:',
    ]
    lines.extend(f"- {issue}" for issue in analysis.issues or ['None'])
    lines.append('')
    lines.append('Recommendations:')
    lines.extend(f"- [{rec.priority}] {rec.suggestion}" for rec in analysis.recommendations)
    return '\n'.join(lines)


class Notifier:
    """Fans a notification out to every configured channel"""

    def __init__(self, console: bool = True, email: Optional[EmailSender] = None,
                 webhook_url: Optional[str] = None, website: str = '', timeout: int = 10):
        self.console = console
        self.email = email
        self.webhook_url = webhook_url
        self.website = website
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'Notifier':
        return cls(
            console=settings.get('NOTIFY_CONSOLE', True),
            email=EmailSender.from_settings(settings),
            webhook_url=settings.get('WEBHOOK_URL'),
            website=settings.get('TARGET_WEBSITE', ''),
        )

    def notify_alert(self, alert: Dict[str, Any]) -> Dict[str, bool]:
        """Deliver an alert; channel failures are logged and reported, never raised"""
        delivered = {}
        if self.console:
            logger.warning(f"ALERT [{alert.get('severity')}] {alert.get('message')}")
            delivered['console'] = True
        if self.email is not None and self.email.enabled:
            subject = f"SEO alert - {str(alert.get('severity', 'info')).upper()}"
            delivered['email'] = self.email.send(subject, format_alert_text(alert, self.website))
        if self.webhook_url:
            delivered['webhook'] = self._post_webhook({'event': 'alert', 'alert': alert})
        return delivered

    def send_analysis_report(self, analysis: PageAnalysis, to: Optional[str] = None) -> bool:
        if self.email is None:
            logger.info(f"No email channel configured, skipping report for {analysis.url}")
            return False
        return self.email.send(f"SEO report - {analysis.url}", format_analysis_text(analysis), to=to)

    def send_summary(self, subject: str, body: str) -> bool:
        if self.console:
            logger.info(f"{subject}\n{body}")
        if self.email is not None and self.email.enabled:
            return self.email.send(subject, body)
        return False

    def _post_webhook(self, payload: Dict[str, Any]) -> bool:
        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"Webhook delivery failed: {e}")
            return False
