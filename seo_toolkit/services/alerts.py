"""
Alert service
Raises, records, persists and dispatches monitoring alerts
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from seo_toolkit.models import PageAnalysis
from seo_toolkit.services.history import MonitoringState

# Configure logging
logger = logging.getLogger(__name__)

CRITICAL_SCORE = 50
ERROR_RATE_THRESHOLD = 0.1


def alerts_for_analysis(analysis: PageAnalysis, threshold: int = 70) -> List[Dict[str, Any]]:
    """A low-score alert when the page scores under ``threshold``"""
    if analysis.score >= threshold:
        return []
    return [{
        'type': 'seo_score',
        'url': analysis.url,
        'metric': 'score',
        'value': analysis.score,
        'threshold': threshold,
        'severity': 'high' if analysis.score < CRITICAL_SCORE else 'medium',
        'message': f"SEO score for {analysis.url} is {analysis.score} (threshold {threshold})",
        'issues': list(analysis.issues),
    }]


def error_rate_alert(total_runs: int, error_count: int) -> Optional[Dict[str, Any]]:
    rate = error_count / total_runs if total_runs else 0.0
    if rate <= ERROR_RATE_THRESHOLD:
        return None
    return {
        'type': 'system',
        'metric': 'error_rate',
        'value': round(rate, 3),
        'threshold': ERROR_RATE_THRESHOLD,
        'severity': 'high',
        'message': f"Task error rate is {rate:.0%}",
    }


class AlertManager:
    """Assigns identity to alerts, then records, persists and notifies them"""

    def __init__(self, state: MonitoringState, writer=None, notifier=None):
        self.state = state
        self.writer = writer
        self.notifier = notifier

    def process(self, alert_data: Dict[str, Any]) -> Dict[str, Any]:
        alert = dict(alert_data)
        alert.setdefault('severity', 'medium')
        alert['id'] = f"alert-{uuid.uuid4().hex[:12]}"
        alert['timestamp'] = datetime.now(timezone.utc).isoformat()

        self.state.add_alert(alert)

        if self.writer is not None:
            try:
                self.writer.save_alert(alert)
            except OSError as e:
                logger.error(f"Failed to persist alert {alert['id']}: {e}")

        if self.notifier is not None:
            try:
                self.notifier.notify_alert(alert)
            except Exception as e:
                # Delivery problems must not interrupt monitoring
                logger.error(f"Failed to send notification for {alert['id']}: {e}")

        logger.info(f"Processed alert {alert['id']}: {alert.get('message')} (severity: {alert['severity']})")
        return alert

    def process_all(self, alerts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [self.process(alert) for alert in alerts]
