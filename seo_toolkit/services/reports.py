"""
Report service
Renders analyses as JSON, HTML or CSV files, builds summary reports and
enforces data retention
"""

import csv
import io
import json
import logging
import os
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from seo_toolkit.exceptions import UnsupportedFormatError
from seo_toolkit.models import PageAnalysis
from seo_toolkit.services.history import AnalysisHistory, MonitoringState
from seo_toolkit.services.page_scorer import recommendations_for

# Configure logging
logger = logging.getLogger(__name__)

REPORT_FORMATS = ('json', 'html', 'csv')
CSV_COLUMNS = ['URL', 'Section', 'Severity', 'Issue', 'Suggestion']

_templates = Environment(
    loader=PackageLoader('seo_toolkit', 'templates'),
    autoescape=select_autoescape(['html'])
)


def _file_stamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%S%fZ')


def score_color(score: int) -> str:
    if score >= 80:
        return '#28a745'
    if score >= 60:
        return '#ffc107'
    return '#dc3545'


def render_html(analysis: PageAnalysis) -> str:
    template = _templates.get_template('analysis_report.html')
    return template.render(analysis=analysis, score_color=score_color(analysis.score))


def render_csv(analysis: PageAnalysis) -> str:
    """One row per issue, paired with the recommendation it maps to"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_COLUMNS)
    for issue in analysis.issues:
        recs = recommendations_for([issue])
        rec = recs[0] if recs else None
        writer.writerow([
            analysis.url,
            rec.type if rec else '',
            rec.priority if rec else '',
            issue,
            rec.suggestion if rec else '',
        ])
    return buffer.getvalue()


def render_analysis(analysis: PageAnalysis, fmt: str = 'json') -> str:
    if fmt == 'json':
        return json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
    if fmt == 'html':
        return render_html(analysis)
    if fmt == 'csv':
        return render_csv(analysis)
    raise UnsupportedFormatError(f"Unsupported report format: {fmt}")


def cleanup_directory(path: str, max_age_days: float, now: Optional[float] = None) -> List[str]:
    """Delete files in ``path`` whose modification time is older than ``max_age_days``"""
    removed: List[str] = []
    if not os.path.isdir(path):
        return removed
    now = now if now is not None else time.time()
    max_age = max_age_days * 24 * 60 * 60
    for name in sorted(os.listdir(path)):
        file_path = os.path.join(path, name)
        try:
            if os.path.isfile(file_path) and now - os.path.getmtime(file_path) > max_age:
                os.remove(file_path)
                removed.append(name)
                logger.info(f"Removed expired file {file_path}")
        except OSError as e:
            logger.error(f"Failed to clean up {file_path}: {e}")
    return removed


class ReportWriter:
    """Writes reports, alerts and error logs below a set of directories"""

    def __init__(self, reports_dir: str, alerts_dir: Optional[str] = None,
                 logs_dir: Optional[str] = None):
        self.reports_dir = reports_dir
        self.alerts_dir = alerts_dir or os.path.join(reports_dir, 'alerts')
        self.logs_dir = logs_dir or os.path.join(reports_dir, 'logs')

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'ReportWriter':
        return cls(settings['REPORTS_DIR'], settings.get('ALERTS_DIR'), settings.get('LOGS_DIR'))

    def _write(self, directory: str, filename: str, content: str) -> str:
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, filename)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        return path

    def save_analysis(self, analysis: PageAnalysis, fmt: str = 'json') -> str:
        """
        Write one analysis report.

        Raises:
            UnsupportedFormatError: for formats other than json, html and csv
        """
        content = render_analysis(analysis, fmt)
        path = self._write(self.reports_dir, f"seo-analysis-{_file_stamp()}.{fmt}", content)
        logger.info(f"Report saved: {path}")
        return path

    def save_json(self, name: str, payload: Any, directory: Optional[str] = None) -> str:
        content = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
        return self._write(directory or self.reports_dir, f"{name}-{_file_stamp()}.json", content)

    def save_alert(self, alert: Dict[str, Any]) -> str:
        name = alert.get('id') or f"alert-{uuid.uuid4().hex[:12]}"
        content = json.dumps(alert, indent=2, ensure_ascii=False, default=str)
        return self._write(self.alerts_dir, f"{name}.json", content)

    def save_error(self, task: str, error: BaseException) -> str:
        entry = {
            'id': f"error-{uuid.uuid4().hex[:12]}",
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'task': task,
            'error': {'name': type(error).__name__, 'message': str(error)},
        }
        return self._write(self.logs_dir, f"{entry['id']}.json", json.dumps(entry, indent=2))


def check_content_quality(history: AnalysisHistory, window: int = 10) -> Dict[str, Any]:
    recent = history.recent(window)
    if not recent:
        return {'status': 'unknown', 'average_score': 0, 'recent_analyses': 0}
    average = sum(a.score for _, a in recent) / len(recent)
    if average > 70:
        status = 'good'
    elif average > 50:
        status = 'warning'
    else:
        status = 'poor'
    return {'status': status, 'average_score': round(average), 'recent_analyses': len(recent)}


def build_seo_report(history: AnalysisHistory, state: MonitoringState) -> Dict[str, Any]:
    alerts = state.alerts()
    rankings = state.rankings()
    return {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'summary': {
            'total_analyses': len(history),
            'average_score': round(history.average_score()),
            'keyword_rankings': len(rankings),
            'active_alerts': len(alerts),
        },
        'recent_analyses': [
            dict(analysis.to_dict(), run_id=run_id) for run_id, analysis in history.recent(5)
        ],
        'keyword_performance': rankings,
        'alerts': alerts[-10:],
    }


def build_health_report(history: AnalysisHistory, state: MonitoringState,
                        competitors: Optional[List[str]] = None) -> Dict[str, Any]:
    """Daily health check across keyword rankings and recent content scores"""
    keyword_health = state.keyword_health()
    content_quality = check_content_quality(history)
    statuses = {keyword_health['status'], content_quality['status']}
    if statuses == {'unknown'}:
        overall = 'unknown'
    elif 'poor' in statuses:
        overall = 'poor'
    elif 'warning' in statuses:
        overall = 'warning'
    else:
        overall = 'good'
    return {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'overall_health': overall,
        'checks': {
            'keyword_rankings': keyword_health,
            'content_quality': content_quality,
            'competitor_activity': {
                'status': 'monitoring',
                'competitors': len(competitors or []),
            },
        },
    }
