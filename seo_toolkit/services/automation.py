"""
Automated SEO Monitor
Runs scoring, ranking and reporting jobs on cron schedules
"""

import logging
import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from seo_toolkit.exceptions import FetchError
from seo_toolkit.services.alerts import AlertManager, alerts_for_analysis, error_rate_alert
from seo_toolkit.services.history import AnalysisHistory, MonitoringState
from seo_toolkit.services.keywords import PlaceholderRankingProvider, check_rankings
from seo_toolkit.services.reports import (
    ReportWriter,
    build_health_report,
    build_seo_report,
    cleanup_directory,
)
from seo_toolkit.services.site_analyzer import SiteAnalyzer

# Configure logging
logger = logging.getLogger(__name__)


class AutomatedMonitor:
    """
    Scheduler around the site analyzer.

    Every task run is timed and counted; a failing task is logged and
    recorded without stopping the scheduler.
    """

    def __init__(self, settings: Dict[str, Any], analyzer: SiteAnalyzer,
                 alert_manager: AlertManager, writer: ReportWriter,
                 state: MonitoringState, history: AnalysisHistory,
                 notifier=None, ranking_provider=None,
                 scheduler: Optional[BackgroundScheduler] = None, error_limit: int = 50):
        self.settings = settings
        self.analyzer = analyzer
        self.alert_manager = alert_manager
        self.writer = writer
        self.state = state
        self.history = history
        self.notifier = notifier
        self.ranking_provider = ranking_provider or PlaceholderRankingProvider()
        self.scheduler = scheduler or BackgroundScheduler(timezone='UTC')
        self.is_running = False

        self.tasks: Dict[str, Callable[[], Dict[str, Any]]] = {
            'hourly': self.run_hourly_check,
            'daily': self.run_daily_report,
            'competitor': self.run_competitor_check,
            'keywords': self.run_keyword_check,
            'weekly': self.run_weekly_analysis,
            'monthly': self.run_monthly_report,
        }

        self._lock = threading.Lock()
        self._status = {
            'last_run': None,
            'total_runs': 0,
            'successful_runs': 0,
            'total_duration': 0.0,
            'error_count': 0,
            # newest error_limit entries only
            'errors': deque(maxlen=error_limit),
            'tasks': {},
        }

    @property
    def monitored_urls(self) -> List[str]:
        return list(self.settings.get('MONITORED_URLS') or [self.settings['TARGET_WEBSITE']])

    def start(self):
        """Register every configured schedule and start the background scheduler"""
        schedules = self.settings.get('SCHEDULES') or {}
        for name, expression in schedules.items():
            if name not in self.tasks or not expression:
                continue
            try:
                trigger = CronTrigger.from_crontab(expression, timezone='UTC')
            except ValueError as e:
                logger.error(f"Invalid schedule for {name}: {expression} ({e})")
                continue
            self.scheduler.add_job(
                func=self._run,
                trigger=trigger,
                args=[name],
                id=name,
                name=name,
                replace_existing=True,
                max_instances=1
            )
            logger.info(f"Scheduled {name}: {expression}")

        self.scheduler.start()
        self.is_running = True
        logger.info(f"Automated monitor started with {len(self.scheduler.get_jobs())} jobs")

    def stop(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Automated monitor stopped")

    def trigger(self, task_name: str) -> Dict[str, Any]:
        """Run a task immediately"""
        if task_name not in self.tasks:
            raise ValueError(f"Unknown task: {task_name}")
        logger.info(f"Manually triggering task: {task_name}")
        return self._run(task_name)

    def _run(self, task_name: str) -> Dict[str, Any]:
        started = time.monotonic()
        success = True
        try:
            result = self.tasks[task_name]()
        except Exception as e:
            # A scheduled job must never take the scheduler thread down
            success = False
            result = {'error': str(e)}
            logger.exception(f"Task {task_name} failed")
            self._record_error(task_name, e)
        duration = time.monotonic() - started
        self._record_run(task_name, duration, success)
        logger.info(f"Task {task_name} {'completed' if success else 'failed'} in {duration:.2f}s")
        return {'task': task_name, 'success': success, 'duration': round(duration, 3), 'result': result}

    def _record_run(self, task_name: str, duration: float, success: bool):
        with self._lock:
            self._status['last_run'] = datetime.now(timezone.utc).isoformat()
            self._status['total_runs'] += 1
            self._status['total_duration'] += duration
            if success:
                self._status['successful_runs'] += 1
            task = self._status['tasks'].setdefault(task_name, {'runs': 0, 'failures': 0})
            task['runs'] += 1
            task['last_run'] = self._status['last_run']
            if not success:
                task['failures'] += 1

    def _record_error(self, task_name: str, error: Exception):
        with self._lock:
            self._status['error_count'] += 1
            self._status['errors'].append({
                'task': task_name,
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'error': str(error),
            })
        try:
            self.writer.save_error(task_name, error)
        except OSError as e:
            logger.error(f"Failed to write error log for {task_name}: {e}")

    def status(self) -> Dict[str, Any]:
        with self._lock:
            total = self._status['total_runs']
            return {
                'is_running': self.is_running,
                'last_run': self._status['last_run'],
                'total_runs': total,
                'error_count': self._status['error_count'],
                'recent_errors': list(self._status['errors'])[-10:],
                'average_run_time': round(self._status['total_duration'] / total, 3) if total else 0.0,
                'success_rate': round(self._status['successful_runs'] / total * 100, 1) if total else 100.0,
                'tasks': {name: dict(info) for name, info in self._status['tasks'].items()},
                'scheduled_jobs': [job.id for job in self.scheduler.get_jobs()],
                'schedules': dict(self.settings.get('SCHEDULES') or {}),
            }

    def _score_monitored_urls(self) -> List[Dict[str, Any]]:
        results = []
        threshold = self.settings.get('SCORE_ALERT_THRESHOLD', 70)
        for url in self.monitored_urls:
            try:
                analysis = self.analyzer.analyze_url(url)
            except FetchError as e:
                self.alert_manager.process({
                    'type': 'availability',
                    'url': url,
                    'metric': 'fetch',
                    'value': e.status_code,
                    'threshold': None,
                    'severity': 'high',
                    'message': f"Could not fetch {url}: {e}",
                })
                results.append({'url': url, 'status': 'failed', 'error': str(e)})
                continue
            self.alert_manager.process_all(alerts_for_analysis(analysis, threshold))
            results.append({'url': analysis.url, 'status': 'success', 'analysis': analysis})
        return results

    def run_hourly_check(self) -> Dict[str, Any]:
        results = self._score_monitored_urls()
        with self._lock:
            total_runs = self._status['total_runs']
            error_count = self._status['error_count']
        alert = error_rate_alert(total_runs, error_count)
        if alert:
            self.alert_manager.process(alert)
        return {
            'checked': len(results),
            'scores': {r['url']: r['analysis'].score for r in results if r['status'] == 'success'},
        }

    def run_daily_report(self) -> Dict[str, Any]:
        results = self._score_monitored_urls()
        files = [self.writer.save_analysis(r['analysis'], 'json')
                 for r in results if r['status'] == 'success']
        health = build_health_report(self.history, self.state, self.settings.get('COMPETITORS'))
        files.append(self.writer.save_json('daily-health', health))

        if self.notifier is not None:
            lines = [f"Overall health: {health['overall_health']}"]
            for r in results:
                if r['status'] == 'success':
                    lines.append(f"{r['url']}: {r['analysis'].score}/100 ({len(r['analysis'].issues)} issues)")
                else:
                    lines.append(f"{r['url']}: failed ({r['error']})")
            self.notifier.send_summary('Daily SEO report', '\n'.join(lines))
        return {'files': files, 'health': health['overall_health']}

    def run_competitor_check(self) -> Dict[str, Any]:
        competitors = self.settings.get('COMPETITORS') or []
        batch = self.analyzer.analyze_batch(competitors)
        own_average = self.history.average_score(limit=10)
        comparison = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'own_average_score': own_average,
            'competitors': [
                {
                    'url': page['url'],
                    'status': page['status'],
                    'score': page['analysis'].score if page['status'] == 'success' else None,
                    'issues': list(page['analysis'].issues) if page['status'] == 'success' else [],
                }
                for page in batch['pages']
            ],
            'summary': batch['summary'],
        }
        path = self.writer.save_json('competitor-report', comparison)
        return {'file': path, 'processed': batch['processed'], 'failed': batch['failed']}

    def run_keyword_check(self) -> Dict[str, Any]:
        keywords = self.settings.get('TRACKED_KEYWORDS') or []
        alerts = check_rankings(keywords, self.ranking_provider, self.state)
        self.alert_manager.process_all(alerts)
        return {'keywords': len(keywords), 'alerts': len(alerts)}

    def run_weekly_analysis(self) -> Dict[str, Any]:
        """Score trend per URL across the stored history"""
        by_url: Dict[str, List] = {}
        for _, analysis in reversed(self.history.all()):
            by_url.setdefault(analysis.url, []).append(analysis)
        trends = {}
        for url, analyses in by_url.items():
            first, last = analyses[0].score, analyses[-1].score
            trends[url] = {
                'first_score': first,
                'latest_score': last,
                'change': last - first,
                'trend': 'up' if last > first else 'down' if last < first else 'stable',
                'samples': len(analyses),
            }
        report = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'trends': trends,
            'keyword_health': self.state.keyword_health(),
        }
        return {'file': self.writer.save_json('weekly-analysis', report), 'urls': len(trends)}

    def run_monthly_report(self) -> Dict[str, Any]:
        path = self.writer.save_json('monthly-report', build_seo_report(self.history, self.state))
        return {'file': path, 'removed': self.cleanup_old_data()}

    def cleanup_old_data(self) -> Dict[str, List[str]]:
        return {
            'reports': cleanup_directory(self.writer.reports_dir, self.settings.get('REPORT_RETENTION_DAYS', 90)),
            'raw': cleanup_directory(self.settings.get('RAW_DATA_DIR', ''), self.settings.get('RAW_DATA_RETENTION_DAYS', 30)),
            'alerts': cleanup_directory(self.writer.alerts_dir, self.settings.get('ALERT_RETENTION_DAYS', 7)),
        }
