"""
SEO Toolkit - Automated monitor
Runs the scheduled SEO checks until interrupted
"""

import argparse
import logging
import os
import signal
import threading

from seo_toolkit import build_services
from seo_toolkit.config import load_settings
from seo_toolkit.services.automation import AutomatedMonitor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

TASK_NAMES = ['hourly', 'daily', 'competitor', 'keywords', 'weekly', 'monthly']


def build_monitor(config_name=None) -> AutomatedMonitor:
    settings = load_settings(config_name)
    services = build_services(settings)
    return AutomatedMonitor(
        settings,
        analyzer=services['analyzer'],
        alert_manager=services['alert_manager'],
        writer=services['writer'],
        state=services['state'],
        history=services['history'],
        notifier=services['notifier'],
        ranking_provider=services['ranking_provider'],
        error_limit=settings['ERROR_LOG_LIMIT']
    )


def main():
    parser = argparse.ArgumentParser(description='Run scheduled SEO monitoring')
    parser.add_argument('--config', default=os.environ.get('FLASK_ENV'), help='configuration name')
    parser.add_argument('--run', choices=TASK_NAMES, help='run a single task once and exit')
    args = parser.parse_args()

    monitor = build_monitor(args.config)

    if args.run:
        result = monitor.trigger(args.run)
        logger.info(f"Task {args.run} finished: {'ok' if result['success'] else 'failed'}")
        return 0 if result['success'] else 1

    stop_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    monitor.start()
    logger.info(f"Monitoring {', '.join(monitor.monitored_urls)}")
    stop_event.wait()
    monitor.stop()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
