"""
SEO Toolkit - On-page SEO scoring, optimization and monitoring
Main application package
"""

import functools
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from seo_toolkit.config import load_settings
from seo_toolkit.exceptions import FetchError, InvalidPayloadError, UnsupportedFormatError

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

__version__ = '1.0.0'

ENDPOINTS = [
    'GET /api/health',
    'GET /api/status',
    'POST /api/analyze',
    'POST /api/analyze/batch',
    'POST /api/analyze/comprehensive',
    'POST /api/analyze/overview',
    'GET /api/history',
    'GET /api/history/<run_id>',
    'GET /api/report',
    'POST /api/generate-report',
    'GET /api/keywords',
    'POST /api/check-keywords',
    'GET /api/keywords/competitors',
    'POST /api/analyze/keywords',
    'GET /api/alerts',
    'POST /api/optimize/meta',
    'POST /api/optimize/social-media',
    'POST /api/optimize/images',
    'POST /api/generate/structured-data',
    'POST /api/validate/structured-data',
    'POST /api/generate/sitemap',
    'POST /api/generate/robots',
    'POST /api/validate/robots',
]


def build_services(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Create the stores and services shared by the API and the monitor"""
    from seo_toolkit.services.alerts import AlertManager
    from seo_toolkit.services.fetcher import fetch_html, fetch_text
    from seo_toolkit.services.history import AnalysisHistory, MonitoringState
    from seo_toolkit.services.keywords import PlaceholderRankingProvider
    from seo_toolkit.services.notifier import Notifier
    from seo_toolkit.services.reports import ReportWriter
    from seo_toolkit.services.site_analyzer import SiteAnalyzer

    history = AnalysisHistory(settings['HISTORY_LIMIT'])
    state = MonitoringState(settings['ALERT_LIMIT'])
    fetcher = functools.partial(
        fetch_html,
        timeout=settings['REQUEST_TIMEOUT'],
        user_agent=settings['USER_AGENT']
    )
    text_fetcher = functools.partial(
        fetch_text,
        timeout=settings['REQUEST_TIMEOUT'],
        user_agent=settings['USER_AGENT']
    )
    analyzer = SiteAnalyzer(
        fetcher=fetcher,
        history=history,
        batch_size=settings['BATCH_SIZE'],
        pause=settings['BATCH_PAUSE_SECONDS'],
        max_discovered_urls=settings['MAX_DISCOVERED_URLS'],
        text_fetcher=text_fetcher
    )
    writer = ReportWriter.from_settings(settings)
    notifier = Notifier.from_settings(settings)

    return {
        'settings': settings,
        'history': history,
        'state': state,
        'analyzer': analyzer,
        'text_fetcher': text_fetcher,
        'writer': writer,
        'notifier': notifier,
        'alert_manager': AlertManager(state, writer, notifier),
        'ranking_provider': PlaceholderRankingProvider(),
    }


def _error(message: str, status: int, **extra):
    return jsonify(dict({'success': False, 'error': message}, **extra)), status


def register_error_handlers(app: Flask):
    @app.errorhandler(InvalidPayloadError)
    def invalid_payload(e):
        return _error(str(e), 400)

    @app.errorhandler(UnsupportedFormatError)
    def unsupported_format(e):
        return _error(str(e), 400)

    @app.errorhandler(FetchError)
    def fetch_failed(e):
        logger.error(f"Fetch failed: {e}")
        return _error(f"Failed to fetch URL: {e}", 502, url=e.url)

    @app.errorhandler(404)
    def not_found(e):
        return _error('Endpoint not found', 404, available_endpoints=ENDPOINTS)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error('Method not allowed', 405)

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return _error(e.description, e.code)
        logger.exception(f"Unhandled error: {e}")
        return _error('Internal server error', 500)


def create_app(config_name: Optional[str] = None, test_config: Optional[Dict[str, Any]] = None):
    """Application factory pattern"""
    app = Flask(__name__)

    # Configure CORS
    CORS(app)

    settings = load_settings(config_name)
    if test_config:
        settings.update(test_config)
    app.config.update(settings)
    app.extensions['seo_toolkit'] = build_services(settings)

    # Register blueprints
    from seo_toolkit.api.routes.analysis import analysis_bp
    from seo_toolkit.api.routes.health import health_bp
    from seo_toolkit.api.routes.monitoring import monitoring_bp
    from seo_toolkit.api.routes.tools import tools_bp

    app.register_blueprint(analysis_bp, url_prefix='/api')
    app.register_blueprint(monitoring_bp, url_prefix='/api')
    app.register_blueprint(tools_bp, url_prefix='/api')
    app.register_blueprint(health_bp, url_prefix='/api')

    register_error_handlers(app)

    logger.info(f"SEO Toolkit app created ({config_name or 'default'} config)")
    return app
