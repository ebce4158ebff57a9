"""
Health Check API Routes
Health and status endpoints
"""

from flask import Blueprint, current_app, jsonify
import logging

from seo_toolkit.services.reports import build_health_report

# Configure logging
logger = logging.getLogger(__name__)

# Create blueprint
health_bp = Blueprint('health', __name__)

SERVICE_NAME = 'SEO Toolkit'
VERSION = '1.0.0'


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': SERVICE_NAME,
        'version': VERSION,
        'modules': [
            'Page Scoring',
            'Batch Site Analysis',
            'Comprehensive Analysis',
            'Meta Optimization',
            'Social Media Tags',
            'Structured Data',
            'Sitemap and Robots.txt',
            'Image SEO',
            'Keyword Monitoring'
        ]
    })


@health_bp.route('/status', methods=['GET'])
def status_check():
    """Detailed status endpoint"""
    services = current_app.extensions['seo_toolkit']
    history = services['history']
    return jsonify({
        'status': 'operational',
        'service': SERVICE_NAME,
        'version': VERSION,
        'target_website': current_app.config['TARGET_WEBSITE'],
        'analyses': {
            'stored': len(history),
            'capacity': current_app.config['HISTORY_LIMIT'],
            'average_score': history.average_score()
        },
        'alerts': len(services['state'].alerts()),
        'notifications': {
            'console': current_app.config['NOTIFY_CONSOLE'],
            'email': bool(services['notifier'].email and services['notifier'].email.enabled),
            'webhook': bool(current_app.config['WEBHOOK_URL'])
        },
        'health': build_health_report(history, services['state'], current_app.config['COMPETITORS'])
    })
