"""
Monitoring API Routes
Keyword rankings, competitor keyword research and alerts
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from seo_toolkit.api.schemas import CheckKeywordsRequest, KeywordAnalysisRequest, parse_request
from seo_toolkit.services.keywords import (
    analyze_content,
    check_rankings,
    generate_keyword_report,
    generate_monitoring_strategy,
    generate_suggestions,
)

# Configure logging
logger = logging.getLogger(__name__)

# Create blueprint
monitoring_bp = Blueprint('monitoring', __name__)


@monitoring_bp.route('/keywords', methods=['GET'])
def keyword_rankings():
    """Latest ranking per tracked keyword"""
    services = current_app.extensions['seo_toolkit']
    return jsonify({
        'success': True,
        'tracked_keywords': current_app.config['TRACKED_KEYWORDS'],
        'rankings': services['state'].rankings(),
        'health': services['state'].keyword_health()
    })


@monitoring_bp.route('/check-keywords', methods=['POST'])
def check_keywords():
    payload = parse_request(CheckKeywordsRequest, allow_empty=True)
    services = current_app.extensions['seo_toolkit']
    keywords = payload.keywords or current_app.config['TRACKED_KEYWORDS']

    alerts = check_rankings(keywords, services['ranking_provider'], services['state'])
    processed = services['alert_manager'].process_all(alerts)
    rankings = services['state'].rankings()

    return jsonify({
        'success': True,
        'source': getattr(services['ranking_provider'], 'source', 'unknown'),
        'rankings': {k: rankings[k] for k in keywords if k in rankings},
        'alerts': processed
    })


@monitoring_bp.route('/keywords/competitors', methods=['GET'])
def competitor_keywords():
    try:
        report = generate_keyword_report()
    except (OSError, ValueError) as e:
        logger.error(f"Competitor keyword data unavailable: {e}")
        return jsonify({'success': False, 'error': 'Competitor keyword data unavailable'}), 500

    return jsonify({
        'success': True,
        'report': report,
        'strategy': generate_monitoring_strategy(report)
    })


@monitoring_bp.route('/analyze/keywords', methods=['POST'])
def analyze_keywords():
    payload = parse_request(KeywordAnalysisRequest)
    return jsonify({
        'success': True,
        'analysis': analyze_content(payload.content, payload.keywords),
        'suggestions': generate_suggestions(payload.content, payload.keywords)
    })


@monitoring_bp.route('/alerts', methods=['GET'])
def list_alerts():
    limit = request.args.get('limit', 50, type=int)
    alerts = current_app.extensions['seo_toolkit']['state'].alerts(max(1, limit))
    return jsonify({'success': True, 'total': len(alerts), 'alerts': alerts})
