"""
Analysis API Routes
Page scoring, module overviews, run history and analysis reports
"""

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from seo_toolkit.api.schemas import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    ComprehensiveRequest,
    GenerateReportRequest,
    parse_request,
)
from seo_toolkit.exceptions import UnsupportedFormatError
from seo_toolkit.services.comprehensive import ComprehensiveAnalyzer
from seo_toolkit.services.fetcher import normalize_url
from seo_toolkit.services.reports import REPORT_FORMATS, build_seo_report

# Configure logging
logger = logging.getLogger(__name__)

# Create blueprint
analysis_bp = Blueprint('analysis', __name__)

DEFAULT_HISTORY_PAGE = 20

comprehensive_analyzer = ComprehensiveAnalyzer()


def _services() -> Dict[str, Any]:
    return current_app.extensions['seo_toolkit']


def _serialize_batch(results: Dict[str, Any]) -> Dict[str, Any]:
    pages = []
    for page in results['pages']:
        entry = {k: v for k, v in page.items() if k != 'analysis'}
        if page['status'] == 'success':
            entry['analysis'] = page['analysis'].to_dict()
        pages.append(entry)
    return dict(results, pages=pages)


@analysis_bp.route('/analyze', methods=['POST'])
def analyze_page():
    """
    Score one page.

    The page is fetched unless its HTML is supplied in the body; the result
    is recorded in the run history and echoed back with its ``run_id``.
    """
    payload = parse_request(AnalyzeRequest)
    services = _services()

    logger.info(f"Starting SEO analysis for URL: {payload.url}")
    analysis = services['analyzer'].analyze_url(payload.url, payload.html, record=False)
    run_id = services['history'].add(analysis)

    return jsonify({
        'success': True,
        'run_id': run_id,
        'analysis': analysis.to_dict()
    })


@analysis_bp.route('/analyze/batch', methods=['POST'])
def analyze_batch():
    """Score a list of URLs, or a domain's discovered pages"""
    payload = parse_request(BatchAnalyzeRequest)
    analyzer = _services()['analyzer']

    if payload.domain:
        results = analyzer.analyze_site(payload.domain, payload.urls or None)
    else:
        results = analyzer.analyze_batch(payload.urls)

    return jsonify(dict(_serialize_batch(results), success=True))


@analysis_bp.route('/analyze/comprehensive', methods=['POST'])
def analyze_comprehensive():
    """Score unpublished content together with its meta data and images"""
    payload = parse_request(ComprehensiveRequest)
    url = normalize_url(payload.url) if payload.url else None

    logger.info(f"Starting comprehensive analysis for {url or 'supplied content'}")
    result = comprehensive_analyzer.analyze_content(
        payload.content,
        keywords=payload.keywords,
        meta=payload.meta.model_dump(exclude_none=True),
        images=payload.images,
        url=url
    )
    return jsonify(dict(result, success=True))


@analysis_bp.route('/analyze/overview', methods=['POST'])
def analyze_overview():
    """Per-module scores, links and prioritized suggestions for one page"""
    payload = parse_request(AnalyzeRequest)
    url = normalize_url(payload.url)
    html = payload.html
    if html is None:
        html = _services()['analyzer'].fetcher(url)

    return jsonify({'success': True, 'overview': comprehensive_analyzer.analyze_page(html, url)})


@analysis_bp.route('/history', methods=['GET'])
def list_history():
    history = _services()['history']
    limit = request.args.get('limit', DEFAULT_HISTORY_PAGE, type=int)
    limit = max(1, min(limit, current_app.config['HISTORY_LIMIT']))

    runs = [
        {
            'run_id': run_id,
            'url': analysis.url,
            'score': analysis.score,
            'issues': len(analysis.issues),
            'timestamp': analysis.timestamp.isoformat()
        }
        for run_id, analysis in history.recent(limit)
    ]
    return jsonify({
        'success': True,
        'total': len(history),
        'average_score': history.average_score(),
        'runs': runs
    })


@analysis_bp.route('/history/<run_id>', methods=['GET'])
def get_history_item(run_id):
    analysis = _services()['history'].get(run_id)
    if analysis is None:
        return jsonify({'success': False, 'error': f'Run {run_id} not found'}), 404
    return jsonify({'success': True, 'run_id': run_id, 'analysis': analysis.to_dict()})


@analysis_bp.route('/report', methods=['GET'])
def seo_report():
    services = _services()
    report = build_seo_report(services['history'], services['state'])
    return jsonify(dict(report, success=True))


@analysis_bp.route('/generate-report', methods=['POST'])
def generate_report():
    """Analyze a page, write the report file and optionally email it"""
    payload = parse_request(GenerateReportRequest)
    if payload.format not in REPORT_FORMATS:
        raise UnsupportedFormatError(f"Unsupported report format: {payload.format}")
    services = _services()

    analysis = services['analyzer'].analyze_url(payload.url, record=False)
    run_id = services['history'].add(analysis)
    path = services['writer'].save_analysis(analysis, payload.format)

    email_sent = False
    if payload.email:
        email_sent = services['notifier'].send_analysis_report(analysis, to=payload.email)

    return jsonify({
        'success': True,
        'run_id': run_id,
        'report_path': path,
        'format': payload.format,
        'email_sent': email_sent,
        'analysis': analysis.to_dict()
    })
