"""
Keyword Service
Competitor keyword research, on-page keyword analysis and ranking checks
"""

import json
import logging
import os
import random
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from seo_toolkit.services.history import MonitoringState

# Configure logging
logger = logging.getLogger(__name__)

DATA_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'competitor_keywords.json')

RANK_ALERT_POSITION = 30
RANK_ALERT_DROP = -5
DENSITY_MIN = 0.5
DENSITY_MAX = 2.5

STOP_WORDS = {
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'but', 'by', 'for', 'from', 'has', 'have',
    'i', 'in', 'is', 'it', 'its', 'of', 'on', 'or', 'our', 'so', 'that', 'the', 'their',
    'this', 'to', 'was', 'we', 'were', 'will', 'with', 'you', 'your',
}

WORD_RE = re.compile(r"[a-z0-9][a-z0-9'\-]*")


def load_competitor_keywords(path: str = DATA_FILE) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def generate_keyword_report(output_path: Optional[str] = None,
                            data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Competitor keyword report, optionally written to ``output_path`` as JSON"""
    data = data or load_competitor_keywords()
    report = dict(data, timestamp=datetime.now(timezone.utc).isoformat())

    for competitor in report.get('competitors', []):
        logger.info(
            f"{competitor['name']}: {', '.join(competitor.get('primary_keywords', []))} "
            f"({competitor.get('brand_positioning', {}).get('main_message', '')})"
        )
    gaps = report.get('competitive_gaps', {}).get('underserved_keywords', [])
    logger.info(f"Underserved keywords: {', '.join(gaps)}")

    if output_path:
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        logger.info(f"Keyword report saved to {output_path}")
    return report


def generate_monitoring_strategy(data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    data = data or load_competitor_keywords()
    return {
        'keyword_monitoring': {
            'primary_targets': data.get('recommendations', {}).get('primary_keyword_targets', []),
            'competitor_tracking': [
                'Monitor competitor ranking changes for target keywords',
                'Track new keyword opportunities',
                'Analyze competitor content strategies',
                'Monitor SERP feature changes',
            ],
            'frequency': 'Weekly for primary keywords, monthly for long-tail',
        },
        'content_monitoring': {
            'competitor_content': [
                'New blog posts and landing pages',
                'Content themes and topics',
                'Content performance indicators',
                'Social media content strategy',
            ],
            'opportunities': [
                'Content gaps in competitor coverage',
                'Trending topics in the industry',
                'User-generated content trends',
                'Seasonal content opportunities',
            ],
        },
        'technical_monitoring': [
            'Site speed comparisons',
            'Mobile optimization',
            'Core Web Vitals',
            'Schema markup implementation',
            'Internal linking strategies',
        ],
        'backlink_monitoring': [
            'New backlink acquisitions',
            'Lost backlinks',
            'Link building strategies',
            'Domain authority changes',
        ],
    }


def _tokenize(text: str) -> List[str]:
    return WORD_RE.findall((text or '').lower())


def _count_phrase(words: List[str], phrase: List[str]) -> int:
    if not phrase or len(phrase) > len(words):
        return 0
    size = len(phrase)
    return sum(1 for i in range(len(words) - size + 1) if words[i:i + size] == phrase)


def analyze_content(content: str, target_keywords: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Keyword usage in a block of text.

    ``density`` is the share of words covered by target keyword
    occurrences (0..1); per-keyword densities are percentages.
    """
    words = _tokenize(content)
    word_count = len(words)
    keywords: Dict[str, Dict[str, Any]] = {}
    covered = 0
    for keyword in target_keywords or []:
        phrase = _tokenize(keyword)
        occurrences = _count_phrase(words, phrase)
        covered += occurrences * len(phrase)
        keywords[keyword] = {
            'occurrences': occurrences,
            'density': round(occurrences * len(phrase) / word_count * 100, 2) if word_count else 0.0,
        }

    terms = Counter(w for w in words if w not in STOP_WORDS and len(w) > 2)
    return {
        'word_count': word_count,
        'keywords': keywords,
        'density': round(covered / word_count, 4) if word_count else 0.0,
        'top_terms': [{'term': term, 'count': count} for term, count in terms.most_common(10)],
    }


def generate_suggestions(content: str, target_keywords: Optional[List[str]] = None) -> List[Dict[str, str]]:
    analysis = analyze_content(content, target_keywords)
    suggestions = []
    if analysis['word_count'] < 300:
        suggestions.append({
            'type': 'content_length',
            'priority': 'medium',
            'message': f"Content has {analysis['word_count']} words, aim for at least 300"
        })
    for keyword, stats in analysis['keywords'].items():
        if stats['occurrences'] == 0:
            suggestions.append({
                'type': 'missing_keyword',
                'priority': 'high',
                'message': f'Target keyword "{keyword}" does not appear in the content'
            })
        elif stats['density'] < DENSITY_MIN:
            suggestions.append({
                'type': 'low_density',
                'priority': 'medium',
                'message': f'Use "{keyword}" more often (density {stats["density"]}%)'
            })
        elif stats['density'] > DENSITY_MAX:
            suggestions.append({
                'type': 'keyword_stuffing',
                'priority': 'high',
                'message': f'"{keyword}" may be overused (density {stats["density"]}%)'
            })
    return suggestions


class PlaceholderRankingProvider:
    """
    Stand-in for a search ranking API.

    Positions and changes are random; every record is labelled
    ``source: placeholder`` so callers never mistake them for real data.
    """

    source = 'placeholder'

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_ranking(self, keyword: str) -> Dict[str, Any]:
        position = self.rng.randint(1, 50)
        change = self.rng.randint(-5, 4)
        return {
            'keyword': keyword,
            'position': position,
            'change': change,
            'trend': 'up' if change > 0 else 'down' if change < 0 else 'stable',
            'last_checked': datetime.now(timezone.utc).isoformat(),
            'source': self.source,
        }


def check_rankings(keywords: List[str], provider, state: MonitoringState) -> List[Dict[str, Any]]:
    """
    Refresh rankings for ``keywords`` and return the ranking-drop alerts raised.

    A keyword whose lookup fails is logged and skipped.
    """
    alerts = []
    for keyword in keywords:
        try:
            ranking = provider.get_ranking(keyword)
        except Exception as e:
            logger.error(f"Ranking check failed for {keyword}: {e}")
            continue
        state.record_ranking(keyword, ranking)
        if ranking['position'] > RANK_ALERT_POSITION or ranking['change'] < RANK_ALERT_DROP:
            alerts.append({
                'type': 'ranking_drop',
                'keyword': keyword,
                'metric': 'position',
                'value': ranking['position'],
                'threshold': RANK_ALERT_POSITION,
                'change': ranking['change'],
                'severity': 'medium',
                'message': f'"{keyword}" is ranked {ranking["position"]} ({ranking["change"]:+d})',
            })
    logger.info(f"Checked {len(keywords)} keyword rankings, {len(alerts)} alerts")
    return alerts
