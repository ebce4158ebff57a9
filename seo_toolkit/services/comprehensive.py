"""
Comprehensive SEO Analysis
Runs the meta, structured data, social, image, keyword and link checks together
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from seo_toolkit.models import ImageInfo
from seo_toolkit.services.image_seo import ImageSEOOptimizer
from seo_toolkit.services.keywords import analyze_content
from seo_toolkit.services.meta_optimizer import MetaOptimizer
from seo_toolkit.services.page_scorer import (
    extract_images,
    extract_links,
    extract_meta_description,
    extract_title,
    parse_html,
)
from seo_toolkit.services.social_media import REQUIRED_OPEN_GRAPH, REQUIRED_TWITTER, SocialMediaOptimizer
from seo_toolkit.services.structured_data import analyze_page_schemas

# Configure logging
logger = logging.getLogger(__name__)

# Share of each module in a page's overall score
MODULE_WEIGHTS = {
    'meta': 0.3,
    'structured_data': 0.2,
    'social_media': 0.2,
    'images': 0.3,
}
PRIORITIES = ('high', 'medium', 'low')
LOW_OVERALL_SCORE = 70

# Content bundle score
KEYWORD_POINTS = 30
META_POINTS = 25
SOCIAL_POINTS = 20
IMAGE_POINTS = 25

PRIMARY_SOCIAL_TAGS = {'og:title', 'og:description', 'og:image'}


def _issue(module: str, message: str, severity: str) -> Dict[str, str]:
    return {'module': module, 'message': message, 'severity': severity}


def content_score(keyword_analysis: Dict[str, Any], meta_optimization: Dict[str, Any],
                  social_tags: Optional[Dict[str, Any]] = None,
                  image_optimization: Optional[Dict[str, Any]] = None) -> int:
    """
    Score a content bundle out of 100.

    Keyword coverage earns up to 30 points (full marks at 10% of the words),
    the meta score is scaled to 25, and generated social tags and an image
    audit add 20 and 25.
    """
    score = min(KEYWORD_POINTS, keyword_analysis['density'] * KEYWORD_POINTS * 10)
    score += meta_optimization['score'] / 100 * META_POINTS
    if social_tags:
        score += SOCIAL_POINTS
    if image_optimization:
        score += IMAGE_POINTS
    return min(100, round(score))


def overall_score(modules: Dict[str, Optional[Dict[str, Any]]]) -> int:
    """Weighted mean of the module scores; absent modules are left out of the weighting"""
    total = 0.0
    weight = 0.0
    for name, module_weight in MODULE_WEIGHTS.items():
        module = modules.get(name)
        if module is None:
            continue
        total += module['score'] * module_weight
        weight += module_weight
    return round(total / weight) if weight else 0


def suggestions_by_priority(issues: List[Dict[str, str]], score: int) -> Dict[str, List[Dict[str, str]]]:
    suggestions = {priority: [] for priority in PRIORITIES}
    for issue in issues:
        suggestions[issue['severity']].append({'module': issue['module'], 'message': issue['message']})
    if score < LOW_OVERALL_SCORE:
        suggestions['high'].append({
            'module': 'technical',
            'message': 'Overall SEO score is low, work through the issues in priority order',
        })
    return suggestions


class ComprehensiveAnalyzer:
    """Runs every optimizer over one page, or over a bundle of content and meta data"""

    def __init__(self, meta_optimizer: Optional[MetaOptimizer] = None,
                 social_optimizer: Optional[SocialMediaOptimizer] = None,
                 image_optimizer: Optional[ImageSEOOptimizer] = None):
        self.meta_optimizer = meta_optimizer or MetaOptimizer()
        self.social_optimizer = social_optimizer or SocialMediaOptimizer()
        self.image_optimizer = image_optimizer or ImageSEOOptimizer()

    def analyze_content(self, content: str, keywords: Optional[List[str]] = None,
                        meta: Optional[Dict[str, Any]] = None,
                        images: Optional[List[Dict[str, Any]]] = None,
                        url: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Analyze content that has not been published yet.

        Social tags are generated only when ``meta`` carries a title, and
        images are audited only when some are supplied.
        """
        meta = dict(meta or {})
        if url and not meta.get('url'):
            meta['url'] = url

        keyword_analysis = analyze_content(content, keywords)
        meta_optimization = self.meta_optimizer.optimize_meta(meta.get('title'), meta.get('description'), keywords)
        social_tags = self.social_optimizer.generate_optimized_tags(meta) if meta.get('title') else None
        image_optimization = self.image_optimizer.batch_optimize_images(images) if images else None

        score = content_score(keyword_analysis, meta_optimization, social_tags, image_optimization)
        logger.info(f"Content analysis for {url or 'unpublished content'} scored {score}/100")

        return {
            'url': url,
            'seo_score': score,
            'analysis': {
                'keywords': keyword_analysis,
                'meta': meta_optimization,
                'social_media': social_tags,
                'images': image_optimization,
            },
            'timestamp': (now or datetime.now(timezone.utc)).isoformat(),
        }

    def analyze_page(self, html: str, url: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Per-module overview of a page.

        Returns:
            Dict with the weighted ``overall_score``, each module's score and
            issues, internal and external links, issue counts and the
            suggestions grouped by priority
        """
        soup = parse_html(html)
        modules = {
            'meta': self._meta_module(extract_title(soup), extract_meta_description(soup)),
            'structured_data': self._structured_data_module(html, url),
            'social_media': self._social_module(html),
            'images': self._image_module(extract_images(soup)),
        }
        score = overall_score(modules)
        issues = [issue for module in modules.values() if module for issue in module['issues']]
        links = extract_links(soup, url)

        logger.info(f"Page overview for {url}: {score}/100 ({len(issues)} issues)")

        return {
            'url': url,
            'timestamp': (now or datetime.now(timezone.utc)).isoformat(),
            'overall_score': score,
            'modules': modules,
            'links': {
                'internal': links['internal'],
                'external': links['external'],
                'nofollow': sum(1 for group in links.values() for link in group if link['is_nofollow']),
            },
            'summary': {
                'total_issues': len(issues),
                'critical_issues': sum(1 for issue in issues if issue['severity'] == 'high'),
            },
            'suggestions': suggestions_by_priority(issues, score),
        }

    def _meta_module(self, title: str, description: str) -> Dict[str, Any]:
        result = self.meta_optimizer.optimize_meta(title, description)
        issues = [
            _issue('meta', suggestion['message'], suggestion['priority'])
            for part in ('title', 'description')
            for suggestion in result[part]['suggestions']
        ]
        return {
            'score': result['score'],
            'title': result['title'],
            'description': result['description'],
            'issues': issues,
        }

    def _structured_data_module(self, html: str, url: str) -> Dict[str, Any]:
        inventory = analyze_page_schemas(html, url)
        issues = []
        if not inventory['total']:
            issues.append(_issue('structured_data', 'No structured data found', 'high'))
        for detail in inventory['details']:
            if detail['missing_required']:
                missing = ', '.join(detail['missing_required'])
                issues.append(_issue(
                    'structured_data', f"{detail['type']} is missing required properties: {missing}", 'medium'
                ))
            elif not detail['valid']:
                issues.append(_issue('structured_data', f"{detail['type']} {detail['format']} markup is invalid", 'medium'))

        score = round(inventory['valid'] / inventory['total'] * 100) if inventory['total'] else 0
        return {
            'score': score,
            'total': inventory['total'],
            'types': inventory['types'],
            'details': inventory['details'],
            'issues': issues,
        }

    def _social_module(self, html: str) -> Dict[str, Any]:
        analysis = self.social_optimizer.analyze_social_tags(html)
        required = len(REQUIRED_OPEN_GRAPH) + len(REQUIRED_TWITTER)
        issues = [
            _issue('social_media', f"Missing {tag} tag", 'medium' if tag in PRIMARY_SOCIAL_TAGS else 'low')
            for tag in analysis['missing']
        ]
        return dict(
            analysis,
            score=round((required - len(analysis['missing'])) / required * 100),
            issues=issues,
        )

    def _image_module(self, images: Tuple[ImageInfo, ...]) -> Optional[Dict[str, Any]]:
        if not images:
            return None
        audits = []
        issues = []
        for image in images:
            audit = self.image_optimizer.analyze_image_seo(image.src, image.alt)
            audits.append({'src': image.src, 'score': audit['score'], 'issues': audit['issues']})
            for problem in audit['issues']:
                severity = 'high' if problem == 'Missing alt text' else 'medium'
                issues.append(_issue('images', f"{image.src or 'Image'}: {problem}", severity))
        return {
            'score': round(sum(audit['score'] for audit in audits) / len(audits)),
            'total': len(audits),
            'images': audits,
            'issues': issues,
        }
