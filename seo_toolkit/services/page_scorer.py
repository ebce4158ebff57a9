"""
Page SEO Scorer
Extracts on-page SEO signals from an HTML document and scores them
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from seo_toolkit.models import HEADING_LEVELS, ImageInfo, PageAnalysis, Recommendation

# Configure logging
logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 160

TITLE_POINTS = 20
DESCRIPTION_POINTS = 20
H1_POINTS = 15
MULTIPLE_H1_POINTS = 8
IMAGE_POINTS = 15
IMAGE_MISSING_ALT_PENALTY = 2
STRUCTURED_DATA_POINTS = 15
SOCIAL_TAG_POINTS = {
    'og:title': 4,
    'og:description': 4,
    'og:image': 4,
    'twitter:card': 3,
}
SOCIAL_POINTS = sum(SOCIAL_TAG_POINTS.values())

ISSUE_TITLE_MISSING = 'Missing page title'
ISSUE_TITLE_LENGTH = 'Title length is not ideal (recommended 30-60 characters)'
ISSUE_DESCRIPTION_MISSING = 'Missing meta description'
ISSUE_DESCRIPTION_LENGTH = 'Meta description length is not ideal (recommended 120-160 characters)'
ISSUE_H1_MISSING = 'Missing H1 tag'
ISSUE_H1_MULTIPLE = 'Too many H1 tags (only one recommended)'
ISSUE_IMAGES_ALT = '{count} image(s) missing alt attribute'
ISSUE_SOCIAL = 'Social media meta tags are incomplete'
ISSUE_STRUCTURED_DATA = 'Missing structured data'

# Keyword (matched case-insensitively inside an issue) -> recommendation
RECOMMENDATION_RULES = [
    ('title', Recommendation(
        type='title',
        priority='high',
        suggestion='Write a unique title of 30-60 characters that includes the primary keyword'
    )),
    ('meta description', Recommendation(
        type='meta',
        priority='high',
        suggestion='Write a compelling meta description of 120-160 characters with a call to action'
    )),
    ('h1', Recommendation(
        type='heading',
        priority='medium',
        suggestion='Use exactly one H1 tag that describes the main topic of the page'
    )),
    ('alt attribute', Recommendation(
        type='images',
        priority='medium',
        suggestion='Add descriptive alt text to every image'
    )),
    ('social media', Recommendation(
        type='social',
        priority='medium',
        suggestion='Add og:title, og:description, og:image and twitter:card meta tags'
    )),
    ('structured data', Recommendation(
        type='structured',
        priority='low',
        suggestion='Add JSON-LD structured data (Organization, Service or Product schema)'
    )),
]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or '', 'html.parser')


def extract_title(soup: BeautifulSoup) -> str:
    tag = soup.find('title')
    if tag is None:
        return ''
    return tag.get_text().strip()


def extract_meta_description(soup: BeautifulSoup) -> str:
    tag = soup.find('meta', attrs={'name': 'description'})
    if tag is None:
        return ''
    return tag.get('content') or ''


def extract_headings(soup: BeautifulSoup) -> Dict[str, List[str]]:
    headings = {}
    for level in HEADING_LEVELS:
        headings[level] = [tag.get_text().strip() for tag in soup.find_all(level)]
    return headings


def extract_images(soup: BeautifulSoup) -> Tuple[ImageInfo, ...]:
    images = []
    for img in soup.find_all('img'):
        alt = img.get('alt')
        images.append(ImageInfo(
            src=img.get('src') or '',
            alt=alt or '',
            has_alt=bool(alt)
        ))
    return tuple(images)


def extract_social_meta(soup: BeautifulSoup) -> Dict[str, str]:
    """Open Graph and Twitter tags; the last occurrence of a key wins"""
    social = {}
    for tag in soup.find_all('meta'):
        prop = tag.get('property') or ''
        name = tag.get('name') or ''
        if prop.startswith('og:'):
            social[prop] = tag.get('content') or ''
        elif name.startswith('twitter:'):
            social[name] = tag.get('content') or ''
    return social


def extract_structured_data(soup: BeautifulSoup) -> Tuple[Any, ...]:
    blocks = []
    for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
        raw = script.string if script.string is not None else script.get_text()
        try:
            blocks.append(json.loads(raw))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
    return tuple(blocks)


def extract_links(soup: BeautifulSoup, url: str) -> Dict[str, List[Dict[str, Any]]]:
    """
    Split anchors into internal and external links.

    A link is external when it resolves to a different host than ``url``;
    relative links are internal. Fragment-only and script links are skipped.
    """
    host = urlparse(url).netloc.lower()
    links = {'internal': [], 'external': []}
    for anchor in soup.find_all('a', href=True):
        href = anchor['href'].strip()
        if not href or href.startswith(('#', 'javascript:', 'mailto:', 'tel:')):
            continue
        link = {
            'href': href,
            'text': anchor.get_text().strip(),
            'has_title': bool(anchor.get('title')),
            'is_nofollow': 'nofollow' in (anchor.get('rel') or []),
        }
        target = urlparse(urljoin(url, href)).netloc.lower()
        links['internal' if not target or target == host else 'external'].append(link)
    return links


def _score_title(title: str, issues: List[str]) -> int:
    if not title:
        issues.append(ISSUE_TITLE_MISSING)
        return 0
    if TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        return TITLE_POINTS
    issues.append(ISSUE_TITLE_LENGTH)
    return TITLE_POINTS // 2


def _score_description(description: str, issues: List[str]) -> int:
    if not description:
        issues.append(ISSUE_DESCRIPTION_MISSING)
        return 0
    if DESCRIPTION_MIN_LENGTH <= len(description) <= DESCRIPTION_MAX_LENGTH:
        return DESCRIPTION_POINTS
    issues.append(ISSUE_DESCRIPTION_LENGTH)
    return DESCRIPTION_POINTS // 2


def _score_h1(h1s: List[str], issues: List[str]) -> int:
    if len(h1s) == 1:
        return H1_POINTS
    if not h1s:
        issues.append(ISSUE_H1_MISSING)
        return 0
    issues.append(ISSUE_H1_MULTIPLE)
    return MULTIPLE_H1_POINTS


def _score_images(images: Tuple[ImageInfo, ...], issues: List[str]) -> int:
    # A page without images neither earns nor loses image points
    if not images:
        return 0
    missing = sum(1 for img in images if not img.has_alt)
    if missing:
        issues.append(ISSUE_IMAGES_ALT.format(count=missing))
    return max(0, IMAGE_POINTS - IMAGE_MISSING_ALT_PENALTY * missing)


def _score_social(social_meta: Dict[str, str], issues: List[str]) -> int:
    points = sum(value for key, value in SOCIAL_TAG_POINTS.items() if social_meta.get(key))
    if points < SOCIAL_POINTS:
        issues.append(ISSUE_SOCIAL)
    return points


def _score_structured_data(blocks: Tuple[Any, ...], issues: List[str]) -> int:
    if blocks:
        return STRUCTURED_DATA_POINTS
    issues.append(ISSUE_STRUCTURED_DATA)
    return 0


def recommendations_for(issues) -> Tuple[Recommendation, ...]:
    """Map issues to recommendations by keyword"""
    recommendations = []
    for issue in issues:
        text = issue.lower()
        for keyword, recommendation in RECOMMENDATION_RULES:
            if keyword in text:
                recommendations.append(recommendation)
    return tuple(recommendations)


def analyze(html: str, url: str, now: Optional[datetime] = None) -> PageAnalysis:
    """
    Score an HTML document.

    Args:
        html: Raw HTML text, possibly malformed or empty
        url: URL the document was fetched from
        now: Analysis instant, defaults to the current UTC time

    Returns:
        PageAnalysis with a score clamped to [0, 100]
    """
    soup = parse_html(html)

    title = extract_title(soup)
    meta_description = extract_meta_description(soup)
    headings = extract_headings(soup)
    images = extract_images(soup)
    social_meta = extract_social_meta(soup)
    structured_data_blocks = extract_structured_data(soup)

    issues: List[str] = []
    score = 0
    score += _score_title(title, issues)
    score += _score_description(meta_description, issues)
    score += _score_h1(headings['h1'], issues)
    score += _score_images(images, issues)
    score += _score_social(social_meta, issues)
    score += _score_structured_data(structured_data_blocks, issues)
    score = max(0, min(100, score))

    logger.debug(f"Scored {url}: {score} ({len(issues)} issues)")

    return PageAnalysis(
        url=url,
        timestamp=now or datetime.now(timezone.utc),
        title=title,
        meta_description=meta_description,
        headings=headings,
        images=images,
        social_meta=social_meta,
        structured_data_blocks=structured_data_blocks,
        score=score,
        issues=tuple(issues),
        recommendations=recommendations_for(issues),
    )
