"""
Site Analyzer
Fetches and scores pages one at a time or in bounded batches
"""

import concurrent.futures
import logging
import time
import xml.etree.ElementTree as ET
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from seo_toolkit.exceptions import FetchError
from seo_toolkit.models import PageAnalysis
from seo_toolkit.services import page_scorer
from seo_toolkit.services.fetcher import fetch_html, fetch_text, normalize_url
from seo_toolkit.services.history import AnalysisHistory

# Configure logging
logger = logging.getLogger(__name__)

FALLBACK_PATHS = ['', '/about', '/contact', '/products', '/services']
MAX_CHILD_SITEMAPS = 3


def _local_name(tag: str) -> str:
    return (tag or '').rsplit('}', 1)[-1].lower()


def parse_sitemap_locations(xml_text: str) -> Dict[str, List[str]]:
    """Split <loc> entries of a sitemap or sitemap index into page and sitemap URLs"""
    pages: List[str] = []
    sitemaps: List[str] = []
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        logger.debug(f"Unparseable sitemap: {e}")
        return {'pages': pages, 'sitemaps': sitemaps}

    for parent in root.iter():
        kind = _local_name(parent.tag)
        if kind not in ('url', 'sitemap'):
            continue
        for child in parent:
            if _local_name(child.tag) == 'loc' and child.text and child.text.strip():
                target = pages if kind == 'url' else sitemaps
                target.append(child.text.strip())
    return {'pages': pages, 'sitemaps': sitemaps}


class SiteAnalyzer:
    """Runs the page scorer against live URLs"""

    def __init__(self, fetcher: Callable[[str], str] = fetch_html,
                 history: Optional[AnalysisHistory] = None,
                 batch_size: int = 5, pause: float = 1.0,
                 max_discovered_urls: int = 50,
                 text_fetcher: Callable[[str], str] = fetch_text):
        self.fetcher = fetcher
        self.text_fetcher = text_fetcher
        self.history = history
        self.batch_size = max(1, batch_size)
        self.pause = pause
        self.max_discovered_urls = max_discovered_urls

    def analyze_url(self, url: str, html: Optional[str] = None, record: bool = True) -> PageAnalysis:
        """
        Score a single page, adding it to the history unless ``record`` is false.

        Raises:
            FetchError: when the page cannot be fetched; nothing is recorded
        """
        url = normalize_url(url)
        if html is None:
            logger.info(f"Fetching {url}")
            html = self.fetcher(url)
        analysis = page_scorer.analyze(html, url)
        if record and self.history is not None:
            self.history.add(analysis)
        logger.info(f"Analysis complete for {url}: score {analysis.score}")
        return analysis

    def _analyze_safely(self, url: str) -> Dict[str, Any]:
        try:
            analysis = self.analyze_url(url)
            return {'url': analysis.url, 'status': 'success', 'analysis': analysis}
        except FetchError as e:
            logger.error(f"Batch item failed: {url} - {e}")
            return {'url': url, 'status': 'failed', 'error': str(e)}

    def analyze_batch(self, urls: List[str]) -> Dict[str, Any]:
        """
        Score many pages, at most ``batch_size`` at a time with a pause
        between batches. Failures are reported per URL.
        """
        results: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'total_urls': len(urls),
            'processed': 0,
            'failed': 0,
            'pages': [],
        }
        for start in range(0, len(urls), self.batch_size):
            batch = urls[start:start + self.batch_size]
            with concurrent.futures.ThreadPoolExecutor(max_workers=len(batch)) as pool:
                outcomes = list(pool.map(self._analyze_safely, batch))
            for outcome in outcomes:
                if outcome['status'] == 'success':
                    results['processed'] += 1
                else:
                    results['failed'] += 1
                results['pages'].append(outcome)
            logger.info(f"Batch progress: {results['processed'] + results['failed']}/{len(urls)}")
            if start + self.batch_size < len(urls) and self.pause > 0:
                time.sleep(self.pause)

        results['summary'] = self.summarize(
            [page['analysis'] for page in results['pages'] if page['status'] == 'success']
        )
        logger.info(f"Batch complete: {results['processed']} succeeded, {results['failed']} failed")
        return results

    def analyze_site(self, domain: str, urls: Optional[List[str]] = None) -> Dict[str, Any]:
        """Batch-score a domain, discovering its URLs when none are given"""
        if not urls:
            urls = self.discover_urls(domain)
        results = self.analyze_batch(urls)
        results['domain'] = domain
        return results

    @staticmethod
    def summarize(analyses: List[PageAnalysis]) -> Dict[str, Any]:
        if not analyses:
            return {'average_score': 0, 'total_issues': 0, 'common_issues': {}}
        counter = Counter(issue for analysis in analyses for issue in analysis.issues)
        return {
            'average_score': round(sum(a.score for a in analyses) / len(analyses)),
            'total_issues': sum(len(a.issues) for a in analyses),
            'common_issues': dict(counter.most_common(10)),
        }

    def discover_urls(self, domain: str) -> List[str]:
        """Page URLs from the domain's sitemap, or a set of common pages"""
        base = normalize_url(domain).rstrip('/')
        urls: List[str] = []

        for sitemap_url in (f"{base}/sitemap.xml", f"{base}/sitemap_index.xml"):
            xml_text = self.text_fetcher(sitemap_url)
            if not xml_text:
                continue
            found = parse_sitemap_locations(xml_text)
            pages = list(found['pages'])
            for child in found['sitemaps'][:MAX_CHILD_SITEMAPS]:
                child_text = self.text_fetcher(child)
                if child_text:
                    pages.extend(parse_sitemap_locations(child_text)['pages'])
            for page in pages:
                if page not in urls:
                    urls.append(page)
            if urls:
                break

        if not urls:
            logger.info(f"No sitemap found for {domain}, falling back to common pages")
            urls = [f"{base}{path}" for path in FALLBACK_PATHS]

        return urls[:self.max_discovered_urls]
