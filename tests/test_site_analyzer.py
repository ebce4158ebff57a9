from unittest.mock import patch

import pytest

from seo_toolkit.exceptions import FetchError
from seo_toolkit.services.history import AnalysisHistory
from seo_toolkit.services.site_analyzer import SiteAnalyzer, parse_sitemap_locations

SITEMAP = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://shop.example.com/</loc></url>
  <url><loc> https://shop.example.com/about </loc></url>
</urlset>"""

SITEMAP_INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://shop.example.com/sitemap-pages.xml</loc></sitemap>
</sitemapindex>"""


@pytest.fixture
def analyzer(fake_fetcher):
    return SiteAnalyzer(fetcher=fake_fetcher, history=AnalysisHistory(), batch_size=2, pause=0)


class TestAnalyzeUrl:

    def test_records_in_history(self, analyzer):
        analysis = analyzer.analyze_url('videogreetings.example.com')

        assert analysis.url == 'https://videogreetings.example.com'
        assert analysis.score == 100
        assert len(analyzer.history) == 1

    def test_supplied_html_skips_fetch(self, analyzer, empty_page_html, fake_fetcher):
        analysis = analyzer.analyze_url('https://elsewhere.example.com', html=empty_page_html)

        assert analysis.score == 0
        assert fake_fetcher.calls == []

    def test_record_false_leaves_history_untouched(self, analyzer):
        analyzer.analyze_url('https://videogreetings.example.com', record=False)

        assert len(analyzer.history) == 0

    def test_fetch_error_propagates(self, analyzer):
        with pytest.raises(FetchError):
            analyzer.analyze_url('https://missing.example.com')

        assert len(analyzer.history) == 0


class TestAnalyzeBatch:

    def test_mixed_results(self, analyzer):
        results = analyzer.analyze_batch([
            'https://videogreetings.example.com',
            'https://videogreetings.example.com/about',
            'https://missing.example.com',
        ])

        assert results['total_urls'] == 3
        assert results['processed'] == 2
        assert results['failed'] == 1
        assert [page['status'] for page in results['pages']] == ['success', 'success', 'failed']
        assert 'error' in results['pages'][2]
        assert results['summary']['average_score'] == round((100 + 85) / 2)
        assert results['summary']['common_issues'] == {'Missing H1 tag': 1}

    def test_pauses_between_batches(self, fake_fetcher):
        analyzer = SiteAnalyzer(fetcher=fake_fetcher, batch_size=1, pause=0.5)

        with patch('seo_toolkit.services.site_analyzer.time.sleep') as mock_sleep:
            analyzer.analyze_batch(['https://videogreetings.example.com'] * 3)

        assert mock_sleep.call_count == 2

    def test_empty_batch(self, analyzer):
        results = analyzer.analyze_batch([])

        assert results['processed'] == 0
        assert results['summary'] == {'average_score': 0, 'total_issues': 0, 'common_issues': {}}


class TestDiscovery:

    def test_parse_sitemap_locations(self):
        assert parse_sitemap_locations(SITEMAP) == {
            'pages': ['https://shop.example.com/', 'https://shop.example.com/about'],
            'sitemaps': [],
        }
        assert parse_sitemap_locations(SITEMAP_INDEX)['sitemaps'] == [
            'https://shop.example.com/sitemap-pages.xml'
        ]

    def test_parse_invalid_xml(self):
        assert parse_sitemap_locations('<not xml') == {'pages': [], 'sitemaps': []}

    def test_discover_from_sitemap_index(self, analyzer):
        documents = {
            'https://shop.example.com/sitemap.xml': SITEMAP_INDEX,
            'https://shop.example.com/sitemap-pages.xml': SITEMAP,
        }
        analyzer.text_fetcher = lambda url: documents.get(url, '')

        assert analyzer.discover_urls('shop.example.com') == [
            'https://shop.example.com/',
            'https://shop.example.com/about',
        ]

    def test_fallback_paths(self, analyzer):
        analyzer.text_fetcher = lambda url: ''

        assert analyzer.discover_urls('https://shop.example.com/') == [
            'https://shop.example.com',
            'https://shop.example.com/about',
            'https://shop.example.com/contact',
            'https://shop.example.com/products',
            'https://shop.example.com/services',
        ]

    def test_discovery_is_capped(self, analyzer):
        urls = ''.join(f'<url><loc>https://shop.example.com/p{i}</loc></url>' for i in range(80))
        analyzer.text_fetcher = lambda url: f'<urlset>{urls}</urlset>' if url.endswith('/sitemap.xml') else ''

        assert len(analyzer.discover_urls('shop.example.com')) == 50

    def test_analyze_site_uses_discovery(self, analyzer):
        analyzer.text_fetcher = lambda url: ''

        results = analyzer.analyze_site('videogreetings.example.com')

        assert results['domain'] == 'videogreetings.example.com'
        assert results['total_urls'] == 5
        assert results['processed'] == 2
        assert results['failed'] == 3
