"""
Test configuration and fixtures for the SEO Toolkit.

Provides page builders for the scorer tests, an application wired to
temporary data directories, and a fake fetcher so no test touches the
network.
"""

import json
from typing import Dict, Generator

import pytest
from flask.testing import FlaskClient

from seo_toolkit import create_app
from seo_toolkit.exceptions import FetchError

# 45 characters
PAGE_TITLE = 'Personalized Video Greetings for Every Moment'
# 140 characters
PAGE_DESCRIPTION = ('Heartfelt video greetings recorded for you. ' * 4)[:140]

ORGANIZATION_JSON_LD = {
    '@context': 'https://schema.org',
    '@type': 'Organization',
    'name': 'WishesVideo',
    'url': 'https://videogreetings.example.com',
}


def _build_page(title=PAGE_TITLE, description=PAGE_DESCRIPTION, h1s=('Video greetings',),
                images=(('birthday.jpg', 'Birthday video greeting'),), social=True,
                json_ld=(ORGANIZATION_JSON_LD,), extra_head='') -> str:
    head = []
    if title is not None:
        head.append(f'<title>{title}</title>')
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if social:
        head.append('<meta property="og:title" content="Video Greetings">')
        head.append('<meta property="og:description" content="Personal video messages">')
        head.append('<meta property="og:image" content="https://videogreetings.example.com/og.jpg">')
        head.append('<meta name="twitter:card" content="summary_large_image">')
    for block in json_ld:
        raw = block if isinstance(block, str) else json.dumps(block)
        head.append(f'<script type="application/ld+json">{raw}</script>')
    head.append(extra_head)

    body = [f'<h1>{text}</h1>' for text in h1s]
    for src, alt in images:
        body.append(f'<img src="{src}">' if alt is None else f'<img src="{src}" alt="{alt}">')

    return f"<html><head>{''.join(head)}</head><body>{''.join(body)}</body></html>"


@pytest.fixture
def build_page():
    """Return a function producing an HTML page; every signal is complete by default"""
    return _build_page


@pytest.fixture
def full_page_html() -> str:
    return _build_page()


@pytest.fixture
def empty_page_html() -> str:
    return '<html><head></head><body></body></html>'


class FakeFetcher:
    """Serves canned HTML per URL and raises FetchError for anything else"""

    def __init__(self, pages: Dict[str, str] = None):
        self.pages = dict(pages or {})
        self.calls = []

    def __call__(self, url: str, *args, **kwargs) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, f'Request failed for {url}', status_code=404)
        return self.pages[url]


@pytest.fixture
def fake_fetcher(full_page_html) -> FakeFetcher:
    return FakeFetcher({
        'https://videogreetings.example.com': full_page_html,
        'https://videogreetings.example.com/about': _build_page(h1s=()),
    })


@pytest.fixture
def data_dirs(tmp_path) -> Dict[str, str]:
    return {
        'DATA_DIR': str(tmp_path),
        'REPORTS_DIR': str(tmp_path / 'reports'),
        'ALERTS_DIR': str(tmp_path / 'alerts'),
        'LOGS_DIR': str(tmp_path / 'logs'),
        'RAW_DATA_DIR': str(tmp_path / 'raw'),
    }


@pytest.fixture
def app(data_dirs, fake_fetcher):
    """Application on the testing config with a fake fetcher and no email or webhook"""
    test_config = dict(
        data_dirs,
        MONITOR_CONFIG_PATH='',
        SMTP_USER=None,
        SMTP_PASSWORD=None,
        ALERT_EMAIL=None,
        WEBHOOK_URL=None,
        TARGET_WEBSITE='https://videogreetings.example.com',
        MONITORED_URLS=[],
    )
    application = create_app('testing', test_config)
    application.extensions['seo_toolkit']['analyzer'].fetcher = fake_fetcher
    return application


@pytest.fixture
def services(app) -> Dict:
    return app.extensions['seo_toolkit']


@pytest.fixture
def client(app) -> Generator[FlaskClient, None, None]:
    with app.test_client() as test_client:
        yield test_client
