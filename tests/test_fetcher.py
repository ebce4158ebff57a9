from unittest.mock import MagicMock, patch

import pytest
import requests

from seo_toolkit.exceptions import FetchError
from seo_toolkit.services.fetcher import fetch_html, fetch_text, normalize_url


def _response(status_code=200, text='<html></html>'):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class TestNormalizeUrl:

    @pytest.mark.parametrize('raw, expected', [
        ('example.com', 'https://example.com'),
        ('  http://example.com  ', 'http://example.com'),
        ('https://example.com/page', 'https://example.com/page'),
        ('', ''),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_url(raw) == expected


class TestFetchHtml:

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_returns_body(self, mock_get):
        mock_get.return_value = _response(text='<html><title>Hi</title></html>')

        assert fetch_html('example.com', timeout=5) == '<html><title>Hi</title></html>'
        args, kwargs = mock_get.call_args
        assert args[0] == 'https://example.com'
        assert kwargs['timeout'] == 5
        assert 'User-Agent' in kwargs['headers']

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_custom_user_agent(self, mock_get):
        mock_get.return_value = _response()

        fetch_html('https://example.com', user_agent='TestBot/1.0')

        assert mock_get.call_args.kwargs['headers']['User-Agent'] == 'TestBot/1.0'

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_non_2xx_raises(self, mock_get):
        mock_get.return_value = _response(status_code=503)

        with pytest.raises(FetchError) as exc_info:
            fetch_html('https://example.com')

        assert exc_info.value.status_code == 503
        assert exc_info.value.url == 'https://example.com'
        assert '(HTTP 503)' in str(exc_info.value)

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_timeout_raises(self, mock_get):
        mock_get.side_effect = requests.Timeout('slow')

        with pytest.raises(FetchError, match='Timed out'):
            fetch_html('https://example.com', timeout=2)

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_connection_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('refused')

        with pytest.raises(FetchError) as exc_info:
            fetch_html('https://example.com')

        assert exc_info.value.status_code is None

    def test_uses_given_session(self):
        session = MagicMock()
        session.get.return_value = _response(text='ok')

        assert fetch_html('https://example.com', session=session) == 'ok'
        session.get.assert_called_once()


class TestFetchText:

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_failure_returns_empty_string(self, mock_get):
        mock_get.return_value = _response(status_code=404)

        assert fetch_text('https://example.com/robots.txt') == ''

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_success_returns_text(self, mock_get):
        mock_get.return_value = _response(text='User-agent: *')

        assert fetch_text('https://example.com/robots.txt') == 'User-agent: *'

    @patch('seo_toolkit.services.fetcher.requests.get')
    def test_timeout_and_user_agent_forwarded(self, mock_get):
        mock_get.return_value = _response(text='User-agent: *')

        fetch_text('https://example.com/robots.txt', timeout=4, user_agent='GreetingBot/2.0')

        assert mock_get.call_args.kwargs['timeout'] == 4
        assert mock_get.call_args.kwargs['headers']['User-Agent'] == 'GreetingBot/2.0'
