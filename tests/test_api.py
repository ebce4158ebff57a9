"""
Tests for the HTTP API.

Every request goes through the Flask test client; pages are served by the
fake fetcher from conftest.
"""

import os
from unittest.mock import patch

import pytest

SITE = 'https://videogreetings.example.com'


class StubRankings:
    source = 'stub'

    def get_ranking(self, keyword):
        return {'keyword': keyword, 'position': 42 if 'birthday' in keyword else 2, 'change': 0}


class TestHealth:

    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['service'] == 'SEO Toolkit'

    def test_status(self, client):
        data = client.get('/api/status').get_json()

        assert data['target_website'] == SITE
        assert data['analyses'] == {'stored': 0, 'capacity': 100, 'average_score': 0.0}
        assert data['notifications'] == {'console': False, 'email': False, 'webhook': False}
        assert data['health']['overall_health'] == 'unknown'

    def test_unknown_endpoint(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        data = response.get_json()
        assert data['success'] is False
        assert 'POST /api/analyze' in data['available_endpoints']

    def test_method_not_allowed(self, client):
        response = client.get('/api/analyze')

        assert response.status_code == 405
        assert response.get_json()['success'] is False


class TestAnalyze:

    def test_analyze_url(self, client, services):
        response = client.post('/api/analyze', json={'url': SITE})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['analysis']['score'] == 100
        assert data['analysis']['issues'] == []
        assert services['history'].get(data['run_id']).url == SITE
        assert len(services['history']) == 1

    def test_analyze_supplied_html(self, client, fake_fetcher, empty_page_html):
        response = client.post('/api/analyze', json={'url': 'https://example.com/draft', 'html': empty_page_html})

        assert response.get_json()['analysis']['score'] == 0
        assert fake_fetcher.calls == []

    def test_url_without_scheme(self, client):
        data = client.post('/api/analyze', json={'url': 'videogreetings.example.com/about'}).get_json()

        assert data['analysis']['url'] == f'{SITE}/about'
        assert data['analysis']['score'] == 85

    @pytest.mark.parametrize('kwargs, message', [
        ({}, 'No JSON data provided'),
        ({'json': ['https://example.com']}, 'JSON body must be an object'),
    ])
    def test_bad_body(self, client, kwargs, message):
        response = client.post('/api/analyze', **kwargs)

        assert response.status_code == 400
        assert response.get_json()['error'] == message

    def test_empty_url(self, client):
        response = client.post('/api/analyze', json={'url': ''})

        assert response.status_code == 400
        assert response.get_json()['error'].startswith('url:')

    def test_fetch_failure(self, client, services):
        response = client.post('/api/analyze', json={'url': 'https://rival.example.com'})

        assert response.status_code == 502
        data = response.get_json()
        assert data['url'] == 'https://rival.example.com'
        assert 'HTTP 404' in data['error']
        assert len(services['history']) == 0


class TestBatch:

    def test_batch_urls(self, client):
        response = client.post('/api/analyze/batch', json={
            'urls': [SITE, f'{SITE}/about', 'https://rival.example.com']
        })

        data = response.get_json()
        assert data['success'] is True
        assert data['processed'] == 2
        assert data['failed'] == 1
        assert [page['status'] for page in data['pages']] == ['success', 'success', 'failed']
        assert data['pages'][0]['analysis']['score'] == 100
        assert 'analysis' not in data['pages'][2]
        assert data['summary']['average_score'] == 92

    def test_domain_with_urls(self, client):
        data = client.post('/api/analyze/batch', json={'domain': SITE, 'urls': [SITE]}).get_json()

        assert data['domain'] == SITE
        assert data['total_urls'] == 1

    def test_requires_target(self, client):
        response = client.post('/api/analyze/batch', json={'urls': []})

        assert response.status_code == 400
        assert 'Either urls or domain is required' in response.get_json()['error']


class TestComprehensive:

    def test_content_analysis(self, client):
        data = client.post('/api/analyze/comprehensive', json={
            'content': 'Video greetings make great gifts. Order video greetings today!',
            'keywords': ['video greetings'],
            'url': 'videogreetings.example.com',
        }).get_json()

        assert data['success'] is True
        assert data['url'] == SITE
        assert data['seo_score'] == 30
        assert data['analysis']['keywords']['word_count'] == 9

    @pytest.mark.parametrize('body', [
        {'keywords': ['video greetings']},
        {'content': 'Some text', 'meta': {'title': 5}},
        {'content': 'Some text', 'images': ['cake.jpg']},
    ])
    def test_content_analysis_rejects_payload(self, client, body):
        response = client.post('/api/analyze/comprehensive', json=body)

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_page_overview(self, client, fake_fetcher, services):
        data = client.post('/api/analyze/overview', json={'url': 'videogreetings.example.com'}).get_json()

        overview = data['overview']
        assert overview['url'] == SITE
        assert set(overview['modules']) == {'meta', 'structured_data', 'social_media', 'images'}
        assert 0 <= overview['overall_score'] <= 100
        assert fake_fetcher.calls == [SITE]
        assert len(services['history']) == 0

    def test_page_overview_supplied_html(self, client, fake_fetcher, empty_page_html):
        data = client.post('/api/analyze/overview', json={'url': SITE, 'html': empty_page_html}).get_json()

        assert data['overview']['modules']['images'] is None
        assert data['overview']['summary']['critical_issues'] >= 3
        assert fake_fetcher.calls == []

    def test_page_overview_fetch_failure(self, client):
        response = client.post('/api/analyze/overview', json={'url': 'https://rival.example.com'})

        assert response.status_code == 502


class TestHistory:

    def test_history_listing(self, client):
        client.post('/api/analyze', json={'url': SITE})
        client.post('/api/analyze', json={'url': f'{SITE}/about'})

        data = client.get('/api/history?limit=1').get_json()

        assert data['total'] == 2
        assert data['average_score'] == 92.5
        assert len(data['runs']) == 1
        assert data['runs'][0]['url'] == f'{SITE}/about'
        assert data['runs'][0]['issues'] == 1

    def test_history_item(self, client):
        run_id = client.post('/api/analyze', json={'url': SITE}).get_json()['run_id']

        data = client.get(f'/api/history/{run_id}').get_json()

        assert data['analysis']['url'] == SITE

    def test_history_item_not_found(self, client):
        response = client.get('/api/history/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['success'] is False

    def test_report(self, client):
        client.post('/api/analyze', json={'url': SITE})

        data = client.get('/api/report').get_json()

        assert data['summary']['total_analyses'] == 1
        assert data['summary']['average_score'] == 100


class TestGenerateReport:

    def test_csv_report(self, client, services):
        data = client.post('/api/generate-report', json={'url': f'{SITE}/about', 'format': 'csv'}).get_json()

        assert data['format'] == 'csv'
        assert data['email_sent'] is False
        assert os.path.dirname(data['report_path']) == services['writer'].reports_dir
        with open(data['report_path'], encoding='utf-8') as f:
            assert 'Missing H1 tag' in f.read()

    def test_email_requested_but_disabled(self, client):
        data = client.post('/api/generate-report', json={'url': SITE, 'email': 'client@example.com'}).get_json()

        assert data['success'] is True
        assert data['email_sent'] is False

    def test_unsupported_format(self, client, services):
        response = client.post('/api/generate-report', json={'url': SITE, 'format': 'pdf'})

        assert response.status_code == 400
        assert len(services['history']) == 0


class TestMonitoring:

    def test_keywords_before_any_check(self, client, app):
        data = client.get('/api/keywords').get_json()

        assert data['tracked_keywords'] == app.config['TRACKED_KEYWORDS']
        assert data['rankings'] == {}
        assert data['health']['status'] == 'unknown'

    def test_check_tracked_keywords(self, client, app):
        data = client.post('/api/check-keywords').get_json()

        assert data['source'] == 'placeholder'
        assert sorted(data['rankings']) == sorted(app.config['TRACKED_KEYWORDS'])

    def test_check_keywords_raises_alerts(self, client, services):
        services['ranking_provider'] = StubRankings()

        data = client.post('/api/check-keywords', json={'keywords': ['video greetings', 'birthday videos']}).get_json()

        assert data['source'] == 'stub'
        assert data['rankings']['video greetings']['position'] == 2
        assert [a['keyword'] for a in data['alerts']] == ['birthday videos']
        assert data['alerts'][0]['id'].startswith('alert-')

        alerts = client.get('/api/alerts').get_json()
        assert alerts['total'] == 1
        health = client.get('/api/keywords').get_json()['health']
        assert health['good_rankings'] == 1

    def test_competitor_keywords(self, client):
        data = client.get('/api/keywords/competitors').get_json()

        assert len(data['report']['competitors']) == 3
        assert data['strategy']['keyword_monitoring']['primary_targets']

    def test_competitor_data_unavailable(self, client):
        with patch('seo_toolkit.api.routes.monitoring.generate_keyword_report', side_effect=OSError('missing')):
            response = client.get('/api/keywords/competitors')

        assert response.status_code == 500

    def test_keyword_content_analysis(self, client):
        data = client.post('/api/analyze/keywords', json={
            'content': 'Video greetings make great gifts. Order video greetings today!',
            'keywords': ['video greetings'],
        }).get_json()

        assert data['analysis']['word_count'] == 9
        assert [s['type'] for s in data['suggestions']] == ['content_length', 'keyword_stuffing']

    def test_alerts_limit(self, client, services):
        for i in range(3):
            services['alert_manager'].process({'type': 'system', 'message': f'alert {i}'})

        data = client.get('/api/alerts?limit=2').get_json()

        assert [a['message'] for a in data['alerts']] == ['alert 1', 'alert 2']


class TestTools:

    def test_optimize_meta(self, client):
        data = client.post('/api/optimize/meta', json={
            'title': 'Custom Video Greetings | WishesVideo Studio',
            'description': 'Book a video greeting today.',
            'keywords': ['video greeting'],
            'industry': 'video-greeting',
        }).get_json()

        assert data['optimization']['score'] == 75
        assert data['templates']

    def test_social_media(self, client, full_page_html):
        data = client.post('/api/optimize/social-media', json={
            'title': 'Birthday video greetings',
            'description': 'Personal birthday messages on video',
            'html': full_page_html,
        }).get_json()

        assert 'open_graph' in data['tags']
        assert 'missing' in data['analysis']

    def test_social_media_requires_content(self, client):
        assert client.post('/api/optimize/social-media', json={'image': 'x.jpg'}).status_code == 400

    def test_optimize_images(self, client):
        data = client.post('/api/optimize/images', json={
            'images': [{'path': 'https://cdn.example.com/images/birthday-cake.webp', 'alt': 'Birthday cake'}]
        }).get_json()

        assert data['summary']['avg_score'] == 65
        assert data['checklist']

    def test_optimize_images_requires_list(self, client):
        assert client.post('/api/optimize/images', json={'images': []}).status_code == 400

    def test_generate_structured_data(self, client):
        data = client.post('/api/generate/structured-data', json={
            'type': 'organization',
            'data': {'name': 'WishesVideo', 'url': SITE},
        }).get_json()

        assert data['schema']['@type'] == 'Organization'
        assert data['script_tag'].startswith('<script type="application/ld+json">')
        assert data['validation']['is_valid'] is True

    def test_generate_unknown_schema(self, client):
        response = client.post('/api/generate/structured-data', json={'type': 'recipe', 'data': {}})

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_structured_data_list_for_object_type(self, client):
        response = client.post('/api/generate/structured-data', json={
            'type': 'organization',
            'data': [{'name': 'WishesVideo'}],
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Data for organization must be an object'

    @pytest.mark.parametrize('data', ['not an object', ['question'], {'questions': ['question']}])
    def test_faq_with_malformed_entries(self, client, data):
        response = client.post('/api/generate/structured-data', json={'type': 'faq', 'data': data})

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_faq_from_list(self, client):
        data = client.post('/api/generate/structured-data', json={
            'type': 'faq',
            'data': [{'question': 'How long?', 'answer': 'Two days'}],
        }).get_json()

        assert data['schema']['mainEntity'][0]['acceptedAnswer']['text'] == 'Two days'

    def test_validate_structured_data(self, client):
        data = client.post('/api/validate/structured-data', json={'data': [{'description': 'No type'}]}).get_json()

        assert data['is_valid'] is False
        assert data['results'][0]['errors'][0] == 'Missing @context'

    def test_validate_page_structured_data(self, client, full_page_html):
        data = client.post('/api/validate/structured-data', json={'html': full_page_html, 'url': SITE}).get_json()

        assert 'Organization' in data['page']['types']
        assert 'is_valid' not in data

    def test_sitemap_from_urls(self, client):
        data = client.post('/api/generate/sitemap', json={'urls': ['https://example.com/a']}).get_json()

        assert data['url_count'] == 1
        assert '<loc>https://example.com/a</loc>' in data['sitemap']
        assert data['validation']['is_valid'] is True
        assert 'robots_entry' not in data

    def test_sitemap_entry_with_images(self, client):
        data = client.post('/api/generate/sitemap', json={
            'urls': [{
                'url': 'https://example.com/birthday',
                'priority': 0.8,
                'images': [{'url': 'https://example.com/cake.jpg', 'caption': 'Cake'}],
            }],
            'include_images': True,
        }).get_json()

        assert '<priority>0.8</priority>' in data['sitemap']
        assert '<image:loc>https://example.com/cake.jpg</image:loc>' in data['sitemap']
        assert data['validation']['is_valid'] is True

    @pytest.mark.parametrize('entry', [
        {'priority': 0.8},
        {'url': ''},
        {'url': 'https://example.com/a', 'images': [{'caption': 'No location'}]},
        42,
    ])
    def test_sitemap_rejects_malformed_entry(self, client, entry):
        response = client.post('/api/generate/sitemap', json={'urls': [entry], 'include_images': True})

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_sitemap_from_domain(self, client):
        data = client.post('/api/generate/sitemap', json={'domain': 'wishesvideo.com'}).get_json()

        assert data['url_count'] == 17
        assert data['robots_entry'] == 'Sitemap: https://wishesvideo.com/sitemap.xml'

    def test_generate_robots(self, client):
        data = client.post('/api/generate/robots', json={'domain': 'example.com'}).get_json()

        assert data['validation']['is_valid'] is True
        assert 'Sitemap: https://example.com/sitemap.xml' in data['robots_txt']

    def test_generate_media_robots(self, client):
        data = client.post('/api/generate/robots', json={'domain': 'example.com', 'profile': 'media'}).get_json()

        assert 'User-agent: AhrefsBot' in data['robots_txt']

    def test_validate_robots_content(self, client):
        data = client.post('/api/validate/robots', json={'content': 'User-agent: *\nDisallow: /admin\n'}).get_json()

        assert data['validation']['is_valid'] is True
        assert data['analysis']['user_agents'][0]['user_agent'] == '*'

    def test_validate_live_robots(self, client, services):
        with patch('seo_toolkit.api.routes.tools.check_site_robots', return_value={'robots_txt_present': True}) as mock_check:
            data = client.post('/api/validate/robots', json={'url': 'example.com'}).get_json()

        mock_check.assert_called_once_with('https://example.com', fetcher=services['text_fetcher'])
        assert data['site'] == {'robots_txt_present': True}

    def test_validate_robots_requires_source(self, client):
        assert client.post('/api/validate/robots', json={}).status_code == 400
