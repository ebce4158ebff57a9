from seo_toolkit.services.robots import (
    RobotsBuilder,
    analyze_robots,
    check_site_robots,
    generate_basic_robots,
    generate_media_robots,
    generate_optimization_suggestions,
    generate_robots_txt,
    validate_robots,
)

BLOCKING_ROBOTS = """# Block AI crawlers
User-agent: GPTBot
User-agent: ClaudeBot
Disallow: /

User-agent: *
Disallow: /blog
Crawl-delay: 5

Sitemap: https://example.com/sitemap.xml
Host: example.com
"""


class TestBuilder:

    def test_chained_rules(self):
        content = (
            RobotsBuilder()
            .add_user_agent_rule('*', allow=['/'], disallow=['/admin/'], crawl_delay=2)
            .add_sitemap('https://example.com/sitemap.xml')
            .add_sitemap('https://example.com/sitemap.xml')
            .set_host('example.com')
            .generate()
        )

        assert content == (
            'User-agent: *\n'
            'Allow: /\n'
            'Disallow: /admin/\n'
            'Crawl-delay: 2\n'
            '\n'
            'Host: example.com\n'
            '\n'
            'Sitemap: https://example.com/sitemap.xml\n'
        )

    def test_basic_profile_is_valid(self):
        content = generate_basic_robots('example.com')

        assert 'Sitemap: https://example.com/sitemap.xml' in content
        assert validate_robots(content)['is_valid'] is True

    def test_media_profile_blocks_scrapers(self):
        content = generate_media_robots('example.com')
        agents = {entry['user_agent']: entry['rules'] for entry in analyze_robots(content)['user_agents']}

        assert agents['AhrefsBot'] == [{'type': 'disallow', 'path': '/'}]
        assert 'Sitemap: https://example.com/video-sitemap.xml' in content

    def test_custom_rules(self):
        content = generate_robots_txt('example.com', custom_rules=[{'user_agent': 'GPTBot', 'disallow': ['/']}])

        assert content.startswith('User-agent: GPTBot\nDisallow: /\n')
        assert 'Sitemap: https://example.com/sitemap.xml' in content

    def test_extra_sitemaps_appended_once(self):
        content = generate_robots_txt('example.com', sitemap_urls=[
            'https://example.com/sitemap.xml',
            'https://cdn.example.com/video-sitemap.xml',
        ])

        assert content.count('Sitemap: https://example.com/sitemap.xml') == 1
        assert content.endswith('Sitemap: https://cdn.example.com/video-sitemap.xml\n')


class TestValidation:

    def test_problems_reported(self):
        result = validate_robots('Disallow: /private\nSitemap: /sitemap.xml\nCrawl-delay: soon\nNoindex: /x\n')

        assert result['is_valid'] is False
        assert result['issues'] == [
            'Line 1: Allow/Disallow must follow a User-agent line',
            'Line 2: Sitemap must be an absolute URL',
            'Line 3: Crawl-delay must be a non-negative number',
            'Missing User-agent directive',
        ]
        assert result['warnings'] == ['Line 4: unknown directive "Noindex: /x"']

    def test_missing_sitemap_is_a_warning(self):
        result = validate_robots('User-agent: *\nDisallow:\n')

        assert result['is_valid'] is True
        assert 'Consider adding a Sitemap directive' in result['warnings']
        assert 'Line 2: empty path' in result['warnings']


class TestAnalysis:

    def test_analyze_groups_and_ai_bots(self):
        result = analyze_robots(BLOCKING_ROBOTS)

        assert [entry['user_agent'] for entry in result['user_agents']] == ['GPTBot', 'ClaudeBot', '*']
        assert result['sitemaps'] == ['https://example.com/sitemap.xml']
        assert result['host'] == 'example.com'
        assert result['crawl_delays'] == {'*': 5.0}
        assert result['comment_lines'] == 1

        ai_bots = result['ai_bots']
        assert ai_bots['access']['GPTBot'] is False
        assert ai_bots['access']['ClaudeBot'] is False
        assert ai_bots['access']['PerplexityBot'] is True
        assert 'PerplexityBot' in ai_bots['blocked_key_paths']['/blog']
        assert ai_bots['crawl_delays']['PerplexityBot'] == 5.0

    def test_check_site_without_robots(self):
        result = check_site_robots('https://example.com/page', fetcher=lambda url: '')

        assert result['robots_txt_present'] is False
        assert result['robots_url'] == 'https://example.com/robots.txt'
        assert all(result['ai_bots']['access'].values())

    def test_check_site_with_robots(self):
        requested = []

        def fetcher(url):
            requested.append(url)
            return BLOCKING_ROBOTS

        result = check_site_robots('https://example.com', fetcher=fetcher)

        assert requested == ['https://example.com/robots.txt']
        assert result['robots_txt_present'] is True
        assert result['validation']['is_valid'] is True

    def test_optimization_suggestions(self):
        suggestions = generate_optimization_suggestions('example.com', 'video-greeting')

        assert 'Googlebot-Video' in suggestions['sample_robots']
        assert suggestions['essential']
