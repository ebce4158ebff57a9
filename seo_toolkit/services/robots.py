"""
Robots.txt Service
Builds, validates and analyzes robots.txt files, including AI crawler access
"""

import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

from seo_toolkit.config import Config
from seo_toolkit.services.fetcher import fetch_text

# Configure logging
logger = logging.getLogger(__name__)

KEY_PATHS = ['/', '/blog', '/blogs', '/articles', '/news', '/products', '/services', '/pricing']
KNOWN_DIRECTIVES = ('user-agent', 'allow', 'disallow', 'sitemap', 'crawl-delay', 'host')


class RobotsBuilder:
    """Accumulates rules and renders a robots.txt file"""

    def __init__(self):
        self.rules: List[Dict[str, Any]] = []
        self.sitemaps: List[str] = []
        self.crawl_delay: Optional[float] = None
        self.host: Optional[str] = None

    def add_user_agent_rule(self, user_agent: str, allow: Optional[List[str]] = None,
                            disallow: Optional[List[str]] = None,
                            crawl_delay: Optional[float] = None) -> 'RobotsBuilder':
        self.rules.append({
            'user_agent': user_agent,
            'allow': list(allow or []),
            'disallow': list(disallow or []),
            'crawl_delay': crawl_delay,
        })
        return self

    def add_sitemap(self, sitemap_url: str) -> 'RobotsBuilder':
        if sitemap_url not in self.sitemaps:
            self.sitemaps.append(sitemap_url)
        return self

    def set_crawl_delay(self, delay: float) -> 'RobotsBuilder':
        self.crawl_delay = delay
        return self

    def set_host(self, host: str) -> 'RobotsBuilder':
        self.host = host
        return self

    def generate(self) -> str:
        lines: List[str] = []
        for rule in self.rules:
            lines.append(f"User-agent: {rule['user_agent']}")
            lines.extend(f'Allow: {path}' for path in rule['allow'])
            lines.extend(f'Disallow: {path}' for path in rule['disallow'])
            if rule['crawl_delay']:
                lines.append(f"Crawl-delay: {rule['crawl_delay']}")
            lines.append('')
        if self.crawl_delay:
            lines.extend([f'Crawl-delay: {self.crawl_delay}', ''])
        if self.host:
            lines.extend([f'Host: {self.host}', ''])
        lines.extend(f'Sitemap: {sitemap}' for sitemap in self.sitemaps)
        return '\n'.join(lines) + '\n'


def generate_basic_robots(domain: str) -> str:
    builder = RobotsBuilder()
    builder.add_user_agent_rule(
        '*', allow=['/'],
        disallow=['/admin/', '/private/', '/temp/', '/*.json$', '/*.xml$']
    )
    builder.add_user_agent_rule('Googlebot', allow=['/'], crawl_delay=1)
    builder.add_user_agent_rule('Bingbot', allow=['/'], crawl_delay=2)
    builder.add_sitemap(f'https://{domain}/sitemap.xml')
    builder.add_sitemap(f'https://{domain}/sitemap-index.xml')
    return builder.generate()


def generate_media_robots(domain: str) -> str:
    """Profile for a video site: media crawlers allowed, private uploads and scrapers blocked"""
    builder = RobotsBuilder()
    builder.add_user_agent_rule(
        '*', allow=['/', '/videos/', '/api/public/'],
        disallow=['/admin/', '/api/private/', '/user-data/', '/temp/', '/uploads/private/']
    )
    builder.add_user_agent_rule('Googlebot', allow=['/', '/videos/', '/api/public/'], crawl_delay=1)
    builder.add_user_agent_rule('Googlebot-Video', allow=['/videos/', '/thumbnails/'],
                                disallow=['/videos/private/'])
    builder.add_user_agent_rule('Googlebot-Image', allow=['/images/', '/thumbnails/', '/assets/images/'])
    builder.add_user_agent_rule('facebookexternalhit', allow=['/', '/videos/'])
    builder.add_user_agent_rule('Twitterbot', allow=['/', '/videos/'])
    builder.add_user_agent_rule('AhrefsBot', disallow=['/'])
    builder.add_user_agent_rule('MJ12bot', disallow=['/'])
    for name in ('sitemap.xml', 'video-sitemap.xml', 'image-sitemap.xml'):
        builder.add_sitemap(f'https://{domain}/{name}')
    return builder.generate()


def generate_robots_txt(domain: str, sitemap_urls: Optional[List[str]] = None,
                        custom_rules: Optional[List[Dict[str, Any]]] = None) -> str:
    """robots.txt for a domain: custom rules when given, else the basic profile plus extra sitemaps"""
    if not custom_rules:
        content = generate_basic_robots(domain)
        for sitemap in sitemap_urls or []:
            line = f'Sitemap: {sitemap}'
            if line not in content:
                content += line + '\n'
        return content

    builder = RobotsBuilder()
    for rule in custom_rules:
        builder.add_user_agent_rule(
            rule.get('user_agent', '*'),
            allow=rule.get('allow'),
            disallow=rule.get('disallow'),
            crawl_delay=rule.get('crawl_delay'),
        )
    for sitemap in sitemap_urls or [f'https://{domain}/sitemap.xml']:
        builder.add_sitemap(sitemap)
    return builder.generate()


def _split_directive(line: str):
    directive, _, value = line.partition(':')
    return directive.strip().lower(), value.strip()


def validate_robots(content: str) -> Dict[str, Any]:
    issues: List[str] = []
    warnings: List[str] = []
    lines = content.splitlines()
    has_user_agent = False
    has_sitemap = False
    current_agent = None

    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        directive, value = _split_directive(stripped)

        if directive == 'user-agent':
            has_user_agent = True
            current_agent = value
            if not value:
                issues.append(f'Line {number}: User-agent value is empty')
        elif directive in ('allow', 'disallow'):
            if not current_agent:
                issues.append(f'Line {number}: Allow/Disallow must follow a User-agent line')
            if not value:
                warnings.append(f'Line {number}: empty path')
        elif directive == 'sitemap':
            has_sitemap = True
            if not value.startswith('http'):
                issues.append(f'Line {number}: Sitemap must be an absolute URL')
        elif directive == 'crawl-delay':
            try:
                if float(value) < 0:
                    raise ValueError(value)
            except ValueError:
                issues.append(f'Line {number}: Crawl-delay must be a non-negative number')
        elif directive == 'host':
            continue
        else:
            warnings.append(f'Line {number}: unknown directive "{stripped}"')

    if not has_user_agent:
        issues.append('Missing User-agent directive')
    if not has_sitemap:
        warnings.append('Consider adding a Sitemap directive')

    return {
        'is_valid': not issues,
        'issues': issues,
        'warnings': warnings,
        'summary': {
            'has_user_agent': has_user_agent,
            'has_sitemap': has_sitemap,
            'line_count': len(lines),
            'issue_count': len(issues),
            'warning_count': len(warnings),
        },
    }


def _parse_groups(lines: List[str]) -> List[Dict[str, Any]]:
    """Group consecutive User-agent lines with the rules that follow them"""
    groups: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        directive, value = _split_directive(stripped)
        if directive == 'user-agent':
            if current is None or current['rules']:
                current = {'user_agents': [], 'rules': [], 'crawl_delay': None}
                groups.append(current)
            current['user_agents'].append(value)
        elif current is not None and directive in ('allow', 'disallow'):
            current['rules'].append({'type': directive, 'path': value})
        elif current is not None and directive == 'crawl-delay':
            try:
                current['crawl_delay'] = float(value)
            except ValueError:
                pass
    return groups


def ai_bot_access(groups: List[Dict[str, Any]], agents: Optional[List[str]] = None) -> Dict[str, Any]:
    """Which AI crawlers are blocked from the site root, and which key paths they cannot reach"""
    agents = agents or Config.AI_BOT_AGENTS
    access: Dict[str, bool] = {}
    blocked_paths: Dict[str, List[str]] = {}
    crawl_delays: Dict[str, float] = {}
    for agent in agents:
        allowed = True
        delay = 0.0
        for group in groups:
            if not any(ua == '*' or ua.lower() == agent.lower() for ua in group['user_agents']):
                continue
            for rule in group['rules']:
                if rule['type'] != 'disallow' or not rule['path']:
                    continue
                if rule['path'] == '/':
                    allowed = False
                for key_path in KEY_PATHS:
                    if key_path.startswith(rule['path']):
                        blocked_paths.setdefault(key_path, [])
                        if agent not in blocked_paths[key_path]:
                            blocked_paths[key_path].append(agent)
            if group['crawl_delay']:
                delay = max(delay, group['crawl_delay'])
        access[agent] = allowed
        if delay:
            crawl_delays[agent] = delay
    return {'access': access, 'blocked_key_paths': blocked_paths, 'crawl_delays': crawl_delays}


def analyze_robots(content: str) -> Dict[str, Any]:
    lines = content.splitlines()
    groups = _parse_groups(lines)
    sitemaps: List[str] = []
    host = None
    for line in lines:
        directive, value = _split_directive(line.strip())
        if directive == 'sitemap':
            sitemaps.append(value)
        elif directive == 'host':
            host = value

    crawl_delays = {}
    for group in groups:
        if group['crawl_delay'] is not None:
            for agent in group['user_agents']:
                crawl_delays[agent] = group['crawl_delay']

    return {
        'user_agents': [
            {'user_agent': agent, 'rules': group['rules']}
            for group in groups for agent in group['user_agents']
        ],
        'sitemaps': sitemaps,
        'crawl_delays': crawl_delays,
        'host': host,
        'total_lines': len(lines),
        'comment_lines': sum(1 for line in lines if line.strip().startswith('#')),
        'empty_lines': sum(1 for line in lines if not line.strip()),
        'ai_bots': ai_bot_access(groups),
    }


def check_site_robots(url: str, fetcher: Callable[[str], str] = fetch_text) -> Dict[str, Any]:
    """Fetch a site's robots.txt and analyze it; a missing file allows every crawler"""
    robots_url = urljoin(url, '/robots.txt')
    content = fetcher(robots_url)
    if not content:
        return {
            'robots_txt_present': False,
            'robots_url': robots_url,
            'ai_bots': ai_bot_access([]),
            'sitemaps': [],
        }
    analysis = analyze_robots(content)
    analysis.update({
        'robots_txt_present': True,
        'robots_url': robots_url,
        'validation': validate_robots(content),
    })
    return analysis


def generate_optimization_suggestions(domain: str, site_type: str = 'general') -> Dict[str, Any]:
    sample = generate_media_robots(domain) if site_type == 'video-greeting' else generate_basic_robots(domain)
    return {
        'essential': [
            'Include a "User-agent: *" group',
            'Reference the primary sitemap URL',
            'Block sensitive directories such as /admin/ and /private/',
        ],
        'recommended': [
            'Set a suitable Crawl-delay for the major search engines',
            'Allow important static assets (CSS, JS, images)',
            'Block temporary and backup files',
        ],
        'advanced': [
            'Add dedicated groups for media and social crawlers',
            'Use wildcard patterns to keep path rules short',
            'Review the AI crawler groups (GPTBot, Google-Extended, ClaudeBot) regularly',
        ],
        'sample_robots': sample,
    }
