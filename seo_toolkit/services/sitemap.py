"""
Sitemap Service
Generates, splits and validates XML sitemaps
"""

import logging
import xml.etree.ElementTree as ET
from datetime import date
from typing import Any, Dict, List, Optional, Union
from xml.sax.saxutils import escape

# Configure logging
logger = logging.getLogger(__name__)

SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'
IMAGE_NS = 'http://www.google.com/schemas/sitemap-image/1.1'
VIDEO_NS = 'http://www.google.com/schemas/sitemap-video/1.1'
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

PRIORITY_BY_TYPE = {
    'homepage': 1.0,
    'category': 0.8,
    'product': 0.6,
    'blog': 0.5,
    'static': 0.4,
}
CHANGEFREQ_BY_TYPE = {
    'homepage': 'daily',
    'category': 'weekly',
    'product': 'weekly',
    'blog': 'monthly',
    'static': 'yearly',
}

SITE_PAGES = [
    ('', 1.0, 'daily'),
    ('/categories', 0.9, 'weekly'),
    ('/creators', 0.9, 'daily'),
    ('/how-it-works', 0.8, 'monthly'),
    ('/pricing', 0.8, 'weekly'),
    ('/about', 0.6, 'monthly'),
    ('/contact', 0.6, 'monthly'),
    ('/privacy', 0.3, 'yearly'),
    ('/terms', 0.3, 'yearly'),
]
SITE_CATEGORIES = [
    'birthday', 'anniversary', 'wedding', 'graduation',
    'holiday', 'congratulations', 'thank-you', 'apology',
]

UrlData = Union[str, Dict[str, Any]]


def escape_xml(text: Any) -> str:
    return escape(str(text), {'"': '&quot;', "'": '&#39;'})


class SitemapBuilder:
    """XML sitemap generator"""

    def __init__(self, default_priority: float = 0.5, default_changefreq: str = 'weekly',
                 max_urls: int = 50000):
        self.default_priority = default_priority
        self.default_changefreq = default_changefreq
        self.max_urls = max_urls

    def generate_sitemap(self, urls: List[UrlData], include_images: bool = False,
                         include_videos: bool = False) -> str:
        namespaces = f' xmlns="{SITEMAP_NS}"'
        if include_images:
            namespaces += f' xmlns:image="{IMAGE_NS}"'
        if include_videos:
            namespaces += f' xmlns:video="{VIDEO_NS}"'

        lines = [XML_DECLARATION, f'<urlset{namespaces}>']
        for url_data in urls:
            lines.append(self.generate_url_entry(url_data, include_images, include_videos))
        lines.append('</urlset>')
        return '\n'.join(lines)

    def generate_url_entry(self, url_data: UrlData, include_images: bool = False,
                           include_videos: bool = False) -> str:
        if isinstance(url_data, str):
            url_data = {'url': url_data}
        lastmod = url_data.get('lastmod') or date.today().isoformat()
        changefreq = url_data.get('changefreq') or self.default_changefreq
        priority = url_data.get('priority', self.default_priority)

        lines = [
            '  <url>',
            f"    <loc>{escape_xml(url_data['url'])}</loc>",
            f'    <lastmod>{lastmod}</lastmod>',
            f'    <changefreq>{changefreq}</changefreq>',
            f'    <priority>{priority}</priority>',
        ]
        if include_images:
            for image in url_data.get('images') or []:
                lines.append('    <image:image>')
                lines.append(f"      <image:loc>{escape_xml(image['url'])}</image:loc>")
                if image.get('caption'):
                    lines.append(f"      <image:caption>{escape_xml(image['caption'])}</image:caption>")
                if image.get('title'):
                    lines.append(f"      <image:title>{escape_xml(image['title'])}</image:title>")
                lines.append('    </image:image>')
        if include_videos:
            for video in url_data.get('videos') or []:
                lines.append('    <video:video>')
                lines.append(f"      <video:thumbnail_loc>{escape_xml(video.get('thumbnail', ''))}</video:thumbnail_loc>")
                lines.append(f"      <video:title>{escape_xml(video.get('title', ''))}</video:title>")
                lines.append(f"      <video:description>{escape_xml(video.get('description', ''))}</video:description>")
                if video.get('content_loc'):
                    lines.append(f"      <video:content_loc>{escape_xml(video['content_loc'])}</video:content_loc>")
                if video.get('player_loc'):
                    lines.append(f"      <video:player_loc>{escape_xml(video['player_loc'])}</video:player_loc>")
                if video.get('duration'):
                    lines.append(f"      <video:duration>{video['duration']}</video:duration>")
                if video.get('publication_date'):
                    lines.append(f"      <video:publication_date>{video['publication_date']}</video:publication_date>")
                lines.append('    </video:video>')
        lines.append('  </url>')
        return '\n'.join(lines)

    def generate_sitemap_index(self, sitemaps: List[UrlData]) -> str:
        lines = [XML_DECLARATION, f'<sitemapindex xmlns="{SITEMAP_NS}">']
        for sitemap in sitemaps:
            if isinstance(sitemap, str):
                sitemap = {'url': sitemap}
            lines.append('  <sitemap>')
            lines.append(f"    <loc>{escape_xml(sitemap['url'])}</loc>")
            if sitemap.get('lastmod'):
                lines.append(f"    <lastmod>{sitemap['lastmod']}</lastmod>")
            lines.append('  </sitemap>')
        lines.append('</sitemapindex>')
        return '\n'.join(lines)

    def site_urls(self, base_url: str) -> List[Dict[str, Any]]:
        """Standard pages and greeting categories of the marketplace site"""
        base_url = base_url.rstrip('/')
        urls = [
            {'url': f'{base_url}{path}' if path else base_url, 'priority': priority, 'changefreq': freq}
            for path, priority, freq in SITE_PAGES
        ]
        urls.extend(
            {'url': f'{base_url}/category/{category}', 'priority': 0.7, 'changefreq': 'weekly'}
            for category in SITE_CATEGORIES
        )
        return urls

    def generate_site_sitemap(self, base_url: str) -> str:
        return self.generate_sitemap(self.site_urls(base_url))

    def validate_sitemap(self, xml_text: str) -> Dict[str, Any]:
        errors: List[str] = []
        warnings: List[str] = []
        url_count = 0

        if not xml_text.lstrip().startswith('<?xml version="1.0"'):
            errors.append('Missing XML declaration')

        try:
            root = ET.fromstring(xml_text.encode('utf-8'))
        except ET.ParseError as e:
            errors.append(f'Malformed XML: {e}')
            return {'is_valid': False, 'errors': errors, 'warnings': warnings, 'url_count': 0}

        if root.tag.rsplit('}', 1)[-1] != 'urlset':
            errors.append('Missing urlset root element')
        elif root.tag != f'{{{SITEMAP_NS}}}urlset':
            warnings.append('urlset does not declare the sitemap 0.9 namespace')

        for index, url in enumerate(child for child in root if child.tag.rsplit('}', 1)[-1] == 'url'):
            url_count += 1
            loc = next((c for c in url if c.tag.rsplit('}', 1)[-1] == 'loc'), None)
            if loc is None or not (loc.text or '').strip():
                errors.append(f'URL {index + 1}: missing loc element')

        if url_count > self.max_urls:
            warnings.append(f'URL count ({url_count}) exceeds the recommended maximum ({self.max_urls})')

        return {'is_valid': not errors, 'errors': errors, 'warnings': warnings, 'url_count': url_count}

    def split_large_sitemap(self, urls: List[UrlData]) -> List[Dict[str, Any]]:
        sitemaps = []
        for index, start in enumerate(range(0, len(urls), self.max_urls)):
            chunk = urls[start:start + self.max_urls]
            sitemaps.append({
                'filename': f'sitemap-{index + 1}.xml',
                'content': self.generate_sitemap(chunk),
                'url_count': len(chunk),
            })
        return sitemaps

    @staticmethod
    def robots_sitemap_entry(sitemap_url: str) -> str:
        return f'Sitemap: {sitemap_url}'

    def suggest_priority(self, url_type: Optional[str]) -> float:
        return PRIORITY_BY_TYPE.get(url_type, self.default_priority)

    def suggest_changefreq(self, url_type: Optional[str]) -> str:
        return CHANGEFREQ_BY_TYPE.get(url_type, self.default_changefreq)
