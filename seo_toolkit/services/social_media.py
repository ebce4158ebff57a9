"""
Social Media Optimizer
Generates and audits Open Graph and Twitter Card meta tags
"""

import html
import logging
from typing import Any, Dict, List, Optional

from seo_toolkit.services.page_scorer import extract_social_meta, parse_html

# Configure logging
logger = logging.getLogger(__name__)

PLATFORMS = {
    'facebook': {
        'title_limit': 100,
        'description_limit': 300,
        'image_size': {'width': 1200, 'height': 630}
    },
    'twitter': {
        'title_limit': 70,
        'description_limit': 200,
        'image_size': {'width': 1200, 'height': 600}
    },
    'linkedin': {
        'title_limit': 120,
        'description_limit': 300,
        'image_size': {'width': 1200, 'height': 627}
    },
}

REQUIRED_OPEN_GRAPH = ['title', 'description', 'image', 'url']
REQUIRED_TWITTER = ['card', 'title', 'description', 'image']


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length - 3] + '...'


def format_meta_tags(tags: Dict[str, Any], attribute: str) -> List[str]:
    """Render <meta> elements, skipping empty values and expanding lists"""
    rendered = []
    for key, value in tags.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            rendered.append(f'<meta {attribute}="{key}" content="{html.escape(str(item))}">')
    return rendered


class SocialMediaOptimizer:
    """Open Graph / Twitter Card generator and analyzer"""

    def __init__(self):
        self.platforms = PLATFORMS

    def generate_open_graph_tags(self, data: Dict[str, Any]) -> List[str]:
        tags = {
            'og:title': data.get('title'),
            'og:description': data.get('description'),
            'og:image': data.get('image'),
            'og:url': data.get('url'),
            'og:type': data.get('type') or 'website',
            'og:site_name': data.get('site_name'),
            'og:locale': data.get('locale') or 'en_US',
        }
        if data.get('type') == 'video':
            tags['og:video'] = data.get('video_url')
            tags['og:video:type'] = data.get('video_type') or 'video/mp4'
            tags['og:video:width'] = data.get('video_width') or '1280'
            tags['og:video:height'] = data.get('video_height') or '720'
        if data.get('type') == 'article':
            tags['article:author'] = data.get('author')
            tags['article:published_time'] = data.get('published_time')
            tags['article:modified_time'] = data.get('modified_time')
            tags['article:section'] = data.get('section')
            tags['article:tag'] = data.get('tags')
        return format_meta_tags(tags, 'property')

    def generate_twitter_card_tags(self, data: Dict[str, Any]) -> List[str]:
        tags = {
            'twitter:card': data.get('card_type') or 'summary_large_image',
            'twitter:title': data.get('title'),
            'twitter:description': data.get('description'),
            'twitter:image': data.get('image'),
            'twitter:site': data.get('twitter_site'),
            'twitter:creator': data.get('twitter_creator'),
        }
        if data.get('card_type') == 'player':
            tags['twitter:player'] = data.get('player_url')
            tags['twitter:player:width'] = data.get('player_width') or '1280'
            tags['twitter:player:height'] = data.get('player_height') or '720'
        return format_meta_tags(tags, 'name')

    def generate_linkedin_tags(self, data: Dict[str, Any]) -> List[str]:
        limits = self.platforms['linkedin']
        return self.generate_open_graph_tags({
            **data,
            'title': truncate_text(data.get('title'), limits['title_limit']),
            'description': truncate_text(data.get('description'), limits['description_limit']),
        })

    def optimize_for_platform(self, content: Dict[str, Any], platform: str) -> Dict[str, Any]:
        limits = self.platforms.get(platform)
        if not limits:
            raise ValueError(f"Unsupported platform: {platform}")
        return {
            'title': truncate_text(content.get('title'), limits['title_limit']),
            'description': truncate_text(content.get('description'), limits['description_limit']),
            'image': content.get('image'),
            'recommended_image_size': limits['image_size'],
            'platform': platform,
        }

    def generate_all_social_tags(self, data: Dict[str, Any]) -> List[str]:
        tags = self.generate_open_graph_tags(data)
        tags.extend(self.generate_twitter_card_tags(data))
        tags.extend(format_meta_tags({
            'description': data.get('description'),
            'keywords': data.get('keywords'),
            'author': data.get('author'),
            'robots': 'index, follow',
        }, 'name'))
        if data.get('url'):
            tags.append(f'<link rel="canonical" href="{html.escape(data["url"])}">')
        return tags

    def generate_video_greeting_tags(self, video: Dict[str, Any]) -> List[str]:
        """Tags for a single greeting video page"""
        occasion = video.get('occasion') or 'Greeting'
        creator = video.get('creator') or 'our creators'
        return self.generate_all_social_tags({
            'title': f"{occasion} Video Message from {creator}",
            'description': (
                f"Get a personalized {occasion.lower()} video message from {creator}. "
                "Custom greetings for any special occasion."
            ),
            'image': video.get('thumbnail'),
            'url': video.get('page_url'),
            'type': 'video',
            'site_name': video.get('site_name') or 'WishesVideo',
            'video_url': video.get('video_url'),
            'author': creator,
            'keywords': f"video message, {occasion}, personalized greeting, custom video",
            'twitter_site': video.get('twitter_site') or '@wishesvideo',
            'locale': 'en_US',
        })

    def generate_optimized_tags(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Everything the optimizer produces for one page"""
        return {
            'open_graph': self.generate_open_graph_tags(data),
            'twitter': self.generate_twitter_card_tags(data),
            'all_tags': self.generate_all_social_tags(data),
            'platforms': {
                name: self.optimize_for_platform(data, name) for name in self.platforms
            },
        }

    def analyze_social_tags(self, html_content: str) -> Dict[str, Any]:
        social = extract_social_meta(parse_html(html_content))
        open_graph = {k[len('og:'):]: v for k, v in social.items() if k.startswith('og:')}
        twitter = {k[len('twitter:'):]: v for k, v in social.items() if k.startswith('twitter:')}

        missing = [f"og:{tag}" for tag in REQUIRED_OPEN_GRAPH if not open_graph.get(tag)]
        missing.extend(f"twitter:{tag}" for tag in REQUIRED_TWITTER if not twitter.get(tag))

        recommendations = []
        if missing:
            recommendations.append('Add the missing social media meta tags')
        if len(open_graph.get('title', '')) > self.platforms['facebook']['title_limit']:
            recommendations.append('Shorten the Open Graph title')
        if len(twitter.get('description', '')) > self.platforms['twitter']['description_limit']:
            recommendations.append('Shorten the Twitter description')

        return {
            'open_graph': open_graph,
            'twitter': twitter,
            'missing': missing,
            'recommendations': recommendations,
        }

    def validate_image_size(self, platform: str, width: Optional[int] = None,
                            height: Optional[int] = None) -> Dict[str, Any]:
        limits = self.platforms.get(platform)
        if not limits:
            return {'valid': False, 'message': 'Unknown platform'}
        recommended = limits['image_size']
        valid = True
        if width is not None and height is not None:
            valid = width >= recommended['width'] and height >= recommended['height']
        return {
            'valid': valid,
            'recommended': recommended,
            'message': f"Recommended size: {recommended['width']}x{recommended['height']}px"
        }
