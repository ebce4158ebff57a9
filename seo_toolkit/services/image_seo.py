"""
Image SEO Optimizer
Audits image files and alt text, suggests filenames, alt text and markup
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from seo_toolkit.services.structured_data import StructuredDataGenerator

# Configure logging
logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ['jpg', 'jpeg', 'png', 'webp', 'gif', 'svg']
MODERN_FORMATS = ['webp', 'avif']
MAX_FILE_SIZE = 1024 * 1024
ALT_MIN_LENGTH = 5
ALT_MAX_LENGTH = 125
RESPONSIVE_WIDTHS = [300, 600, 900, 1200]

MEANINGLESS_FILENAMES = [
    re.compile(r'^img\d+$', re.IGNORECASE),
    re.compile(r'^image\d+$', re.IGNORECASE),
    re.compile(r'^photo\d+$', re.IGNORECASE),
    re.compile(r'^pic\d+$', re.IGNORECASE),
    re.compile(r'^screenshot\d+$', re.IGNORECASE),
    re.compile(r'^untitled', re.IGNORECASE),
    re.compile(r'^dsc\d+$', re.IGNORECASE),
    re.compile(r'^\d+$'),
]

TYPE_HINTS = [
    ('logo', ['logo']),
    ('product', ['product', 'item']),
    ('person', ['person', 'avatar', 'profile']),
    ('screenshot', ['screenshot', 'screen']),
    ('icon', ['icon']),
    ('banner', ['banner', 'hero']),
]

GENERIC_ALT_TEXT = {
    'logo': ['Company logo', 'Brand logo'],
    'product': ['Product photo', 'Product close-up'],
    'person': ['Team member portrait', 'Profile photo'],
    'screenshot': ['Application screenshot', 'Feature walkthrough'],
}

SEO_CHECKLIST = [
    {
        'category': 'Basics',
        'items': [
            'Use descriptive file names',
            'Add meaningful alt text',
            'Keep files under 1MB',
            'Choose an appropriate format',
        ]
    },
    {
        'category': 'Technical',
        'items': [
            'Serve modern formats (WebP/AVIF)',
            'Provide responsive srcset variants',
            'Lazy-load offscreen images',
            'Declare width and height',
        ]
    },
    {
        'category': 'Structured data',
        'items': [
            'Add ImageObject structured data',
            'Provide captions and descriptions',
            'Include license information',
            'Link images to related content',
        ]
    },
]


def _path_of(image_path: str) -> str:
    """Path component for URLs, the value itself for file paths"""
    parsed = urlparse(image_path)
    return parsed.path if parsed.scheme in ('http', 'https') else image_path


def image_extension(image_path: str) -> str:
    return os.path.splitext(_path_of(image_path))[1].lower().lstrip('.')


def image_stem(image_path: str) -> str:
    return os.path.splitext(os.path.basename(_path_of(image_path)))[0]


def is_descriptive_filename(filename: str) -> bool:
    if len(filename) <= 3:
        return False
    return not any(pattern.search(filename) for pattern in MEANINGLESS_FILENAMES)


def detect_image_type(image_path: str) -> str:
    filename = os.path.basename(_path_of(image_path)).lower()
    for image_type, hints in TYPE_HINTS:
        if any(hint in filename for hint in hints):
            return image_type
    return 'general'


def _slug(text: str) -> str:
    return re.sub(r'\s+', '-', text.strip().lower())


class ImageSEOOptimizer:
    """Per-image audit and optimization helpers"""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = max_file_size
        self.structured_data = StructuredDataGenerator()

    def analyze_image_seo(self, image_path: str, alt_text: Optional[str] = '',
                          metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        metadata = metadata or {}
        score = 0
        issues: List[str] = []
        recommendations: List[str] = []
        optimizations: List[str] = []

        ext = image_extension(image_path)
        if ext in SUPPORTED_FORMATS:
            score += 10
        else:
            issues.append(f'Unsupported image format: {ext or "unknown"}')

        alt_text = (alt_text or '').strip()
        if not alt_text:
            issues.append('Missing alt text')
        elif len(alt_text) < ALT_MIN_LENGTH:
            issues.append('Alt text is too short')
        elif len(alt_text) > ALT_MAX_LENGTH:
            issues.append(f'Alt text is too long (keep it under {ALT_MAX_LENGTH} characters)')
        else:
            score += 25

        if is_descriptive_filename(image_stem(image_path)):
            score += 15
        else:
            recommendations.append('Use a descriptive file name')

        file_size = metadata.get('file_size')
        if file_size:
            if file_size > self.max_file_size:
                issues.append('File is too large and slows down page loads')
            else:
                score += 15

        width, height = metadata.get('width'), metadata.get('height')
        if width and height:
            ratio = width / height
            if 0.5 <= ratio <= 3:
                score += 10
            else:
                recommendations.append('Consider adjusting the aspect ratio')

        if ext in MODERN_FORMATS:
            score += 15
        else:
            optimizations.append('Convert to WebP for better performance')

        if metadata.get('structured_data'):
            score += 10
        else:
            recommendations.append('Add ImageObject structured data')

        return {
            'score': min(score, 100),
            'issues': issues,
            'recommendations': recommendations,
            'optimizations': optimizations,
        }

    def generate_alt_text_suggestions(self, image_path: str, context: str = '',
                                      keywords: Optional[List[str]] = None) -> List[str]:
        keywords = keywords or []
        suggestions: List[str] = []

        from_name = re.sub(r'\s+', ' ', re.sub(r'\d+', '', re.sub(r'[-_]', ' ', image_stem(image_path)))).strip()
        if from_name:
            suggestions.append(from_name)
        if context:
            suggestions.append(context)
            if keywords:
                suggestions.append(f'{context} - {keywords[0]}')
                suggestions.append(f'{keywords[0]} {context}')
        suggestions.extend(GENERIC_ALT_TEXT.get(detect_image_type(image_path), ['Related image']))

        # Unique, first occurrence order
        return list(dict.fromkeys(suggestions))[:5]

    def optimize_filename(self, original_name: str, keywords: Optional[List[str]] = None,
                          context: str = '') -> str:
        keywords = keywords or []
        name = re.sub(r'[^a-z0-9\-_.]', '-', original_name.lower())
        name = re.sub(r'-+', '-', name).strip('-')

        if not is_descriptive_filename(os.path.splitext(name)[0]) and keywords:
            name = f'{_slug(keywords[0])}-{name}'
        if context and _slug(context) not in name:
            name = f'{_slug(context)}-{name}'
        return name

    def generate_image_structured_data(self, image: Dict[str, Any]) -> Dict[str, Any]:
        return self.structured_data.generate_image_object(image)

    def generate_responsive_image_config(self, base_url: str, filename: str) -> Dict[str, str]:
        name, ext = os.path.splitext(filename)
        base_url = base_url.rstrip('/')
        sizes = [f'(max-width: {w}px) {w}px' for w in RESPONSIVE_WIDTHS[:-1]]
        sizes.append(f'{RESPONSIVE_WIDTHS[-1]}px')
        return {
            'srcset': ', '.join(f'{base_url}/{name}-{w}w{ext} {w}w' for w in RESPONSIVE_WIDTHS),
            'sizes': ', '.join(sizes),
            'src': f'{base_url}/{name}-600w{ext}',
            'loading': 'lazy',
            'decoding': 'async',
        }

    def seo_checklist(self) -> List[Dict[str, Any]]:
        return [dict(section, items=list(section['items'])) for section in SEO_CHECKLIST]

    def batch_optimize_images(self, images: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Audit a list of images and propose alt text, filename and markup for each"""
        optimized = []
        failed = []
        total_score = 0

        for index, image in enumerate(images):
            path = image.get('path') or image.get('url')
            if not path:
                failed.append({'index': index, 'path': None, 'error': 'Image path or url is required'})
                continue
            metadata = image.get('metadata') or {}
            analysis = self.analyze_image_seo(path, image.get('alt'), metadata)
            optimized.append({
                'index': index,
                'path': path,
                'analysis': analysis,
                'optimizations': {
                    'original_alt': image.get('alt'),
                    'suggested_alt': self.generate_alt_text_suggestions(
                        path, image.get('context', ''), image.get('keywords')
                    ),
                    'optimized_filename': self.optimize_filename(
                        os.path.basename(_path_of(path)), image.get('keywords'), image.get('context', '')
                    ),
                    'structured_data': self.generate_image_structured_data({
                        'url': image.get('url') or path,
                        'caption': image.get('caption'),
                        'description': image.get('description'),
                        'width': metadata.get('width'),
                        'height': metadata.get('height'),
                    }),
                },
            })
            total_score += analysis['score']

        return {
            'optimized': optimized,
            'failed': failed,
            'summary': {
                'total': len(images),
                'success': len(optimized),
                'failed': len(failed),
                'avg_score': round(total_score / len(optimized)) if optimized else 0,
            },
        }
