"""
Page analysis data model
Records produced by the page SEO scorer
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Tuple

HEADING_LEVELS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')


@dataclass(frozen=True)
class ImageInfo:
    """An <img> element and its alt attribute state"""
    src: str
    alt: str
    has_alt: bool


@dataclass(frozen=True)
class Recommendation:
    """Actionable fix derived from an issue"""
    type: str
    priority: str
    suggestion: str


@dataclass(frozen=True)
class PageAnalysis:
    """
    Result of scoring one HTML document.

    Created once per scoring call and never updated. ``issues`` and
    ``recommendations`` are derived only from the extracted fields.
    """
    url: str
    timestamp: datetime
    title: str = ''
    meta_description: str = ''
    headings: Dict[str, List[str]] = field(default_factory=dict)
    images: Tuple[ImageInfo, ...] = ()
    social_meta: Dict[str, str] = field(default_factory=dict)
    structured_data_blocks: Tuple[Any, ...] = ()
    score: int = 0
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()

    @property
    def images_missing_alt(self) -> int:
        return sum(1 for img in self.images if not img.has_alt)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation"""
        return {
            'url': self.url,
            'timestamp': self.timestamp.isoformat(),
            'title': self.title,
            'meta_description': self.meta_description,
            'headings': {level: list(texts) for level, texts in self.headings.items()},
            'images': [asdict(img) for img in self.images],
            'social_meta': dict(self.social_meta),
            'structured_data_blocks': list(self.structured_data_blocks),
            'score': self.score,
            'issues': list(self.issues),
            'recommendations': [asdict(rec) for rec in self.recommendations],
        }
