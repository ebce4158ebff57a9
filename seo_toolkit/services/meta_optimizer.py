"""
Meta Tag Optimizer
Scores page titles and meta descriptions and suggests improvements
"""

import logging
from typing import Dict, List, Optional

from seo_toolkit.services.page_scorer import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)

# Configure logging
logger = logging.getLogger(__name__)

CALL_TO_ACTION_WORDS = ['contact', 'get', 'discover', 'learn', 'start', 'try', 'book', 'order']
GENERIC_TITLE_WORDS = ['untitled', 'home']

META_TEMPLATES = {
    'video-greeting': {
        'title': 'Custom Video Messages & Personalized Greetings | {brand}',
        'description': (
            'Create personalized video messages and custom greetings for any occasion. '
            'Professional video creators from around the world ready to make your special '
            'moments unforgettable.'
        ),
    },
    'general': {
        'title': '{keyword} | Professional Services | {brand}',
        'description': (
            'Discover professional {keyword} services. Get expert solutions tailored to your '
            'needs with guaranteed quality and customer satisfaction.'
        ),
    },
}


class MetaOptimizer:
    """Title and meta description optimizer"""

    def __init__(self):
        self.title_limits = {'min': TITLE_MIN_LENGTH, 'max': TITLE_MAX_LENGTH}
        self.description_limits = {'min': DESCRIPTION_MIN_LENGTH, 'max': DESCRIPTION_MAX_LENGTH}

    def optimize_title(self, title: Optional[str], keywords: Optional[List[str]] = None) -> Dict:
        keywords = keywords or []
        suggestions = []

        if not title or len(title) < self.title_limits['min']:
            suggestions.append({
                'type': 'title_too_short',
                'message': f"Title is too short, use at least {self.title_limits['min']} characters",
                'priority': 'high'
            })
        if title and len(title) > self.title_limits['max']:
            suggestions.append({
                'type': 'title_too_long',
                'message': f"Title is too long, keep it under {self.title_limits['max']} characters",
                'priority': 'high'
            })
        if keywords and not self._contains_any(title, keywords):
            suggestions.append({
                'type': 'missing_keywords',
                'message': 'Title does not include any of the primary keywords',
                'priority': 'medium'
            })

        return {
            'current': title,
            'length': len(title) if title else 0,
            'suggestions': suggestions,
            'score': self.calculate_title_score(title, keywords)
        }

    def optimize_description(self, description: Optional[str], keywords: Optional[List[str]] = None) -> Dict:
        keywords = keywords or []
        suggestions = []

        if not description or len(description) < self.description_limits['min']:
            suggestions.append({
                'type': 'description_too_short',
                'message': f"Description is too short, use at least {self.description_limits['min']} characters",
                'priority': 'high'
            })
        if description and len(description) > self.description_limits['max']:
            suggestions.append({
                'type': 'description_too_long',
                'message': f"Description is too long, keep it under {self.description_limits['max']} characters",
                'priority': 'high'
            })
        if keywords and description and not self._contains_any(description, keywords):
            suggestions.append({
                'type': 'missing_keywords',
                'message': 'Description does not include any of the primary keywords',
                'priority': 'medium'
            })

        return {
            'current': description,
            'length': len(description) if description else 0,
            'suggestions': suggestions,
            'score': self.calculate_description_score(description, keywords)
        }

    def optimize_meta(self, title: Optional[str], description: Optional[str],
                      keywords: Optional[List[str]] = None) -> Dict:
        """Optimize title and description together"""
        title_result = self.optimize_title(title, keywords)
        description_result = self.optimize_description(description, keywords)
        return {
            'title': title_result,
            'description': description_result,
            'score': round((title_result['score'] + description_result['score']) / 2)
        }

    def generate_meta_suggestions(self, industry: str = 'general') -> Dict[str, str]:
        return dict(META_TEMPLATES.get(industry, META_TEMPLATES['general']))

    def calculate_title_score(self, title: Optional[str], keywords: List[str]) -> int:
        if not title:
            return 0
        lower = title.lower()
        score = 0
        if self.title_limits['min'] <= len(title) <= self.title_limits['max']:
            score += 40
        score += 30 * sum(1 for keyword in keywords if keyword.lower() in lower)
        # Brand separator
        if '|' in title or '-' in title:
            score += 15
        if not any(word in lower for word in GENERIC_TITLE_WORDS):
            score += 15
        return min(score, 100)

    def calculate_description_score(self, description: Optional[str], keywords: List[str]) -> int:
        if not description:
            return 0
        lower = description.lower()
        score = 0
        if self.description_limits['min'] <= len(description) <= self.description_limits['max']:
            score += 50
        score += 25 * sum(1 for keyword in keywords if keyword.lower() in lower)
        if any(word in lower for word in CALL_TO_ACTION_WORDS):
            score += 25
        return min(score, 100)

    @staticmethod
    def _contains_any(text: Optional[str], keywords: List[str]) -> bool:
        if not text:
            return False
        lower = text.lower()
        return any(keyword.lower() in lower for keyword in keywords)
