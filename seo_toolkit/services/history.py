"""
Analysis stores
In-memory history of analyses and monitoring state, owned by the caller
"""

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from seo_toolkit.models import PageAnalysis

GOOD_RANK_THRESHOLD = 20


class AnalysisHistory:
    """Bounded, newest-first store of PageAnalysis records"""

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError('capacity must be at least 1')
        self.capacity = capacity
        self._entries: deque = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def add(self, analysis: PageAnalysis) -> str:
        run_id = str(uuid.uuid4())
        with self._lock:
            self._entries.appendleft((run_id, analysis))
        return run_id

    def get(self, run_id: str) -> Optional[PageAnalysis]:
        with self._lock:
            for entry_id, analysis in self._entries:
                if entry_id == run_id:
                    return analysis
        return None

    def recent(self, limit: int = 10) -> List[Tuple[str, PageAnalysis]]:
        limit = max(0, min(limit, self.capacity))
        with self._lock:
            return list(self._entries)[:limit]

    def all(self) -> List[Tuple[str, PageAnalysis]]:
        with self._lock:
            return list(self._entries)

    def for_url(self, url: str) -> List[PageAnalysis]:
        with self._lock:
            return [analysis for _, analysis in self._entries if analysis.url == url]

    def average_score(self, limit: Optional[int] = None) -> float:
        entries = self.recent(limit) if limit else self.all()
        if not entries:
            return 0.0
        return round(sum(a.score for _, a in entries) / len(entries), 1)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


class MonitoringState:
    """Keyword rankings and alerts gathered by monitoring jobs"""

    def __init__(self, alert_capacity: int = 500):
        self._rankings: Dict[str, Dict[str, Any]] = {}
        self._alerts: deque = deque(maxlen=alert_capacity)
        self._lock = threading.Lock()

    def record_ranking(self, keyword: str, ranking: Dict[str, Any]):
        with self._lock:
            self._rankings[keyword] = dict(ranking)

    def rankings(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {k: dict(v) for k, v in self._rankings.items()}

    def add_alert(self, alert: Dict[str, Any]):
        with self._lock:
            self._alerts.append(dict(alert))

    def alerts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent alerts last"""
        with self._lock:
            items = list(self._alerts)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def keyword_health(self) -> Dict[str, Any]:
        """'good' when more than half of the tracked keywords rank in the top 20"""
        rankings = self.rankings()
        total = len(rankings)
        if not total:
            return {'status': 'unknown', 'total_keywords': 0, 'good_rankings': 0, 'percentage': 0}
        good = sum(1 for r in rankings.values() if r.get('position', 999) <= GOOD_RANK_THRESHOLD)
        return {
            'status': 'good' if good > total * 0.5 else 'warning',
            'total_keywords': total,
            'good_rankings': good,
            'percentage': round(good / total * 100),
            'checked_at': datetime.now(timezone.utc).isoformat(),
        }
