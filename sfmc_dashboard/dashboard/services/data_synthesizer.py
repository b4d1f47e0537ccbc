# Dashboard Data Synthesizer
#
# Generates plausible demo metrics when real SFMC data is unavailable.
# Totals and campaign counts are a fixed 30-day baseline scaled by
# period / 30; daily trend values are drawn from an injectable random
# source so tests can seed it.

import math
import random
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ...utils.timezone_utils import now_in_timezone, to_api_timestamp

DEMO_ERROR = 'Demo data - SFMC API authentication failed'

class DataSynthesizer:
    """Builds demo dashboard payloads scaled to the requested period"""

    BASELINE_DAYS = 30

    # 30-day overview baseline
    OVERVIEW_BASELINE = {
        'totalSent': 50000,
        'delivered': 48500,
        'opened': 14550,
        'clicked': 2180,
        'bounced': 1500
    }

    # Daily trend ranges (inclusive) before scaling
    OPENS_RANGE = (500, 1499)
    CLICKS_RANGE = (100, 299)

    # (id, name, days from now, status, sent, opened, clicked)
    DEMO_CAMPAIGNS = [
        ('1', 'Summer Sale Newsletter', -2, 'Completed', 15000, 4500, 675),
        ('2', 'Product Launch Announcement', -5, 'Completed', 8200, 2460, 410),
        ('3', 'Weekly Newsletter #23', -7, 'Active', 12000, 3600, 540),
        ('4', 'Customer Survey', -10, 'Completed', 5500, 1375, 275),
        ('5', 'Holiday Promotion', 3, 'Scheduled', 20000, 0, 0),
    ]

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = now_in_timezone):
        self.rng = rng or random.Random()
        self.clock = clock

    @staticmethod
    def _scale(value: float, multiplier: float) -> int:
        return int(math.floor(value * multiplier))

    def synthesize(self, period: int, error: str = DEMO_ERROR) -> Dict[str, Any]:
        """
        Generate a demo payload for the last `period` days

        Args:
            period: Number of days covered, e.g. 7, 30 or 90
            error: Human-readable reason demo data is shown

        Returns:
            Dashboard payload with isRealData False
        """
        multiplier = period / self.BASELINE_DAYS
        now = self.clock()

        overview = {
            key: self._scale(value, multiplier)
            for key, value in self.OVERVIEW_BASELINE.items()
        }

        return {
            'overview': overview,
            'trends': self.generate_trends(period, multiplier, now),
            'campaigns': self.generate_campaigns(multiplier, now),
            'isRealData': False,
            'sfmcConnected': False,
            'connectionStatus': 'Demo mode',
            'error': error,
            'lastUpdated': to_api_timestamp(now)
        }

    def generate_trends(self, period: int, multiplier: float, now: datetime) -> List[Dict[str, Any]]:
        """One entry per day in [today - period + 1, today], oldest first"""
        today = now.date()
        trends = []
        for days_back in range(period - 1, -1, -1):
            day = today - timedelta(days=days_back)
            trends.append({
                'date': day.isoformat(),
                'opens': self._scale(self.rng.randint(*self.OPENS_RANGE), multiplier),
                'clicks': self._scale(self.rng.randint(*self.CLICKS_RANGE), multiplier)
            })
        return trends

    def generate_campaigns(self, multiplier: float, now: datetime) -> List[Dict[str, Any]]:
        campaigns = []
        for campaign_id, name, offset_days, status, sent, opened, clicked in self.DEMO_CAMPAIGNS:
            campaigns.append({
                'id': campaign_id,
                'name': name,
                'date': to_api_timestamp(now + timedelta(days=offset_days)),
                'status': status,
                'sent': self._scale(sent, multiplier),
                'opened': self._scale(opened, multiplier),
                'clicked': self._scale(clicked, multiplier)
            })
        return campaigns
