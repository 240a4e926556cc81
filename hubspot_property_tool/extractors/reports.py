"""
Reports Extractor
Fetches analytics reports in a single capped request
"""
from typing import Dict, Any, List

from .base import BaseExtractor
from ..analyzers.usage import SourceKind

REPORTS_LIMIT = 300


class ReportsExtractor(BaseExtractor):
    """Extract reports"""

    source_kind = SourceKind.REPORTS
    placeholder_name = 'Unnamed report'

    def fetch(self) -> List[Dict[str, Any]]:
        data = self.client.get('/reports/v2/reports', params={'limit': REPORTS_LIMIT}) or {}
        if isinstance(data, list):
            return data
        return data.get('objects') or data.get('results') or []
