"""
Lists Extractor
Fetches segmentation lists together with their filter definitions
"""
from typing import Dict, Any, List

from .base import BaseExtractor
from ..analyzers.usage import SourceKind


class ListsExtractor(BaseExtractor):
    """Extract segmentation lists"""

    source_kind = SourceKind.LISTS
    placeholder_name = 'Unnamed list'

    def fetch(self) -> List[Dict[str, Any]]:
        # Filters are only returned when explicitly requested
        return self.client.paginated_get(
            '/crm/v3/lists',
            results_key='lists',
            params={'includeFilters': 'true'},
        )

    def item_name(self, item: Dict[str, Any]) -> str:
        return str(item.get('name') or item.get('listId') or self.placeholder_name)
