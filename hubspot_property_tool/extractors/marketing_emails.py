"""
Marketing Emails Extractor
Fetches marketing emails; bodies reference properties through tokens
"""
from typing import Dict, Any, List, Set

from .base import BaseExtractor
from ..analyzers.usage import SourceKind
from ..analyzers.references import extract_text_references


class MarketingEmailsExtractor(BaseExtractor):
    """Extract marketing emails"""

    source_kind = SourceKind.MARKETING_EMAILS
    placeholder_name = 'Unnamed email'

    def fetch(self) -> List[Dict[str, Any]]:
        return self.client.paginated_get('/marketing/v3/emails')

    def extract_references(self, item: Dict[str, Any]) -> Set[str]:
        return extract_text_references(item)
