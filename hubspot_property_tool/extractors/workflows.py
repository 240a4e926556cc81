"""
Workflows Extractor
Fetches automation workflows (flows) from HubSpot
"""
from typing import Dict, Any, List, Set

from .base import BaseExtractor
from ..analyzers.usage import SourceKind
from ..analyzers.references import extract_text_references


class WorkflowsExtractor(BaseExtractor):
    """Extract automation workflows"""

    source_kind = SourceKind.WORKFLOWS

    def fetch(self) -> List[Dict[str, Any]]:
        return self.client.paginated_get('/automation/v4/flows')

    def item_name(self, item: Dict[str, Any]) -> str:
        return str(item.get('name') or f"Workflow {item.get('id', 'unknown')}")

    def extract_references(self, item: Dict[str, Any]) -> Set[str]:
        # Actions carry free text (emails, notes) with personalization tokens
        return extract_text_references(item)
