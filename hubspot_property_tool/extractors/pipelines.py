"""
Pipelines Extractor
Fetches deal and ticket pipelines (stage metadata can reference properties)
"""
from typing import Dict, Any, List
import logging

from .base import BaseExtractor
from ..analyzers.usage import SourceKind

logger = logging.getLogger(__name__)

PIPELINE_OBJECT_TYPES = ['deals', 'tickets']


class PipelinesExtractor(BaseExtractor):
    """Extract sales and service pipelines"""

    source_kind = SourceKind.PIPELINES
    placeholder_name = 'Unnamed pipeline'

    def fetch(self) -> List[Dict[str, Any]]:
        pipelines = []
        for object_type in PIPELINE_OBJECT_TYPES:
            data = self.client.get(f'/crm/v3/pipelines/{object_type}') or {}
            results = data.get('results') or []
            logger.debug(f"  {len(results)} {object_type} pipelines")
            pipelines.extend(results)
        return pipelines

    def item_name(self, item: Dict[str, Any]) -> str:
        return str(item.get('label') or item.get('id') or self.placeholder_name)
