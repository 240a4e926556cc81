"""
Base Extractor Class
Every content source scanned for property usage inherits from this class
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any, List, Optional, Set
import json
import logging
from datetime import datetime

from ..api.hubspot_client import HubSpotAPIClient
from ..analyzers.usage import SourceKind
from ..analyzers.references import extract_property_keys

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Base class for HubSpot content extractors"""

    source_kind: SourceKind = None
    placeholder_name = 'Unnamed item'

    def __init__(self, client: HubSpotAPIClient, output_dir: Optional[Path] = None):
        """
        Initialize base extractor

        Args:
            client: Initialized HubSpot API client
            output_dir: If set, raw fetched items are saved here as JSON
        """
        self.client = client
        self.output_dir = output_dir
        self.stats = {
            'total': 0,
            'start_time': None,
            'end_time': None
        }

        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def fetch(self) -> List[Dict[str, Any]]:
        """
        Fetch every item of this kind from HubSpot

        Returns:
            Raw items

        Raises:
            HubSpotAPIError: if the source cannot be fetched
        """
        pass

    def get_extractor_name(self) -> str:
        return self.source_kind.label

    def item_name(self, item: Dict[str, Any]) -> str:
        """Human-readable name used for provenance"""
        return str(item.get('name') or item.get('id') or self.placeholder_name)

    def extract_references(self, item: Dict[str, Any]) -> Set[str]:
        """Property names this item references"""
        return extract_property_keys(item)

    def save_json(self, data: Any, filename: str) -> Optional[Path]:
        """
        Save data as JSON file

        Args:
            data: Data to save
            filename: Name of file

        Returns:
            Path to saved file, or None when no output directory is set
        """
        if self.output_dir is None:
            return None

        filepath = self.output_dir / filename

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved to: {filepath}")
        return filepath

    def log_stats(self) -> None:
        """Log fetch statistics"""
        line = f"{self.get_extractor_name()}: {self.stats['total']} items"

        if self.stats['start_time'] and self.stats['end_time']:
            duration = (self.stats['end_time'] - self.stats['start_time']).total_seconds()
            line += f" in {duration:.2f} seconds"

        logger.info(line)

    def run(self) -> List[Dict[str, Any]]:
        """
        Fetch with timing and statistics

        Returns:
            Raw items
        """
        logger.info(f"Fetching {self.get_extractor_name().lower()}...")

        self.stats['start_time'] = datetime.now()

        try:
            items = self.fetch()
        finally:
            self.stats['end_time'] = datetime.now()

        self.stats['total'] = len(items)
        self.log_stats()
        self.save_json(items, f'{self.source_kind.value}.json')
        return items
