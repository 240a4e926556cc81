"""
Usage Aggregator

Runs one usage scan across the six content sources:
  1. Workflows          (paginated, keys + personalization tokens)
  2. Forms              (paginated, dedicated form walk)
  3. Lists              (paginated with filters, keys)
  4. Pipelines          (deals + tickets, keys)
  5. Marketing emails   (paginated, keys + personalization tokens)
  6. Reports            (single capped fetch, keys)

A source that fails is turned into a warning and the scan carries on;
the result always holds whatever subset succeeded.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Set, Optional, Any

from ..api.hubspot_client import HubSpotAPIClient
from ..errors import HubSpotAPIError
from ..extractors.workflows import WorkflowsExtractor
from ..extractors.forms import FormsExtractor
from ..extractors.lists import ListsExtractor
from ..extractors.pipelines import PipelinesExtractor
from ..extractors.marketing_emails import MarketingEmailsExtractor
from ..extractors.reports import ReportsExtractor
from .usage import SourceKind

logger = logging.getLogger(__name__)


# Registry of content extractors, in scan order
EXTRACTORS = [
    WorkflowsExtractor,
    FormsExtractor,
    ListsExtractor,
    PipelinesExtractor,
    MarketingEmailsExtractor,
    ReportsExtractor,
]


@dataclass
class ScanWarning:
    source: SourceKind
    message: str

    def __str__(self):
        return f"{self.source.label}: {self.message}"


@dataclass
class ScanResult:
    """Merged output of one usage scan."""
    references: Dict[SourceKind, Set[str]] = field(
        default_factory=lambda: {kind: set() for kind in SourceKind}
    )
    # property name -> source kind -> item names (deduplicated, in scan order)
    provenance: Dict[str, Dict[SourceKind, List[str]]] = field(default_factory=dict)
    counts: Dict[SourceKind, int] = field(default_factory=dict)
    warnings: List[ScanWarning] = field(default_factory=list)
    failed_sources: Set[SourceKind] = field(default_factory=set)

    def record(self, kind: SourceKind, item_name: str, property_names: Set[str]):
        """Record that item_name (of the given kind) references property_names."""
        self.references[kind].update(property_names)
        for name in property_names:
            names = self.provenance.setdefault(name, {}).setdefault(kind, [])
            if item_name not in names:
                names.append(item_name)

    def add_warning(self, kind: SourceKind, message: str):
        self.failed_sources.add(kind)
        self.warnings.append(ScanWarning(kind, message))

    def to_dict(self) -> Dict[str, Any]:
        data = {kind.value: sorted(self.references[kind]) for kind in SourceKind}
        data['usageSources'] = {
            name: {kind.value: list(items) for kind, items in kinds.items()}
            for name, kinds in sorted(self.provenance.items())
        }
        data['counts'] = {kind.value: count for kind, count in self.counts.items()}
        data['warnings'] = [str(w) for w in self.warnings]
        return data


class UsageAggregator:
    """Scan every content source and merge property references."""

    def __init__(self, client: HubSpotAPIClient, extractors: Optional[list] = None,
                 raw_output_dir: Optional[Path] = None):
        """
        Args:
            client: HubSpot API client
            extractors: Extractor classes to run (defaults to EXTRACTORS)
            raw_output_dir: If set, each source's raw items are saved there
        """
        self.client = client
        self.extractor_classes = extractors if extractors is not None else EXTRACTORS
        self.raw_output_dir = raw_output_dir

    def _scan_source(self, extractor, result: ScanResult):
        items = extractor.run()
        kind = extractor.source_kind

        # merged only once every item of the source has been processed
        found = []
        for item in items:
            if not isinstance(item, dict):
                continue
            refs = extractor.extract_references(item)
            if refs:
                found.append((extractor.item_name(item), refs))

        for item_name, refs in found:
            result.record(kind, item_name, refs)

        result.counts[kind] = len(items)
        logger.info(f"  {kind.label}: {len(items)} items, "
                    f"{len(result.references[kind])} properties referenced")

    def scan(self) -> ScanResult:
        """
        Run the full usage scan.

        Returns:
            ScanResult with per-source identifier sets, provenance, item
            counts and a warning for every source that failed
        """
        start_time = datetime.now()
        result = ScanResult()

        logger.info("=" * 60)
        logger.info("PROPERTY USAGE SCAN")
        logger.info("=" * 60)

        for extractor_class in self.extractor_classes:
            extractor = extractor_class(self.client, output_dir=self.raw_output_dir)
            kind = extractor.source_kind

            try:
                self._scan_source(extractor, result)
            except HubSpotAPIError as e:
                logger.warning(f"Could not scan {kind.label.lower()}: {e.status_code} {e}")
                result.add_warning(kind, str(e))
            except Exception as e:
                logger.error(f"Failed to scan {kind.label.lower()}: {e}", exc_info=True)
                result.add_warning(kind, str(e) or e.__class__.__name__)

        elapsed = (datetime.now() - start_time).total_seconds()

        logger.info("=" * 60)
        logger.info("SCAN COMPLETE")
        logger.info("=" * 60)
        for kind in SourceKind:
            if kind in result.counts:
                logger.info(f"{kind.label}: {result.counts[kind]} items, "
                            f"{len(result.references[kind])} properties")
        for warning in result.warnings:
            logger.warning(f"Skipped {warning}")
        logger.info(f"Time: {elapsed:.1f}s")

        return result
