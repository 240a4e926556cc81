"""
Bulk Property Creator
Submits property rows to HubSpot one at a time and records each outcome.

Rows are sent strictly in order with a fixed pause between requests;
HubSpot rate-limits property writes, so the pause is required, not an
optimisation. A failed row never stops the batch.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional, Callable

from ..api.hubspot_client import HubSpotAPIClient
from ..errors import HubSpotAPIError
from .definitions import PropertyRow, build_property_body

logger = logging.getLogger(__name__)

DEFAULT_CREATE_DELAY = 0.25


@dataclass
class RowResult:
    """Outcome of creating one row."""
    row_number: int           # 1-based position in the batch
    label: str
    success: bool
    internal_name: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row_number,
            'label': self.label,
            'success': self.success,
            'internalName': self.internal_name,
            'error': self.error,
            'statusCode': self.status_code,
        }


@dataclass
class BulkResult:
    object_type: str
    group_name: str
    results: List[RowResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def created(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'objectType': self.object_type,
            'groupName': self.group_name,
            'total': self.total,
            'created': self.created,
            'failed': self.failed,
            'results': [r.to_dict() for r in self.results],
        }


def create_property(client: HubSpotAPIClient, object_type: str,
                    row: PropertyRow, group_name: str) -> Dict[str, Any]:
    """
    Create a single property.

    Returns:
        The created property as returned by HubSpot

    Raises:
        HubSpotAPIError: with the upstream message and status code
    """
    body = build_property_body(row, group_name)
    logger.debug(f"Creating {object_type}.{body['name']} in group {group_name}")
    return client.post(f'/crm/v3/properties/{object_type}', json_data=body) or {}


class BulkCreator:
    """Create many properties on one object type."""

    def __init__(self, client: HubSpotAPIClient, object_type: str, group_name: str,
                 delay: float = DEFAULT_CREATE_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            client: HubSpot API client
            object_type: Target object type (contacts, deals, custom id...)
            group_name: Property group, resolved once for the whole batch
            delay: Seconds to pause between create calls
            sleep: Sleep function (swappable for tests)
        """
        self.client = client
        self.object_type = object_type
        self.group_name = group_name
        self.delay = delay
        self._sleep = sleep

    def create_one(self, row: PropertyRow, row_number: int) -> RowResult:
        try:
            created = create_property(self.client, self.object_type, row, self.group_name)
        except HubSpotAPIError as e:
            logger.error(f"  ✗ Row {row_number} \"{row.name}\": {e}")
            return RowResult(row_number, row.name, success=False,
                             error=str(e), status_code=e.status_code)

        internal_name = created.get('name')
        logger.info(f"  ✓ Row {row_number} \"{row.name}\" -> {internal_name}")
        return RowResult(row_number, created.get('label') or row.name, success=True,
                         internal_name=internal_name)

    def create_all(self, rows: List[PropertyRow]) -> BulkResult:
        """Create every row in order; returns per-row outcomes."""
        result = BulkResult(self.object_type, self.group_name)
        start = datetime.now()
        total = len(rows)

        logger.info(f"Creating {total} properties on {self.object_type} (group: {self.group_name})")

        for i, row in enumerate(rows):
            if i > 0 and self.delay:
                self._sleep(self.delay)
            logger.info(f"Creating property {i + 1} of {total}: \"{row.name}\"")
            result.results.append(self.create_one(row, i + 1))

        duration = (datetime.now() - start).total_seconds()
        logger.info(f"{'=' * 60}")
        logger.info("BULK CREATE COMPLETE")
        logger.info(f"{'=' * 60}")
        logger.info(f"Total: {result.total}")
        logger.info(f"Created: {result.created}")
        logger.info(f"Failed: {result.failed}")
        logger.info(f"Duration: {duration:.2f} seconds")
        logger.info(f"{'=' * 60}")
        return result
