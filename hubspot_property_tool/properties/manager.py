"""
Property Manager
Lists object types and properties, resolves property groups, counts
records that hold a value for a property, and deletes properties.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Iterable, Callable

from ..api.hubspot_client import HubSpotAPIClient
from ..errors import HubSpotAPIError, PropertyError
from .definitions import (
    PropertyDefinition,
    DEFAULT_GROUPS,
    STANDARD_OBJECT_TYPES,
)

logger = logging.getLogger(__name__)

# Search API allows roughly 4 requests/second per account
DEFAULT_COUNT_DELAY = 0.3


@dataclass
class RecordCount:
    """Outcome of one live record-count check."""
    property_name: str
    count: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DeleteResult:
    property_name: str
    success: bool
    error: Optional[str] = None


def _is_hubspot_group(group: Dict[str, Any]) -> bool:
    name = group.get('name', '') or ''
    return bool(group.get('hubspotDefined')) or name.startswith('hs_')


def pick_group_name(groups: List[Dict[str, Any]], object_type: str) -> str:
    """
    Choose a property group from a group listing.

    Prefers the first group not owned by HubSpot, then the first group of
    any kind, then a synthesized "<object_type>information" name.
    """
    active = [g for g in groups if g.get('name') and not g.get('archived')]

    for group in active:
        if not _is_hubspot_group(group):
            return group['name']
    if active:
        return active[0]['name']
    return f'{object_type}information'


class PropertyManager:
    """Manage-mode operations against one HubSpot account."""

    def __init__(self, client: HubSpotAPIClient,
                 sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self._sleep = sleep

    def resolve_group(self, object_type: str, group_name: Optional[str] = None) -> str:
        """
        Resolve the group new properties are created in.

        Args:
            object_type: e.g. "contacts" or a custom object type id
            group_name: Explicit group, used as-is when given

        Returns:
            Group name
        """
        if group_name:
            return group_name
        if object_type in DEFAULT_GROUPS:
            return DEFAULT_GROUPS[object_type]

        try:
            data = self.client.get(f'/crm/v3/properties/{object_type}/groups') or {}
        except HubSpotAPIError as e:
            logger.warning(f"Could not list groups for {object_type}: {e}")
            return f'{object_type}information'

        group = pick_group_name(data.get('results') or [], object_type)
        logger.info(f"Resolved property group for {object_type}: {group}")
        return group

    def list_object_types(self) -> List[Dict[str, Any]]:
        """
        Standard objects plus any custom objects on the account.

        Custom objects carry a precomputed default group so creation does
        not need another lookup.
        """
        object_types = [
            {
                'objectType': name,
                'label': name.capitalize(),
                'custom': False,
                'defaultGroup': DEFAULT_GROUPS[name],
            }
            for name in STANDARD_OBJECT_TYPES
        ]

        data = self.client.get('/crm/v3/schemas') or {}
        for schema in data.get('results') or []:
            object_type = schema.get('objectTypeId') or schema.get('fullyQualifiedName') or schema.get('name')
            if not object_type:
                continue
            labels = schema.get('labels') or {}
            object_types.append({
                'objectType': object_type,
                'label': labels.get('plural') or schema.get('name') or object_type,
                'custom': True,
                'defaultGroup': self.resolve_group(object_type),
            })

        logger.info(f"Found {len(object_types)} object types "
                    f"({len(object_types) - len(STANDARD_OBJECT_TYPES)} custom)")
        return object_types

    def list_properties(self, object_type: str) -> List[PropertyDefinition]:
        """All non-archived properties for an object type, sorted by label."""
        data = self.client.get(
            f'/crm/v3/properties/{object_type}', params={'archived': 'false'}
        ) or {}

        properties = [PropertyDefinition.from_api(p) for p in data.get('results') or []]
        properties.sort(key=lambda p: p.label.lower())

        logger.info(f"Found {len(properties)} properties on {object_type}")
        return properties

    def count_records(self, object_type: str, property_name: str) -> int:
        """Number of records holding any value for the property."""
        body = {
            'filterGroups': [{
                'filters': [{
                    'propertyName': property_name,
                    'operator': 'HAS_PROPERTY',
                }]
            }],
            'properties': ['hs_object_id'],
            'limit': 1,
        }
        data = self.client.post(f'/crm/v3/objects/{object_type}/search', json_data=body) or {}
        return int(data.get('total', 0))

    def count_all(self, object_type: str, property_names: Iterable[str],
                  delay: float = DEFAULT_COUNT_DELAY) -> List[RecordCount]:
        """
        Count records for each property, one request at a time.

        A fixed pause separates requests to stay under the search rate
        limit. A failure on one property is recorded and the loop moves on.
        """
        results = []
        names = list(property_names)

        for i, name in enumerate(names):
            if i > 0 and delay:
                self._sleep(delay)
            try:
                results.append(RecordCount(name, count=self.count_records(object_type, name)))
            except HubSpotAPIError as e:
                logger.warning(f"Record count failed for {object_type}.{name}: {e}")
                results.append(RecordCount(name, error=str(e)))

        return results

    def delete_property(self, object_type: str, property_name: str,
                        definition: Optional[PropertyDefinition] = None) -> None:
        """
        Delete (archive) a property.

        Raises:
            PropertyError: if the property is known to be HubSpot-defined
            HubSpotAPIError: if HubSpot rejects the delete
        """
        if definition is not None and definition.hubspot_defined:
            raise PropertyError(f'"{property_name}" is a HubSpot-defined property and cannot be deleted')

        self.client.delete(f'/crm/v3/properties/{object_type}/{property_name}')
        logger.info(f"Deleted {object_type}.{property_name}")

    def delete_many(self, object_type: str,
                    properties: Iterable[PropertyDefinition]) -> List[DeleteResult]:
        """Delete several properties; each failure is isolated to its item."""
        results = []

        for prop in properties:
            try:
                self.delete_property(object_type, prop.name, definition=prop)
                results.append(DeleteResult(prop.name, success=True))
            except (PropertyError, HubSpotAPIError) as e:
                logger.error(f"Failed to delete {object_type}.{prop.name}: {e}")
                results.append(DeleteResult(prop.name, success=False, error=str(e)))

        return results
