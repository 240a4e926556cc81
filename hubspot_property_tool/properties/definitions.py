"""
Property definitions - the shapes sent to and read from HubSpot.

Covers:
  - Name sanitizing (display label -> internal property name)
  - Option list parsing ("A;B;C" -> choice options)
  - The supported property types and default groups
  - PropertyDefinition, the in-memory snapshot of a HubSpot property
"""
import re
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

MAX_NAME_LENGTH = 250

# Human-readable type label -> HubSpot type / fieldType
PROPERTY_TYPES = {
    'Drop-down Select':    {'type': 'enumeration', 'fieldType': 'select'},
    'Radio Select':        {'type': 'enumeration', 'fieldType': 'radio'},
    'Multiple Checkboxes': {'type': 'enumeration', 'fieldType': 'checkbox'},
    'Single-line Text':    {'type': 'string', 'fieldType': 'text'},
    'Multi-line Text':     {'type': 'string', 'fieldType': 'textarea'},
    'Number':              {'type': 'number', 'fieldType': 'number'},
    'Date Picker':         {'type': 'date', 'fieldType': 'date'},
    'Date and Time':       {'type': 'datetime', 'fieldType': 'date'},
}

VALID_TYPES = list(PROPERTY_TYPES.keys())

DEFAULT_GROUPS = {
    'contacts':  'contactinformation',
    'companies': 'companyinformation',
    'deals':     'dealinformation',
    'tickets':   'ticketinformation',
    'products':  'productinformation',
}

STANDARD_OBJECT_TYPES = list(DEFAULT_GROUPS.keys())

_WHITESPACE = re.compile(r'\s+')
_INVALID_CHARS = re.compile(r'[^a-z0-9_]')


def to_internal_name(label: str) -> str:
    """
    Convert a display label to a valid HubSpot internal property name.

    Lowercase, whitespace becomes underscores, anything outside a-z/0-9/_
    is dropped. Names must start with a letter, so a leading digit gets a
    "p_" prefix. Empty input gives an empty name; callers need a fallback.
    """
    name = (label or '').lower().strip()
    name = _WHITESPACE.sub('_', name)
    name = _INVALID_CHARS.sub('', name)

    if name[:1].isdigit():
        name = 'p_' + name

    return name[:MAX_NAME_LENGTH]


@dataclass
class ChoiceOption:
    """One choice of an enumeration property."""
    label: str
    value: str
    display_order: int
    hidden: bool = False

    def to_api(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'value': self.value,
            'displayOrder': self.display_order,
            'hidden': self.hidden,
        }


def parse_options(options: Optional[str]) -> List[ChoiceOption]:
    """
    Build choice options from a semicolon-separated string.

    Empty segments are dropped before numbering, so "A;;B" gives
    display orders 0 and 1.
    """
    if not options or not options.strip():
        return []

    labels = [piece.strip() for piece in options.split(';')]
    labels = [label for label in labels if label]

    return [
        ChoiceOption(
            label=label,
            value=to_internal_name(label) or f'option_{i}',
            display_order=i,
        )
        for i, label in enumerate(labels)
    ]


@dataclass
class PropertyRow:
    """A validated input row (from CSV or entered by hand)."""
    name: str
    type: str
    description: str = ''
    options: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {
            'Name': self.name,
            'Type': self.type,
            'Description': self.description,
            'Options': self.options,
        }


def build_property_body(row: PropertyRow, group_name: str) -> Dict[str, Any]:
    """
    Build the create-property request body for one row.

    Raises:
        KeyError: if row.type is not one of PROPERTY_TYPES
    """
    type_info = PROPERTY_TYPES[row.type]

    return {
        'name': to_internal_name(row.name),
        'label': row.name,
        'type': type_info['type'],
        'fieldType': type_info['fieldType'],
        'groupName': group_name,
        'description': row.description or '',
        'options': [opt.to_api() for opt in parse_options(row.options)],
    }


@dataclass
class PropertyDefinition:
    """Snapshot of a property as HubSpot reports it."""
    name: str
    label: str
    type: str
    field_type: str = ''
    group_name: str = ''
    description: str = ''
    options: List[ChoiceOption] = field(default_factory=list)
    hubspot_defined: bool = False
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'PropertyDefinition':
        options = []
        for i, opt in enumerate(data.get('options') or []):
            options.append(ChoiceOption(
                label=opt.get('label', ''),
                value=opt.get('value', ''),
                display_order=opt.get('displayOrder', i),
                hidden=bool(opt.get('hidden', False)),
            ))

        return cls(
            name=data.get('name', ''),
            label=data.get('label') or data.get('name', ''),
            type=data.get('type', ''),
            field_type=data.get('fieldType', ''),
            group_name=data.get('groupName', ''),
            description=data.get('description', ''),
            options=options,
            hubspot_defined=bool(data.get('hubspotDefined', False)),
            updated_at=data.get('updatedAt'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'label': self.label,
            'type': self.type,
            'fieldType': self.field_type,
            'groupName': self.group_name,
            'description': self.description,
            'options': [opt.to_api() for opt in self.options],
            'hubspotDefined': self.hubspot_defined,
            'updatedAt': self.updated_at,
        }
