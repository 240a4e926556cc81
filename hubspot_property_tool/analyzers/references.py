"""
Property reference extraction.

Finds the internal property names an arbitrary HubSpot object refers to.
Workflows, lists, pipelines, reports and emails come back in shapes that
differ by object kind and API version, so instead of modelling them we
walk the decoded JSON generically:

  - Structural keys: any key ending in "property" / "propertyName"
    (suffix matched case-insensitively, so "filterProperty" and
    "fromPropertyName" count) whose value looks like an internal name.
    The value shape rejects things like {"propertyType": "ENUMERATION"}.
  - Personalization tokens: "{{contact.favorite_color}}" in any string.

Forms are the exception: their field names sit under a known (versioned)
nesting, so they get a dedicated walk.
"""
import re
from typing import Any, Iterator, Set, Tuple

# Internal property names: lowercase letter, then lowercase/digits/underscore
PROPERTY_NAME = re.compile(r'[a-z][a-z0-9_]*')
PROPERTY_KEY = re.compile(r'.*property(?:name)?', re.IGNORECASE)
PERSONALIZATION_TOKEN = re.compile(r'\{\{\s*[a-z_]+\.([a-z][a-z0-9_]*)\s*\}\}')


def _walk(node: Any) -> Iterator[Tuple[Any, Any]]:
    """Yield every (key, value) pair in a nested dict/list structure."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            for key, value in current.items():
                yield key, value
                if isinstance(value, (dict, list)):
                    stack.append(value)
        elif isinstance(current, list):
            for value in current:
                yield None, value
                if isinstance(value, (dict, list)):
                    stack.append(value)


def _strings(node: Any) -> Iterator[str]:
    """Every string in the structure, keys included."""
    if isinstance(node, str):
        yield node
        return
    for key, value in _walk(node):
        if isinstance(key, str):
            yield key
        if isinstance(value, str):
            yield value


def extract_property_keys(item: Any) -> Set[str]:
    """
    Property names referenced through *property / *propertyName keys.

    >>> extract_property_keys({"filterProperty": "lead_status"})
    {'lead_status'}
    >>> extract_property_keys({"propertyType": "ENUMERATION"})
    set()
    """
    found = set()
    for key, value in _walk(item):
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if PROPERTY_KEY.fullmatch(key) and PROPERTY_NAME.fullmatch(value):
            found.add(value)
    return found


def extract_personalization_tokens(item: Any) -> Set[str]:
    """Property names used in {{object.property}} placeholders."""
    found = set()
    for text in _strings(item):
        if '{{' in text:
            found.update(PERSONALIZATION_TOKEN.findall(text))
    return found


def extract_text_references(item: Any) -> Set[str]:
    """Structural keys plus personalization tokens (workflows, emails)."""
    return extract_property_keys(item) | extract_personalization_tokens(item)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _collect_form_field(form_field: Any, found: Set[str]) -> None:
    if not isinstance(form_field, dict):
        return

    name = form_field.get('name')
    if isinstance(name, str) and name:
        found.add(name)

    # v2 forms attach conditional fields directly to the field
    for flt in _as_list(form_field.get('dependentFieldFilters')):
        if isinstance(flt, dict):
            _collect_form_field(flt.get('dependentFormField'), found)

    for dependent in _as_list(form_field.get('dependentFields')):
        if not isinstance(dependent, dict):
            continue
        for flt in _as_list(dependent.get('dependentFieldFilters')):
            if isinstance(flt, dict):
                _collect_form_field(flt.get('dependentFormField'), found)
        _collect_form_field(dependent.get('dependentField'), found)
        # legacy layout nests a plain field list under the dependent entry
        for nested in _as_list(dependent.get('fields')):
            _collect_form_field(nested, found)


def _collect_field_list(fields: Any, found: Set[str]) -> None:
    """Flat list of fields, or row-major list of lists of fields."""
    for entry in _as_list(fields):
        if isinstance(entry, list):
            for form_field in entry:
                _collect_form_field(form_field, found)
        else:
            _collect_form_field(entry, found)


def extract_form_fields(form: Any) -> Set[str]:
    """
    Property names of every field on a form, conditional fields included.

    Handles the current layout (fieldGroups[].fields[]) and the legacy
    layouts (formFieldGroups[].fields[] and a top-level fields list that
    may be flat or row-major). A form carrying both yields the union.
    """
    found = set()
    if not isinstance(form, dict):
        return found

    for group in _as_list(form.get('fieldGroups')):
        if isinstance(group, dict):
            _collect_field_list(group.get('fields'), found)

    for group in _as_list(form.get('formFieldGroups')):
        if isinstance(group, dict):
            _collect_field_list(group.get('fields'), found)

    _collect_field_list(form.get('fields'), found)

    return found
