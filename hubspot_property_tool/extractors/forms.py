"""
Forms Extractor
Fetches marketing forms; field names come from the form's field groups
"""
from typing import Dict, Any, List, Set

from .base import BaseExtractor
from ..analyzers.usage import SourceKind
from ..analyzers.references import extract_form_fields


class FormsExtractor(BaseExtractor):
    """Extract marketing forms"""

    source_kind = SourceKind.FORMS
    placeholder_name = 'Unnamed form'

    def fetch(self) -> List[Dict[str, Any]]:
        return self.client.paginated_get('/marketing/v3/forms')

    def extract_references(self, item: Dict[str, Any]) -> Set[str]:
        return extract_form_fields(item)
