"""
Property usage records - where each property is referenced.

Each property gets a state per source kind:
  - UNCHECKED: no scan has covered this source yet
  - PRESENT: at least one item of this kind references the property
  - ABSENT: the source was scanned and nothing references it
  - ERROR: the source could not be fetched, so presence is unknown

Plus an optional live record count and, per source kind, the names of
the items that reference the property (provenance).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Iterable, Any


class SourceKind(Enum):
    WORKFLOWS = "workflows"
    FORMS = "forms"
    LISTS = "lists"
    PIPELINES = "pipelines"
    MARKETING_EMAILS = "marketingEmails"
    REPORTS = "reports"

    @property
    def label(self) -> str:
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    SourceKind.WORKFLOWS: "Workflows",
    SourceKind.FORMS: "Forms",
    SourceKind.LISTS: "Lists",
    SourceKind.PIPELINES: "Pipelines",
    SourceKind.MARKETING_EMAILS: "Marketing Emails",
    SourceKind.REPORTS: "Reports",
}


class UsageState(Enum):
    UNCHECKED = "unchecked"
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass
class UsageRecord:
    """Usage of a single property across all source kinds."""
    property_name: str
    label: str = ""
    hubspot_defined: bool = False
    states: Dict[SourceKind, UsageState] = field(
        default_factory=lambda: {kind: UsageState.UNCHECKED for kind in SourceKind}
    )
    provenance: Dict[SourceKind, List[str]] = field(default_factory=dict)
    record_count: Optional[int] = None
    record_count_error: Optional[str] = None

    def mark_present(self, kind: SourceKind, source_names: Iterable[str]):
        self.states[kind] = UsageState.PRESENT
        names = self.provenance.setdefault(kind, [])
        for name in source_names:
            if name not in names:
                names.append(name)

    def mark_absent(self, kind: SourceKind):
        self.states[kind] = UsageState.ABSENT
        self.provenance.pop(kind, None)

    def mark_error(self, kind: SourceKind):
        self.states[kind] = UsageState.ERROR
        self.provenance.pop(kind, None)

    @property
    def used_in(self) -> List[SourceKind]:
        return [k for k in SourceKind if self.states[k] == UsageState.PRESENT]

    @property
    def is_used(self) -> bool:
        return bool(self.used_in) or bool(self.record_count)

    @property
    def is_unused(self) -> bool:
        """
        Confirmed unused: every source scanned clean and no records hold
        a value (or the count was not checked).
        """
        if any(state != UsageState.ABSENT for state in self.states.values()):
            return False
        return not self.record_count

    @property
    def usage_summary(self) -> str:
        """Quick summary like 'Workflows:2 Forms:1' or 'unused'."""
        if self.is_unused:
            return "unused"
        parts = []
        for kind in self.used_in:
            parts.append(f"{kind.label}:{len(self.provenance.get(kind, []))}")
        if self.record_count:
            parts.append(f"Records:{self.record_count}")
        return " ".join(parts) or "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.property_name,
            'label': self.label,
            'hubspotDefined': self.hubspot_defined,
            'states': {k.value: s.value for k, s in self.states.items()},
            'provenance': {k.value: list(v) for k, v in self.provenance.items()},
            'recordCount': self.record_count,
            'recordCountError': self.record_count_error,
            'unused': self.is_unused,
        }


def build_usage_records(properties, scan, record_counts=None) -> List[UsageRecord]:
    """
    Combine a property list, a scan result and record counts.

    Args:
        properties: PropertyDefinitions (anything with name/label/hubspot_defined)
        scan: ScanResult from the usage aggregator, or None if no scan ran
        record_counts: Optional RecordCount results

    Returns:
        One UsageRecord per property, in input order
    """
    counts = {rc.property_name: rc for rc in (record_counts or [])}
    records = []

    for prop in properties:
        record = UsageRecord(
            property_name=prop.name,
            label=getattr(prop, 'label', prop.name),
            hubspot_defined=getattr(prop, 'hubspot_defined', False),
        )

        if scan is not None:
            for kind in SourceKind:
                if kind in scan.failed_sources:
                    record.mark_error(kind)
                elif prop.name in scan.references[kind]:
                    record.mark_present(kind, scan.provenance.get(prop.name, {}).get(kind, []))
                else:
                    record.mark_absent(kind)

        count = counts.get(prop.name)
        if count is not None:
            record.record_count = count.count
            record.record_count_error = count.error

        records.append(record)

    return records


def usage_stats(records: List[UsageRecord]) -> Dict[str, Any]:
    total = len(records)
    unused = sum(1 for r in records if r.is_unused)
    stats = {
        'total_properties': total,
        'used_properties': sum(1 for r in records if r.is_used),
        'unused_properties': unused,
    }
    for kind in SourceKind:
        stats[f'{kind.value}_references'] = sum(
            1 for r in records if r.states[kind] == UsageState.PRESENT
        )
    return stats
