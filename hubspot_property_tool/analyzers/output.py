"""
Output generators for property usage results.

Generates:
  1. Usage table (CSV) - one row per property with per-source state
  2. Scan dump (JSON) - raw identifier sets, provenance, counts, warnings
  3. Usage summary (JSON) - records plus aggregate stats
"""
import logging
from pathlib import Path
from typing import List, Dict, Any

import pandas as pd

from ..utils.file_helpers import save_json
from .usage import UsageRecord, SourceKind, usage_stats

logger = logging.getLogger(__name__)


def usage_frame(records: List[UsageRecord]) -> pd.DataFrame:
    """Flatten usage records into a table, one row per property."""
    rows = []
    for record in records:
        row = {
            'Label': record.label,
            'Internal Name': record.property_name,
            'HubSpot Defined': record.hubspot_defined,
        }
        for kind in SourceKind:
            row[kind.label] = record.states[kind].value
            row[f'{kind.label} Sources'] = '; '.join(record.provenance.get(kind, []))
        row['Record Count'] = record.record_count if record.record_count is not None else ''
        row['Record Count Error'] = record.record_count_error or ''
        row['Unused'] = record.is_unused
        rows.append(row)

    columns = ['Label', 'Internal Name', 'HubSpot Defined']
    for kind in SourceKind:
        columns += [kind.label, f'{kind.label} Sources']
    columns += ['Record Count', 'Record Count Error', 'Unused']

    return pd.DataFrame(rows, columns=columns)


def export_usage_csv(records: List[UsageRecord], filepath: Path,
                     unused_only: bool = False) -> Path:
    """
    Write the usage table to CSV.

    Args:
        records: Usage records
        filepath: Output file
        unused_only: Only include properties confirmed unused
    """
    if unused_only:
        records = [r for r in records if r.is_unused]

    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    usage_frame(records).to_csv(filepath, index=False, encoding='utf-8')
    logger.info(f"Exported {len(records)} rows to {filepath}")
    return filepath


def save_scan_json(scan, filepath: Path) -> Path:
    filepath = Path(filepath)
    save_json(scan.to_dict(), filepath)
    logger.info(f"Scan saved to {filepath}")
    return filepath


def build_summary(records: List[UsageRecord], scan, object_type: str) -> Dict[str, Any]:
    """Summary payload shared by the JSON export and the HTML report."""
    return {
        'object_type': object_type,
        'stats': usage_stats(records),
        'counts': {k.value: v for k, v in scan.counts.items()} if scan else {},
        'warnings': [str(w) for w in scan.warnings] if scan else [],
        'properties': [r.to_dict() for r in records],
    }


def save_summary_json(summary: Dict[str, Any], filepath: Path) -> Path:
    filepath = Path(filepath)
    save_json(summary, filepath)
    return filepath
