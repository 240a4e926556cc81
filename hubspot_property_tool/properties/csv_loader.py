"""
Property CSV Loader
Reads a CSV of property definitions and validates every row.

Expected columns: Name, Type, Description (optional), Options (optional).
Options are semicolon-separated, e.g. "Website;Referral;Event".
"""
import io
import logging
from pathlib import Path
from typing import List, Union, IO

import pandas as pd

from ..errors import CSVValidationError
from .definitions import PropertyRow, PROPERTY_TYPES, VALID_TYPES, to_internal_name

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['Name', 'Type']

TEMPLATE_ROWS = [
    ['Name', 'Type', 'Description', 'Options'],
    ['Lead Source', 'Drop-down Select', 'How the contact discovered us',
     'Website;Referral;Social Media;Email Campaign;Event'],
    ['Preferred Contact Method', 'Radio Select', 'Contact preferred communication channel',
     'Phone;Email;Text Message'],
    ['Product Interests', 'Multiple Checkboxes', 'Products the contact is interested in',
     'Product A;Product B;Product C;Product D'],
    ['Decision Stage', 'Drop-down Select', 'Where the contact is in the buying journey',
     'Awareness;Consideration;Decision'],
]


def _read_frame(source: Union[str, Path, IO]) -> pd.DataFrame:
    try:
        df = pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            encoding='utf-8',
        )
    except pd.errors.EmptyDataError:
        raise CSVValidationError(['The CSV file is empty.'])
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CSVValidationError([f'Could not parse CSV: {e}'])
    except OSError as e:
        raise CSVValidationError([f'Could not read CSV: {e}'])

    df.columns = [str(col).strip() for col in df.columns]
    return df.fillna('')


def validate_rows(df: pd.DataFrame) -> List[PropertyRow]:
    """
    Validate a parsed frame and normalise it into PropertyRows.

    Args:
        df: Frame with one row per property

    Returns:
        Validated rows, in file order

    Raises:
        CSVValidationError: with one "Row N: ..." message per problem
    """
    if df.empty:
        raise CSVValidationError(['The CSV file is empty.'])

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise CSVValidationError(['CSV must have at least the columns: Name, Type'])

    errors = []
    rows = []

    for i, record in enumerate(df.to_dict(orient='records')):
        row_num = i + 2  # row 1 is the header
        name = (record.get('Name') or '').strip()
        type_label = (record.get('Type') or '').strip()

        if not name:
            errors.append(f'Row {row_num}: Name is required')
        elif not to_internal_name(name):
            errors.append(f'Row {row_num}: Name "{name}" does not produce a valid internal name')
        if not type_label:
            errors.append(f'Row {row_num}: Type is required')
        elif type_label not in PROPERTY_TYPES:
            errors.append(
                f'Row {row_num}: Invalid type "{type_label}". '
                f'Must be one of: {", ".join(VALID_TYPES)}'
            )

        rows.append(PropertyRow(
            name=name,
            type=type_label,
            description=(record.get('Description') or '').strip(),
            options=(record.get('Options') or '').strip(),
        ))

    if errors:
        raise CSVValidationError(errors)

    return rows


def load_property_csv(source: Union[str, Path, IO]) -> List[PropertyRow]:
    """
    Load and validate a property CSV file.

    Args:
        source: Path to the CSV or an open file object

    Returns:
        Validated rows
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix.lower() != '.csv':
            raise CSVValidationError(['Only .csv files are allowed'])
        logger.info(f"Loading property CSV: {path}")

    rows = validate_rows(_read_frame(source))
    logger.info(f"Parsed {len(rows)} propert{'y' if len(rows) == 1 else 'ies'} ready to create")
    return rows


def parse_property_csv_text(text: str) -> List[PropertyRow]:
    """Validate CSV content already held in memory."""
    return validate_rows(_read_frame(io.StringIO(text)))


def write_template(filepath: Path) -> Path:
    """Write the example CSV template."""
    df = pd.DataFrame(TEMPLATE_ROWS[1:], columns=TEMPLATE_ROWS[0])
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(filepath, index=False)
    logger.info(f"Template saved to: {filepath}")
    return filepath
