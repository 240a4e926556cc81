"""
File Helper Utilities
Common file operations and utilities
"""
from pathlib import Path
import json
import yaml
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


def load_yaml(filepath: Path) -> Dict[str, Any]:
    """
    Load YAML configuration file

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary with configuration (empty for an empty file)
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def save_json(data: Any, filepath: Path, indent: int = 2) -> None:
    """
    Save data to JSON file

    Args:
        data: Data to save
        filepath: Path to save to
        indent: JSON indentation
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def ensure_dir(directory: Path) -> Path:
    """
    Ensure directory exists, create if it doesn't

    Args:
        directory: Directory path

    Returns:
        The directory path
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_account_report_dir(account: str, base_dir: Optional[Path] = None) -> Path:
    """
    Get the report directory for a specific account

    Args:
        account: Account (config) name
        base_dir: Base report directory (default: ./reports)

    Returns:
        Path to the account's report directory
    """
    if base_dir is None:
        base_dir = Path('reports')

    return ensure_dir(Path(base_dir) / account)
