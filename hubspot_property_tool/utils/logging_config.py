"""
Logging Configuration
Centralized logging setup for the CLI
"""
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional


def setup_logging(log_dir: Optional[Path] = None, log_level: str = 'INFO',
                  console_output: bool = True, log_name: str = 'hubspot_props') -> Optional[Path]:
    """
    Setup logging configuration

    Args:
        log_dir: Directory for log files (None = no file logging)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        console_output: Whether to output to console
        log_name: Prefix for the timestamped log file

    Returns:
        Path to the log file, if one was created
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if console_output:
        # stderr keeps stdout clean for JSON output; UTF-8 for the ✓/✗ markers
        stream = sys.stderr
        if hasattr(stream, 'reconfigure'):
            stream.reconfigure(encoding='utf-8', errors='replace')
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # requests/urllib3 are noisy at DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    if not log_dir:
        return None

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f'{log_name}_{timestamp}.log'

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)  # Always log everything to file
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logger.info(f"Logging to file: {log_file}")
    return log_file
