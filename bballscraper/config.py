"""
Configuration for the basketball scraper CSV layer.
"""
from dataclasses import dataclass
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(key: str, default: str = '0') -> bool:
    return os.getenv(key, default).strip().lower() in ('1', 'true', 'yes')


@dataclass(frozen=True)
class Settings:
    """Immutable settings from environment."""

    csv_dir: str = os.getenv('CSV_DIR', os.path.join('src', 'csv'))
    log_dir: str = os.getenv('LOG_DIR', 'logs')
    log_level: str = os.getenv('LOG_LEVEL', 'INFO')
    strict_columns: bool = _env_flag('STRICT_COLUMNS')


settings = Settings()
