"""
Configuration settings for the schedule calculator.
Load configuration from environment variables or a .env file.
"""
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = PROJECT_ROOT / 'data'
    OUTPUT_DATA_DIR = Path(os.getenv('PDM_OUTPUT_DIR', str(DATA_DIR / 'output')))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_TO_FILE = os.getenv('PDM_LOG_TO_FILE', 'false').lower() in ('1', 'true', 'yes')
    LOG_DIR = Path(os.getenv('PDM_LOG_DIR', str(PROJECT_ROOT / 'logs')))

    # ============================================================================
    # Schedule analysis
    # ============================================================================
    NEAR_CRITICAL_THRESHOLD_DAYS = int(os.getenv('PDM_NEAR_CRITICAL_DAYS', '5'))

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate the configured values.
        Returns list of problems found.
        """
        problems = []

        if cls.NEAR_CRITICAL_THRESHOLD_DAYS < 0:
            problems.append('PDM_NEAR_CRITICAL_DAYS must not be negative')

        if not isinstance(logging.getLevelName(cls.LOG_LEVEL.upper()), int):
            problems.append(f'Unknown LOG_LEVEL: {cls.LOG_LEVEL}')

        return problems


# Create settings instance
settings = Settings()
