"""
Configuration settings for the unsubscribe engine.
"""

import os
from pathlib import Path

from dotenv import load_dotenv


class Config:
    """Configuration settings."""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///unsubscribe.db')

    # Classifier settings
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
    OPENAI_TIMEOUT = float(os.getenv('OPENAI_TIMEOUT', '60'))
    CLASSIFIER_MAX_ATTEMPTS = int(os.getenv('CLASSIFIER_MAX_ATTEMPTS', '3'))
    CLASSIFIER_RETRY_BASE_DELAY = float(os.getenv('CLASSIFIER_RETRY_BASE_DELAY', '2.0'))

    # Browser automation service (unset = not configured)
    BROWSER_AUTOMATION_URL = os.getenv('BROWSER_AUTOMATION_URL')
    AUTOMATION_TIMEOUT = float(os.getenv('AUTOMATION_TIMEOUT', '90'))

    # HTTP settings
    REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '10'))

    # Bulk unsubscribe fan-out
    BULK_MAX_WORKERS = int(os.getenv('BULK_MAX_WORKERS', '4'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

    @classmethod
    def get_data_dir(cls) -> Path:
        """Get the data directory for storing the database and logs."""
        data_dir = Path(os.getenv('DATA_DIR', Path.cwd() / 'data'))
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    @classmethod
    def get_database_url(cls) -> str:
        """Get the database URL, placing relative SQLite files in the data directory."""
        if cls.DATABASE_URL.startswith('sqlite:///'):
            db_file = cls.DATABASE_URL[10:]
            if db_file != ':memory:' and not os.path.isabs(db_file):
                db_path = cls.get_data_dir() / db_file
                return f"sqlite:///{db_path}"
        return cls.DATABASE_URL


def load_config_from_env_file(env_file: str = '.env'):
    """Load configuration from environment file and refresh Config."""
    env_path = Path(env_file)
    if not env_path.exists():
        return False

    load_dotenv(env_path)
    Config.DATABASE_URL = os.getenv('DATABASE_URL', Config.DATABASE_URL)
    Config.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', Config.OPENAI_API_KEY)
    Config.OPENAI_MODEL = os.getenv('OPENAI_MODEL', Config.OPENAI_MODEL)
    Config.OPENAI_TIMEOUT = float(os.getenv('OPENAI_TIMEOUT', Config.OPENAI_TIMEOUT))
    Config.CLASSIFIER_MAX_ATTEMPTS = int(os.getenv('CLASSIFIER_MAX_ATTEMPTS', Config.CLASSIFIER_MAX_ATTEMPTS))
    Config.CLASSIFIER_RETRY_BASE_DELAY = float(
        os.getenv('CLASSIFIER_RETRY_BASE_DELAY', Config.CLASSIFIER_RETRY_BASE_DELAY)
    )
    Config.BROWSER_AUTOMATION_URL = os.getenv('BROWSER_AUTOMATION_URL', Config.BROWSER_AUTOMATION_URL)
    Config.AUTOMATION_TIMEOUT = float(os.getenv('AUTOMATION_TIMEOUT', Config.AUTOMATION_TIMEOUT))
    Config.REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', Config.REQUEST_TIMEOUT))
    Config.BULK_MAX_WORKERS = int(os.getenv('BULK_MAX_WORKERS', Config.BULK_MAX_WORKERS))
    Config.LOG_LEVEL = os.getenv('LOG_LEVEL', Config.LOG_LEVEL)
    return True
