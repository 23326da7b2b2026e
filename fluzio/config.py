"""
Configuration for the Fluzio rules service.

The config class is picked by FLASK_ENV. Values come from the environment,
with a .env file loaded first for local runs.
"""
import os
from dotenv import load_dotenv

from .utils.exceptions import ConfigurationError

load_dotenv()

# Substrings that mark a placeholder SECRET_KEY
WEAK_KEY_MARKERS = ('dev', 'change', 'default', 'test', 'secret', 'password')
MIN_SECRET_KEY_LENGTH = 32


def _database_url(default: str = '') -> str:
    url = os.getenv('DATABASE_URL', default)
    if url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    return url


class BaseConfig:
    """Settings shared by every environment."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Level transitions re-evaluated after a version conflict
    LEVEL_SAVE_ATTEMPTS = int(os.getenv('LEVEL_SAVE_ATTEMPTS', '3'))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///fluzio_dev.db')


class ProductionConfig(BaseConfig):
    DEBUG = False
    SECRET_KEY = os.getenv('SECRET_KEY', '')
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,
    }

    @classmethod
    def problems(cls) -> list:
        """Every reason this configuration cannot serve traffic."""
        found = []
        key = cls.SECRET_KEY or ''
        if not key:
            found.append('SECRET_KEY is not set')
        else:
            weak = [marker for marker in WEAK_KEY_MARKERS if marker in key.lower()]
            if weak:
                found.append(f"SECRET_KEY looks like a placeholder (contains '{weak[0]}')")
            if len(key) < MIN_SECRET_KEY_LENGTH:
                found.append(f'SECRET_KEY is shorter than {MIN_SECRET_KEY_LENGTH} characters')
        if not cls.SQLALCHEMY_DATABASE_URI:
            found.append('DATABASE_URL is not set')
        if cls.LEVEL_SAVE_ATTEMPTS < 1:
            found.append('LEVEL_SAVE_ATTEMPTS must be at least 1')
        return found


class TestingConfig(BaseConfig):
    TESTING = True
    LOG_LEVEL = 'WARNING'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(config_name: str = 'development'):
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Refuse to start production with unsafe settings.

    Raises:
        ConfigurationError: listing every problem found
    """
    if config_name != 'production':
        return
    found = ProductionConfig.problems()
    if found:
        raise ConfigurationError('Invalid production configuration: ' + '; '.join(found))
