"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///meal_planner.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Generative backend (OpenAI-compatible chat completions)
    LLM_API_KEY = (os.environ.get('XAI_API_KEY')
                   or os.environ.get('GROK_API_KEY')
                   or os.environ.get('X_AI_API_KEY'))
    LLM_BASE_URL = os.environ.get('LLM_BASE_URL', 'https://api.x.ai/v1')
    LLM_MODEL = os.environ.get('LLM_MODEL', 'grok-2-1212')
    LLM_TIMEOUT = float(os.environ.get('LLM_TIMEOUT', '60'))

    # Email delivery
    SENDGRID_API_KEY = os.environ.get('SENDGRID_API_KEY')
    MAIL_FROM = os.environ.get('MAIL_FROM', 'hello@mymealplannerai.com')
    MAIL_FROM_NAME = os.environ.get('MAIL_FROM_NAME', 'My Meal Planner AI')
    MAIL_ENABLED = True

    # Users and credits
    USER_ID_HEADER = os.environ.get('USER_ID_HEADER', 'X-User-Id')
    AUTO_PROVISION_USERS = _env_bool('AUTO_PROVISION_USERS', True)
    DEFAULT_MEAL_CREDITS = int(os.environ.get('DEFAULT_MEAL_CREDITS', '10'))

    # Calendar weeks start on Sunday (date.weekday() numbering)
    WEEK_STARTS_ON = int(os.environ.get('WEEK_STARTS_ON', '6'))

    # Recipe import
    IMPORT_TIMEOUT = 10
    MAX_IMPORT_SIZE = 5 * 1024 * 1024  # 5MB max page


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    AUTO_PROVISION_USERS = _env_bool('AUTO_PROVISION_USERS', False)


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    MAIL_ENABLED = False
    LLM_API_KEY = 'test-key'
    AUTO_PROVISION_USERS = True


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
