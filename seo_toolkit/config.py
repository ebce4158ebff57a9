"""
Configuration settings for SEO Toolkit
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    DEBUG = _env_bool('DEBUG', 'True')
    TESTING = False
    PORT = int(os.environ.get('PORT', '5000'))

    # Fetching
    REQUEST_TIMEOUT = int(os.environ.get('REQUEST_TIMEOUT', '15'))
    USER_AGENT = os.environ.get(
        'USER_AGENT',
        'Mozilla/5.0 (compatible; SEOToolkit/1.0; +https://github.com/seo-toolkit)'
    )

    # Analysis settings
    HISTORY_LIMIT = int(os.environ.get('HISTORY_LIMIT', '100'))
    ALERT_LIMIT = int(os.environ.get('ALERT_LIMIT', '500'))
    ERROR_LOG_LIMIT = int(os.environ.get('ERROR_LOG_LIMIT', '50'))
    BATCH_SIZE = int(os.environ.get('BATCH_SIZE', '5'))
    BATCH_PAUSE_SECONDS = float(os.environ.get('BATCH_PAUSE_SECONDS', '1.0'))
    MAX_DISCOVERED_URLS = int(os.environ.get('MAX_DISCOVERED_URLS', '50'))
    SCORE_ALERT_THRESHOLD = int(os.environ.get('SCORE_ALERT_THRESHOLD', '70'))

    # Monitoring targets
    TARGET_WEBSITE = os.environ.get('TARGET_WEBSITE', 'https://videogreetings.example.com')
    MONITORED_URLS = _env_list('MONITORED_URLS', [])
    COMPETITORS = _env_list('COMPETITORS', [
        'vidblessings.com',
        'wishesmadevisual.com',
        'dancegreetingsafrica.com',
    ])
    TRACKED_KEYWORDS = _env_list('TRACKED_KEYWORDS', [
        'personalized video messages',
        'custom greeting videos',
        'african video greetings',
        'birthday video messages',
    ])

    # Schedules (cron expressions)
    SCHEDULES = {
        'daily': os.environ.get('SCHEDULE_DAILY', '0 8 * * *'),
        'hourly': os.environ.get('SCHEDULE_HOURLY', '0 * * * *'),
        'competitor': os.environ.get('SCHEDULE_COMPETITOR', '0 */4 * * *'),
        'keywords': os.environ.get('SCHEDULE_KEYWORDS', '0 */6 * * *'),
        'weekly': os.environ.get('SCHEDULE_WEEKLY', '0 9 * * 1'),
        'monthly': os.environ.get('SCHEDULE_MONTHLY', '0 10 1 * *'),
    }

    # Storage
    DATA_DIR = os.environ.get('DATA_DIR', 'seo-data')
    REPORTS_DIR = os.environ.get('REPORTS_DIR', os.path.join(DATA_DIR, 'reports'))
    ALERTS_DIR = os.environ.get('ALERTS_DIR', os.path.join(DATA_DIR, 'alerts'))
    LOGS_DIR = os.environ.get('LOGS_DIR', os.path.join(DATA_DIR, 'logs'))
    RAW_DATA_DIR = os.environ.get('RAW_DATA_DIR', os.path.join(DATA_DIR, 'raw'))
    REPORT_RETENTION_DAYS = int(os.environ.get('REPORT_RETENTION_DAYS', '90'))
    RAW_DATA_RETENTION_DAYS = int(os.environ.get('RAW_DATA_RETENTION_DAYS', '30'))
    ALERT_RETENTION_DAYS = int(os.environ.get('ALERT_RETENTION_DAYS', '7'))

    # Notifications
    NOTIFY_CONSOLE = _env_bool('NOTIFY_CONSOLE', 'True')
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USER = os.environ.get('SMTP_USER')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD')
    ALERT_EMAIL = os.environ.get('ALERT_EMAIL')
    WEBHOOK_URL = os.environ.get('WEBHOOK_URL')

    # Optional JSON file overriding the monitoring section
    MONITOR_CONFIG_PATH = os.environ.get('MONITOR_CONFIG_PATH', '')

    # AI Bot agents checked in robots.txt analysis
    AI_BOT_AGENTS = [
        'GPTBot',
        'Google-Extended',
        'ClaudeBot',
        'PerplexityBot',
        'CCBot',
        'bingbot',
    ]


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = False
    BATCH_PAUSE_SECONDS = 0.0
    NOTIFY_CONSOLE = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def config_to_dict(config_class) -> Dict[str, Any]:
    """Collect the upper-case settings of a config class into a plain dict"""
    settings = {}
    for name in dir(config_class):
        if name.isupper():
            value = getattr(config_class, name)
            if isinstance(value, (dict, list)):
                value = value.copy()
            settings[name] = value
    return settings


def load_monitor_config(settings: Dict[str, Any], path: Optional[str] = None) -> Dict[str, Any]:
    """
    Overlay monitoring settings from a JSON file.

    Recognised keys are ``target_website``, ``monitored_urls``, ``competitors``,
    ``keywords`` and ``schedules``. A missing or malformed file leaves the
    settings untouched.
    """
    path = path or settings.get('MONITOR_CONFIG_PATH')
    if not path:
        return settings
    try:
        with open(path, 'r', encoding='utf-8') as f:
            overrides = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Monitor config {path} not found, using defaults")
        return settings
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load monitor config {path}: {e}")
        return settings
    if not isinstance(overrides, dict):
        logger.error(f"Monitor config {path} must contain a JSON object")
        return settings

    merged = dict(settings)
    if overrides.get('target_website'):
        merged['TARGET_WEBSITE'] = overrides['target_website']
    if isinstance(overrides.get('monitored_urls'), list):
        merged['MONITORED_URLS'] = list(overrides['monitored_urls'])
    if isinstance(overrides.get('competitors'), list):
        merged['COMPETITORS'] = list(overrides['competitors'])
    if isinstance(overrides.get('keywords'), list):
        merged['TRACKED_KEYWORDS'] = list(overrides['keywords'])
    if isinstance(overrides.get('schedules'), dict):
        schedules = dict(merged.get('SCHEDULES') or {})
        schedules.update({k: v for k, v in overrides['schedules'].items() if isinstance(v, str)})
        merged['SCHEDULES'] = schedules
    logger.info(f"Loaded monitor config from {path}")
    return merged


def load_settings(config_name: Optional[str] = None) -> Dict[str, Any]:
    """Settings for a named configuration, with the monitor config file applied"""
    config_name = config_name or os.environ.get('FLASK_ENV', 'default')
    config_class = config.get(config_name, config['default'])
    return load_monitor_config(config_to_dict(config_class))
