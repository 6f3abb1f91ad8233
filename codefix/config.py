import os

ONE_MEGABYTE = 1024 * 1024


class Config:
    """Base configuration."""
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-1.5-flash')
    GEMINI_TIMEOUT = float(os.environ.get('GEMINI_TIMEOUT', '30'))
    MAX_CONTENT_LENGTH = ONE_MEGABYTE
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'text')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    JSON_SORT_KEYS = False
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class TestingConfig(Config):
    """Testing configuration. Never picks up a real key from the environment."""
    TESTING = True
    GEMINI_API_KEY = None


class ProductionConfig(Config):
    """Production configuration."""
    LOG_FORMAT = os.environ.get('LOG_FORMAT', 'json')


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
