import os
from datetime import timedelta
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
# Use override=True to ensure .env values override any system environment variables
load_dotenv(os.path.join(basedir, '.env'), override=True)


def _database_uri():
    """Resolve the database URI from DATABASE_URL or the split DATABASE_* variables."""
    url = os.environ.get('DATABASE_URL')
    if url:
        return url

    db_user = os.environ.get('DATABASE_USER')
    db_password = os.environ.get('DATABASE_PASSWORD')
    db_host = os.environ.get('DATABASE_HOST')
    db_name = os.environ.get('DATABASE_NAME')

    if all([db_user, db_host, db_name]):
        if db_password:
            return f'mysql+pymysql://{db_user}:{db_password}@{db_host}/{db_name}'
        return f'mysql+pymysql://{db_user}@{db_host}/{db_name}'

    return 'sqlite:///' + os.path.join(basedir, 'mindquest.db')


class Config:
    ENV = os.environ.get('FLASK_ENV', 'development')
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'

    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'False').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 43200  # 12 hours
    REMEMBER_COOKIE_DURATION = timedelta(seconds=43200)
    REMEMBER_COOKIE_HTTPONLY = True

    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # User clock fallback when a profile has no timezone set
    DEFAULT_TIMEZONE = os.environ.get('DEFAULT_TIMEZONE', 'Europe/Madrid')

    # Streak shield is a premium perk in the product; flip to open it to everyone
    SHIELD_PREMIUM_ONLY = os.environ.get('SHIELD_PREMIUM_ONLY', 'true').lower() == 'true'

    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_HEADERS_ENABLED = True

    # Default rate limits for general endpoints
    RATELIMIT_DEFAULT = "500 per day, 100 per hour"

    # Gameplay (generous - won't affect normal users)
    RATELIMIT_MISSION_COMPLETE = "60 per hour"
    RATELIMIT_VICTORY = "20 per hour"
    RATELIMIT_CHECK_IN = "30 per hour"
    RATELIMIT_STREAK_ACTION = "20 per hour"
    RATELIMIT_WAGER = "20 per hour"
    RATELIMIT_TOKEN_SPEND = "30 per hour"

    # Social
    RATELIMIT_CONNECTION_REQUEST = "15 per hour"
    RATELIMIT_SOCIAL_ACTION = "60 per hour"

    # Reads
    RATELIMIT_API_READ = "300 per hour"

    # Error Handling Configuration
    PROPAGATE_EXCEPTIONS = None
    TRAP_HTTP_EXCEPTIONS = False
    TRAP_BAD_REQUEST_ERRORS = None


class DevelopmentConfig(Config):
    """Development environment configuration with relaxed security for debugging."""
    DEBUG = True
    TESTING = False

    SESSION_COOKIE_SECURE = False

    PROPAGATE_EXCEPTIONS = False
    TRAP_BAD_REQUEST_ERRORS = True


class ProductionConfig(Config):
    """Production environment configuration."""
    ENV = 'production'
    DEBUG = False
    TESTING = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 20,
        'max_overflow': 40,
        'pool_timeout': 30,
        'pool_recycle': 1800,
        'pool_pre_ping': True,
    }

    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True

    # Production: Use Redis for rate limiting (shared across gunicorn workers)
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL', "redis://localhost:6379/1")

    PROPAGATE_EXCEPTIONS = False
    TRAP_HTTP_EXCEPTIONS = False
    TRAP_BAD_REQUEST_ERRORS = False


class TestingConfig(Config):
    """Testing environment configuration."""
    ENV = 'testing'
    TESTING = True
    DEBUG = False

    # Testing: Use in-memory database
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # Testing: Disable rate limiting
    RATELIMIT_ENABLED = False

    # Testing: Deterministic user clock
    DEFAULT_TIMEZONE = 'UTC'

    LOG_TO_FILES = False


# Configuration dictionary for easy selection
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
