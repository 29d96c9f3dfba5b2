import os

from dotenv import load_dotenv

load_dotenv()


def _float_env(name, default):
    value = os.getenv(name)
    return float(value) if value else default


def _int_env(name, default):
    value = os.getenv(name)
    return int(value) if value else default


def _intervals_env(name, default):
    value = os.getenv(name)
    if not value:
        return list(default)
    return [int(part) for part in value.split(",") if part.strip()]


class Config:
    """Base configuration class"""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    DEBUG = os.getenv("DEBUG", "True") == "True"

    # SQLAlchemy configuration
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///sanasto.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # SM-2 scheduling constants
    SM2_DEFAULT_EASE_FACTOR = _float_env("SM2_DEFAULT_EASE_FACTOR", 2.5)
    SM2_MIN_EASE_FACTOR = _float_env("SM2_MIN_EASE_FACTOR", 1.3)
    SM2_INITIAL_INTERVALS = _intervals_env("SM2_INITIAL_INTERVALS", (1, 3))

    # Auto-mastery thresholds
    MASTERY_STREAK_REQUIRED = _int_env("MASTERY_STREAK_REQUIRED", 3)
    MASTERY_MIN_ATTEMPTS = _int_env("MASTERY_MIN_ATTEMPTS", 4)
    MASTERY_ACCURACY_THRESHOLD = _float_env("MASTERY_ACCURACY_THRESHOLD", 0.85)

    # Defaults for a fresh day's goals
    DAILY_GOAL_WORDS_TO_LEARN = _int_env("DAILY_GOAL_WORDS_TO_LEARN", 3)
    DAILY_GOAL_WORDS_TO_PRACTICE = _int_env("DAILY_GOAL_WORDS_TO_PRACTICE", 10)
    DAILY_GOAL_TARGET_ACCURACY = _int_env("DAILY_GOAL_TARGET_ACCURACY", 80)


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    # Tests assert against the stock constants regardless of the local .env
    SM2_DEFAULT_EASE_FACTOR = 2.5
    SM2_MIN_EASE_FACTOR = 1.3
    SM2_INITIAL_INTERVALS = [1, 3]
    MASTERY_STREAK_REQUIRED = 3
    MASTERY_MIN_ATTEMPTS = 4
    MASTERY_ACCURACY_THRESHOLD = 0.85
    DAILY_GOAL_WORDS_TO_LEARN = 3
    DAILY_GOAL_WORDS_TO_PRACTICE = 10
    DAILY_GOAL_TARGET_ACCURACY = 80


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
