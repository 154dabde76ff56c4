# workhub_api/config.py
import os
from datetime import timedelta


class Config:
    """Defaults shared by every environment; create_app() reads env vars on top."""
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=8)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_DECODE_LEEWAY = 120

    APP_TIMEZONE = "Asia/Kolkata"
    LATE_AFTER = "09:00"
    STANDARD_WORK_HOURS = 8
    DEFAULT_MONTH_DAYS = 28
    MAX_OT_IMAGE_BYTES = 50 * 1024 * 1024

    @staticmethod
    def get_logging_config(log_dir=None, level="INFO"):
        handlers = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        }
        if log_dir:
            handlers["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(log_dir, "workhub.log"),
                "maxBytes": 1024 * 1024 * 10,  # 10MB
                "backupCount": 5,
                "formatter": "default",
                "encoding": "utf-8",
            }
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
                }
            },
            "handlers": handlers,
            "root": {
                "level": level,
                "handlers": list(handlers),
            },
        }


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-32b"
    LOG_DIR = None
