import os
from dotenv import load_dotenv

load_dotenv()

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Load the section list once at startup instead of on the first request
    HOMEPAGE_CACHE_PRELOAD = os.getenv("HOMEPAGE_CACHE_PRELOAD", "false").lower() == "true"

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///catalog_admin.db")

class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET_KEY = "testing-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    HOMEPAGE_CACHE_PRELOAD = False

class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")

config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig
}
