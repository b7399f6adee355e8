from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager

from .cache.homepage_sections import HomepageSectionsCache

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

# One cache per process, shared by every admin screen and route.
homepage_cache = HomepageSectionsCache()
