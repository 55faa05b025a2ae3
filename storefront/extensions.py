# storefront/extensions.py
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from .cache import KeyValueCache
from .services.payment_gateway import Payments

db = SQLAlchemy()
jwt = JWTManager()
cors = CORS()
migrate = Migrate()
cache = KeyValueCache()
payments = Payments()
