from flask import Flask, g, jsonify
from flask_jwt_extended import set_access_cookies

from .config import get_config
from .errors import register_error_handlers
from .extensions import db, jwt, cors, migrate, cache, payments
from .utils.logging import configure_logging


def _configure_jwt(app):
    cfg = app.config
    cfg["JWT_SECRET_KEY"] = cfg["ACCESS_TOKEN_SECRET"]
    cfg["JWT_ACCESS_TOKEN_EXPIRES"] = cfg["ACCESS_TOKEN_EXPIRES"]
    cfg["JWT_REFRESH_TOKEN_EXPIRES"] = cfg["REFRESH_TOKEN_EXPIRES"]
    cfg["JWT_TOKEN_LOCATION"] = ["cookies", "headers"]
    cfg["JWT_ACCESS_COOKIE_NAME"] = "accessToken"
    cfg["JWT_REFRESH_COOKIE_NAME"] = "refreshToken"
    cfg["JWT_COOKIE_SECURE"] = cfg["COOKIE_SECURE"]
    cfg["JWT_COOKIE_SAMESITE"] = "Strict"
    cfg["JWT_COOKIE_CSRF_PROTECT"] = False
    cfg["JWT_SESSION_COOKIE"] = False


def create_app(config_object=None, **overrides):
    app = Flask(__name__, instance_relative_config=True)

    config_object = config_object or get_config()
    app.config.from_object(config_object)
    app.config.update(overrides)
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024
    config_object.init_app(app)
    _configure_jwt(app)

    configure_logging(app.config["LOG_LEVEL"], json_logs=app.config["ENV"] == "production")

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CLIENT_URL"]}}, supports_credentials=True)
    migrate.init_app(app, db)
    cache.init_app(app)
    payments.init_app(app)

    register_error_handlers(app)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .coupon import bp as coupon_bp; app.register_blueprint(coupon_bp)
    from .payment import bp as payment_bp; app.register_blueprint(payment_bp)
    from .analytics import bp as analytics_bp; app.register_blueprint(analytics_bp)

    from .cli import register_cli
    register_cli(app)

    @app.after_request
    def renew_access_cookie(response):
        # set by protect_route when it fell back to the refresh token
        token = g.pop("renewed_access_token", None)
        if token:
            set_access_cookies(
                response, token, max_age=int(app.config["ACCESS_TOKEN_EXPIRES"].total_seconds())
            )
        return response

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        db.create_all()

    return app
