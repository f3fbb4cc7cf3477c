import logging

import click

from ddm_jewellers.core.imports import jsonify, Flask, cloudinary, HTTPException
from ddm_jewellers.core.config import Config
from ddm_jewellers.core.errors import ServiceError
from ddm_jewellers.core.extensions import db, jwt, swagger, cors, bcrypt, migrate, mail
from ddm_jewellers.models.userModel import User
from ddm_jewellers.routes.auth import auth_bp, seed_demo_users
from ddm_jewellers.routes.admin import admin_bp
from ddm_jewellers.routes.catalog import catalog_bp, seed_categories, seed_products
from ddm_jewellers.routes.cart import cart_bp
from ddm_jewellers.routes.orders import orders_bp
from ddm_jewellers.routes.wishlist import wishlist_bp
from ddm_jewellers.routes.wholesaler import wholesaler_bp
from ddm_jewellers.routes.stock import stock_bp
from ddm_jewellers.routes.reports import reports_bp
from ddm_jewellers.routes.exchange import exchange_bp
from ddm_jewellers.routes.corporate import corporate_bp
from ddm_jewellers.routes.gullak import gullak_bp
from ddm_jewellers.routes.market import market_bp
from ddm_jewellers.routes.care import care_bp, seed_care_tutorials
from ddm_jewellers.routes.chatbot import chatbot_bp
from ddm_jewellers.routes.stores import stores_bp, seed_store_locations
from ddm_jewellers.services.gullak import process_autopayments
from ddm_jewellers.services.market_rates import ensure_current_rates, refresh_rates

logger = logging.getLogger(__name__)

BLUEPRINTS = [
    auth_bp, admin_bp, catalog_bp, cart_bp, orders_bp, wishlist_bp, wholesaler_bp, stock_bp, reports_bp,
    exchange_bp, corporate_bp, gullak_bp, market_bp, care_bp, chatbot_bp, stores_bp,
]


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        return jsonify({"message": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description}), error.code

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"message": "Authorization token is missing"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"message": "Invalid token"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401

    @jwt.user_lookup_loader
    def load_active_user(jwt_header, jwt_payload):
        user = db.session.get(User, int(jwt_payload["sub"]))
        return user if user and user.is_active else None

    @jwt.user_lookup_error_loader
    def inactive_user(jwt_header, jwt_payload):
        return jsonify({"message": "Account is not active"}), 401


def register_commands(app):
    @app.cli.command("seed")
    def seed():
        """Create tables and load demo data."""
        db.create_all()
        seed_demo_users()
        seed_categories()
        seed_products()
        seed_store_locations()
        seed_care_tutorials()
        ensure_current_rates()
        print("✅ Seeding complete")

    @app.cli.command("gullak-autopay")
    def gullak_autopay():
        """Collect every Gullak payment that is due."""
        result = process_autopayments()
        click.echo(f"Processed {result['processed']} autopayments ({result['failed']} failed)")

    @app.cli.command("refresh-rates")
    def refresh_market_rates():
        """Fetch and store the latest gold and silver rates."""
        rates = refresh_rates()
        click.echo(f"Rates updated from {rates.source}: 24k {rates.gold_24k}/g, silver {rates.silver}/g")


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.setdefault("SWAGGER", {
        "title": "DDM Jewellers API",
        "uiversion": 3,
        "securityDefinitions": {
            "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
        },
    })
    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db.init_app(app)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(app)
    bcrypt.init_app(app)
    mail.init_app(app)
    migrate.init_app(app, db)

    cloudinary.config(
        cloud_name=app.config.get("CLOUDINARY_CLOUD_NAME"),
        api_key=app.config.get("CLOUDINARY_API_KEY"),
        api_secret=app.config.get("CLOUDINARY_API_SECRET"),
        secure=True,
    )

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)

    register_error_handlers(app)
    register_commands(app)

    @app.route('/ping')
    def ping():
        return "Ping received", 200

    return app


app = create_app()


if __name__ == "__main__":
    with app.app_context():
        db.create_all()

        seed_demo_users()
        seed_categories()
        seed_products()
        seed_store_locations()
        seed_care_tutorials()

    app.run(debug=True)
