import logging
import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from werkzeug.security import generate_password_hash
from .extensions import db, migrate
from .config import Config
from .blueprints.auth import bp as auth_bp
from .blueprints.reservations import bp as reservations_bp
from .blueprints.restaurants import bp as restaurants_bp
from .models import Reservation, Restaurant, User

SAMPLE_RESTAURANTS = [
    ("Trattoria Lucia", "Downtown", "Hand-made pasta and a wood-fired oven."),
    ("Sakura House", "Riverside", "Sushi counter and izakaya plates."),
    ("El Fogón", "Old Town", "Charcoal grill, tapas and vermouth."),
    ("Green Table", "Harbor District", "Seasonal vegetarian tasting menus."),
    ("Spice Route", "Downtown", "Regional curries and tandoor breads."),
    ("Le Petit Zinc", "Market Square", "Classic bistro fare and natural wine."),
]

def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(restaurants_bp, url_prefix="/api/restaurants")
    app.register_blueprint(reservations_bp, url_prefix="/api")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("init-db")
    @with_appcontext
    def init_db_command():
        """Creates all tables without going through migrations."""
        db.create_all()
        click.echo("Database tables created.")

    @click.command("seed")
    @with_appcontext
    def seed_command():
        """Creates sample restaurants and a demo user."""
        db.session.query(Reservation).delete()
        db.session.query(Restaurant).delete()
        db.session.commit()
        click.echo("Cleared existing restaurants and reservations.")

        restaurants = [
            Restaurant(name=name, location=location, description=description)
            for name, location, description in SAMPLE_RESTAURANTS
        ]
        db.session.add_all(restaurants)

        if User.query.filter_by(email="demo@example.com").one_or_none() is None:
            db.session.add(User(
                name="Demo Diner",
                email="demo@example.com",
                password_hash=generate_password_hash("demo-password"),
            ))
        db.session.commit()
        click.echo(f"Created {len(restaurants)} restaurants.")
        click.echo("Database seeded!")

    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)

    return app
