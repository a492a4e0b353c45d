from flask import Flask, jsonify
from config import Config
from routes import health_bp, slots_bp, appointments_bp, stats_bp, reports_bp, audit_bp

from models import db
from flask_migrate import Migrate
from services.errors import SchedulingError


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(slots_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(audit_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.errorhandler(SchedulingError)
    def _scheduling_error(exc):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        # CSP can be strict if you serve frontend separately; for API it's fine to keep minimal:
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
import json

import click
from services import BookingCoordinator, StatsAggregator
from services.validation import validate_bulk_week


def register_cli(app):
    @app.cli.command("create-week")
    @click.argument("start_date")
    @click.argument("time_slots", nargs=-1, required=True)
    def create_week(start_date, time_slots):
        """Create a week of slots, e.g. create-week 2024-06-10 08:00:Carregamento 14:00:Descarregamento"""
        pairs = []
        for item in time_slots:
            parts = item.split(":", 2)
            if len(parts) != 3:
                raise click.BadParameter(f"{item!r} must look like HH:MM:Service")
            pairs.append({"time": f"{parts[0]}:{parts[1]}", "service": parts[2]})

        try:
            day, parsed = validate_bulk_week({"start_date": start_date, "time_slots": pairs})
            slots = BookingCoordinator(db.session).create_week(day, parsed)
        except SchedulingError as exc:
            raise click.ClickException("; ".join([exc.message] + exc.details))
        click.echo(f"{len(slots)} slots created")

    @app.cli.command("stats")
    def stats():
        """Print current appointment and slot counts."""
        click.echo(json.dumps(StatsAggregator(db.session).snapshot(), indent=2))

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
