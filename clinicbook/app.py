import logging

from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from clinicbook.config import Config
from clinicbook.models import db
from clinicbook.routes import health_bp, meta_bp, doctors_bp, appointments_bp, my_bp, audit_bp
from clinicbook.security.tokens import init_authenticator
from clinicbook.services.errors import SchedulingError
from clinicbook.utils.auth_context import load_current_identity

logger = logging.getLogger("clinicbook")


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    _configure_logging(app)

    # Signing keys are read once here; a malformed key stops the boot
    init_authenticator(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(meta_bp)
    app.register_blueprint(doctors_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(my_bp)
    app.register_blueprint(audit_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_identity():
        load_current_identity()

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


def register_error_handlers(app):
    @app.errorhandler(SchedulingError)
    def _scheduling_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(error=exc.description, code=(exc.name or "error").lower().replace(" ", "_")), exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc):
        logger.exception("unhandled error")
        db.session.rollback()
        return jsonify(error="Internal error", code="internal_error"), 500

#-------------------------
import click
from clinicbook.models.user import User, ROLES
from clinicbook.models.doctor import Doctor

def register_cli(app):
    @app.cli.command("set-role")
    @click.argument("identifier")
    @click.argument("role", type=click.Choice(ROLES))
    @click.option("--full-name", default=None, help="Display name for a new or updated account.")
    @click.option("--bio", default=None, help="Doctor bio (doctor role only).")
    @click.option("--years", "years_experience", default=0, type=click.IntRange(min=0))
    def set_role(identifier, role, full_name, bio, years_experience):
        """Set the role of an account by external uid or email (bootstrap).

        An unknown uid gets a fresh account; the doctor role also ensures a doctor profile.
        """
        identifier = identifier.strip()
        user = User.query.filter_by(external_uid=identifier).first()
        if user is None and "@" in identifier:
            user = User.query.filter_by(email=identifier.lower()).first()
        if user is None:
            if "@" in identifier:
                click.echo("User not found")
                raise SystemExit(1)
            user = User(external_uid=identifier, role=role, full_name=full_name)
            db.session.add(user)

        user.role = role
        if full_name:
            user.full_name = full_name
        db.session.flush()

        if role == "doctor":
            doctor = Doctor.query.filter_by(user_id=user.id).first()
            if doctor is None:
                doctor = Doctor(user_id=user.id, years_experience=years_experience)
                db.session.add(doctor)
            if bio is not None:
                doctor.bio = bio
            doctor.years_experience = years_experience or doctor.years_experience

        db.session.commit()
        click.echo(f"{user.external_uid} is now {role}")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
