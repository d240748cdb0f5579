from __future__ import annotations

import logging
from typing import Optional

import click
from dotenv import load_dotenv
from flask import Flask

from . import __version__
from .attendance.controller import register as register_attendance
from .common.http import EXTENSION_KEY, register_error_handlers, respond
from .config import AppSettings, get_settings_module, load_settings
from .container import Container, build_container
from .core.constants import MAX_PHOTO_BYTES
from .core.enums import Role
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DatabaseConnection
from .employees.controller import register as register_employees
from .employees.model import EmployeeProfile

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings: Optional[AppSettings] = None) -> Flask:
    """Application factory.

    Tests pass a prebuilt container (in-memory repositories); otherwise the
    settings module picked by APP_ENV is loaded and MySQL adapters are wired.
    """
    load_dotenv(override=False)
    if container is not None:
        settings = container.settings
    elif settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug
    app.config["TESTING"] = settings.testing
    # multipart overhead on top of the largest accepted photo
    app.config["MAX_CONTENT_LENGTH"] = MAX_PHOTO_BYTES + 1024 * 1024

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            get_settings_module(), settings.db.user, settings.db.host, settings.db.port, settings.db.database,
        )
        if settings.auto_init_db:
            conn = DatabaseConnection(settings.db)
            apply_schema(conn)
            logger.info("schema ready (tables=%d)", len(list_tables(conn)))
        container = build_container(settings)

    app.extensions[EXTENSION_KEY] = container
    register_error_handlers(app)

    @app.route("/healthz", methods=["GET"], endpoint="healthz")
    def healthz():
        return respond({"status": "ok", "version": __version__})

    register_employees(app, container)
    register_attendance(app, container)
    _register_cli(app, container)

    return app


def _register_cli(app: Flask, container: Container) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create the database and tables if they do not exist."""
        conn = container.conn or DatabaseConnection(container.settings.db)
        count = apply_schema(conn)
        click.echo(f"Applied {count} statements; tables: {', '.join(list_tables(conn))}")

    @app.cli.command("create-supervisor")
    @click.option("--email", required=True)
    @click.option("--name", default="Supervisor", show_default=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--address", default="-", show_default=True)
    @click.option("--district", default="-", show_default=True)
    @click.option("--city", default="-", show_default=True)
    @click.option("--province", default="-", show_default=True)
    @click.option("--phone", default="-", show_default=True)
    def create_supervisor(email, name, password, address, district, city, province, phone):
        """Seed the first privileged account."""
        employee = container.employee_service.create(
            caller_role=Role.SUPERVISOR,
            profile=EmployeeProfile(
                name=name,
                email=email,
                role=Role.SUPERVISOR,
                address=address,
                district=district,
                city=city,
                province=province,
                phone=phone,
            ),
            password=password,
        )
        click.echo(f"Created supervisor {employee.employee_id} <{employee.email}>")
