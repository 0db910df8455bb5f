import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask, render_template

from content_sanitizer import trusted_html
from extensions import db
from locations import locations_bp
from preview import preview_bp
from projects import projects_bp
from storage import CLIENT_CONFIG_KEY, build_storypath_client


# ====== Environment ======
def _env_flag(name: str, default: bool) -> bool:
    """Parse truthy feature-toggle values from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_str(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip() or None


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        print(f"⚠️ Invalid {name} value: {raw!r}. Using default {default}.")
        return default


# ====== StoryPath API ======
STORYPATH_API_URL = _env_str("STORYPATH_API_URL")  # unset -> local SQLite store
STORYPATH_API_TOKEN = _env_str("STORYPATH_API_TOKEN")
STORYPATH_USERNAME = _env_str("STORYPATH_USERNAME")
STORYPATH_API_TIMEOUT = _env_int("STORYPATH_API_TIMEOUT", 10, minimum=1)

# Legacy behaviour: a location opened without a project attaches to the first project.
LOCATION_DEFAULT_TO_FIRST_PROJECT = _env_flag("STORYPATH_LOCATION_DEFAULT_TO_FIRST_PROJECT", False)

ROOT_PATH = Path(__file__).resolve().parent
DATA_DIR = ROOT_PATH / "data"
SQLITE_PATH = DATA_DIR / "storypath.db"


def _default_config() -> dict:
    return {
        "SECRET_KEY": _env_str("STORYPATH_SECRET_KEY") or os.urandom(24),
        "PERMANENT_SESSION_LIFETIME": timedelta(days=1),
        "STORYPATH_API_URL": STORYPATH_API_URL,
        "STORYPATH_API_TOKEN": STORYPATH_API_TOKEN,
        "STORYPATH_USERNAME": STORYPATH_USERNAME,
        "STORYPATH_API_TIMEOUT": STORYPATH_API_TIMEOUT,
        "STORYPATH_LOCATION_DEFAULT_TO_FIRST_PROJECT": LOCATION_DEFAULT_TO_FIRST_PROJECT,
        "SQLALCHEMY_DATABASE_URI": _env_str("DATABASE_URL") or f"sqlite:///{SQLITE_PATH}",
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
    }


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.update(_default_config())
    if overrides:
        app.config.update(overrides)

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith(f"sqlite:///{DATA_DIR}"):
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    db.init_app(app)

    if app.config.get(CLIENT_CONFIG_KEY) is None:
        app.config[CLIENT_CONFIG_KEY] = build_storypath_client(app.config)

    app.add_template_filter(trusted_html, "trusted_html")

    @app.context_processor
    def inject_footer_year():
        return dict(current_year=datetime.now().year)

    @app.errorhandler(404)
    @app.errorhandler(500)
    def show_custom_error_page(err):
        status_code = getattr(err, "code", 500) or 500
        return render_template("error.html", status_code=status_code), status_code

    @app.get("/")
    def landing():
        return render_template("landing.html")

    app.register_blueprint(projects_bp)
    app.register_blueprint(locations_bp)
    app.register_blueprint(preview_bp)

    with app.app_context():
        db.create_all()

    if app.config.get("STORYPATH_API_URL"):
        app.logger.info("StoryPath data served by %s", app.config["STORYPATH_API_URL"])
    else:
        app.logger.info("StoryPath data served by the local store (%s)", app.config["SQLALCHEMY_DATABASE_URI"])

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)), debug=True)
