# FILE: app.py
import click
from dotenv import load_dotenv
from flask import Flask

from config import Config
from models import db
from routes.main_routes import main_bp
from services.ai_gateway import GeminiGateway, ai_mode_from_config
from services.jobs import JobOrchestrator
from services.task_queue import JobWorker, TaskQueue

load_dotenv()


def init_jobs(app: Flask, gateway=None) -> JobOrchestrator:
    gateway = gateway or GeminiGateway.from_config(app.config)
    mode = ai_mode_from_config(app.config)
    queue = TaskQueue()
    orchestrator = JobOrchestrator.from_config(app.config, queue=queue, gateway=gateway, mode=mode)
    worker = JobWorker(
        app,
        queue,
        orchestrator.handlers,
        poll_interval=app.config.get("WORKER_POLL_SECONDS", 0.5),
    )
    app.extensions["interview_jobs"] = orchestrator
    app.extensions["interview_worker"] = worker
    app.logger.info("AI mode: %s (model %s)", mode.value, app.config.get("GEMINI_MODEL"))
    return orchestrator


def register_commands(app: Flask) -> None:
    @app.cli.command("check-config")
    def check_config():
        """Report whether the Gemini path is configured."""
        has_key = bool((app.config.get("GEMINI_API_KEY") or "").strip())
        click.echo("Configuration check:")
        click.echo(f"- Gemini API key: {'configured' if has_key else 'missing'}")
        click.echo(f"- Gemini model: {app.config.get('GEMINI_MODEL')}")
        click.echo(f"- AI mode: {ai_mode_from_config(app.config).value}")
        if not has_key:
            click.echo("Warning: without GEMINI_API_KEY, fallback questions, scoring and feedback are used")

    @app.cli.command("drain-jobs")
    def drain_jobs():
        """Run every queued job now, ignoring scheduled delays."""
        ran = app.extensions["interview_worker"].drain()
        click.echo(f"Ran {ran} jobs")


def create_app(config_object=Config, gateway=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    app.register_blueprint(main_bp)

    with app.app_context():
        db.create_all()

    init_jobs(app, gateway=gateway)
    register_commands(app)

    if app.config.get("START_WORKER") and not app.testing:
        app.extensions["interview_worker"].start()

    return app


if __name__ == "__main__":
    create_app().run(debug=True, use_reloader=False)
