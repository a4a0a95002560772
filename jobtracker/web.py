"""
HTTP surface for JobTracker.

All routes except /health require a bearer token; the resolved owner
identity scopes every repository call.
"""

from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_login import login_required

from .auth import current_owner_id, login_manager
from .database import init_database
from .env import Settings, get_settings
from .errors import AuthorizationError, NotFoundError, StorageError, ValidationError
from .export import build_rows, export_filename, to_csv, to_xlsx
from .logger import get_logger
from .repository import JobRepository, ResumeRepository
from .schema import parse_job_input, parse_resume_input
from .stats import StatsAggregator

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _download(body, mimetype: str, extension: str) -> Response:
    response = Response(body, mimetype=mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{export_filename(extension)}"'
    return response


def create_app(settings: Optional[Settings] = None) -> Flask:
    """
    Build the Flask application.

    The logger and database engine are process-wide; the first app created
    configures them and later apps reuse them.
    """
    settings = settings or get_settings()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    init_database(settings.database_url)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["JOBTRACKER_SETTINGS"] = settings
    login_manager.init_app(app)

    def jobs() -> JobRepository:
        return JobRepository(current_owner_id())

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify(e.to_dict()), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e) or "Not found"}), 404

    @app.errorhandler(AuthorizationError)
    def handle_unauthorized(e):
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(StorageError)
    def handle_storage(e):
        return jsonify({"error": "Operation failed"}), 500

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/jobs", methods=["GET"])
    @login_required
    def list_jobs():
        page = request.args.get("page", type=int) or 1
        limit = request.args.get("limit", type=int) or settings.page_limit
        result = jobs().list(
            search=request.args.get("search") or None,
            status=request.args.get("jobStatus") or None,
            page=page,
            limit=limit,
        )
        result["jobs"] = [job.to_dict() for job in result["jobs"]]
        return jsonify(result)

    @app.route("/jobs", methods=["POST"])
    @login_required
    def create_job():
        data = parse_job_input(request.get_json(silent=True))
        job = jobs().create(data)
        if job is None:
            return jsonify({"error": "Failed to create job"}), 500
        return jsonify(job.to_dict()), 201

    @app.route("/jobs/download", methods=["GET"])
    @login_required
    def download_jobs():
        return jsonify([job.to_dict() for job in jobs().list_all_for_owner()])

    @app.route("/jobs/export.csv", methods=["GET"])
    @login_required
    def export_csv():
        rows = build_rows(jobs().list_all_for_owner())
        return _download(to_csv(rows), "text/csv; charset=utf-8", "csv")

    @app.route("/jobs/export.xlsx", methods=["GET"])
    @login_required
    def export_xlsx():
        rows = build_rows(jobs().list_all_for_owner())
        return _download(to_xlsx(rows), XLSX_MIMETYPE, "xlsx")

    @app.route("/jobs/<job_id>", methods=["GET"])
    @login_required
    def get_job(job_id):
        job = jobs().get_one(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return jsonify(job.to_dict())

    @app.route("/jobs/<job_id>", methods=["PUT"])
    @login_required
    def update_job(job_id):
        data = parse_job_input(request.get_json(silent=True))
        job = jobs().update(job_id, data)
        if job is None:
            return jsonify({"error": "Failed to update job"}), 400
        return jsonify(job.to_dict())

    @app.route("/jobs/<job_id>", methods=["DELETE"])
    @login_required
    def delete_job(job_id):
        job = jobs().delete(job_id)
        if job is None:
            return jsonify({"error": "Failed to delete job"}), 400
        return jsonify(job.to_dict())

    @app.route("/stats", methods=["GET"])
    @login_required
    def stats():
        return jsonify(StatsAggregator(current_owner_id()).counts_by_status())

    @app.route("/charts", methods=["GET"])
    @login_required
    def charts():
        aggregator = StatsAggregator(current_owner_id(), trend_months=settings.trend_months)
        return jsonify(aggregator.monthly_trend())

    @app.route("/resumes", methods=["GET"])
    @login_required
    def list_resumes():
        return jsonify([r.to_dict() for r in ResumeRepository(current_owner_id()).list()])

    @app.route("/resumes", methods=["POST"])
    @login_required
    def create_resume():
        data = parse_resume_input(request.get_json(silent=True))
        resume = ResumeRepository(current_owner_id()).create(data)
        if resume is None:
            return jsonify({"error": "Failed to create resume"}), 500
        return jsonify(resume.to_dict()), 201

    logger.debug("Application created")
    return app
