from flask import Flask, jsonify
from .extensions import db, migrate, login_manager, rq
from .errors import register_error_handlers

COMPANY_CODE_HEADER = "X-Company-Code"


def create_app(config_object="config.Config", overrides=None):
    """App factory.

    ``overrides`` is applied on top of ``config_object``; tests use it to point
    the app at a throwaway database.
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    rq.init_app(app)
    register_error_handlers(app)

    # companies authenticate with their access code only: no session, no password
    @login_manager.request_loader
    def load_company_from_request(req):
        from .models.company import Company
        code = (req.headers.get(COMPANY_CODE_HEADER) or "").strip()
        if not code:
            return None
        return Company.query.filter_by(code=code).first()

    @login_manager.user_loader
    def load_company(code):
        from .models.company import Company
        return Company.query.filter_by(code=code).first()

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "unauthorized", "message": "A valid company access code is required"}), 401

    from .blueprints.companies import bp as companies_bp
    app.register_blueprint(companies_bp, url_prefix="/companies")

    from .blueprints.assessments import bp as assessments_bp
    app.register_blueprint(assessments_bp, url_prefix="/assessments")

    from .blueprints.jobs import bp as jobs_bp
    app.register_blueprint(jobs_bp, url_prefix="/jobs")

    from .blueprints.admin import bp as admin_bp
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "queue": "rq" if rq.queue else "inline"})

    return app
