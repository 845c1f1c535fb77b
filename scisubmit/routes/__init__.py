from flask import Flask

from scisubmit.routes.v1.admin import admin_bp
from scisubmit.routes.v1.auth_route import auth_bp
from scisubmit.routes.v1.participant_route import participant_bp
from scisubmit.routes.v1.reviewer_route import reviewer_bp
from scisubmit.routes.v1.user_route import user_bp


def register_blueprints(app: Flask):
    prefix = app.config.get("API_PREFIX", "/api/v1")
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(user_bp, url_prefix=f"{prefix}/user")
    app.register_blueprint(participant_bp, url_prefix=f"{prefix}/participant")
    app.register_blueprint(reviewer_bp, url_prefix=f"{prefix}/reviewer")
    app.register_blueprint(admin_bp, url_prefix=f"{prefix}/admin")
