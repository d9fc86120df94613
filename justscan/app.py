import logging

from flask import Flask, jsonify

from justscan.config import Config
from justscan.utils.db import init_db_connection
from justscan.utils.logger import configure_logging

# Import controllers
from justscan.controllers.auth_controller import auth_bp
from justscan.controllers.organization_controller import organization_bp
from justscan.controllers.membership_controller import membership_bp
from justscan.controllers.student_controller import student_bp
from justscan.controllers.entry_controller import entry_bp
from justscan.controllers.feedback_controller import feedback_bp

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)                   # Initialize Flask app
    app.config.from_object(config_object)   # Load configuration from Config class
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    init_db_connection(app)                 # Initialize MongoDB connection

    # Register Blueprint
    app.register_blueprint(auth_bp)

    app.register_blueprint(organization_bp)
    app.register_blueprint(membership_bp)

    app.register_blueprint(student_bp)
    app.register_blueprint(entry_bp)

    app.register_blueprint(feedback_bp)

    @app.route("/", methods=["GET"])
    def health():
        return jsonify({"message": "JustScan API is running"}), 200

    @app.errorhandler(404)
    def not_found(_):
        return jsonify({"message": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify({"message": "Method not allowed"}), 405

    return app


def main():
    app = create_app()
    logger.info("[APP] Listening on %s:%s", app.config["HOST"], app.config["PORT"])
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"])


# Run the app
if __name__ == "__main__":
    main()
