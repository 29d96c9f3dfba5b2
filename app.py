import os

from config import config
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate


def create_app(config_name=None):
    """Application factory pattern"""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Reject invalid scheduling constants at startup
    from services import spaced_repetition as srs

    srs.SM2Settings.from_config(app.config)
    srs.MasterySettings.from_config(app.config)

    # Initialize CORS for the web frontend
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")

    CORS(
        app,
        resources={
            r"/words/*": {"origins": ALLOWED_ORIGINS},
            r"/learning/*": {"origins": ALLOWED_ORIGINS},
            r"/practice/*": {"origins": ALLOWED_ORIGINS},
            r"/progress/*": {"origins": ALLOWED_ORIGINS},
        },
    )

    # Initialize SQLAlchemy
    from models import db

    db.init_app(app)

    # Initialize Flask-Migrate
    migrate = Migrate(app, db)

    # Import all models to ensure they are registered with SQLAlchemy
    from models.daily_goal import DailyGoal
    from models.learning_entry import LearningEntry
    from models.practice_session import PracticeSession
    from models.word import Word

    # Register API blueprints
    from routes.learning import bp as learning_bp
    from routes.practice import bp as practice_bp
    from routes.progress import bp as progress_bp
    from routes.words import bp as words_bp

    app.register_blueprint(words_bp)
    app.register_blueprint(learning_bp)
    app.register_blueprint(practice_bp)
    app.register_blueprint(progress_bp)

    # Home route
    @app.route("/")
    def home():
        return jsonify({"message": "Welcome to Sanasto!", "version": "1.0.0"})

    # Health check route
    @app.route("/health")
    def health_check():
        try:
            db.session.execute(db.text("SELECT 1"))
            return jsonify({"status": "healthy", "database": "connected"}), 200
        except Exception as e:
            app.logger.error(f"Health check failed: {e}")
            return jsonify({"status": "unhealthy", "error": str(e)}), 500

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5001)
