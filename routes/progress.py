from flask import Blueprint, jsonify, request
from models import db
from services import daily_goals_service, statistics_service
from services.api_models import DailyGoalUpdate
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('progress', __name__, url_prefix='/progress')


@bp.route('/stats')
def stats():
    """Quick counts plus the full overview (categories, most practiced, needs attention)"""
    overview = statistics_service.get_overview()
    overview['quick'] = statistics_service.get_quick_stats()
    return jsonify(overview)


@bp.route('/reviews')
def reviews():
    return jsonify(statistics_service.get_review_stats())


@bp.route('/daily', methods=['GET'])
def daily():
    summary = daily_goals_service.get_daily_progress_summary()
    db.session.commit()
    return jsonify(summary)


@bp.route('/daily', methods=['PATCH'])
def update_daily():
    """
    Update today's goals.

    Request Body:
        {"words_to_learn": 5, "words_to_practice": 20, "target_accuracy": 90}

    Returns:
        JSON daily progress summary with the new targets
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = DailyGoalUpdate.model_validate(data)
        daily_goals_service.update_goals(**payload.model_dump())

        return jsonify(daily_goals_service.get_daily_progress_summary())

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error updating daily goals: {str(e)}')
        return jsonify({'error': 'Failed to update daily goals. Please try again.'}), 500
