"""
Practice Routes - Practice session endpoints.

- POST /practice/sessions                 - Start a session {mode, count}
- POST /practice/sessions/<id>/answer     - Submit an answer {word_id, direction, user_answer}
- POST /practice/sessions/<id>/finish     - Close the session and get the score
"""

import logging

from flask import Blueprint, jsonify, request

from models import db
from services import practice_service
from services.api_models import PracticeAnswer, PracticeSessionStart
from services.exceptions import ConcurrentUpdateError, NotFoundError

logger = logging.getLogger(__name__)

bp = Blueprint('practice', __name__, url_prefix='/practice')


@bp.route('/sessions', methods=['POST'])
def start_session():
    """
    Start a practice session.

    Request Body:
        {"mode": "due-review" | "smart" | "fi-en" | "en-fi" | "mixed" | "review", "count": 10}

    Returns:
        201: {"session_id": 1, "mode": "smart", "available": 12,
              "prompts": [{"word_id": 4, "direction": "fi-en", "question": "kissa"}, ...]}
        400: Invalid mode/count or no words available
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = PracticeSessionStart.model_validate(data)
        session = practice_service.start_session(payload.mode, payload.count)

        return jsonify(session), 201

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error starting practice session: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/sessions/<int:session_id>/answer', methods=['POST'])
def submit_answer(session_id):
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = PracticeAnswer.model_validate(data)
        result = practice_service.submit_answer(
            session_id=session_id,
            word_id=payload.word_id,
            direction=payload.direction,
            user_answer=payload.user_answer
        )
        result['next_review_date'] = result['next_review_date'].isoformat()

        return jsonify(result)

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except ConcurrentUpdateError as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error submitting answer in session {session_id}: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/sessions/<int:session_id>/finish', methods=['POST'])
def finish_session(session_id):
    try:
        return jsonify(practice_service.finish_session(session_id))

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error finishing session {session_id}: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500
