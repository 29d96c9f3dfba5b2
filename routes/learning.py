"""
Learning Routes - The active study set and its scheduling state.

- GET    /learning                   - All learning entries (camelCase scheduling contract)
- POST   /learning/<word_id>         - Start learning a word
- DELETE /learning/<word_id>         - Stop learning a word (progress discarded)
- POST   /learning/<word_id>/answer  - Record an answer {direction, isCorrect}
- POST   /learning/mastery           - Manual mastery toggle {wordIds, mastered}
- GET    /learning/due               - Review queue, most overdue first (?include_mastered=1)
- GET    /learning/smart             - Smart-practice order, highest priority first
"""

import logging

from flask import Blueprint, jsonify, request

from models import db
from services import learning_service
from services import spaced_repetition as srs
from services.api_models import AnswerEvent, LearningEntrySchema, MasteryUpdate
from services.exceptions import ConcurrentUpdateError, NotFoundError

logger = logging.getLogger(__name__)

bp = Blueprint('learning', __name__, url_prefix='/learning')


def _serialize(entry):
    return LearningEntrySchema.model_validate(entry).to_json()


def _queue_item(entry, now):
    data = _serialize(entry)
    data['native'] = list(entry.word.native)
    data['target'] = list(entry.word.target)
    data['priority'] = srs.get_word_priority(entry, now)
    return data


def _include_mastered():
    return request.args.get('include_mastered') in ('1', 'true')


@bp.route('', methods=['GET'])
def list_entries():
    entries = learning_service.get_all_entries()
    return jsonify({'entries': [_serialize(entry) for entry in entries], 'count': len(entries)})


@bp.route('/<int:word_id>', methods=['POST'])
def add_to_learning(word_id):
    try:
        entry = learning_service.add_to_learning(word_id)
        if entry is None:
            return jsonify({'added': False, 'entry': _serialize(learning_service.get_learning_entry(word_id))})
        return jsonify({'added': True, 'entry': _serialize(entry)}), 201

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error adding word {word_id} to learning list: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/<int:word_id>', methods=['DELETE'])
def remove_from_learning(word_id):
    try:
        removed = learning_service.remove_from_learning(word_id)
        if not removed:
            return jsonify({'error': f'Word {word_id} is not in the learning list'}), 404
        return jsonify({'removed': True, 'word_id': word_id})

    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error removing word {word_id} from learning list: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/<int:word_id>/answer', methods=['POST'])
def record_answer(word_id):
    """
    Record one practice answer and reschedule the word.

    Request Body:
        {"direction": "A" | "B" | "fi-en" | "en-fi", "isCorrect": true}

    Returns:
        200: {
            "status": "learning" | "newly_mastered" | "already_mastered",
            "quality": 3,
            "nextReview": "tomorrow",
            "entry": {...updated scheduling fields...}
        }
        400: Invalid body
        404: Word not in the learning list
        409: Entry modified concurrently
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        event = AnswerEvent.model_validate(data)
        result = learning_service.record_answer(word_id, event.direction, event.is_correct)
        entry = learning_service.get_learning_entry(word_id)

        return jsonify({
            'status': result['mastery_status'],
            'quality': result['quality'],
            'nextReview': result['next_review'],
            'entry': _serialize(entry)
        })

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except ConcurrentUpdateError as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error recording answer for word {word_id}: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/mastery', methods=['POST'])
def update_mastery():
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = MasteryUpdate.model_validate(data)
        result = learning_service.set_mastery(payload.word_ids, payload.mastered)

        return jsonify({'updated': result['updated'], 'unchanged': result['unchanged']})

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except ConcurrentUpdateError as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error updating mastery: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/due', methods=['GET'])
def due_entries():
    now = srs.utcnow()
    entries = learning_service.get_due_entries(include_mastered=_include_mastered(), now=now)
    return jsonify({'entries': [_queue_item(entry, now) for entry in entries], 'count': len(entries)})


@bp.route('/smart', methods=['GET'])
def smart_entries():
    now = srs.utcnow()
    entries = learning_service.get_smart_practice_entries(include_mastered=_include_mastered(), now=now)
    return jsonify({'entries': [_queue_item(entry, now) for entry in entries], 'count': len(entries)})
