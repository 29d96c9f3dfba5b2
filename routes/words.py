"""
Word Routes - Vocabulary catalog endpoints.

- GET    /words              - List words (?category=, ?sort=native|target, ?order=asc|desc, ?learning=1)
- POST   /words              - Create a word (auto-added to the learning list)
- GET    /words/<id>         - Get one word
- PATCH  /words/<id>         - Edit a word (progress is kept)
- DELETE /words/<id>         - Delete a word and its progress
- GET    /words/search?q=    - Search all forms and notes
- GET    /words/categories   - Categories with word counts
"""

import logging

from flask import Blueprint, jsonify, request

from models import db
from services import word_service
from services.api_models import WordCreate, WordUpdate
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

bp = Blueprint('words', __name__, url_prefix='/words')


@bp.route('', methods=['GET'])
def list_words():
    try:
        words = word_service.list_words(
            category=request.args.get('category'),
            sort_by=request.args.get('sort'),
            order=request.args.get('order', 'asc'),
            learning_only=request.args.get('learning') in ('1', 'true')
        )
        return jsonify({'words': [word.to_dict() for word in words], 'count': len(words)})

    except ValueError as e:
        return jsonify({'error': str(e)}), 400


@bp.route('', methods=['POST'])
def create_word():
    """
    Create a word.

    Request Body:
        {
            "native": "kissa" | ["kissa", "kisu"],
            "target": "cat" | ["cat", "kitty"],
            "category": "animals",
            "entry_type": "word",
            "example": "",
            "notes": ""
        }

    Returns:
        201: The created word
        400: Validation error or duplicate word
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = WordCreate.model_validate(data)
        word = word_service.create_word(**payload.model_dump())

        return jsonify(word.to_dict()), 201

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error creating word: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/search', methods=['GET'])
def search_words():
    try:
        words = word_service.search_words(request.args.get('q', ''))
        return jsonify({'words': [word.to_dict() for word in words], 'count': len(words)})

    except ValueError as e:
        return jsonify({'error': str(e)}), 400


@bp.route('/categories', methods=['GET'])
def list_categories():
    return jsonify({'categories': word_service.list_categories()})


@bp.route('/<int:word_id>', methods=['GET'])
def get_word(word_id):
    try:
        return jsonify(word_service.get_word(word_id).to_dict())

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404


@bp.route('/<int:word_id>', methods=['PATCH'])
def update_word(word_id):
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'No JSON data provided'}), 400

        payload = WordUpdate.model_validate(data)
        word = word_service.update_word(word_id, **payload.model_dump(exclude_none=True))

        return jsonify(word.to_dict())

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error updating word {word_id}: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500


@bp.route('/<int:word_id>', methods=['DELETE'])
def delete_word(word_id):
    try:
        word_service.delete_word(word_id)
        return jsonify({'success': True, 'word_id': word_id})

    except NotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error deleting word {word_id}: {str(e)}')
        return jsonify({'error': f'Server error: {str(e)}'}), 500
