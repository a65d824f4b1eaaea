"""
Blood pressure reading API routes.
"""
import logging
from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import SQLAlchemyError
from bp_tracker import db
from bp_tracker.models import BloodPressureReading
from bp_tracker.utils.auth import token_required
from bp_tracker.utils.audit_logger import audit_log, audit_access
from bp_tracker.utils.classification import CATEGORIES, get_category_info
from bp_tracker.utils.statistics import DEFAULT_PERIOD, aggregate, resolve_window
from bp_tracker.utils.time_utils import now_utc, to_storage, to_naive_utc
from bp_tracker.utils.validators import parse_int, validate_reading

logger = logging.getLogger(__name__)

readings_bp = Blueprint('readings', __name__)

MAX_PAGE_SIZE = 100

SORTABLE_COLUMNS = {
    'timestamp': BloodPressureReading.timestamp,
    'systolic': BloodPressureReading.systolic,
    'diastolic': BloodPressureReading.diastolic,
    'pulseRate': BloodPressureReading.pulse_rate,
    'createdAt': BloodPressureReading.created_at,
}


def _validation_failed(errors):
    return jsonify({'success': False, 'message': 'Validation failed', 'errors': errors}), 400


def _not_found():
    return jsonify({'success': False, 'message': 'BP reading not found'}), 404


def _get_owned_reading(reading_id):
    return BloodPressureReading.query.filter_by(id=reading_id, user_id=g.user_id).first()


def _apply_fields(reading, data):
    """Copy validated request fields onto a reading. Category is never taken from input."""
    if 'systolic' in data:
        reading.systolic = parse_int(data['systolic'])
    if 'diastolic' in data:
        reading.diastolic = parse_int(data['diastolic'])
    if 'pulseRate' in data:
        reading.pulse_rate = parse_int(data['pulseRate'])
    if data.get('timestamp'):
        reading.timestamp = to_naive_utc(to_storage(data['timestamp']))
    if 'comments' in data:
        reading.comments = data['comments'].strip() if data['comments'] else None
    if 'location' in data:
        reading.location = data['location'].strip() if data['location'] else None
    if 'deviceUsed' in data:
        reading.device_used = data['deviceUsed'].strip() if data['deviceUsed'] else None
    if 'tags' in data:
        reading.tags = data['tags'] or []


def _commit(action):
    """Commit the session, returning an error response on failure."""
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.error('Failed to %s BP reading for user_id=%s', action, g.user_id, exc_info=True)
        return jsonify({'success': False, 'message': f'Failed to {action} BP reading'}), 500
    return None


@readings_bp.route('/', methods=['POST'])
@token_required
def create_reading():
    """Create a reading from a display-local timestamp; category is computed."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'success': False, 'message': 'Request body is required'}), 400

    errors = validate_reading(data)
    if errors:
        return _validation_failed(errors)

    reading = BloodPressureReading(user_id=g.user_id, timestamp=to_naive_utc(now_utc()))
    _apply_fields(reading, data)
    reading.update_category()

    db.session.add(reading)
    failure = _commit('create')
    if failure:
        return failure

    audit_log('CREATE', 'reading', resource_id=str(reading.id),
              details={'category': reading.category})

    return jsonify({
        'success': True,
        'message': 'BP reading created successfully',
        'data': reading.to_dict(),
    }), 201


@readings_bp.route('/', methods=['GET'])
@token_required
@audit_access('READ', 'reading')
def list_readings():
    """List readings with filters, sorting, and pagination."""
    page = max(request.args.get('page', 1, type=int), 1)
    limit = request.args.get('limit', 10, type=int)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    category = request.args.get('category', '').strip()
    start_date = request.args.get('startDate')
    end_date = request.args.get('endDate')
    sort_by = request.args.get('sortBy', 'timestamp')
    sort_order = request.args.get('sortOrder', 'desc')

    query = BloodPressureReading.query.filter_by(user_id=g.user_id)

    if category and category != 'all':
        if category not in CATEGORIES:
            return jsonify({'success': False, 'message': f'Unknown category: {category}'}), 400
        query = query.filter(BloodPressureReading.category == category)

    try:
        if start_date:
            query = query.filter(BloodPressureReading.timestamp >= to_naive_utc(to_storage(start_date)))
        if end_date:
            query = query.filter(BloodPressureReading.timestamp <= to_naive_utc(to_storage(end_date)))
    except ValueError:
        return jsonify({'success': False, 'message': 'Invalid date filter format'}), 400

    sort_col = SORTABLE_COLUMNS.get(sort_by, BloodPressureReading.timestamp)
    query = query.order_by(sort_col.asc() if sort_order == 'asc' else sort_col.desc())

    total_count = query.count()
    total_pages = (total_count + limit - 1) // limit
    readings = query.offset((page - 1) * limit).limit(limit).all()

    return jsonify({
        'success': True,
        'data': {
            'readings': [r.to_dict() for r in readings],
            'pagination': {
                'currentPage': page,
                'totalPages': total_pages,
                'totalCount': total_count,
                'hasNextPage': page < total_pages,
                'hasPrevPage': page > 1,
            },
        },
    }), 200


@readings_bp.route('/recent', methods=['GET'])
@token_required
@audit_access('READ', 'reading')
def recent_readings():
    """Most recent readings, newest first."""
    limit = min(max(request.args.get('limit', 5, type=int), 1), MAX_PAGE_SIZE)

    readings = (BloodPressureReading.query
                .filter_by(user_id=g.user_id)
                .order_by(BloodPressureReading.timestamp.desc())
                .limit(limit)
                .all())

    return jsonify({'success': True, 'data': [r.to_dict() for r in readings]}), 200


@readings_bp.route('/statistics', methods=['GET'])
@token_required
@audit_access('READ', 'statistics')
def reading_statistics():
    """Averages, category distribution, and trend series for a period."""
    period = request.args.get('period', DEFAULT_PERIOD)
    now = now_utc()
    start, end = resolve_window(period, now)

    readings = (BloodPressureReading.query
                .filter(BloodPressureReading.user_id == g.user_id,
                        BloodPressureReading.timestamp >= to_naive_utc(start),
                        BloodPressureReading.timestamp <= to_naive_utc(end))
                .order_by(BloodPressureReading.timestamp.asc())
                .all())

    return jsonify({'success': True, 'data': aggregate(readings, period, now=now)}), 200


@readings_bp.route('/categories', methods=['GET'])
@token_required
def reading_categories():
    """Static category legend."""
    return jsonify({'success': True, 'data': get_category_info()}), 200


@readings_bp.route('/<int:reading_id>', methods=['GET'])
@token_required
@audit_access('READ', 'reading')
def get_reading(reading_id):
    reading = _get_owned_reading(reading_id)
    if not reading:
        return _not_found()
    return jsonify({'success': True, 'data': reading.to_dict()}), 200


@readings_bp.route('/<int:reading_id>', methods=['PUT'])
@token_required
@audit_access('UPDATE', 'reading')
def update_reading(reading_id):
    """Partial update. Category is recomputed when either pressure changes."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'success': False, 'message': 'Request body is required'}), 400

    reading = _get_owned_reading(reading_id)
    if not reading:
        return _not_found()

    errors = validate_reading(data, partial=True, existing=reading)
    if errors:
        return _validation_failed(errors)

    _apply_fields(reading, data)
    if 'systolic' in data or 'diastolic' in data:
        reading.update_category()

    failure = _commit('update')
    if failure:
        return failure

    return jsonify({
        'success': True,
        'message': 'BP reading updated successfully',
        'data': reading.to_dict(),
    }), 200


@readings_bp.route('/<int:reading_id>', methods=['DELETE'])
@token_required
@audit_access('DELETE', 'reading')
def delete_reading(reading_id):
    reading = _get_owned_reading(reading_id)
    if not reading:
        return _not_found()

    payload = reading.to_dict()
    db.session.delete(reading)
    failure = _commit('delete')
    if failure:
        return failure

    return jsonify({
        'success': True,
        'message': 'BP reading deleted successfully',
        'data': payload,
    }), 200
