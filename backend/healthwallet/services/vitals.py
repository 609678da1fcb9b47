"""
Vitals service: recording, querying, charting and editing measurements.
"""
import math
from collections import OrderedDict

from healthwallet import db
from healthwallet.errors import ValidationError, NotFoundError
from healthwallet.models import Vital
from healthwallet.utils.logging import get_logger
from healthwallet.utils.validators import parse_date, validate_vital

log = get_logger(__name__)


def parse_numeric(value):
    """
    Best-effort numeric reading of a stored value. "95" -> 95.0, while
    "120/80" or "positive" come back unchanged.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    if not math.isfinite(number):
        return value
    return number


def _date_filter(name, value):
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f'{name} must be in YYYY-MM-DD format')
    return parsed


def _in_range(query, start_date, end_date):
    start = _date_filter('start_date', start_date)
    end = _date_filter('end_date', end_date)
    if start is not None:
        query = query.filter(Vital.date >= start)
    if end is not None:
        query = query.filter(Vital.date <= end)
    return query


def get_owned_vital(user_id, vital_id) -> Vital:
    vital = db.session.get(Vital, vital_id)
    if vital is None or vital.user_id != user_id:
        raise NotFoundError('Vital not found')
    return vital


def add_vital(user_id, vital_type, value, date, unit=None) -> Vital:
    data = {'vital_type': vital_type, 'value': value, 'date': date, 'unit': unit}
    errors = validate_vital(data)
    if errors:
        raise ValidationError(errors)

    vital = Vital(
        user_id=user_id,
        vital_type=str(vital_type),
        value=str(value),
        unit=str(unit) if unit else None,
        date=parse_date(date),
    )
    db.session.add(vital)
    db.session.commit()

    log.info('vital_added', vital_id=vital.id, user_id=user_id)
    return vital


def list_vitals(user_id, vital_type=None, start_date=None, end_date=None) -> list:
    """Vitals of one user, exact type match, inclusive date range, newest first."""
    query = Vital.query.filter(Vital.user_id == user_id)
    if vital_type:
        query = query.filter(Vital.vital_type == vital_type)
    query = _in_range(query, start_date, end_date)
    return query.order_by(Vital.date.desc(), Vital.id.desc()).all()


def get_trends(user_id, start_date=None, end_date=None) -> dict:
    """
    Chart series keyed by vital type, oldest first within each series.
    Non-numeric values are passed through as text.
    """
    query = _in_range(Vital.query.filter(Vital.user_id == user_id), start_date, end_date)
    vitals = query.order_by(Vital.date.asc(), Vital.id.asc()).all()

    grouped = OrderedDict()
    for vital in vitals:
        grouped.setdefault(vital.vital_type, []).append({
            'date': vital.date.isoformat(),
            'value': parse_numeric(vital.value),
            'unit': vital.unit,
        })
    return grouped


def update_vital(user_id, vital_id, vital_type=None, value=None, unit=None, date=None) -> Vital:
    """
    Partial update. An empty or missing field keeps the stored value, so a
    field can never be cleared through this call.
    """
    vital = get_owned_vital(user_id, vital_id)

    new_date = vital.date
    if date:
        new_date = parse_date(date)
        if new_date is None:
            raise ValidationError('Date must be in YYYY-MM-DD format')

    merged = {
        'vital_type': vital_type or vital.vital_type,
        'value': value or vital.value,
        'unit': unit or vital.unit,
        'date': new_date.isoformat(),
    }
    errors = validate_vital(merged)
    if errors:
        raise ValidationError(errors)

    vital.vital_type = str(merged['vital_type'])
    vital.value = str(merged['value'])
    vital.unit = str(merged['unit']) if merged['unit'] else None
    vital.date = new_date
    db.session.commit()

    log.info('vital_updated', vital_id=vital.id, user_id=user_id)
    return vital


def delete_vital(user_id, vital_id):
    """Delete an owned vital. Its report links are removed by the schema cascade."""
    vital = get_owned_vital(user_id, vital_id)
    db.session.delete(vital)
    db.session.commit()

    log.info('vital_deleted', vital_id=vital_id, user_id=user_id)
