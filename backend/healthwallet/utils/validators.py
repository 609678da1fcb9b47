"""
Input validation for registration, report uploads, vitals, and sharing.
Validators return a list of error strings (empty = valid).
"""
import os
import re
from datetime import datetime
from email_validator import validate_email, EmailNotValidError

ALLOWED_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png'}
ALLOWED_MIME_TYPES = {'application/pdf', 'image/jpeg', 'image/jpg', 'image/png'}

MAX_ACCESS_TYPE_LENGTH = 20
MAX_FILE_NAME_LENGTH = 255

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_date(value):
    """Parse a YYYY-MM-DD string into a date. Returns None if it is not one."""
    if value is None:
        return None
    value = str(value).strip()
    if not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        return None


def is_allowed_file(filename, mimetype) -> bool:
    """PDF and image uploads only; both the extension and the MIME type must agree."""
    ext = os.path.splitext(filename or '')[1].lower()
    return ext in ALLOWED_EXTENSIONS and (mimetype or '').lower() in ALLOWED_MIME_TYPES


def validate_registration(data: dict) -> list:
    """Validate registration input."""
    errors = []

    for field in ('name', 'email', 'password'):
        if data.get(field) is not None and not isinstance(data[field], str):
            errors.append(f'{field.capitalize()} must be a string')
    if errors:
        return errors

    name = (data.get('name') or '').strip()
    if not name:
        errors.append('Name is required')
    if len(name) > 200:
        errors.append('Name must be 200 characters or fewer')

    email = (data.get('email') or '').strip()
    if not email:
        errors.append('Email is required')
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    password = data.get('password') or ''
    if not password:
        errors.append('Password is required')
    elif len(password) < 6:
        errors.append('Password must be at least 6 characters')

    return errors


def validate_report_upload(file, report_type, date) -> list:
    """Validate the multipart fields of a report upload."""
    errors = []

    if file is None or not file.filename:
        errors.append('No file uploaded')
    elif not is_allowed_file(file.filename, file.mimetype):
        errors.append('Only PDF and image files are allowed')
    elif len(file.filename) > MAX_FILE_NAME_LENGTH:
        errors.append(f'File name must be {MAX_FILE_NAME_LENGTH} characters or fewer')

    if not report_type or not report_type.strip():
        errors.append('Report type is required')
    elif len(report_type) > 100:
        errors.append('Report type must be 100 characters or fewer')

    if not date:
        errors.append('Date is required')
    elif parse_date(date) is None:
        errors.append('Date must be in YYYY-MM-DD format')

    return errors


def validate_vital(data: dict) -> list:
    """Validate a new vital. vital_type, value and date are required."""
    errors = []

    if not data.get('vital_type'):
        errors.append('Vital type is required')
    elif len(str(data['vital_type'])) > 100:
        errors.append('Vital type must be 100 characters or fewer')

    if not data.get('value'):
        errors.append('Value is required')
    elif len(str(data['value'])) > 100:
        errors.append('Value must be 100 characters or fewer')

    unit = data.get('unit')
    if unit and len(str(unit)) > 50:
        errors.append('Unit must be 50 characters or fewer')

    if not data.get('date'):
        errors.append('Date is required')
    elif parse_date(data['date']) is None:
        errors.append('Date must be in YYYY-MM-DD format')

    return errors


def validate_access_type(access_type) -> list:
    errors = []
    if not isinstance(access_type, str) or not access_type.strip():
        errors.append('Access type must be a non-empty string')
    elif len(access_type) > MAX_ACCESS_TYPE_LENGTH:
        errors.append(f'Access type must be {MAX_ACCESS_TYPE_LENGTH} characters or fewer')
    return errors
