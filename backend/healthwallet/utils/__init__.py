from .auth import generate_token, token_required, authenticate
from .validators import validate_registration, validate_report_upload, validate_vital, parse_date
from .logging import setup_logging, get_logger
