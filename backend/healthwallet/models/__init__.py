from .user import User
from .report import Report, ReportVital
from .vital import Vital
from .shared_access import SharedAccess, DEFAULT_ACCESS_TYPE
from .revoked_token import RevokedToken
