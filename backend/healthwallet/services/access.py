"""
Report access predicates.

Owners can do everything with a report; grantees can only view it. Callers
that need the report to exist report a failed check as "not found" so the
response never confirms that someone else's report exists.
"""
from healthwallet import db
from healthwallet.errors import NotFoundError
from healthwallet.models import Report, SharedAccess


def has_grant(user_id, report_id) -> bool:
    return db.session.query(
        db.exists().where(
            SharedAccess.report_id == report_id,
            SharedAccess.shared_with_id == user_id,
        )
    ).scalar()


def can_view(user_id, report) -> bool:
    return report.user_id == user_id or has_grant(user_id, report.id)


def can_manage(user_id, report) -> bool:
    return report.user_id == user_id


def get_viewable_report(user_id, report_id) -> Report:
    report = db.session.get(Report, report_id)
    if report is None or not can_view(user_id, report):
        raise NotFoundError('Report not found')
    return report


def get_managed_report(user_id, report_id) -> Report:
    report = db.session.get(Report, report_id)
    if report is None or not can_manage(user_id, report):
        raise NotFoundError('Report not found or access denied')
    return report
