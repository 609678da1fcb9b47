"""
Sharing service: grant, list and revoke per-report access for other users.

There is at most one grant per (report, grantee). Sharing again with the same
person updates the existing grant's access type instead of adding a row.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from healthwallet import db
from healthwallet.errors import ValidationError, NotFoundError
from healthwallet.models import Report, ReportVital, SharedAccess, User, DEFAULT_ACCESS_TYPE
from healthwallet.services.access import can_manage, get_managed_report
from healthwallet.services.reports import ReportEntry
from healthwallet.utils.logging import get_logger
from healthwallet.utils.validators import validate_access_type

log = get_logger(__name__)


def _find_grant(report_id, grantee_id):
    return SharedAccess.query.filter_by(report_id=report_id, shared_with_id=grantee_id).first()


def grant_access(owner_id, report_id, grantee_email, access_type=None):
    """
    Share a report with the user registered under ``grantee_email``.

    Returns ``(grant, created)``; ``created`` is False when an existing grant
    was updated in place.
    """
    if not grantee_email or not str(grantee_email).strip():
        raise ValidationError('Email of user to share with is required')

    access_type = access_type or DEFAULT_ACCESS_TYPE
    errors = validate_access_type(access_type)
    if errors:
        raise ValidationError(errors)

    grantee = User.find_by_email(str(grantee_email).strip())
    if grantee is not None and grantee.id == owner_id:
        raise ValidationError('Cannot share with yourself')

    report = db.session.get(Report, report_id)
    if report is None or not can_manage(owner_id, report):
        raise NotFoundError('Report not found or access denied')

    if grantee is None:
        raise NotFoundError('User not found')

    grant = _find_grant(report.id, grantee.id)
    created = grant is None
    if created:
        grant = SharedAccess(
            report_id=report.id,
            owner_id=report.user_id,
            shared_with_id=grantee.id,
            access_type=access_type,
        )
        db.session.add(grant)
    else:
        grant.access_type = access_type

    try:
        db.session.commit()
    except IntegrityError:
        # Another request inserted the same pair first; update that row instead
        db.session.rollback()
        grant = _find_grant(report.id, grantee.id)
        if grant is None:
            raise
        grant.access_type = access_type
        db.session.commit()
        created = False

    log.info('access_granted' if created else 'access_updated',
             report_id=report.id, owner_id=owner_id, grantee_id=grantee.id,
             access_type=access_type)
    return grant, created


def list_grants_for_report(owner_id, report_id) -> list:
    report = get_managed_report(owner_id, report_id)
    return (SharedAccess.query
            .options(selectinload(SharedAccess.shared_with))
            .filter(SharedAccess.report_id == report.id)
            .order_by(SharedAccess.created_at.desc(), SharedAccess.id.desc())
            .all())


def list_shared_with_me(user_id) -> list:
    """Reports other users have shared with ``user_id``, most recent grant first."""
    rows = (db.session.query(Report, SharedAccess)
            .join(SharedAccess, SharedAccess.report_id == Report.id)
            .options(
                selectinload(Report.vital_links).selectinload(ReportVital.vital),
                selectinload(Report.owner),
            )
            .filter(SharedAccess.shared_with_id == user_id)
            .order_by(SharedAccess.created_at.desc(), SharedAccess.id.desc())
            .all())

    return [
        ReportEntry(report,
                    owner_name=report.owner.name,
                    owner_email=report.owner.email,
                    access_type=grant.access_type,
                    shared_at=grant.created_at)
        for report, grant in rows
    ]


def list_shared_by_me(owner_id) -> list:
    """Grants ``owner_id`` has issued, most recent first."""
    return (SharedAccess.query
            .options(selectinload(SharedAccess.report), selectinload(SharedAccess.shared_with))
            .filter(SharedAccess.owner_id == owner_id)
            .order_by(SharedAccess.created_at.desc(), SharedAccess.id.desc())
            .all())


def revoke_access(owner_id, report_id, grantee_id):
    """Remove a grant. Revoking a grant that does not exist is NotFound."""
    report = get_managed_report(owner_id, report_id)

    deleted = (SharedAccess.query
               .filter_by(report_id=report.id, shared_with_id=grantee_id)
               .delete(synchronize_session=False))
    db.session.commit()

    if deleted == 0:
        raise NotFoundError('Share not found')

    log.info('access_revoked', report_id=report.id, owner_id=owner_id, grantee_id=grantee_id)
