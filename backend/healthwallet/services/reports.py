"""
Report service: upload, listing, retrieval and deletion of medical reports.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from healthwallet import db
from healthwallet.errors import ValidationError, InternalError
from healthwallet.models import Report, ReportVital, SharedAccess, Vital
from healthwallet.services.access import get_viewable_report, get_managed_report
from healthwallet.utils.logging import get_logger
from healthwallet.utils.validators import parse_date, validate_report_upload, validate_vital

log = get_logger(__name__)


@dataclass
class ReportEntry:
    """A report as one caller sees it, with owner details when it was shared to them."""
    report: Report
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    access_type: Optional[str] = None
    shared_at: Optional[datetime] = None

    def summary_dict(self, file_url):
        """Listing shape: linked vitals flattened to type/value pairs."""
        data = self.report.to_dict()
        data['file_url'] = file_url
        data['vitals'] = [{'type': v.vital_type, 'value': v.value}
                          for v in self.report.linked_vitals]
        self._add_sharing(data)
        return data

    def detail_dict(self, file_url):
        """Single-report shape: full vital records."""
        data = self.report.to_dict()
        data['file_url'] = file_url
        data['vitals'] = [v.to_dict() for v in self.report.linked_vitals]
        self._add_sharing(data)
        return data

    def _add_sharing(self, data):
        if self.owner_name is not None:
            data['owner_name'] = self.owner_name
        if self.owner_email is not None:
            data['owner_email'] = self.owner_email
        if self.access_type is not None:
            data['access_type'] = self.access_type
        if self.shared_at is not None:
            data['shared_at'] = self.shared_at.isoformat()


def _with_vitals(query):
    return query.options(
        selectinload(Report.vital_links).selectinload(ReportVital.vital),
        selectinload(Report.owner),
    )


def decode_vitals_payload(raw):
    """
    Accept the vitals form field as a JSON string or an already-decoded list.
    Anything undecodable is logged and treated as no vitals.
    """
    if raw is None or raw == '':
        return []
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            log.warning('vitals_payload_unparseable')
            return []
    if not isinstance(raw, list):
        log.warning('vitals_payload_not_a_list', payload_type=type(raw).__name__)
        return []
    return raw


def _vital_from_item(user_id, item):
    """Build a Vital from one payload item, or None if the item is malformed."""
    if not isinstance(item, dict) or validate_vital(item):
        return None
    return Vital(
        user_id=user_id,
        vital_type=str(item['vital_type']),
        value=str(item['value']),
        unit=str(item['unit']) if item.get('unit') else None,
        date=parse_date(item['date']),
    )


def create_report(user_id, file, report_type, date, vitals_payload=None, *, store) -> Report:
    """
    Store the uploaded file and record the report, plus any well-formed vitals
    from the payload, each linked to the new report. Malformed vital items are
    skipped without failing the upload.
    """
    errors = validate_report_upload(file, report_type, date)
    if errors:
        raise ValidationError(errors)

    items = decode_vitals_payload(vitals_payload)

    try:
        handle = store.save(file.stream, file.filename, file.mimetype)
    except Exception as e:
        raise InternalError(f'File storage failed: {e}') from e

    report = Report(
        user_id=user_id,
        file_name=file.filename,
        file_path=handle,
        file_type=file.mimetype,
        report_type=report_type.strip(),
        date=parse_date(date),
    )
    db.session.add(report)

    linked = 0
    for item in items:
        vital = _vital_from_item(user_id, item)
        if vital is None:
            continue
        db.session.add(vital)
        db.session.add(ReportVital(report=report, vital=vital))
        linked += 1

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        store.delete(handle)
        raise InternalError(f'Saving report failed: {e}') from e

    log.info('report_created', report_id=report.id, user_id=user_id,
             vitals_linked=linked, vitals_skipped=len(items) - linked)
    return report


def list_reports(user_id, date=None, report_type=None) -> dict:
    """
    Reports the user owns (optionally narrowed by exact date and/or type) and
    reports shared with them (never filtered). Both newest date first.
    """
    owned_query = _with_vitals(Report.query.filter(Report.user_id == user_id))

    if date:
        parsed = parse_date(date)
        if parsed is None:
            raise ValidationError('date must be in YYYY-MM-DD format')
        owned_query = owned_query.filter(Report.date == parsed)

    if report_type:
        owned_query = owned_query.filter(Report.report_type == report_type)

    owned = owned_query.order_by(Report.date.desc(), Report.id.asc()).all()

    shared = (_with_vitals(Report.query)
              .join(SharedAccess, SharedAccess.report_id == Report.id)
              .filter(SharedAccess.shared_with_id == user_id)
              .order_by(Report.date.desc(), Report.id.asc())
              .all())

    return {
        'owned': [ReportEntry(r) for r in owned],
        'shared': [ReportEntry(r, owner_name=r.owner.name) for r in shared],
    }


def get_report(user_id, report_id) -> ReportEntry:
    report = get_viewable_report(user_id, report_id)
    return ReportEntry(report, owner_name=report.owner.name)


def open_report_file(user_id, report_id) -> Report:
    """Report whose file the user may download."""
    return get_viewable_report(user_id, report_id)


def delete_report(user_id, report_id, *, store):
    """
    Remove the stored file, then the report. Links and grants go with the
    report; the vitals themselves stay.
    """
    report = get_managed_report(user_id, report_id)

    try:
        store.delete(report.file_path)
    except Exception as e:
        raise InternalError(f'Deleting stored file failed: {e}') from e

    db.session.delete(report)
    db.session.commit()

    log.info('report_deleted', report_id=report_id, user_id=user_id)
