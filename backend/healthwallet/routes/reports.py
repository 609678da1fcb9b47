"""
Report routes.
"""
from flask import Blueprint, request, jsonify, g, url_for
from healthwallet.services import reports as report_service
from healthwallet.storage import get_file_store
from healthwallet.utils.auth import token_required

reports_bp = Blueprint('reports', __name__)


def _file_url(report):
    # Downloads go through the access-checked route, never a public static path
    return url_for('reports.download_report_file', id=report.id)


@reports_bp.route('', methods=['POST'])
@reports_bp.route('/upload', methods=['POST'])
@token_required
def upload_report():
    """Upload a report file (multipart) with optional JSON-encoded vitals."""
    report = report_service.create_report(
        g.user_id,
        request.files.get('file'),
        request.form.get('report_type'),
        request.form.get('date'),
        request.form.get('vitals'),
        store=get_file_store(),
    )

    return jsonify({
        'message': 'Report uploaded successfully',
        'report': {
            'id': report.id,
            'file_name': report.file_name,
            'report_type': report.report_type,
            'date': report.date.isoformat(),
        }
    }), 201


@reports_bp.route('', methods=['GET'])
@token_required
def list_reports():
    """Own reports (filterable by date and report_type) and reports shared with the caller."""
    result = report_service.list_reports(
        g.user_id,
        date=request.args.get('date'),
        report_type=request.args.get('report_type'),
    )

    return jsonify({
        'myReports': [e.summary_dict(_file_url(e.report)) for e in result['owned']],
        'sharedReports': [e.summary_dict(_file_url(e.report)) for e in result['shared']],
    }), 200


@reports_bp.route('/<int:id>', methods=['GET'])
@token_required
def get_report(id):
    entry = report_service.get_report(g.user_id, id)
    return jsonify(entry.detail_dict(_file_url(entry.report))), 200


@reports_bp.route('/<int:id>/file', methods=['GET'])
@token_required
def download_report_file(id):
    """Serve the stored file to the owner or a grantee."""
    report = report_service.open_report_file(g.user_id, id)
    return get_file_store().send(report.file_path, report.file_name, report.file_type)


@reports_bp.route('/<int:id>', methods=['DELETE'])
@token_required
def delete_report(id):
    report_service.delete_report(g.user_id, id, store=get_file_store())
    return jsonify({'message': 'Report deleted successfully'}), 200
