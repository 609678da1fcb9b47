"""
Report sharing routes.
"""
from flask import Blueprint, jsonify, g, url_for
from healthwallet.errors import ValidationError
from healthwallet.routes import json_object
from healthwallet.services import sharing as sharing_service
from healthwallet.utils.auth import token_required

share_bp = Blueprint('share', __name__)


def _share_response(grant, created):
    grantee = grant.shared_with
    return jsonify({
        'message': 'Report shared successfully' if created else 'Share access updated successfully',
        'sharedWith': {
            'id': grantee.id,
            'name': grantee.name,
            'email': grantee.email,
        },
        'access_type': grant.access_type,
    }), 201 if created else 200


@share_bp.route('', methods=['POST'])
@token_required
def share_report():
    """Share a report named in the body: {report_id, shared_with_email, access_type?}."""
    data = json_object()
    report_id = data.get('report_id')
    if not report_id or not data.get('shared_with_email'):
        raise ValidationError('Report ID and shared with email are required')
    try:
        report_id = int(report_id)
    except (TypeError, ValueError):
        raise ValidationError('Report ID must be an integer')

    grant, created = sharing_service.grant_access(
        g.user_id, report_id, data['shared_with_email'], data.get('access_type'))
    return _share_response(grant, created)


@share_bp.route('/report/<int:report_id>', methods=['POST'])
@token_required
def share_report_by_path(report_id):
    data = json_object()
    grant, created = sharing_service.grant_access(
        g.user_id, report_id, data.get('shared_with_email'), data.get('access_type'))
    return _share_response(grant, created)


@share_bp.route('/report/<int:report_id>', methods=['GET'])
@token_required
def list_report_shares(report_id):
    """Grants on one of the caller's reports."""
    grants = sharing_service.list_grants_for_report(g.user_id, report_id)
    return jsonify([grant.to_dict() for grant in grants]), 200


@share_bp.route('/shared-with-me', methods=['GET'])
@token_required
def shared_with_me():
    entries = sharing_service.list_shared_with_me(g.user_id)
    return jsonify({
        'reports': [
            e.summary_dict(url_for('reports.download_report_file', id=e.report.id))
            for e in entries
        ]
    }), 200


@share_bp.route('/shared-by-me', methods=['GET'])
@token_required
def shared_by_me():
    shares = []
    for grant in sharing_service.list_shared_by_me(g.user_id):
        item = grant.report.to_dict()
        item.update({
            'share_id': grant.id,
            'shared_with_id': grant.shared_with_id,
            'shared_with_name': grant.shared_with.name,
            'shared_with_email': grant.shared_with.email,
            'access_type': grant.access_type,
            'shared_at': grant.created_at.isoformat() if grant.created_at else None,
        })
        shares.append(item)
    return jsonify({'shares': shares}), 200


@share_bp.route('/report/<int:report_id>/user/<int:user_id>', methods=['DELETE'])
@share_bp.route('/revoke/<int:report_id>/<int:user_id>', methods=['DELETE'])
@token_required
def revoke_access(report_id, user_id):
    sharing_service.revoke_access(g.user_id, report_id, user_id)
    return jsonify({'message': 'Access revoked successfully'}), 200
