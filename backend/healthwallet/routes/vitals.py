"""
Vitals routes.
"""
from flask import Blueprint, request, jsonify, g
from healthwallet.routes import json_object
from healthwallet.services import vitals as vital_service
from healthwallet.utils.auth import token_required

vitals_bp = Blueprint('vitals', __name__)


@vitals_bp.route('', methods=['POST'])
@token_required
def add_vital():
    data = json_object(required=True)

    vital = vital_service.add_vital(
        g.user_id,
        data.get('vital_type'),
        data.get('value'),
        data.get('date'),
        unit=data.get('unit'),
    )

    return jsonify({'message': 'Vital added successfully', 'vital': vital.to_dict()}), 201


@vitals_bp.route('', methods=['GET'])
@token_required
def list_vitals():
    vitals = vital_service.list_vitals(
        g.user_id,
        vital_type=request.args.get('vital_type'),
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date'),
    )
    return jsonify([v.to_dict() for v in vitals]), 200


@vitals_bp.route('/trends', methods=['GET'])
@token_required
def get_trends():
    """Vitals grouped by type, oldest first, for charting."""
    trends = vital_service.get_trends(
        g.user_id,
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date'),
    )
    return jsonify(trends), 200


@vitals_bp.route('/<int:id>', methods=['GET'])
@token_required
def get_vital(id):
    return jsonify(vital_service.get_owned_vital(g.user_id, id).to_dict()), 200


@vitals_bp.route('/<int:id>', methods=['PUT'])
@token_required
def update_vital(id):
    data = json_object()

    vital = vital_service.update_vital(
        g.user_id, id,
        vital_type=data.get('vital_type'),
        value=data.get('value'),
        unit=data.get('unit'),
        date=data.get('date'),
    )

    return jsonify({'message': 'Vital updated successfully', 'vital': vital.to_dict()}), 200


@vitals_bp.route('/<int:id>', methods=['DELETE'])
@token_required
def delete_vital(id):
    vital_service.delete_vital(g.user_id, id)
    return jsonify({'message': 'Vital deleted successfully'}), 200
