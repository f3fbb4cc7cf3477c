from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id, is_admin, admin_required
from ddm_jewellers.models.exchangeModels import ExchangeRequest, EXCHANGE_STATUSES
from ddm_jewellers.services.exchange import submit_request, approve_request, reject_request, serialize_request

exchange_bp = Blueprint('exchange', __name__)


@exchange_bp.route('/api/exchange/requests', methods=['POST'])
@jwt_required()
def create_exchange_request():
    """
    Submit old jewelry for exchange valuation
    ---
    tags:
      - Exchange
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [jewelry_photo_url, bill_photo_url]
          properties:
            jewelry_photo_url: { type: string }
            bill_photo_url: { type: string }
            order_id: { type: integer, description: "Original purchase, if bought here" }
            description: { type: string, example: "22k gold bangle, 2015" }
            estimated_value: { type: number, example: 45000 }
    responses:
      201:
        description: Request submitted for review
      400:
        description: Missing photos or invalid value
      404:
        description: Order not found
    """
    exchange = submit_request(current_user_id(), request.get_json() or {})
    return jsonify({"message": "Exchange request submitted", "request": serialize_request(exchange)}), 201


@exchange_bp.route('/api/exchange/requests', methods=['GET'])
@exchange_bp.route('/api/admin/exchange-requests', methods=['GET'])
@jwt_required()
def get_exchange_requests():
    query = ExchangeRequest.query
    if request.path.startswith('/api/admin/') and not is_admin():
        return jsonify({"error": "Forbidden"}), 403
    if not is_admin():
        query = query.filter_by(user_id=current_user_id())

    status = request.args.get('status')
    if status:
        if status not in EXCHANGE_STATUSES:
            return jsonify({"message": f"status must be one of {', '.join(EXCHANGE_STATUSES)}"}), 400
        query = query.filter_by(status=status)

    requests_ = query.order_by(ExchangeRequest.created_at.desc()).all()
    return jsonify([serialize_request(r) for r in requests_]), 200


def _exchange_or_404(request_id):
    return db.session.get(ExchangeRequest, request_id)


@exchange_bp.route('/api/exchange/requests/<int:request_id>/approve', methods=['POST'])
@exchange_bp.route('/api/admin/exchange-requests/<int:request_id>/approve', methods=['POST'])
@admin_required
def approve_exchange_request(request_id):
    """
    Admin: approve an exchange request with an assigned value
    ---
    tags:
      - Exchange
    security:
      - Bearer: []
    parameters:
      - name: request_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [admin_assigned_value]
          properties:
            admin_assigned_value: { type: number, example: 42000 }
            admin_notes: { type: string }
    responses:
      200:
        description: Approved
      400:
        description: Missing or invalid value
      404:
        description: Request not found
      409:
        description: Request already reviewed
    """
    exchange = _exchange_or_404(request_id)
    if not exchange:
        return jsonify({"message": "Exchange request not found"}), 404

    data = request.get_json() or {}
    if data.get('admin_assigned_value') is None:
        return jsonify({"message": "Valid assigned value is required"}), 400
    approve_request(exchange, current_user_id(), data['admin_assigned_value'], data.get('admin_notes'))
    return jsonify({"message": "Exchange request approved", "request": serialize_request(exchange)}), 200


@exchange_bp.route('/api/exchange/requests/<int:request_id>/reject', methods=['POST'])
@exchange_bp.route('/api/admin/exchange-requests/<int:request_id>/reject', methods=['POST'])
@admin_required
def reject_exchange_request(request_id):
    exchange = _exchange_or_404(request_id)
    if not exchange:
        return jsonify({"message": "Exchange request not found"}), 404

    data = request.get_json() or {}
    reject_request(exchange, current_user_id(), data.get('rejection_reason'), data.get('admin_notes'))
    return jsonify({"message": "Exchange request rejected", "request": serialize_request(exchange)}), 200
