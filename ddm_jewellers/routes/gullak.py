from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id, is_admin, admin_required
from ddm_jewellers.models.gullakModels import GullakAccount, GullakTransaction
from ddm_jewellers.services import gullak
from ddm_jewellers.services.market_rates import ensure_current_rates, serialize_rates

gullak_bp = Blueprint('gullak', __name__)


def _own_account(account_id):
    account = db.session.get(GullakAccount, account_id)
    if not account or (account.user_id != current_user_id() and not is_admin()):
        return None
    return account


@gullak_bp.route('/api/gullak/accounts', methods=['GET'])
@jwt_required()
def get_accounts():
    accounts = GullakAccount.query.filter_by(user_id=current_user_id()) \
        .order_by(GullakAccount.created_at.desc()).all()
    return jsonify([gullak.serialize_account(a) for a in accounts]), 200


@gullak_bp.route('/api/gullak/accounts', methods=['POST'])
@jwt_required()
def create_account():
    """
    Open a Gullak savings account
    ---
    tags:
      - Gullak
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [name, metal_type, metal_purity, payment_amount, payment_frequency, target_metal_weight]
          properties:
            name: { type: string, example: "Wedding gold" }
            metal_type: { type: string, enum: [gold, silver] }
            metal_purity: { type: string, enum: ["24k", "22k", "18k", silver] }
            payment_amount: { type: number, example: 500 }
            payment_frequency: { type: string, enum: [daily, weekly, monthly] }
            payment_day_of_week: { type: integer, description: "0-6, Sunday = 0" }
            payment_day_of_month: { type: integer, description: "1-28" }
            target_metal_weight: { type: number, example: 10 }
            target_amount: { type: number, description: "Computed from the current rate when omitted" }
            auto_pay_enabled: { type: boolean }
    responses:
      201:
        description: Account created
      400:
        description: Invalid account details
    """
    account = gullak.open_account(current_user_id(), request.get_json() or {})
    return jsonify({"message": "Gullak account created", "account": gullak.serialize_account(account)}), 201


@gullak_bp.route('/api/gullak/accounts/<int:account_id>', methods=['GET'])
@jwt_required()
def get_account(account_id):
    account = _own_account(account_id)
    if not account:
        return jsonify({"message": "Gullak account not found"}), 404
    return jsonify(gullak.serialize_account(account)), 200


@gullak_bp.route('/api/gullak/accounts/<int:account_id>', methods=['PATCH'])
@jwt_required()
def update_account(account_id):
    account = _own_account(account_id)
    if not account:
        return jsonify({"message": "Gullak account not found"}), 404
    gullak.update_account(account, request.get_json() or {})
    return jsonify({"message": "Gullak account updated", "account": gullak.serialize_account(account)}), 200


@gullak_bp.route('/api/gullak/accounts/<int:account_id>/transactions', methods=['GET'])
@jwt_required()
def get_transactions(account_id):
    account = _own_account(account_id)
    if not account:
        return jsonify({"message": "Gullak account not found"}), 404
    txns = GullakTransaction.query.filter_by(account_id=account.id) \
        .order_by(GullakTransaction.transaction_date.desc(), GullakTransaction.id.desc()).all()
    return jsonify([gullak.serialize_transaction(t) for t in txns]), 200


@gullak_bp.route('/api/gullak/transactions', methods=['POST'])
@jwt_required()
def create_transaction():
    """
    Make a manual deposit into a Gullak account
    ---
    tags:
      - Gullak
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [account_id, amount]
          properties:
            account_id: { type: integer }
            amount: { type: number, example: 1000 }
            payment_method: { type: string, example: "upi" }
            transaction_id: { type: string }
    responses:
      201:
        description: Deposit recorded with the metal bought
      404:
        description: Account not found
      409:
        description: Account is not active
    """
    data = request.get_json() or {}
    account = _own_account(data.get('account_id')) if data.get('account_id') else None
    if not account:
        return jsonify({"message": "Gullak account not found"}), 404

    txn = gullak.deposit(
        account,
        data.get('amount'),
        kind="manual",
        payment_method=data.get('payment_method'),
        transaction_id=data.get('transaction_id'),
        description=data.get('description'),
    )
    return jsonify({
        "message": "Payment recorded",
        "transaction": gullak.serialize_transaction(txn),
        "account": gullak.serialize_account(account),
    }), 201


@gullak_bp.route('/api/gullak/gold-rates', methods=['GET'])
def get_gold_rates():
    return jsonify(serialize_rates(ensure_current_rates())), 200


@gullak_bp.route('/api/admin/gullak', methods=['GET'])
@admin_required
def admin_get_accounts():
    query = GullakAccount.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    accounts = query.order_by(GullakAccount.created_at.desc()).all()
    result = []
    for account in accounts:
        data = gullak.serialize_account(account)
        data["customer_name"] = account.user.full_name if account.user else None
        data["customer_email"] = account.user.email if account.user else None
        result.append(data)
    return jsonify(result), 200
