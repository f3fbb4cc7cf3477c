from ddm_jewellers.core.imports import Blueprint, jsonify, request
from ddm_jewellers.core.security import admin_required
from ddm_jewellers.services.market_rates import ensure_current_rates, refresh_rates, calculate_jewelry_price, serialize_rates

market_bp = Blueprint('market', __name__)


@market_bp.route('/api/market-rates', methods=['GET'])
def get_market_rates():
    """
    Current gold and silver rates (INR per gram)
    ---
    tags:
      - Market Rates
    responses:
      200:
        description: Latest stored rates
        schema:
          type: object
          properties:
            gold_24k: { type: number, example: 6800 }
            gold_22k: { type: number, example: 6200 }
            gold_18k: { type: number, example: 5100 }
            silver: { type: number, example: 82.5 }
            source: { type: string }
            updated_at: { type: string }
    """
    return jsonify(serialize_rates(ensure_current_rates())), 200


@market_bp.route('/api/market-rates/refresh', methods=['POST'])
@admin_required
def refresh_market_rates():
    rates = refresh_rates()
    return jsonify({"message": "Market rates updated", "rates": serialize_rates(rates)}), 200


@market_bp.route('/api/market-rates/calculate-price', methods=['POST'])
def calculate_market_price():
    """
    Indicative price from weight, purity and markup
    ---
    tags:
      - Market Rates
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [weight, purity]
          properties:
            weight: { type: number, example: 10 }
            purity: { type: string, enum: ["24k", "22k", "18k", silver] }
            markup: { type: number, example: 1.3 }
    responses:
      200:
        description: Calculated price
      400:
        description: Invalid weight or purity
      404:
        description: No market rates stored yet
    """
    data = request.get_json() or {}
    if data.get('weight') is None or not data.get('purity'):
        return jsonify({"message": "Weight and purity are required"}), 400
    try:
        price = calculate_jewelry_price(data['weight'], data['purity'], data.get('markup', "1.3"))
    except ValueError as e:
        return jsonify({"message": str(e)}), 400
    return jsonify({
        "price": float(price),
        "weight": data['weight'],
        "purity": data['purity'],
        "markup": float(data.get('markup', 1.3)),
        "currency": "INR",
    }), 200
