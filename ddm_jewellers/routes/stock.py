from ddm_jewellers.core.imports import Blueprint, jsonify, request, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required, current_user_id
from ddm_jewellers.models.stockModels import StockItem, StockMovement, STOCK_CATEGORIES, STOCK_UNITS
from ddm_jewellers.services.stock import record_movement

stock_bp = Blueprint('stock', __name__)

STOCK_FIELDS = ["name", "category", "current_stock", "min_stock", "max_stock", "unit",
                "cost_price", "selling_price", "description"]
COUNT_FIELDS = ["current_stock", "min_stock", "max_stock"]


def serialize_stock_item(item):
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "current_stock": item.current_stock,
        "min_stock": item.min_stock,
        "max_stock": item.max_stock,
        "unit": item.unit,
        "cost_price": float(item.cost_price) if item.cost_price is not None else None,
        "selling_price": float(item.selling_price) if item.selling_price is not None else None,
        "description": item.description,
        "low_stock": item.is_low_stock,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


def serialize_movement(movement):
    return {
        "id": movement.id,
        "stock_item_id": movement.stock_item_id,
        "item_name": movement.stock_item.name if movement.stock_item else None,
        "movement_type": movement.movement_type,
        "quantity": movement.quantity,
        "stock_before": movement.stock_before,
        "stock_after": movement.stock_after,
        "reason": movement.reason,
        "reference": movement.reference,
        "created_by": movement.created_by,
        "created_by_name": movement.user.full_name if movement.user else None,
        "created_at": movement.created_at.isoformat() if movement.created_at else None,
    }


def _validate_stock_item(data, creating):
    if creating and not data.get('name'):
        return "Name is required"
    if creating and not data.get('category'):
        return "Category is required"
    if 'category' in data and data['category'] not in STOCK_CATEGORIES:
        return f"Category must be one of {', '.join(STOCK_CATEGORIES)}"
    if 'unit' in data and data['unit'] not in STOCK_UNITS:
        return f"Unit must be one of {', '.join(STOCK_UNITS)}"
    for field in COUNT_FIELDS:
        if field in data and (not isinstance(data[field], int) or data[field] < 0):
            return f"{field} must be a non-negative whole number"
    return None


@stock_bp.route('/api/admin/stock-items', methods=['GET'])
@admin_required
def get_stock_items():
    """
    Admin: list stock items
    ---
    tags:
      - Stock
    security:
      - Bearer: []
    parameters:
      - name: category
        in: query
        type: string
      - name: lowStock
        in: query
        type: boolean
        description: Only items at or below their minimum stock
      - name: search
        in: query
        type: string
    responses:
      200:
        description: Stock items
    """
    query = StockItem.query
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    if request.args.get('lowStock', '').lower() == 'true':
        query = query.filter(StockItem.current_stock <= StockItem.min_stock)
    search = request.args.get('search')
    if search:
        like = f"%{search}%"
        query = query.filter(StockItem.name.ilike(like) | StockItem.description.ilike(like))
    items = query.order_by(StockItem.name).all()
    return jsonify([serialize_stock_item(i) for i in items]), 200


@stock_bp.route('/api/admin/stock-items/<int:item_id>', methods=['GET'])
@admin_required
def get_stock_item(item_id):
    item = db.session.get(StockItem, item_id)
    if not item:
        return jsonify({"message": "Stock item not found"}), 404
    return jsonify(serialize_stock_item(item)), 200


@stock_bp.route('/api/admin/stock-items', methods=['POST'])
@admin_required
def create_stock_item():
    data = request.get_json() or {}
    error = _validate_stock_item(data, creating=True)
    if error:
        return jsonify({"message": error}), 400

    item = StockItem(**{k: data[k] for k in STOCK_FIELDS if k in data})
    try:
        db.session.add(item)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error creating stock item"}), 500
    return jsonify(serialize_stock_item(item)), 201


@stock_bp.route('/api/admin/stock-items/<int:item_id>', methods=['PUT'])
@admin_required
def update_stock_item(item_id):
    item = db.session.get(StockItem, item_id)
    if not item:
        return jsonify({"message": "Stock item not found"}), 404

    data = request.get_json() or {}
    error = _validate_stock_item(data, creating=False)
    if error:
        return jsonify({"message": error}), 400

    for field in STOCK_FIELDS:
        if field in data:
            setattr(item, field, data[field])
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error updating stock item"}), 500
    return jsonify(serialize_stock_item(item)), 200


@stock_bp.route('/api/admin/stock-items/<int:item_id>', methods=['DELETE'])
@admin_required
def delete_stock_item(item_id):
    item = db.session.get(StockItem, item_id)
    if not item:
        return jsonify({"message": "Stock item not found"}), 404
    db.session.delete(item)
    db.session.commit()
    return jsonify({"message": "Stock item deleted"}), 200


@stock_bp.route('/api/admin/stock-movements', methods=['GET'])
@admin_required
def get_stock_movements():
    query = StockMovement.query
    item_id = request.args.get('stockItemId', type=int)
    if item_id:
        query = query.filter_by(stock_item_id=item_id)
    movement_type = request.args.get('movementType')
    if movement_type:
        query = query.filter_by(movement_type=movement_type)
    movements = query.order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).all()
    return jsonify([serialize_movement(m) for m in movements]), 200


@stock_bp.route('/api/admin/stock-movements', methods=['POST'])
@admin_required
def create_stock_movement():
    """
    Admin: record a stock movement
    ---
    tags:
      - Stock
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [stock_item_id, movement_type, quantity, reason]
          properties:
            stock_item_id: { type: integer }
            movement_type:
              type: string
              enum: [in, out, adjustment, damaged, returned]
            quantity: { type: integer, example: 5 }
            reason: { type: string, example: "Supplier delivery" }
            reference: { type: string, example: "PO-1021" }
    responses:
      201:
        description: Movement recorded and stock updated
      400:
        description: Invalid movement or insufficient stock
      404:
        description: Stock item not found
    """
    data = request.get_json() or {}
    item = db.session.get(StockItem, data.get('stock_item_id')) if data.get('stock_item_id') else None
    if not item:
        return jsonify({"message": "Stock item not found"}), 404

    movement = record_movement(
        item,
        data.get('movement_type'),
        data.get('quantity'),
        data.get('reason'),
        reference=data.get('reference'),
        created_by=current_user_id(),
    )
    return jsonify({"message": "Stock movement recorded", "movement": serialize_movement(movement),
                    "item": serialize_stock_item(item)}), 201
