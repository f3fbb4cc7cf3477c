from ddm_jewellers.core.imports import Blueprint, jsonify, request, Response, datetime, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required, current_user_id
from ddm_jewellers.models.salesModels import OfflineSale, SALE_CATEGORIES, PAYMENT_MODES
from ddm_jewellers.services import reports
from ddm_jewellers.services.pricing import is_non_negative_number

reports_bp = Blueprint('reports', __name__)

SALE_FIELDS = ["customer_name", "mobile_number", "product_name", "product_category", "weight_grams",
               "rate_per_gram", "making_charges", "gemstones_cost", "diamonds_cost", "payment_mode",
               "bill_number", "notes"]
SALE_NUMERIC_FIELDS = ["weight_grams", "rate_per_gram", "making_charges", "gemstones_cost", "diamonds_cost",
                       "gst_percentage", "gst_amount", "total_amount"]


def _num(value):
    return float(value) if value is not None else None


def serialize_sale(sale):
    return {
        "id": sale.id,
        "customer_name": sale.customer_name,
        "mobile_number": sale.mobile_number,
        "product_name": sale.product_name,
        "product_category": sale.product_category,
        "weight_grams": _num(sale.weight_grams),
        "rate_per_gram": _num(sale.rate_per_gram),
        "making_charges": _num(sale.making_charges),
        "gemstones_cost": _num(sale.gemstones_cost),
        "diamonds_cost": _num(sale.diamonds_cost),
        "gst_percentage": _num(sale.gst_percentage),
        "gst_amount": _num(sale.gst_amount),
        "total_amount": _num(sale.total_amount),
        "payment_mode": sale.payment_mode,
        "bill_number": sale.bill_number,
        "sale_date": sale.sale_date.isoformat() if sale.sale_date else None,
        "notes": sale.notes,
        "created_by": sale.created_by,
    }


def _parse_sale_date(value):
    if not value:
        return datetime.utcnow()
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _validate_sale(data, creating):
    if creating:
        required = ['customer_name', 'product_name', 'product_category', 'payment_mode', 'bill_number']
        missing = [field for field in required if not data.get(field)]
        if missing:
            return f"Missing required fields: {', '.join(missing)}"
    if 'product_category' in data and data['product_category'] not in SALE_CATEGORIES:
        return f"product_category must be one of {', '.join(SALE_CATEGORIES)}"
    if 'payment_mode' in data and data['payment_mode'] not in PAYMENT_MODES:
        return f"payment_mode must be one of {', '.join(PAYMENT_MODES)}"
    for field in SALE_NUMERIC_FIELDS:
        if data.get(field) is None:
            continue
        if not is_non_negative_number(data[field]):
            return f"{field} must be a non-negative number"
    return None


@reports_bp.route('/api/admin/offline-sales', methods=['GET'])
@admin_required
def get_offline_sales():
    start, end = reports.date_range(request.args.get('dateFrom'), request.args.get('dateTo'))
    sales = reports.offline_sales(
        start, end,
        category=request.args.get('category'),
        payment_mode=request.args.get('paymentMode'),
        search=request.args.get('search'),
    )
    return jsonify([serialize_sale(s) for s in sales]), 200


@reports_bp.route('/api/admin/offline-sales', methods=['POST'])
@admin_required
def create_offline_sale():
    """
    Admin: record an in-store sale
    ---
    tags:
      - Day Book
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [customer_name, product_name, product_category, payment_mode, bill_number]
          properties:
            customer_name: { type: string, example: "Anita Verma" }
            mobile_number: { type: string }
            product_name: { type: string, example: "Gold chain" }
            product_category: { type: string, enum: [gold, silver, imitation, others] }
            weight_grams: { type: number, example: 10 }
            rate_per_gram: { type: number, example: 6200 }
            making_charges: { type: number, example: 3000 }
            gst_percentage: { type: number, example: 3 }
            total_amount: { type: number, description: "Computed when omitted" }
            payment_mode: { type: string, enum: [cash, card, upi, bank_transfer] }
            bill_number: { type: string, example: "DDM-2024-0001" }
            sale_date: { type: string, format: date-time }
    responses:
      201:
        description: Sale recorded
      400:
        description: Invalid sale data
      409:
        description: Bill number already used
    """
    data = request.get_json() or {}
    error = _validate_sale(data, creating=True)
    if error:
        return jsonify({"message": error}), 400
    sale_date = _parse_sale_date(data.get('sale_date'))
    if sale_date is None:
        return jsonify({"message": "Invalid sale_date"}), 400
    if OfflineSale.query.filter_by(bill_number=data['bill_number']).first():
        return jsonify({"message": "Bill number already exists"}), 409

    try:
        gst_percentage, gst_amount, total = reports.compute_offline_totals(data)
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    sale = OfflineSale(
        gst_percentage=gst_percentage,
        gst_amount=gst_amount,
        total_amount=total,
        sale_date=sale_date,
        created_by=current_user_id(),
        **{k: data[k] for k in SALE_FIELDS if k in data},
    )
    try:
        db.session.add(sale)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error saving sale"}), 500
    return jsonify(serialize_sale(sale)), 201


@reports_bp.route('/api/admin/offline-sales/<int:sale_id>', methods=['PUT'])
@admin_required
def update_offline_sale(sale_id):
    sale = db.session.get(OfflineSale, sale_id)
    if not sale:
        return jsonify({"message": "Sale not found"}), 404

    data = request.get_json() or {}
    error = _validate_sale(data, creating=False)
    if error:
        return jsonify({"message": error}), 400
    if 'bill_number' in data:
        clash = OfflineSale.query.filter(OfflineSale.bill_number == data['bill_number'], OfflineSale.id != sale.id).first()
        if clash:
            return jsonify({"message": "Bill number already exists"}), 409
    if 'sale_date' in data:
        sale_date = _parse_sale_date(data['sale_date'])
        if sale_date is None:
            return jsonify({"message": "Invalid sale_date"}), 400
        sale.sale_date = sale_date

    for field in SALE_FIELDS:
        if field in data:
            setattr(sale, field, data[field])

    pricing_keys = {"weight_grams", "rate_per_gram", "making_charges", "gemstones_cost", "diamonds_cost",
                    "gst_percentage", "gst_amount", "total_amount"}
    if pricing_keys & set(data):
        merged = {key: getattr(sale, key) for key in pricing_keys if key not in ("gst_amount", "total_amount")}
        merged["gst_percentage"] = data.get("gst_percentage", sale.gst_percentage)
        merged["gst_amount"] = data.get("gst_amount")
        merged["total_amount"] = data.get("total_amount")
        try:
            sale.gst_percentage, sale.gst_amount, sale.total_amount = reports.compute_offline_totals(merged)
        except ValueError as e:
            db.session.rollback()
            return jsonify({"message": str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error updating sale"}), 500
    return jsonify(serialize_sale(sale)), 200


@reports_bp.route('/api/admin/offline-sales/<int:sale_id>', methods=['DELETE'])
@admin_required
def delete_offline_sale(sale_id):
    sale = db.session.get(OfflineSale, sale_id)
    if not sale:
        return jsonify({"message": "Sale not found"}), 404
    db.session.delete(sale)
    db.session.commit()
    return jsonify({"message": "Sale deleted"}), 200


@reports_bp.route('/api/admin/day-book', methods=['GET'])
@admin_required
def get_day_book():
    """
    Admin: daily online and offline takings
    ---
    tags:
      - Day Book
    security:
      - Bearer: []
    parameters:
      - name: dateFrom
        in: query
        type: string
        format: date
      - name: dateTo
        in: query
        type: string
        format: date
    responses:
      200:
        description: One entry per day with activity, newest first
      400:
        description: Invalid date
    """
    start, end = reports.date_range(request.args.get('dateFrom'), request.args.get('dateTo'))
    return jsonify(reports.day_book(start, end)), 200


@reports_bp.route('/api/admin/day-book/<day>', methods=['GET'])
@admin_required
def get_day_book_entry(day):
    return jsonify(reports.day_book_entry(reports.parse_day(day))), 200


@reports_bp.route('/api/admin/sales-report', methods=['GET'])
@admin_required
def get_sales_report():
    start, end = reports.date_range(request.args.get('dateFrom'), request.args.get('dateTo'))
    return jsonify(reports.sales_report(start, end, request.args.get('salesType', 'both'))), 200


@reports_bp.route('/api/admin/sales-report/export', methods=['GET'])
@admin_required
def export_sales_report():
    start, end = reports.date_range(request.args.get('dateFrom'), request.args.get('dateTo'))
    sales_type = request.args.get('salesType', 'both')
    export_format = request.args.get('format', 'csv')

    if export_format == 'json':
        return jsonify(reports.export_rows(start, end, sales_type)), 200
    if export_format != 'csv':
        return jsonify({"message": "format must be csv or json"}), 400

    filename = f"sales-report-{start.isoformat()}-to-{end.isoformat()}.csv"
    return Response(
        reports.export_csv(start, end, sales_type),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
