import re

from ddm_jewellers.core.imports import Blueprint, jsonify, request, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required
from ddm_jewellers.models.catalogModels import Category, Product
from ddm_jewellers.services.pricing import calculate_price, price_product, format_breakdown, is_non_negative_number
from ddm_jewellers.services.market_rates import get_current_rates

catalog_bp = Blueprint('catalog', __name__)

PRODUCT_TYPES = ["real", "imitation"]
PRODUCT_FIELDS = [
    "name", "description", "category_id", "image_url", "image_urls", "price", "product_type", "material",
    "weight", "making_charges", "gemstones_cost", "diamonds_cost", "silver_billing_mode",
    "fixed_rate_per_gram", "purity", "size", "stock", "is_featured", "is_active", "tags",
]
NUMERIC_PRODUCT_FIELDS = [
    "price", "weight", "making_charges", "gemstones_cost", "diamonds_cost", "fixed_rate_per_gram",
]
CATEGORY_FIELDS = ["name", "slug", "description", "image_url", "parent_id", "product_type", "sort_order", "is_active"]


def slugify(text):
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


def _number(value):
    return float(value) if value is not None else None


def serialize_category(category):
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image_url": category.image_url,
        "parent_id": category.parent_id,
        "product_type": category.product_type,
        "sort_order": category.sort_order,
        "is_active": category.is_active,
    }


def serialize_product(product, rates=None, with_pricing=False):
    data = {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "category_id": product.category_id,
        "category": product.category.name if product.category else None,
        "image_url": product.image_url,
        "image_urls": product.image_urls or [],
        "price": _number(product.price),
        "product_type": product.product_type,
        "material": product.material,
        "weight": _number(product.weight),
        "making_charges": _number(product.making_charges),
        "gemstones_cost": _number(product.gemstones_cost),
        "diamonds_cost": _number(product.diamonds_cost),
        "silver_billing_mode": product.silver_billing_mode,
        "fixed_rate_per_gram": _number(product.fixed_rate_per_gram),
        "purity": product.purity,
        "size": product.size,
        "stock": product.stock,
        "is_featured": product.is_featured,
        "is_active": product.is_active,
        "tags": product.tags or [],
    }
    breakdown = price_product(product, rates)
    data["final_price"] = float(breakdown.final_price)
    if with_pricing:
        data["pricing"] = breakdown.as_dict()
        data["pricing_display"] = format_breakdown(breakdown)
    return data


def seed_categories():
    categories = [
        {"name": "Necklaces", "product_type": "both", "sort_order": 1},
        {"name": "Earrings", "product_type": "both", "sort_order": 2},
        {"name": "Rings", "product_type": "real", "sort_order": 3},
        {"name": "Bangles", "product_type": "both", "sort_order": 4},
        {"name": "Bridal Sets", "product_type": "real", "sort_order": 5},
        {"name": "Fashion Jewelry", "product_type": "imitation", "sort_order": 6},
    ]
    for data in categories:
        slug = slugify(data["name"])
        if not Category.query.filter_by(slug=slug).first():
            db.session.add(Category(slug=slug, **data))
    db.session.commit()
    print("✅ Categories seeded successfully")


def seed_products():
    if Product.query.first():
        print("ℹ️ Products already exist.")
        return
    by_slug = {c.slug: c.id for c in Category.query.all()}
    products = [
        {"name": "Temple Gold Necklace", "category_id": by_slug.get("necklaces"), "product_type": "real",
         "material": "22k gold", "purity": "22k", "weight": 25.5, "making_charges": 12000, "price": 175000,
         "stock": 3, "is_featured": True},
        {"name": "Solitaire Diamond Ring", "category_id": by_slug.get("rings"), "product_type": "real",
         "material": "18k gold", "purity": "18k", "weight": 4.2, "making_charges": 3500, "diamonds_cost": 45000,
         "price": 72000, "stock": 5, "is_featured": True},
        {"name": "Silver Anklet Pair", "category_id": by_slug.get("bangles"), "product_type": "real",
         "material": "silver", "weight": 40, "making_charges": 800, "silver_billing_mode": "live_rate",
         "price": 4500, "stock": 12},
        {"name": "Kundan Jhumkas", "category_id": by_slug.get("earrings"), "product_type": "imitation",
         "material": "brass", "price": 1499, "stock": 30, "is_featured": True},
        {"name": "Oxidised Choker", "category_id": by_slug.get("fashion-jewelry"), "product_type": "imitation",
         "material": "alloy", "price": 899, "stock": 25},
    ]
    for data in products:
        db.session.add(Product(is_active=True, **data))
    db.session.commit()
    print("✅ Products seeded successfully")


@catalog_bp.route('/api/categories', methods=['GET'])
def get_categories():
    """
    List active categories
    ---
    tags:
      - Catalog
    parameters:
      - name: productType
        in: query
        type: string
        enum: [real, imitation]
        description: Categories of type "both" match either value
    responses:
      200:
        description: Categories ordered by sort order
    """
    query = Category.query.filter_by(is_active=True)
    product_type = request.args.get('productType')
    if product_type:
        query = query.filter(Category.product_type.in_([product_type, "both"]))
    categories = query.order_by(Category.sort_order, Category.name).all()
    return jsonify([serialize_category(c) for c in categories]), 200


@catalog_bp.route('/api/categories/<slug>', methods=['GET'])
def get_category(slug):
    category = Category.query.filter_by(slug=slug, is_active=True).first()
    if not category:
        return jsonify({"message": "Category not found"}), 404
    return jsonify(serialize_category(category)), 200


@catalog_bp.route('/api/admin/categories', methods=['POST'])
@admin_required
def create_category():
    data = request.get_json() or {}
    if not data.get('name'):
        return jsonify({"message": "Category name is required"}), 400
    if data.get('product_type', 'both') not in ("real", "imitation", "both"):
        return jsonify({"message": "product_type must be real, imitation or both"}), 400

    slug = slugify(data.get('slug') or data['name'])
    if Category.query.filter_by(slug=slug).first():
        return jsonify({"message": "A category with this slug already exists"}), 409

    category = Category(slug=slug, **{k: data[k] for k in CATEGORY_FIELDS if k in data and k != "slug"})
    try:
        db.session.add(category)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error creating category"}), 500
    return jsonify(serialize_category(category)), 201


@catalog_bp.route('/api/admin/categories/<int:category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    category = db.session.get(Category, category_id)
    if not category:
        return jsonify({"message": "Category not found"}), 404

    data = request.get_json() or {}
    if 'slug' in data:
        slug = slugify(data['slug'])
        clash = Category.query.filter(Category.slug == slug, Category.id != category.id).first()
        if clash:
            return jsonify({"message": "A category with this slug already exists"}), 409
        category.slug = slug
    for field in CATEGORY_FIELDS:
        if field in data and field != "slug":
            setattr(category, field, data[field])

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error updating category"}), 500
    return jsonify(serialize_category(category)), 200


@catalog_bp.route('/api/admin/categories/<int:category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    category = db.session.get(Category, category_id)
    if not category:
        return jsonify({"message": "Category not found"}), 404
    if Product.query.filter_by(category_id=category.id, is_active=True).first():
        return jsonify({"message": "Category still has active products"}), 409

    db.session.delete(category)
    db.session.commit()
    return jsonify({"message": "Category deleted"}), 200


@catalog_bp.route('/api/products', methods=['GET'])
def get_products():
    """
    List active products
    ---
    tags:
      - Catalog
    parameters:
      - name: categoryId
        in: query
        type: integer
      - name: search
        in: query
        type: string
        description: Case-insensitive match on name or description
      - name: featured
        in: query
        type: boolean
      - name: productType
        in: query
        type: string
        enum: [real, imitation]
      - name: limit
        in: query
        type: integer
      - name: offset
        in: query
        type: integer
    responses:
      200:
        description: Products with their current price
    """
    query = Product.query.filter_by(is_active=True)

    category_id = request.args.get('categoryId', type=int)
    if category_id:
        query = query.filter_by(category_id=category_id)
    search = request.args.get('search')
    if search:
        like = f"%{search}%"
        query = query.filter(Product.name.ilike(like) | Product.description.ilike(like))
    if request.args.get('featured', '').lower() == 'true':
        query = query.filter_by(is_featured=True)
    product_type = request.args.get('productType')
    if product_type:
        query = query.filter_by(product_type=product_type)

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    offset = request.args.get('offset', type=int)
    if offset:
        query = query.offset(offset)
    limit = request.args.get('limit', type=int)
    if limit:
        query = query.limit(limit)

    rates = get_current_rates()
    return jsonify([serialize_product(p, rates) for p in query.all()]), 200


@catalog_bp.route('/api/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    product = Product.query.filter_by(id=product_id, is_active=True).first()
    if not product:
        return jsonify({"message": "Product not found"}), 404
    return jsonify(serialize_product(product, get_current_rates(), with_pricing=True)), 200


def _apply_product_fields(product, data):
    for field in PRODUCT_FIELDS:
        if field in data:
            setattr(product, field, data[field])


def _validate_product(data, creating):
    if creating and not data.get('name'):
        return "Product name is required"
    product_type = data.get('product_type', 'real' if creating else None)
    if product_type is not None and product_type not in PRODUCT_TYPES:
        return "product_type must be real or imitation"
    if creating and product_type == "imitation" and data.get('price') is None:
        return "Imitation products need a price"
    for field in NUMERIC_PRODUCT_FIELDS:
        if data.get(field) is None:
            continue
        if not is_non_negative_number(data[field]):
            return f"{field} must be a non-negative number"
    if data.get('stock') is not None:
        if not isinstance(data['stock'], int) or data['stock'] < 0:
            return "Stock must be a non-negative whole number"
    if data.get('category_id') is not None and not db.session.get(Category, data['category_id']):
        return "Category not found"
    return None


@catalog_bp.route('/api/admin/products', methods=['POST'])
@admin_required
def create_product():
    """
    Admin: create a product
    ---
    tags:
      - Admin Catalog
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name: { type: string, example: "Temple Gold Necklace" }
            category_id: { type: integer }
            product_type: { type: string, enum: [real, imitation] }
            material: { type: string, example: "22k gold" }
            weight: { type: number, example: 25.5 }
            making_charges: { type: number, example: 12000 }
            price: { type: number, example: 175000 }
            stock: { type: integer, example: 3 }
    responses:
      201:
        description: Product created
      400:
        description: Invalid product data
    """
    data = request.get_json() or {}
    error = _validate_product(data, creating=True)
    if error:
        return jsonify({"message": error}), 400

    product = Product(product_type="real", is_active=True)
    _apply_product_fields(product, data)
    try:
        db.session.add(product)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error creating product"}), 500
    return jsonify(serialize_product(product, get_current_rates(), with_pricing=True)), 201


@catalog_bp.route('/api/admin/products/<int:product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    data = request.get_json() or {}
    error = _validate_product(data, creating=False)
    if error:
        return jsonify({"message": error}), 400

    _apply_product_fields(product, data)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error updating product"}), 500
    return jsonify(serialize_product(product, get_current_rates(), with_pricing=True)), 200


@catalog_bp.route('/api/admin/products/<int:product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    # soft delete keeps order history intact
    product.is_active = False
    db.session.commit()
    return jsonify({"message": "Product deleted"}), 200


@catalog_bp.route('/api/calculate-pricing', methods=['POST'])
def calculate_pricing():
    """
    Price a piece of jewelry from its weight, material and charges
    ---
    tags:
      - Catalog
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            product_type: { type: string, example: "real" }
            material: { type: string, example: "22k gold" }
            weight: { type: number, example: 10 }
            making_charges: { type: number, example: 5000 }
            gemstones_cost: { type: number }
            diamonds_cost: { type: number }
            price: { type: number }
            quantity: { type: integer, example: 1 }
    responses:
      200:
        description: Pricing breakdown
    """
    data = request.get_json() or {}
    try:
        quantity = int(data.get('quantity', 1))
        breakdown = calculate_price(data, rates=get_current_rates(), quantity=quantity)
    except ValueError as e:
        return jsonify({"message": str(e)}), 400
    if quantity < 1:
        return jsonify({"message": "Quantity must be at least 1"}), 400

    return jsonify({"pricing": breakdown.as_dict(), "display": format_breakdown(breakdown)}), 200
