from ddm_jewellers.core.imports import Blueprint, jsonify, request, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required
from ddm_jewellers.models.contentModels import CareTutorial

care_bp = Blueprint('care', __name__)

TUTORIAL_FIELDS = ["title", "description", "video_url", "thumbnail_url", "category", "jewelry_type", "difficulty",
                   "duration", "materials", "tools", "steps", "tips", "warnings", "is_featured", "is_active"]


def serialize_tutorial(tutorial):
    data = {field: getattr(tutorial, field) for field in TUTORIAL_FIELDS}
    data.update({
        "id": tutorial.id,
        "views": tutorial.views or 0,
        "likes": tutorial.likes or 0,
        "created_at": tutorial.created_at.isoformat() if tutorial.created_at else None,
    })
    return data


def seed_care_tutorials():
    if CareTutorial.query.first():
        print("ℹ️ Care tutorials already exist.")
        return
    tutorials = [
        {
            "title": "Cleaning gold jewelry at home",
            "description": "Bring back the shine of everyday gold pieces safely.",
            "category": "cleaning", "jewelry_type": "gold", "difficulty": "beginner", "duration": "10 min",
            "materials": ["Mild dish soap", "Warm water", "Soft cloth"],
            "tools": ["Soft-bristle toothbrush", "Bowl"],
            "steps": ["Soak for 15 minutes in soapy warm water", "Brush gently", "Rinse and pat dry"],
            "tips": ["Dry completely before storing"],
            "warnings": ["Avoid toothpaste and bleach"],
            "is_featured": True,
        },
        {
            "title": "Storing silver to prevent tarnish",
            "description": "Keep silver bright between wears.",
            "category": "storage", "jewelry_type": "silver", "difficulty": "beginner", "duration": "5 min",
            "materials": ["Anti-tarnish strips", "Zip pouches"],
            "steps": ["Wipe pieces after wearing", "Store each piece in its own sealed pouch"],
            "tips": ["Add silica gel in humid weather"],
        },
    ]
    for data in tutorials:
        db.session.add(CareTutorial(is_active=True, **data))
    db.session.commit()
    print("✅ Care tutorials seeded successfully")


@care_bp.route('/api/jewelry-care/tutorials', methods=['GET'])
def get_tutorials():
    """
    Jewelry care tutorials
    ---
    tags:
      - Jewelry Care
    parameters:
      - name: category
        in: query
        type: string
        description: cleaning, storage or maintenance
      - name: jewelryType
        in: query
        type: string
    responses:
      200:
        description: Active tutorials, featured first
    """
    query = CareTutorial.query.filter_by(is_active=True)
    category = request.args.get('category')
    if category:
        query = query.filter_by(category=category)
    jewelry_type = request.args.get('jewelryType')
    if jewelry_type:
        query = query.filter_by(jewelry_type=jewelry_type)
    tutorials = query.order_by(CareTutorial.is_featured.desc(), CareTutorial.created_at.desc()).all()
    return jsonify([serialize_tutorial(t) for t in tutorials]), 200


@care_bp.route('/api/jewelry-care/tutorials/<int:tutorial_id>', methods=['GET'])
def get_tutorial(tutorial_id):
    tutorial = CareTutorial.query.filter_by(id=tutorial_id, is_active=True).first()
    if not tutorial:
        return jsonify({"message": "Tutorial not found"}), 404
    tutorial.views = (tutorial.views or 0) + 1
    db.session.commit()
    return jsonify(serialize_tutorial(tutorial)), 200


@care_bp.route('/api/jewelry-care/tutorials/<int:tutorial_id>/like', methods=['POST'])
def like_tutorial(tutorial_id):
    tutorial = CareTutorial.query.filter_by(id=tutorial_id, is_active=True).first()
    if not tutorial:
        return jsonify({"message": "Tutorial not found"}), 404
    tutorial.likes = (tutorial.likes or 0) + 1
    db.session.commit()
    return jsonify({"likes": tutorial.likes}), 200


@care_bp.route('/api/admin/jewelry-care/tutorials', methods=['GET'])
@admin_required
def admin_get_tutorials():
    tutorials = CareTutorial.query.order_by(CareTutorial.created_at.desc()).all()
    return jsonify([serialize_tutorial(t) for t in tutorials]), 200


@care_bp.route('/api/admin/jewelry-care/tutorials', methods=['POST'])
@admin_required
def create_tutorial():
    data = request.get_json() or {}
    if not data.get('title'):
        return jsonify({"message": "Title is required"}), 400

    tutorial = CareTutorial(**{k: data[k] for k in TUTORIAL_FIELDS if k in data})
    try:
        db.session.add(tutorial)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error creating tutorial"}), 500
    return jsonify(serialize_tutorial(tutorial)), 201


@care_bp.route('/api/admin/jewelry-care/tutorials/<int:tutorial_id>', methods=['PUT'])
@admin_required
def update_tutorial(tutorial_id):
    tutorial = db.session.get(CareTutorial, tutorial_id)
    if not tutorial:
        return jsonify({"message": "Tutorial not found"}), 404

    data = request.get_json() or {}
    for field in TUTORIAL_FIELDS:
        if field in data:
            setattr(tutorial, field, data[field])
    db.session.commit()
    return jsonify(serialize_tutorial(tutorial)), 200


@care_bp.route('/api/admin/jewelry-care/tutorials/<int:tutorial_id>', methods=['DELETE'])
@admin_required
def delete_tutorial(tutorial_id):
    tutorial = db.session.get(CareTutorial, tutorial_id)
    if not tutorial:
        return jsonify({"message": "Tutorial not found"}), 404
    db.session.delete(tutorial)
    db.session.commit()
    return jsonify({"message": "Tutorial deleted"}), 200
