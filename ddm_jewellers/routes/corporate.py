from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request, current_app, datetime, timedelta, secrets, SQLAlchemyError
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import admin_required, current_user_id
from ddm_jewellers.core.errors import InvalidTransition
from ddm_jewellers.models.corporateModels import CorporateRegistration, MaintenanceSchedule
from ddm_jewellers.services.emails import send_corporate_approval_email

corporate_bp = Blueprint('corporate', __name__)

MAINTENANCE_LEAD_DAYS = 30
REGISTRATION_FIELDS = ["company_name", "registration_number", "gstin", "company_address", "contact_person_name",
                       "contact_person_phone", "contact_person_email", "company_email", "approximate_employees",
                       "purpose_of_tieup"]


def generate_corporate_code():
    while True:
        code = "CORP" + "".join(secrets.choice("0123456789") for _ in range(10))
        if not CorporateRegistration.query.filter_by(corporate_code=code).first():
            return code


def serialize_registration(reg):
    return {
        "id": reg.id,
        "company_name": reg.company_name,
        "registration_number": reg.registration_number,
        "gstin": reg.gstin,
        "company_address": reg.company_address,
        "contact_person_name": reg.contact_person_name,
        "contact_person_phone": reg.contact_person_phone,
        "contact_person_email": reg.contact_person_email,
        "company_email": reg.company_email,
        "approximate_employees": reg.approximate_employees,
        "purpose_of_tieup": reg.purpose_of_tieup,
        "status": reg.status,
        "corporate_code": reg.corporate_code,
        "approved_at": reg.approved_at.isoformat() if reg.approved_at else None,
        "created_at": reg.created_at.isoformat() if reg.created_at else None,
    }


def serialize_schedule(schedule):
    return {
        "id": schedule.id,
        "corporate_id": schedule.corporate_id,
        "company_name": schedule.corporate.company_name if schedule.corporate else None,
        "user_id": schedule.user_id,
        "employee_id": schedule.employee_id,
        "service_type": schedule.service_type,
        "scheduled_date": schedule.scheduled_date.isoformat() if schedule.scheduled_date else None,
        "status": schedule.status,
        "notes": schedule.notes,
        "completed_at": schedule.completed_at.isoformat() if schedule.completed_at else None,
    }


@corporate_bp.route('/api/corporate/register', methods=['POST'])
def register_corporate():
    """
    Apply for a corporate partnership
    ---
    tags:
      - Corporate
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [company_name, contact_person_name, contact_person_email]
          properties:
            company_name: { type: string, example: "Acme Infotech" }
            gstin: { type: string, example: "27AAPFU0939F1ZV" }
            contact_person_name: { type: string }
            contact_person_email: { type: string }
            contact_person_phone: { type: string }
            approximate_employees: { type: integer, example: 250 }
            purpose_of_tieup: { type: string }
    responses:
      201:
        description: Registration received, pending review
      400:
        description: Missing or invalid fields
    """
    data = request.get_json() or {}
    required = ['company_name', 'contact_person_name', 'contact_person_email']
    if not all(data.get(field) for field in required):
        return jsonify({"message": "Company name, contact person name and email are required"}), 400
    if "@" not in data['contact_person_email']:
        return jsonify({"message": "Invalid contact email"}), 400
    if data.get('gstin') and len(data['gstin']) > 15:
        return jsonify({"message": "GSTIN must be at most 15 characters"}), 400

    reg = CorporateRegistration(status="pending", **{k: data[k] for k in REGISTRATION_FIELDS if k in data})
    try:
        db.session.add(reg)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error saving registration"}), 500
    return jsonify({"message": "Registration submitted successfully", "registration": serialize_registration(reg)}), 201


@corporate_bp.route('/api/corporate/registrations', methods=['GET'])
@admin_required
def get_registrations():
    query = CorporateRegistration.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    regs = query.order_by(CorporateRegistration.created_at.desc()).all()
    return jsonify([serialize_registration(r) for r in regs]), 200


def _pending_registration(reg_id):
    reg = db.session.get(CorporateRegistration, reg_id)
    if reg and reg.status != "pending":
        raise InvalidTransition(f"Registration is already {reg.status}")
    return reg


@corporate_bp.route('/api/corporate/registrations/<int:reg_id>/approve', methods=['PATCH'])
@admin_required
def approve_registration(reg_id):
    """
    Admin: approve a corporate registration and issue its code
    ---
    tags:
      - Corporate
    security:
      - Bearer: []
    parameters:
      - name: reg_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Approved; corporate code issued and emailed
      404:
        description: Registration not found
      409:
        description: Registration already reviewed
    """
    reg = _pending_registration(reg_id)
    if not reg:
        return jsonify({"message": "Registration not found"}), 404

    reg.status = "approved"
    reg.corporate_code = generate_corporate_code()
    reg.approved_by = current_user_id()
    reg.approved_at = datetime.utcnow()
    db.session.commit()
    send_corporate_approval_email(reg)
    return jsonify({"message": "Registration approved", "registration": serialize_registration(reg)}), 200


@corporate_bp.route('/api/corporate/registrations/<int:reg_id>/reject', methods=['PATCH'])
@admin_required
def reject_registration(reg_id):
    reg = _pending_registration(reg_id)
    if not reg:
        return jsonify({"message": "Registration not found"}), 404

    reg.status = "rejected"
    db.session.commit()
    return jsonify({"message": "Registration rejected", "registration": serialize_registration(reg)}), 200


@corporate_bp.route('/api/corporate/verify-code', methods=['POST'])
def verify_code():
    data = request.get_json() or {}
    code = data.get('corporate_code') or data.get('code')
    code = code.strip().upper() if isinstance(code, str) else ''
    if not code:
        return jsonify({"message": "Corporate code is required"}), 400

    reg = CorporateRegistration.query.filter_by(corporate_code=code, status="approved").first()
    if not reg:
        return jsonify({"message": "Invalid corporate code"}), 404

    return jsonify({
        "corporate": {"id": reg.id, "company_name": reg.company_name, "corporate_code": reg.corporate_code},
        "benefits": {
            "discount_percentage": current_app.config["CORPORATE_DISCOUNT_PERCENT"],
            "free_maintenance": True,
        },
    }), 200


@corporate_bp.route('/api/corporate/maintenance/enroll', methods=['POST'])
@jwt_required()
def enroll_maintenance():
    data = request.get_json() or {}
    code = data.get('corporate_code')
    code = code.strip().upper() if isinstance(code, str) else ''
    employee_id = str(data.get('employee_id') or '').strip()
    if not code or not employee_id:
        return jsonify({"message": "Corporate code and employee ID are required"}), 400

    reg = CorporateRegistration.query.filter_by(corporate_code=code, status="approved").first()
    if not reg:
        return jsonify({"message": "Invalid corporate code"}), 404

    schedule = MaintenanceSchedule(
        corporate_id=reg.id,
        user_id=current_user_id(),
        employee_id=employee_id,
        service_type=data.get('service_type') or "cleaning",
        scheduled_date=datetime.utcnow() + timedelta(days=MAINTENANCE_LEAD_DAYS),
        status="scheduled",
    )
    db.session.add(schedule)
    db.session.commit()
    return jsonify({"message": "Enrolled in maintenance programme", "schedule": serialize_schedule(schedule)}), 201


@corporate_bp.route('/api/corporate/maintenance/schedules', methods=['GET'])
@admin_required
def get_schedules():
    query = MaintenanceSchedule.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    schedules = query.order_by(MaintenanceSchedule.scheduled_date).all()
    return jsonify([serialize_schedule(s) for s in schedules]), 200


@corporate_bp.route('/api/corporate/maintenance/<int:schedule_id>/complete', methods=['PATCH'])
@admin_required
def complete_schedule(schedule_id):
    schedule = db.session.get(MaintenanceSchedule, schedule_id)
    if not schedule:
        return jsonify({"message": "Schedule not found"}), 404
    if schedule.status == "completed":
        raise InvalidTransition("Maintenance visit already completed")

    data = request.get_json(silent=True) or {}
    schedule.status = "completed"
    schedule.notes = data.get('notes')
    schedule.completed_at = datetime.utcnow()
    db.session.commit()
    return jsonify({"message": "Maintenance marked complete", "schedule": serialize_schedule(schedule)}), 200
