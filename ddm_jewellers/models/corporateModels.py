from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import datetime


class CorporateRegistration(db.Model):
    __tablename__ = "corporate_registrations"

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(255), nullable=False)
    registration_number = db.Column(db.String(100))
    gstin = db.Column(db.String(15))
    company_address = db.Column(db.Text)
    contact_person_name = db.Column(db.String(100), nullable=False)
    contact_person_phone = db.Column(db.String(20))
    contact_person_email = db.Column(db.String(255), nullable=False)
    company_email = db.Column(db.String(255))
    approximate_employees = db.Column(db.Integer, default=0)
    purpose_of_tieup = db.Column(db.Text)

    status = db.Column(db.String(20), default="pending")  # pending, approved, rejected
    corporate_code = db.Column(db.String(20), unique=True, nullable=True, index=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    approved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MaintenanceSchedule(db.Model):
    __tablename__ = "maintenance_schedules"

    id = db.Column(db.Integer, primary_key=True)
    corporate_id = db.Column(db.Integer, db.ForeignKey("corporate_registrations.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    employee_id = db.Column(db.String(100), nullable=False)
    service_type = db.Column(db.String(50), default="cleaning")
    scheduled_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), default="scheduled")  # scheduled, completed
    notes = db.Column(db.Text)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    corporate = db.relationship("CorporateRegistration", backref="maintenance_schedules")
    user = db.relationship("User")
