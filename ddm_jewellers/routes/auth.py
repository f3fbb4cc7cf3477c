from ddm_jewellers.core.imports import Blueprint, jsonify, request, create_access_token, jwt_required, secrets, datetime, timedelta, SQLAlchemyError
from ddm_jewellers.core.extensions import db, bcrypt
from ddm_jewellers.core.security import current_user_id
from ddm_jewellers.models.userModel import User, PasswordResetToken, UserActivityLog
from ddm_jewellers.services.emails import send_verification_email, send_password_reset_email

auth_bp = Blueprint('auth', __name__)

OTP_VALID_MINUTES = 60
MIN_PASSWORD_LENGTH = 6


def seed_demo_users():
    demo_users = [
        {"email": "admin@ddmjewellers.in", "password": "Admin@123", "first_name": "Store", "last_name": "Admin", "role": "admin"},
        {"email": "demo@customer.com", "password": "password123", "first_name": "Priya", "last_name": "Sharma", "role": "customer"},
    ]
    for data in demo_users:
        if User.query.filter_by(email=data["email"]).first():
            print(f"ℹ️ Demo {data['role']} already exists.")
            continue
        user = User(
            email=data["email"],
            password=bcrypt.generate_password_hash(data["password"]).decode('utf-8'),
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=data["role"],
            is_active=True,
            is_approved=True,
            is_email_verified=True,
        )
        db.session.add(user)
        db.session.commit()
        print(f"✅ Demo {data['role']} created (email={data['email']}, password={data['password']})")


def log_activity(user, action, details=None):
    db.session.add(UserActivityLog(
        user_id=user.id,
        action=action,
        details=details or {},
        ip_address=request.headers.get("X-Forwarded-For", request.remote_addr),
        user_agent=request.headers.get("User-Agent"),
    ))


def serialize_user(user):
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "profile_image_url": user.profile_image_url,
        "role": user.role,
        "is_active": user.is_active,
        "is_email_verified": user.is_email_verified,
        "is_approved": user.is_approved,
        "business_name": user.business_name,
        "business_address": user.business_address,
        "gst_number": user.gst_number,
        "last_login_at": user.last_login_at.isoformat() if user.last_login_at else None,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _validate_signup(data):
    required = ['first_name', 'last_name', 'email', 'password', 'confirm_password']
    if not all(data.get(field) for field in required):
        return "All required fields must be filled"
    if "@" not in data['email']:
        return "Invalid email address"
    if len(data['password']) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if data['password'] != data['confirm_password']:
        return "Passwords do not match"
    return None


def _create_account(data, role, **extra):
    email = data['email'].strip().lower()
    if User.query.filter_by(email=email).first():
        return jsonify({"message": "Account with this email already exists"}), 409

    user = User(
        email=email,
        password=bcrypt.generate_password_hash(data['password']).decode('utf-8'),
        first_name=data['first_name'].strip(),
        last_name=data['last_name'].strip(),
        phone=data.get('phone'),
        role=role,
        is_active=True,
        is_email_verified=False,
        email_verification_token=secrets.token_urlsafe(32),
        **extra,
    )
    try:
        db.session.add(user)
        db.session.flush()
        log_activity(user, "signup", {"role": role})
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"message": "Error creating account"}), 500

    send_verification_email(user)
    return jsonify({"message": "Account created. Please check your email to verify your address.", "user": serialize_user(user)}), 201


@auth_bp.route('/api/auth/signup/customer', methods=['POST'])
def signup_customer():
    """
    Register a customer account
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [first_name, last_name, email, password, confirm_password]
          properties:
            first_name: { type: string, example: "Priya" }
            last_name: { type: string, example: "Sharma" }
            email: { type: string, example: "priya@example.com" }
            phone: { type: string, example: "9876543210" }
            password: { type: string, example: "secret123" }
            confirm_password: { type: string, example: "secret123" }
    responses:
      201:
        description: Account created, verification email sent
      400:
        description: Missing or invalid fields
      409:
        description: Email already registered
    """
    data = request.get_json() or {}
    error = _validate_signup(data)
    if error:
        return jsonify({"message": error}), 400
    return _create_account(data, "customer", is_approved=True)


@auth_bp.route('/api/auth/signup/wholesaler', methods=['POST'])
def signup_wholesaler():
    """
    Register a wholesaler account (requires admin approval)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [first_name, last_name, email, password, confirm_password, business_name]
          properties:
            first_name: { type: string }
            last_name: { type: string }
            email: { type: string }
            password: { type: string }
            confirm_password: { type: string }
            business_name: { type: string, example: "Shree Gems Pvt Ltd" }
            business_address: { type: string }
            gst_number: { type: string, example: "27AAPFU0939F1ZV" }
    responses:
      201:
        description: Account created, pending approval
      400:
        description: Missing or invalid fields
      409:
        description: Email already registered
    """
    data = request.get_json() or {}
    error = _validate_signup(data)
    if error:
        return jsonify({"message": error}), 400
    if not data.get('business_name'):
        return jsonify({"message": "Business name is required"}), 400
    return _create_account(
        data, "wholesaler",
        is_approved=False,
        business_name=data['business_name'],
        business_address=data.get('business_address'),
        gst_number=data.get('gst_number'),
    )


@auth_bp.route('/api/auth/signin', methods=['POST'])
def signin():
    """
    Sign in with email and password
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string, example: "demo@customer.com" }
            password: { type: string, example: "password123" }
    responses:
      200:
        description: Signed in
        schema:
          type: object
          properties:
            access_token: { type: string }
            user: { type: object }
      401:
        description: Invalid credentials
      403:
        description: Account is deactivated
    """
    data = request.get_json() or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not bcrypt.check_password_hash(user.password, password):
        if user:
            log_activity(user, "failed_login")
            db.session.commit()
        return jsonify({"message": "Invalid email or password"}), 401

    if not user.is_active:
        return jsonify({"message": "Account is deactivated"}), 403

    user.last_login_at = datetime.utcnow()
    log_activity(user, "login")
    db.session.commit()

    access_token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return jsonify({
        "message": "Login successful",
        "access_token": access_token,
        "user": serialize_user(user),
    }), 200


@auth_bp.route('/api/auth/verify-email/<token>', methods=['GET'])
def verify_email(token):
    user = User.query.filter_by(email_verification_token=token).first()
    if not user:
        return jsonify({"message": "Invalid or expired verification link"}), 400

    user.is_email_verified = True
    user.email_verification_token = None
    db.session.commit()
    return jsonify({"message": "Email verified successfully"}), 200


@auth_bp.route('/api/auth/forgot-password', methods=['POST'])
def forgot_password():
    """
    Request a password reset code
    ---
    tags:
      - Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            email: { type: string }
    responses:
      200:
        description: A code is emailed if the account exists
    """
    data = request.get_json() or {}
    email = (data.get('email') or '').strip().lower()
    if not email:
        return jsonify({"message": "Email is required"}), 400

    user = User.query.filter_by(email=email).first()
    if user:
        otp_code = f"{secrets.randbelow(900000) + 100000}"
        PasswordResetToken.query.filter_by(email=email).delete()
        db.session.add(PasswordResetToken(
            email=email,
            otp_code=otp_code,
            expires_at=datetime.utcnow() + timedelta(minutes=OTP_VALID_MINUTES),
        ))
        db.session.commit()
        send_password_reset_email(email, otp_code)

    return jsonify({"message": "If an account exists for this email, a reset code has been sent"}), 200


@auth_bp.route('/api/auth/reset-password', methods=['POST'])
def reset_password():
    data = request.get_json() or {}
    email = (data.get('email') or '').strip().lower()
    otp = data.get('otp')
    new_password = data.get('new_password') or ''

    if not email or not otp or not new_password:
        return jsonify({"message": "Email, OTP and new password are required"}), 400
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return jsonify({"message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}), 400

    token = PasswordResetToken.query.filter_by(email=email, otp_code=str(otp)).first()
    if not token or token.expires_at < datetime.utcnow():
        return jsonify({"message": "Invalid or expired OTP"}), 400

    user = User.query.filter_by(email=email).first()
    if not user:
        return jsonify({"message": "User not found"}), 404

    user.password = bcrypt.generate_password_hash(new_password).decode('utf-8')
    PasswordResetToken.query.filter_by(email=email).delete()
    log_activity(user, "password_reset")
    db.session.commit()
    return jsonify({"message": "Password reset successful"}), 200


@auth_bp.route('/api/auth/user', methods=['GET'])
@jwt_required()
def get_current_user():
    """
    Get the signed-in user's profile
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: User profile
      404:
        description: User not found
    """
    user = db.session.get(User, current_user_id())
    if not user:
        return jsonify({"message": "User not found"}), 404
    return jsonify(serialize_user(user)), 200
