from ddm_jewellers.core.imports import Blueprint, jsonify, jwt_required, request, Response, current_app
from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.security import current_user_id
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.models.chatModels import ChatConversation
from ddm_jewellers.routes.catalog import serialize_product
from ddm_jewellers.services import assistant
from ddm_jewellers.services.market_rates import get_current_rates
from ddm_jewellers.services.uploads import upload_file, ALLOWED_DESIGN_EXTENSIONS

chatbot_bp = Blueprint('chatbot', __name__)

ALLOWED_AUDIO_EXTENSIONS = {"mp3", "mp4", "m4a", "wav", "webm", "ogg", "mpeg", "mpga"}


@chatbot_bp.route('/api/chatbot/memory', methods=['GET'])
@jwt_required()
def get_memory():
    return jsonify(assistant.serialize_memory(assistant.get_memory(current_user_id()))), 200


@chatbot_bp.route('/api/chatbot/memory', methods=['POST'])
@jwt_required()
def save_memory():
    memory = assistant.upsert_memory(current_user_id(), request.get_json() or {})
    return jsonify(assistant.serialize_memory(memory)), 200


@chatbot_bp.route('/api/chatbot/conversation', methods=['POST'])
@jwt_required()
def save_conversation():
    data = request.get_json() or {}
    session_id = data.get('session_id') or data.get('sessionId')
    messages = data.get('messages')
    if not session_id or not isinstance(messages, list):
        return jsonify({"message": "session_id and a list of messages are required"}), 400

    conversation = ChatConversation(user_id=current_user_id(), session_id=session_id, messages=messages)
    db.session.add(conversation)
    db.session.commit()
    return jsonify({
        "id": conversation.id,
        "session_id": conversation.session_id,
        "messages": conversation.messages,
        "created_at": conversation.created_at.isoformat() if conversation.created_at else None,
    }), 201


@chatbot_bp.route('/api/chatbot/chat', methods=['POST'])
@jwt_required()
def chat():
    """
    Chat with Sunaarji, the jewelry consultant
    ---
    tags:
      - AI Assistant
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [message]
          properties:
            message: { type: string, example: "What should I wear to my cousin's sangeet?" }
            user_profile:
              type: object
              properties:
                age: { type: string }
                lifestyle: { type: string }
                preferences: { type: object }
    responses:
      200:
        description: Assistant reply
      502:
        description: Upstream AI service failed
      503:
        description: AI assistant not configured
    """
    data = request.get_json() or {}
    reply = assistant.chat(current_user_id(), data.get('message'), data.get('user_profile') or data.get('userProfile'))
    return jsonify({"response": reply}), 200


@chatbot_bp.route('/api/chatbot/speech-to-text', methods=['POST'])
@jwt_required()
def speech_to_text():
    audio = request.files.get('audio')
    if audio is None or audio.filename == "":
        return jsonify({"message": "No audio file uploaded"}), 400
    if "." in audio.filename and audio.filename.rsplit(".", 1)[1].lower() not in ALLOWED_AUDIO_EXTENSIONS:
        return jsonify({"message": "Unsupported audio format"}), 400

    audio.stream.seek(0, 2)
    size = audio.stream.tell()
    audio.stream.seek(0)
    if size > current_app.config["MAX_AUDIO_BYTES"]:
        return jsonify({"message": "Audio file must be 25 MB or smaller"}), 400

    return jsonify({"text": assistant.transcribe(audio)}), 200


@chatbot_bp.route('/api/chatbot/text-to-speech', methods=['POST'])
@jwt_required()
def text_to_speech():
    data = request.get_json() or {}
    audio = assistant.synthesize(data.get('text'))
    return Response(audio, mimetype="audio/mpeg", headers={"Content-Length": str(len(audio))})


@chatbot_bp.route('/api/shingaar-guru/recommendations', methods=['POST'])
def shingaar_guru():
    """
    Shingaar Guru: styling advice plus matching pieces from the catalog
    ---
    tags:
      - AI Assistant
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            occasion: { type: string, example: "wedding" }
            budget:
              type: array
              items: { type: number }
              example: [20000, 150000]
            metal_preference: { type: string, example: "gold" }
            style: { type: string, example: "traditional" }
            outfit: { type: string }
    responses:
      200:
        description: Advice and up to six products
      400:
        description: Invalid budget
    """
    data = request.get_json() or {}
    try:
        picks = assistant.recommend_products(data.get('budget'), data.get('metal_preference'))
    except ValueError as e:
        return jsonify({"message": str(e)}), 400
    advice, source = assistant.styling_advice(data)

    rates = get_current_rates()
    return jsonify({
        "advice": advice,
        "advice_source": source,
        "products": [serialize_product(product, rates) for product, _ in picks],
    }), 200


@chatbot_bp.route('/api/ai-tryon/upload', methods=['POST'])
@jwt_required()
def ai_tryon_upload():
    product_id = request.form.get('product_id', type=int)
    if not product_id or not Product.query.filter_by(id=product_id, is_active=True).first():
        return jsonify({"message": "Product not found"}), 404

    url = upload_file(request.files.get('photo'), folder="ddm/try-on")
    return jsonify({
        "message": "Photo processed successfully!",
        "photo_url": url,
        "product_id": product_id,
        "note": "AI try-on feature is in beta. The processed image will be available shortly.",
    }), 201


@chatbot_bp.route('/api/custom-jewelry/upload', methods=['POST'])
@jwt_required()
def custom_jewelry_upload():
    url = upload_file(request.files.get('design'), folder="ddm/custom-designs", extensions=ALLOWED_DESIGN_EXTENSIONS,
                      resource_type="auto")
    return jsonify({"message": "Design uploaded", "design_url": url,
                    "description": request.form.get('description')}), 201
