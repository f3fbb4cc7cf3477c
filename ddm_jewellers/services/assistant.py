"""
Sunaarji, the in-store jewelry consultant, plus voice and styling helpers.

Talks to the OpenAI HTTP API directly with ``requests``.
"""
import logging

from ddm_jewellers.core.extensions import db
from ddm_jewellers.core.imports import requests, current_app
from ddm_jewellers.core.errors import ExternalServiceError, ServiceUnavailable, ValidationFailed
from ddm_jewellers.models.chatModels import UserMemory
from ddm_jewellers.models.catalogModels import Product
from ddm_jewellers.services.pricing import price_product, to_decimal
from ddm_jewellers.services.market_rates import get_current_rates

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 6

CANNED_ADVICE = {
    "wedding": "For a wedding, a statement necklace with matching jhumkas is timeless. Keep bangles in the same metal tone.",
    "festival": "Festivals are perfect for temple jewelry or a bright kundan set paired with simple studs.",
    "office": "For everyday office wear, pick lightweight studs, a slim chain and a single bangle or bracelet.",
    "party": "For a party, let one piece shine: statement earrings or a cocktail ring, with the rest kept minimal.",
}
DEFAULT_ADVICE = "Choose one hero piece and keep the rest simple. Match metal tones and consider your neckline and outfit colours."


def _api_key():
    key = current_app.config.get("OPENAI_API_KEY")
    if not key:
        raise ServiceUnavailable("AI assistant is not configured")
    return key


def _post(path, **kwargs):
    headers = {"Authorization": f"Bearer {_api_key()}"}
    url = f"{current_app.config['OPENAI_BASE_URL'].rstrip('/')}/{path}"
    try:
        response = requests.post(url, headers=headers, timeout=current_app.config.get("HTTP_TIMEOUT", 10) * 3, **kwargs)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"OpenAI request to {path} failed: {e}")
        raise ExternalServiceError("AI service request failed")
    return response


def get_memory(user_id):
    return UserMemory.query.filter_by(user_id=user_id).first()


def upsert_memory(user_id, data):
    """Store age/lifestyle and merge preferences into what is already remembered."""
    memory = get_memory(user_id)
    if memory is None:
        memory = UserMemory(user_id=user_id, preferences={})
        db.session.add(memory)
    if data.get("age"):
        memory.age = str(data["age"])
    if data.get("lifestyle"):
        memory.lifestyle = data["lifestyle"]
    if isinstance(data.get("preferences"), dict):
        # reassign so the JSON column is flagged dirty
        memory.preferences = {**(memory.preferences or {}), **data["preferences"]}
    db.session.commit()
    return memory


def serialize_memory(memory):
    if memory is None:
        return None
    return {
        "id": memory.id,
        "user_id": memory.user_id,
        "age": memory.age,
        "lifestyle": memory.lifestyle,
        "preferences": memory.preferences or {},
        "updated_at": memory.updated_at.isoformat() if memory.updated_at else None,
    }


def build_persona(memory):
    context = "You are Sunaarji, a warm and friendly Indian jewelry consultant at DDM_Jewellers. "
    context += "You use occasional Indian phrases like 'ji', 'beta', 'baisaheb' but remain professional. "
    context += "Give tasteful, practical jewelry advice - not pushy or salesy. "
    if memory is not None:
        preferences = memory.preferences or {}
        if memory.age:
            context += f"The customer is {memory.age} years old. "
        if memory.lifestyle:
            context += f"Their lifestyle: {memory.lifestyle}. "
        if preferences.get("favoriteMetals"):
            context += f"They prefer {', '.join(preferences['favoriteMetals'])} metals. "
        if preferences.get("budgetRange"):
            context += f"Their budget range: {preferences['budgetRange']}. "
    return context


def complete(system_prompt, user_message, max_tokens=300):
    response = _post("chat/completions", json={
        "model": current_app.config.get("OPENAI_CHAT_MODEL", "gpt-4o"),
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
        "max_tokens": max_tokens,
        "temperature": 0.7,
    })
    try:
        return response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError):
        logger.error("Unexpected chat completion payload")
        raise ExternalServiceError("AI service returned an invalid response")


def chat(user_id, message, user_profile=None):
    if not (message or "").strip():
        raise ValidationFailed("Message is required")
    reply = complete(build_persona(get_memory(user_id)), message)
    if user_profile:
        upsert_memory(user_id, user_profile)
    return reply


def transcribe(audio_file):
    response = _post(
        "audio/transcriptions",
        data={"model": "whisper-1"},
        files={"file": (audio_file.filename, audio_file.stream, audio_file.mimetype or "application/octet-stream")},
    )
    return response.json().get("text", "")


def synthesize(text):
    if not (text or "").strip():
        raise ValidationFailed("Text is required")
    response = _post("audio/speech", json={"model": "tts-1", "voice": "nova", "input": text})
    return response.content


def _budget_bounds(budget):
    if not budget:
        return None, None
    if not isinstance(budget, (list, tuple)) or len(budget) != 2:
        raise ValidationFailed("budget must be [min, max]")
    low, high = to_decimal(budget[0]), to_decimal(budget[1])
    if low > high:
        raise ValidationFailed("budget minimum exceeds maximum")
    return low, high


def recommend_products(budget=None, metal_preference=None):
    low, high = _budget_bounds(budget)
    query = Product.query.filter_by(is_active=True)
    if metal_preference and metal_preference not in ("any", "all"):
        query = query.filter(Product.material.ilike(f"%{metal_preference}%"))

    rates = get_current_rates()
    picks = []
    for product in query.order_by(Product.is_featured.desc(), Product.created_at.desc()).all():
        price = price_product(product, rates).final_price
        if low is not None and not low <= price <= high:
            continue
        picks.append((product, price))
        if len(picks) == MAX_RECOMMENDATIONS:
            break
    return picks


def styling_advice(profile):
    occasion = (profile.get("occasion") or "").lower()
    fallback = CANNED_ADVICE.get(occasion, DEFAULT_ADVICE)
    prompt = (
        "Suggest jewelry styling for: "
        f"occasion {profile.get('occasion') or 'any'}, style {profile.get('style') or 'any'}, "
        f"metal {profile.get('metal_preference') or 'any'}, outfit {profile.get('outfit') or 'not specified'}. "
        "Answer in three short sentences."
    )
    try:
        return complete(build_persona(None), prompt, max_tokens=200), "assistant"
    except (ServiceUnavailable, ExternalServiceError):
        return fallback, "canned"
