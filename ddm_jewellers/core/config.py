from datetime import timedelta
import os
from dotenv import load_dotenv

load_dotenv()
class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///ddm_jewellers.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    MAIL_SERVER = 'smtp.gmail.com'
    MAIL_PORT = 587
    MAIL_USE_TLS = True
    MAIL_USERNAME = os.getenv("USERNAME_FOR_EMAIL")
    MAIL_PASSWORD = os.getenv("PASSWORD_FOR_EMAIL")
    MAIL_DEFAULT_SENDER = os.getenv("USERNAME_FOR_EMAIL", "no-reply@ddmjewellers.in")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5000")

    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET")

    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_CHAT_MODEL = os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o")

    METALS_API_KEY = os.environ.get("METALS_API_KEY")
    ALPHA_VANTAGE_API_KEY = os.environ.get("ALPHA_VANTAGE_API_KEY")
    FINNHUB_API_KEY = os.environ.get("FINNHUB_API_KEY")
    MARKET_RATES_USE_FREE_API = True
    HTTP_TIMEOUT = 10

    # business rules
    GST_RATE = 0.03
    FREE_SHIPPING_THRESHOLD = 25000
    SHIPPING_FEE = 500
    USD_TO_INR = 83
    CORPORATE_DISCOUNT_PERCENT = 10
    MAX_AUDIO_BYTES = 25 * 1024 * 1024
    MAX_IMAGE_BYTES = 10 * 1024 * 1024


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    MAIL_SUPPRESS_SEND = True
    BCRYPT_LOG_ROUNDS = 4
    MAIL_DEFAULT_SENDER = "test@ddmjewellers.in"
    OPENAI_API_KEY = None
    METALS_API_KEY = None
    ALPHA_VANTAGE_API_KEY = None
    FINNHUB_API_KEY = None
    MARKET_RATES_USE_FREE_API = False
    CLOUDINARY_CLOUD_NAME = None
