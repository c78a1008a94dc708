import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]
load_dotenv(BASE_DIR / ".env")


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Storage
DATABASE_URL = os.getenv("DATABASE_URL", "")
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
# Always the same file under the data directory
SQLITE_PATH = DATA_DIR / "chatbot.db"

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "30"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "2"))
DB_SSL = os.getenv("DB_SSL", "1" if APP_ENV == "production" else "0") == "1"

SESSION_LOG_LIMIT = 100
SESSION_MESSAGE_LIMIT = 20
ALL_MESSAGES_LIMIT = 100

# LLM
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "your-default-api-key")
MODEL = os.getenv("MODEL", "gpt-4o-mini")
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "300"))
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.7"))
CONTEXT_PATH = Path(os.getenv("CONTEXT_PATH", str(DATA_DIR / "summary.txt")))

# Auth
AUTHORIZED_EMAILS = _csv(os.getenv("AUTHORIZED_EMAILS", "admin@stackcreamery.com"))
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "stackcreamery2024")

CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:3000"))

# Chat
CATEGORIES = {
    "hours": ["hour", "open", "close", "time"],
    "menu": ["menu", "flavor", "ice cream", "dessert"],
    "location": ["location", "address", "where", "direction"],
    "catering": ["cater", "event", "party", "wedding"],
    "dietary": ["allergen", "vegan", "gluten", "dairy"],
    "seasonal": ["seasonal", "special", "limited"],
    "giftcards": ["gift", "card"],
    "ordering": ["order", "delivery", "pickup"],
}
INAPPROPRIATE_TERMS = ["hate", "violence", "illegal", "drug", "weapon"]
UNKNOWN_ANSWER_MARKERS = ["I don't know", "I'm not sure", "contact the store"]

FALLBACK_REPLY = "🦭 Sorry, I'm having a brain freeze right now! Please try asking me again in a moment."
INAPPROPRIATE_REPLY = (
    "🦭 Oops! I'm just here to help with Stack Creamery questions - let's keep things sweet and friendly! "
    "What can I help you with about our delicious ice cream?"
)
