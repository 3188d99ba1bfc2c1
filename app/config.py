import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env')

BASE_DIR = Path(__file__).parent.parent

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
# Pinned: identical questions against identical context should give the same answer
LLM_TEMPERATURE = 0

# WhatsApp Cloud API Configuration
WHATSAPP_TOKEN = os.getenv("WHATSAPP_TOKEN")
PHONE_NUMBER_ID = os.getenv("PHONE_NUMBER_ID")
GRAPH_API_URL = os.getenv("GRAPH_API_URL", "https://graph.facebook.com")
GRAPH_API_VERSION = os.getenv("GRAPH_API_VERSION", "v21.0")

# Webhook Configuration
VERIFY_TOKEN = os.getenv("VERIFY_TOKEN")
APP_SECRET = os.getenv("APP_SECRET")  # Optional, enables X-Hub-Signature-256 checks
PORT = int(os.getenv("PORT", "3000"))

# Client bridge (QR-paired WhatsApp client running as a sidecar)
BRIDGE_PASSKEY = os.getenv("BRIDGE_PASSKEY")

# Knowledge base / retrieval
KNOWLEDGE_PATH = os.getenv("KNOWLEDGE_PATH", str(BASE_DIR / "data" / "knowledge.txt"))
RETRIEVAL_BACKEND = os.getenv("RETRIEVAL_BACKEND", "memory")  # memory | chroma
TOP_K = int(os.getenv("TOP_K", "3"))

# Relevance gate: extra comma separated keywords appended to the built-in set
RELEVANCE_EXTRA_KEYWORDS = [
    kw.strip() for kw in os.getenv("RELEVANCE_EXTRA_KEYWORDS", "").split(",") if kw.strip()
]

# Prompt context
DEPLOYMENT_TIMEZONE = os.getenv("DEPLOYMENT_TIMEZONE", "Asia/Makassar")  # WITA
OPERATOR_NOTICE = os.getenv("OPERATOR_NOTICE", "")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")

# Conversation log
CONVERSATION_LOG_ENABLED = os.getenv("CONVERSATION_LOG_ENABLED", "true").lower() == "true"
CONVERSATION_LOG_DB_PATH = os.getenv("CONVERSATION_LOG_DB_PATH", "app/conversation_log.db")
CONVERSATION_LOG_RETENTION_DAYS = int(os.getenv("CONVERSATION_LOG_RETENTION_DAYS", "30"))
