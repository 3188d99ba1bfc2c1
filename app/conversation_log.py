"""
Conversation log for WhatsApp and bridge users
Stores each question and reply in a local SQLite file for admin follow-up.
Never read back into prompts: every question is answered on its own.
"""
import sqlite3
import os
from typing import List, Dict
from contextlib import contextmanager

from app import config

@contextmanager
def get_conn():
    db_path = config.CONVERSATION_LOG_DB_PATH
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        yield conn
    finally:
        conn.close()

def init_conversation_log_db():
    """Initialize the conversation log database"""
    with get_conn() as conn:
        conn.execute("""
        CREATE TABLE IF NOT EXISTS conversation_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_identifier TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            channel TEXT
        )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_user_id ON conversation_log(user_identifier, id DESC)")
        conn.commit()

def log_message(user_identifier: str, role: str, content: str, channel: str = None):
    """
    Log a conversation message
    
    Args:
        user_identifier: Sender id (phone number / wa_id)
        role: Either "user" or "assistant"
        content: Message text content
        channel: "whatsapp" or "bridge"
    """
    if not config.CONVERSATION_LOG_ENABLED:
        return
    with get_conn() as conn:
        conn.execute(
            "INSERT INTO conversation_log (user_identifier, role, content, channel, timestamp) VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)",
            (user_identifier, role, content, channel)
        )
        conn.commit()

def get_recent_messages(user_identifier: str, limit: int = 100) -> List[Dict]:
    """
    Retrieve recent conversation messages for a user, oldest first
    
    Returns:
        List of message dictionaries with keys: role, content, timestamp, channel
    """
    with get_conn() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.execute(
            """SELECT role, content, timestamp, channel 
               FROM conversation_log 
               WHERE user_identifier = ? 
               ORDER BY id DESC 
               LIMIT ?""",
            (user_identifier, limit)
        )
        messages = [dict(row) for row in cursor.fetchall()]
        return list(reversed(messages))

def cleanup_old_messages(days: int = 30) -> int:
    """Delete messages older than specified days to keep database manageable"""
    with get_conn() as conn:
        cursor = conn.execute(
            "DELETE FROM conversation_log WHERE timestamp < datetime('now', ?)",
            (f'-{days} days',)
        )
        conn.commit()
        return cursor.rowcount
