"""
Prompt construction for the answer synthesizer.

Builds the single user prompt sent to the language model: persona and scope
rules, today's date in the deployment's local calendar, the two canned
fallback phrasings the model should use, the retrieved passages and the
question verbatim.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pytz import timezone, utc

from .chunker import KnowledgeChunk

DEFAULT_TIMEZONE = "Asia/Makassar"

INDONESIAN_DAYS = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]
INDONESIAN_MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_today(now: Optional[datetime] = None, tz: str = DEFAULT_TIMEZONE) -> str:
    """Format a date the Indonesian way, e.g. 'Senin, 19 Oktober 2026'.

    Naive datetimes are taken as UTC before conversion to tz.
    """
    zone = timezone(tz)
    if now is None:
        now = datetime.now(zone)
    elif now.tzinfo is None:
        now = utc.localize(now).astimezone(zone)
    else:
        now = now.astimezone(zone)

    return f"{INDONESIAN_DAYS[now.weekday()]}, {now.day} {INDONESIAN_MONTHS[now.month - 1]} {now.year}"


def format_context(passages: List[KnowledgeChunk]) -> str:
    return "\n\n".join(p.text for p in passages)


@dataclass(frozen=True)
class PromptTemplate:
    """Persona and scope wording for one deployment."""
    assistant_name: str = "ADIMAS"
    organization: str = "Badan Pusat Statistik (BPS) Kabupaten Enrekang"
    scope: str = "rekrutmen mitra BPS Kabupaten Enrekang tahun 2026"
    timezone_label: str = "zona waktu Indonesia bagian tengah - WITA"
    out_of_scope_reply: str = (
        "Pertanyaan tersebut bukan pertanyaan terkait rekrutmen mitra BPS Kabupaten Enrekang. 🙏"
    )
    escalation_reply: str = (
        "Pertanyaan tersebut akan diteruskan kepada admin BPS Kabupaten Enrekang. "
        "Mohon tunggu balasan selanjutnya. 🙏"
    )
    # Stage currently running (e.g. online competency test window), set by operators
    operator_notice: str = ""

    def render(self, question: str, passages: List[KnowledgeChunk], today: str) -> str:
        notice = ""
        if self.operator_notice:
            notice = f"- Tambahan informasi untuk kamu: {self.operator_notice}\n"

        return f"""Anda adalah {self.assistant_name}, asisten virtual resmi {self.organization}.

📅 Saat ini adalah {today} ({self.timezone_label}).
Gunakan informasi waktu ini untuk menjawab pertanyaan yang berkaitan dengan tanggal, durasi, atau status pendaftaran/seleksi.

🎯 Tugas utama Anda:
- Jawab **hanya pertanyaan seputar {self.scope}**.
- Semua jawaban berdasarkan knowledge base di bawah.
- Jika pengguna menanyakan waktu atau tanggal (misalnya "sudah dimulai belum", "berapa hari lagi", "kapan dimulai"), gunakan tanggal saat ini ({today}) untuk menghitung atau menilai statusnya.
- Jika pertanyaan tidak relevan dengan topik rekrutmen, jawab:
  "{self.out_of_scope_reply}"
- Jika topiknya masih relevan tapi tidak ditemukan di knowledge base, jawab:
  "{self.escalation_reply}"
{notice}
Gunakan bahasa sopan, profesional, dan ringkas.

---
📚 Knowledge Base:
{format_context(passages)}

❓ Pertanyaan pengguna:
{question}

💬 Jawaban {self.assistant_name}:
"""
