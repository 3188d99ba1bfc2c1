"""Answer synthesizer: relevance gate, retrieval, generation and fallback.

Every path returns a plain string to the transport layer: a generated
answer, the out-of-domain message, the escalate-to-admin message or the
error message. Exceptions never leave `AnswerService.answer`.
"""
import logging
from typing import Iterable, Optional, Tuple

from app import config
from app.knowledge_base import KnowledgeBase
from app.llm_client import LanguageModel, OpenAIChatModel
from app.rag.embedder import OpenAIEmbedder
from app.rag.prompt import PromptTemplate, format_today
from app.rag.relevance import DEFAULT_KEYWORDS, KeywordRelevanceGate, RelevanceClassifier
from app.rag.vector_index import DEFAULT_TOP_K, VectorIndex, get_backend_factory

logger = logging.getLogger(__name__)

OUT_OF_DOMAIN_MESSAGE = (
    "Sistem ini hanya melayani pertanyaan seputar rekrutmen mitra BPS Kabupaten Enrekang tahun 2026. "
    "Untuk pertanyaan lain, silakan hubungi admin BPS Kabupaten Enrekang. 🙏"
)
ESCALATION_MESSAGE = (
    "Pertanyaan tersebut akan diteruskan kepada admin BPS Kabupaten Enrekang. "
    "Mohon tunggu balasan selanjutnya. 🙏"
)
ERROR_MESSAGE = (
    "Terjadi kesalahan saat mengakses knowledge base. "
    "Admin akan segera membalas pesan kamu."
)

# Phrases that mean the model could not answer from the knowledge base
LOW_CONFIDENCE_MARKERS: Tuple[str, ...] = (
    "tidak tahu",
    "tidak ditemukan",
    "tidak ada informasi",
    "maaf",
)
MIN_ANSWER_LENGTH = 20


def apply_quality_fallback(
    answer: Optional[str],
    markers: Iterable[str] = LOW_CONFIDENCE_MARKERS,
    min_length: int = MIN_ANSWER_LENGTH,
    fallback: str = ESCALATION_MESSAGE,
) -> str:
    """Replace empty, uncertain or too-short answers with the escalation message."""
    text = (answer or "").strip()
    lowered = text.lower()
    if not text or len(lowered) < min_length or any(m in lowered for m in markers):
        return fallback
    return text


class AnswerService:

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        gate: RelevanceClassifier,
        llm: LanguageModel,
        template: PromptTemplate = PromptTemplate(),
        top_k: int = DEFAULT_TOP_K,
        timezone: str = config.DEPLOYMENT_TIMEZONE,
    ):
        self.knowledge_base = knowledge_base
        self.gate = gate
        self.llm = llm
        self.template = template
        self.top_k = top_k
        self.timezone = timezone

    @property
    def index(self) -> VectorIndex:
        return self.knowledge_base.index

    async def answer(self, question: str) -> str:
        """Answer a question from the knowledge base. Never raises."""
        try:
            await self.knowledge_base.ensure_loaded()

            if not self.gate.is_relevant(question):
                logger.info(f"[ANSWER] Out of context: {question!r}")
                return OUT_OF_DOMAIN_MESSAGE

            logger.info(f"[ANSWER] In context, matched {list(self.gate.matched_keywords(question))}")

            passages = await self.index.query(question, k=self.top_k)
            today = format_today(tz=self.timezone)
            logger.info(f"[ANSWER] Retrieved {len(passages)} passages, today is {today}")

            prompt = self.template.render(question, passages, today)
            raw_answer = await self.llm.complete(prompt)

            answer = apply_quality_fallback(raw_answer)
            if answer == ESCALATION_MESSAGE:
                logger.info(f"[ANSWER] Low-confidence answer escalated to admin: {raw_answer!r}")
            return answer
        except Exception as e:
            logger.exception(f"[ANSWER] Error while processing knowledge base: {e}")
            return ERROR_MESSAGE


def build_answer_service() -> AnswerService:
    """Wire the default stack from app.config."""
    index = VectorIndex(
        OpenAIEmbedder(model=config.EMBEDDING_MODEL),
        backend_factory=get_backend_factory(config.RETRIEVAL_BACKEND),
    )
    knowledge_base = KnowledgeBase(config.KNOWLEDGE_PATH, index)
    gate = KeywordRelevanceGate(DEFAULT_KEYWORDS + tuple(config.RELEVANCE_EXTRA_KEYWORDS))
    template = PromptTemplate(operator_notice=config.OPERATOR_NOTICE)

    return AnswerService(
        knowledge_base,
        gate,
        OpenAIChatModel(),
        template=template,
        top_k=config.TOP_K,
    )
