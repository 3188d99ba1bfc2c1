"""
Keyword relevance gate.

Decides, before any retrieval or model call, whether a question belongs to
the recruitment domain. Matching is a lower-cased substring test, so it is
high recall: off-topic questions that happen to contain a keyword pass and
are left to the model, while on-topic questions phrased without any keyword
are rejected.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Tuple

# Recruitment / registration / testing vocabulary
DEFAULT_KEYWORDS: Tuple[str, ...] = (
    "mitra",
    "bps",
    "rekrut",
    "pendaftaran",
    "sobat",
    "akun",
    "registrasi",
    "tes",
    "seleksi",
    "administrasi",
    "kompetensi",
    "pengumuman",
    "pakta",
    "integritas",
    "dokumen",
    "berkas",
    "data diri",
    "petugas",
    "enrekang",
    "daftar",
    "mendaftar",
    "jadwal",
    "login",
    "cara",
    "rekruitmen",
)


class RelevanceClassifier(ABC):
    """Decides whether a question is in the supported domain."""

    @abstractmethod
    def is_relevant(self, question: str) -> bool:
        raise NotImplementedError

    def matched_keywords(self, question: str) -> Tuple[str, ...]:
        return ()


class KeywordRelevanceGate(RelevanceClassifier):

    def __init__(self, keywords: Iterable[str] = DEFAULT_KEYWORDS):
        self.keywords: Tuple[str, ...] = tuple(kw.lower() for kw in keywords if kw)

    def is_relevant(self, question: str) -> bool:
        lowered = (question or "").lower()
        return any(kw in lowered for kw in self.keywords)

    def matched_keywords(self, question: str) -> Tuple[str, ...]:
        """Keywords found in the question, for logging."""
        lowered = (question or "").lower()
        return tuple(kw for kw in self.keywords if kw in lowered)
