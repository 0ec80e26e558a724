"""FAQ knowledge base for automated answers."""

from ticketbot.services.faq.knowledge_base import (
    FAQ_MIN_SCORE,
    FAQEntry,
    FAQSearchResult,
    KnowledgeBase,
    format_faq_context,
    load_faq_entries,
)

__all__ = [
    "FAQ_MIN_SCORE",
    "FAQEntry",
    "FAQSearchResult",
    "KnowledgeBase",
    "format_faq_context",
    "load_faq_entries",
]
