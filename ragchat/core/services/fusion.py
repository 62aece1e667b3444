"""Context fusion - merges document and web evidence into one instruction block."""

import logging
from enum import Enum

from ..models.evidence import EvidenceBundle, EvidenceStatus

logger = logging.getLogger(__name__)

DOCUMENT_SECTION = "=== DOCUMENT CONTEXT (from uploaded documents) ==="
WEB_SECTION = "=== WEB SEARCH RESULTS ==="

BOTH_INSTRUCTION = (
    "Please answer the user's question using BOTH the document context and web "
    "search results provided above. Prioritize information from uploaded documents "
    "when available, but also incorporate relevant information from web search. "
    "Cite the source documents or URLs when referencing specific information."
)
DOCUMENTS_INSTRUCTION = (
    "Please answer the user's question based on the context provided above "
    "from the uploaded documents."
)
WEB_INSTRUCTION = (
    "Please answer the user's question based on the web search results provided "
    "above. Cite the source URLs when referencing information."
)
NO_EVIDENCE_WEB_EMPTY = (
    "Note: No relevant documents were found in the knowledge base and "
    "web search did not return results."
)
NO_EVIDENCE_WEB_DISABLED = (
    "Note: No relevant documents were found in the knowledge base and "
    "web search is disabled by the user."
)
NO_EVIDENCE_INSTRUCTION = (
    "Please inform the user that you don't have relevant information "
    "to answer this question."
)


class FusionBranch(Enum):
    BOTH = "both"
    DOCUMENTS_ONLY = "documents_only"
    WEB_ONLY = "web_only"
    NONE = "none"


def select_branch(doc_bundle: EvidenceBundle, web_bundle: EvidenceBundle) -> FusionBranch:
    """Pick the fusion branch from bundle state alone."""
    has_docs = doc_bundle.has_items
    has_web = web_bundle.succeeded

    if has_docs and has_web:
        return FusionBranch.BOTH
    if has_docs:
        return FusionBranch.DOCUMENTS_ONLY
    if has_web:
        return FusionBranch.WEB_ONLY
    return FusionBranch.NONE


class ContextFusionEngine:
    """Deterministic document/web fusion policy."""

    def fuse(
        self,
        doc_bundle: EvidenceBundle,
        web_bundle: EvidenceBundle,
        query: str,
    ) -> str:
        """Build the context block for the system message.

        Args:
            doc_bundle: Corpus evidence.
            web_bundle: Web evidence; status DISABLED when the caller
                turned web search off.
            query: User question.

        Returns:
            Context and instructions, without the base system prompt.
        """
        branch = select_branch(doc_bundle, web_bundle)
        logger.info(f"Fusion branch: {branch.value} for '{query[:50]}...'")

        parts: list[str] = []
        question = f"User Question: {query}"

        if branch is FusionBranch.BOTH:
            parts += [
                DOCUMENT_SECTION,
                doc_bundle.context,
                WEB_SECTION,
                web_bundle.context,
                question,
                BOTH_INSTRUCTION,
            ]
        elif branch is FusionBranch.DOCUMENTS_ONLY:
            parts += [doc_bundle.context, question, DOCUMENTS_INSTRUCTION]
        elif branch is FusionBranch.WEB_ONLY:
            parts += [web_bundle.context, question, WEB_INSTRUCTION]
        else:
            note = (
                NO_EVIDENCE_WEB_DISABLED
                if web_bundle.status is EvidenceStatus.DISABLED
                else NO_EVIDENCE_WEB_EMPTY
            )
            parts += [question, f"{note} {NO_EVIDENCE_INSTRUCTION}"]

        return "\n\n".join(parts)
