"""Tests for the document/web fusion policy."""

import pytest

from ragchat.core.models.evidence import EvidenceBundle, EvidenceItem, EvidenceStatus
from ragchat.core.services.fusion import (
    BOTH_INSTRUCTION,
    DOCUMENT_SECTION,
    DOCUMENTS_INSTRUCTION,
    NO_EVIDENCE_INSTRUCTION,
    NO_EVIDENCE_WEB_DISABLED,
    NO_EVIDENCE_WEB_EMPTY,
    WEB_INSTRUCTION,
    WEB_SECTION,
    ContextFusionEngine,
    FusionBranch,
    select_branch,
)

DOC_CONTEXT = "doc context block"
WEB_CONTEXT = "web context block"


def _docs() -> EvidenceBundle:
    return EvidenceBundle(
        items=[EvidenceItem(content="c", source="a.txt", score=0.8)],
        context=DOC_CONTEXT,
        sources=["a.txt"],
        status=EvidenceStatus.OK,
    )


def _web() -> EvidenceBundle:
    return EvidenceBundle(
        items=[EvidenceItem(content="w", source="https://a.example", score=1.0)],
        context=WEB_CONTEXT,
        sources=["https://a.example"],
        status=EvidenceStatus.OK,
    )


@pytest.mark.parametrize(
    "doc, web, branch",
    [
        (_docs(), _web(), FusionBranch.BOTH),
        (_docs(), EvidenceBundle.empty(""), FusionBranch.DOCUMENTS_ONLY),
        (EvidenceBundle.empty(""), _web(), FusionBranch.WEB_ONLY),
        (EvidenceBundle.empty("", status=EvidenceStatus.FAILED), EvidenceBundle.empty(""), FusionBranch.NONE),
    ],
)
def test_select_branch(doc, web, branch) -> None:
    assert select_branch(doc, web) is branch


def test_both_sources_are_labelled_and_ordered() -> None:
    fused = ContextFusionEngine().fuse(_docs(), _web(), "What is AI?")

    order = [
        fused.index(DOCUMENT_SECTION),
        fused.index(DOC_CONTEXT),
        fused.index(WEB_SECTION),
        fused.index(WEB_CONTEXT),
        fused.index("User Question: What is AI?"),
        fused.index(BOTH_INSTRUCTION),
    ]
    assert order == sorted(order)


def test_documents_only_has_no_web_material() -> None:
    fused = ContextFusionEngine().fuse(
        _docs(), EvidenceBundle.empty("", status=EvidenceStatus.DISABLED), "q"
    )

    assert fused == "\n\n".join([DOC_CONTEXT, "User Question: q", DOCUMENTS_INSTRUCTION])


def test_web_only() -> None:
    fused = ContextFusionEngine().fuse(EvidenceBundle.empty("nothing"), _web(), "q")

    assert fused == "\n\n".join([WEB_CONTEXT, "User Question: q", WEB_INSTRUCTION])
    assert "nothing" not in fused


def test_no_evidence_with_web_disabled_mentions_user_choice() -> None:
    fused = ContextFusionEngine().fuse(
        EvidenceBundle.empty(""), EvidenceBundle.empty("", status=EvidenceStatus.DISABLED), "q"
    )

    assert NO_EVIDENCE_WEB_DISABLED in fused
    assert NO_EVIDENCE_INSTRUCTION in fused


@pytest.mark.parametrize(
    "web_status", [EvidenceStatus.EMPTY, EvidenceStatus.FAILED, EvidenceStatus.UNCONFIGURED]
)
def test_no_evidence_with_web_attempted(web_status) -> None:
    fused = ContextFusionEngine().fuse(
        EvidenceBundle.empty(""), EvidenceBundle.empty("", status=web_status), "q"
    )

    assert NO_EVIDENCE_WEB_EMPTY in fused
    assert NO_EVIDENCE_WEB_DISABLED not in fused
