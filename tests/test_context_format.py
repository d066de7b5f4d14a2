"""Tests for context block assembly."""

from ragchat.core.context_format import build_context
from tests.fakes.fake_services import make_document


def test_one_source_line_per_document_in_order():
    documents = [
        make_document(0.91, "glossary.pdf", "ASO means administrative services only."),
        make_document(0.77, "cerp.pdf", "ADA CERP recognizes CE providers."),
        make_document(0.60, "adpac.pdf", "ADPAC is a political action committee."),
    ]

    context = build_context(documents)

    source_lines = [line for line in context.splitlines() if line.startswith("Source: ")]
    assert source_lines == ["Source: glossary.pdf", "Source: cerp.pdf", "Source: adpac.pdf"]


def test_exact_format():
    documents = [make_document(0.9, "a.pdf", "First."), make_document(0.8, "b.pdf", "Second.")]

    assert build_context(documents) == "Source: a.pdf\nFirst.\n\nSource: b.pdf\nSecond."


def test_empty_documents_give_empty_context():
    assert build_context([]) == ""


def test_single_document_has_no_separator():
    assert build_context([make_document(0.9, "a.pdf", "Only.")]) == "Source: a.pdf\nOnly."


def test_same_input_gives_same_output():
    documents = [make_document(0.9, "a.pdf", "First."), make_document(0.8, "b.pdf", "Second.")]

    assert build_context(documents) == build_context(documents)
