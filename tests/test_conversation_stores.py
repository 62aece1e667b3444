"""Contract tests run against both conversation store implementations."""

import pytest

from ragchat.core.models.document import Document, DocumentType
from ragchat.core.protocols.conversation_store import ConversationStoreProtocol
from ragchat.infrastructure.storage import InMemoryConversationStore, SqlConversationStore


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryConversationStore()
    return SqlConversationStore.from_url("sqlite://")


def _document(document_id: str, filename: str) -> Document:
    return Document(
        id=document_id,
        filename=filename,
        file_type=DocumentType.TXT,
        chunk_count=2,
        vector_store_id=document_id,
    )


def test_implements_protocol(any_store) -> None:
    assert isinstance(any_store, ConversationStoreProtocol)


def test_thread_lifecycle(any_store) -> None:
    thread = any_store.create_thread("First")

    assert any_store.get_thread(thread.id).title == "First"
    assert any_store.update_thread_title(thread.id, "Renamed").title == "Renamed"
    assert any_store.set_message_count(thread.id, 3).message_count == 3
    assert any_store.count_threads() == 1
    assert any_store.get_thread("missing") is None
    assert any_store.update_thread_title("missing", "x") is None


def test_messages_keep_insertion_order(any_store) -> None:
    thread = any_store.create_thread("t")
    for i in range(5):
        any_store.append_message(thread.id, "user" if i % 2 == 0 else "assistant", f"m{i}")

    oldest = any_store.list_messages(thread.id, skip=0, limit=3)
    newest = any_store.list_messages(thread.id, skip=0, limit=2, newest_first=True)

    assert [m.content for m in oldest] == ["m0", "m1", "m2"]
    assert [m.content for m in newest] == ["m4", "m3"]
    assert [m.content for m in any_store.list_messages(thread.id, skip=3, limit=10)] == ["m3", "m4"]
    assert any_store.count_messages(thread.id) == 5


def test_message_fields_round_trip(any_store) -> None:
    thread = any_store.create_thread("t")

    stored = any_store.append_message(
        thread.id, "assistant", "answer", sources=["d1", "d2"], web_search_used=True
    )
    [loaded] = any_store.list_messages(thread.id)

    assert loaded.id == stored.id
    assert loaded.sources == ["d1", "d2"]
    assert loaded.web_search_used is True


def test_append_to_unknown_thread_fails(any_store) -> None:
    with pytest.raises(KeyError):
        any_store.append_message("missing", "user", "hi")


def test_delete_thread_cascades_to_messages(any_store) -> None:
    doomed = any_store.create_thread("doomed")
    kept = any_store.create_thread("kept")
    for i in range(3):
        any_store.append_message(doomed.id, "user", f"m{i}")
    any_store.append_message(kept.id, "user", "stay")

    assert any_store.delete_thread(doomed.id) == 3
    assert any_store.get_thread(doomed.id) is None
    assert any_store.count_messages(doomed.id) == 0
    assert any_store.count_messages(kept.id) == 1
    assert any_store.delete_thread(doomed.id) == 0


def test_list_threads_pages(any_store) -> None:
    ids = {any_store.create_thread(f"t{i}").id for i in range(3)}

    first = any_store.list_threads(skip=0, limit=2)
    rest = any_store.list_threads(skip=2, limit=2)

    assert len(first) == 2 and len(rest) == 1
    assert {t.id for t in first + rest} == ids


def test_documents(any_store) -> None:
    any_store.add_document(_document("d1", "a.txt"))
    any_store.add_document(_document("d2", "b.txt"))

    assert any_store.get_document("d1").filename == "a.txt"
    assert any_store.get_document("d1").file_type is DocumentType.TXT
    assert [d.id for d in any_store.find_documents_by_filenames(["b.txt", "zzz"])] == ["d2"]
    assert {d.id for d in any_store.get_documents(["d1", "d2", "d3"])} == {"d1", "d2"}
    assert any_store.find_documents_by_filenames([]) == []
    assert len(any_store.list_documents()) == 2

    assert any_store.delete_document("d1") is True
    assert any_store.delete_document("d1") is False
    assert any_store.get_document("d1") is None
