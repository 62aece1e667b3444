from datetime import datetime, timedelta, timezone

from ragchat.core.models.chat import Message
from ragchat.core.services.assembler import SYSTEM_PROMPT, ConversationAssembler

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _history(*pairs: tuple[str, str]) -> list[Message]:
    """Build newest-first history from chronological (role, content) pairs."""
    messages = [
        Message(id=str(i), thread_id="t", role=role, content=content, timestamp=BASE + timedelta(seconds=i))
        for i, (role, content) in enumerate(pairs)
    ]
    return list(reversed(messages))


def test_system_message_first_with_fused_context() -> None:
    messages = ConversationAssembler().assemble("FUSED", [], "hello")

    assert messages[0] == {"role": "system", "content": f"{SYSTEM_PROMPT}\n\nFUSED"}
    assert messages[1:] == [{"role": "user", "content": "hello"}]


def test_history_is_bounded_and_chronological() -> None:
    history = _history(
        ("user", "q1"), ("assistant", "a1"),
        ("user", "q2"), ("assistant", "a2"),
        ("user", "q3"), ("assistant", "a3"),
        ("user", "q4"),
    )

    messages = ConversationAssembler(history_limit=5).assemble("ctx", history, "q4")

    assert [m["content"] for m in messages[1:]] == ["q2", "a2", "q3", "a3", "q4"]


def test_current_message_appended_when_history_lacks_it() -> None:
    history = _history(("user", "q1"), ("assistant", "a1"))

    messages = ConversationAssembler().assemble("ctx", history, "q2")

    assert [m["content"] for m in messages[1:]] == ["q1", "a1", "q2"]


def test_system_messages_in_history_are_dropped() -> None:
    history = _history(("system", "old prompt"), ("user", "q1"))

    messages = ConversationAssembler().assemble("ctx", history, "q1")

    assert [m["role"] for m in messages] == ["system", "user"]
    assert all(m["content"] != "old prompt" for m in messages)
