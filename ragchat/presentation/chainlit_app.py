import logging
from pathlib import Path

import chainlit as cl
from chainlit.input_widget import Switch

from ragchat.config.settings import settings
from ragchat.container import configure_container
from ragchat.core.errors import RagChatError
from ragchat.core.models.chat import ChatRequest
from ragchat.core.protocols.embedder import EmbedderProtocol
from ragchat.core.services.orchestrator import Orchestrator

logging.basicConfig(level=settings.log_level, format="%(message)s")
logger = logging.getLogger(__name__)

container = configure_container(settings)


async def _ingest_attachments(message: cl.Message) -> list[str]:
    """Upload attached files; returns human-readable status lines."""
    orchestrator = container.resolve(Orchestrator)
    lines = []
    for element in message.elements or []:
        path = getattr(element, "path", None)
        if not path:
            continue
        name = element.name or Path(path).name
        try:
            result = await orchestrator.upload_document_async(
                Path(path).read_bytes(), name, getattr(element, "mime", None)
            )
            lines.append(f"Indexed **{name}** ({result.chunk_count} chunks)")
        except RagChatError as e:
            lines.append(f"Could not index **{name}**: {e.message}")
    return lines


@cl.on_chat_start
async def start():
    cl.user_session.set("thread_id", None)
    cl.user_session.set("web_search", True)

    await cl.ChatSettings(
        [Switch(id="web_search", label="Web search", initial=True)]
    ).send()

    container.resolve(EmbedderProtocol).warmup()

    await cl.Message(
        content="Hi! Attach PDF, TXT, DOCX or MD files and ask questions about them."
    ).send()


@cl.on_settings_update
async def update_settings(chat_settings: dict):
    cl.user_session.set("web_search", bool(chat_settings.get("web_search", True)))


@cl.on_message
async def main(message: cl.Message):
    status_lines = await _ingest_attachments(message)
    if status_lines:
        await cl.Message(content="\n".join(status_lines)).send()

    user_input = (message.content or "").strip()
    if not user_input:
        return

    orchestrator = container.resolve(Orchestrator)

    try:
        async with cl.Step(name="Answering") as step:
            step.input = user_input
            response = await orchestrator.submit(
                ChatRequest(
                    message=user_input,
                    thread_id=cl.user_session.get("thread_id"),
                    enable_web_search=cl.user_session.get("web_search", True),
                )
            )
            step.output = (
                f"{response.chunk_count} document chunks, "
                f"web search used: {response.web_search_used}"
            )
    except RagChatError as e:
        logger.error(f"Chat failed: {e.message}")
        await cl.Message(content=f"Error: {e.message}").send()
        return

    cl.user_session.set("thread_id", response.thread_id)

    content = response.message
    if response.sources:
        content += "\n\n**Sources:**\n" + "\n".join(f"- {s}" for s in response.sources)
    await cl.Message(content=content).send()
