"""NiceGUI chat interface driven by ConversationSession events."""

import logging
import math
from contextlib import aclosing

from nicegui import ui

from src.agent.chat_agent import get_agent_service
from src.models.schemas import Cancelled, Delta, Failed, Rejected, Role, Turn
from src.session.conversation import ConversationSession
from src.session.errors import SessionError
from src.session.rate_gate import get_rate_gate
from src.ui.markdown import markdown_to_html

logger = logging.getLogger(__name__)

APP_TITLE = "Gemini Chat"

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f3f4f6; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: #2563eb; }

    .message-user {
        background: #3b82f6;
        color: white;
        border-radius: 12px;
    }

    .message-assistant {
        background: #e5e7eb;
        color: #111827;
        border-radius: 12px;
    }

    @keyframes typing {
        0% { opacity: 0.3; }
        50% { opacity: 1; }
        100% { opacity: 0.3; }
    }
    .typing-animation { animation: typing 2s infinite; }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
    .input-box:focus-within { border-color: #2563eb; }

    /* Markdown styling */
    .message-assistant strong { font-weight: 600; }
    .message-assistant em { font-style: italic; }
    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant ul, .message-assistant ol { margin: 0.5rem 0; }
</style>
"""


def rejection_text(event: Rejected) -> str:
    seconds = max(1, math.ceil(event.retry_after_seconds))
    return f"Too many requests. Please wait {seconds} seconds."


def assistant_html(text: str) -> str:
    return markdown_to_html(text) if text else "Thinking...."


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ConversationSession(get_agent_service(), rate_gate=get_rate_gate())

    messages_container: ui.column
    input_field: ui.input
    send_btn: ui.button
    stop_btn: ui.button

    def render_message(turn: Turn) -> None:
        is_user = turn.role is Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-3 py-2 {bubble}"):
                    if is_user:
                        ui.label(turn.text).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.html(assistant_html(turn.text), sanitize=False).classes(
                            "text-sm leading-relaxed"
                        )
                ui.label(turn.created_at.strftime("%I:%M %p")).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for turn in session.history:
                render_message(turn)

    def set_streaming(streaming: bool) -> None:
        if streaming:
            send_btn.disable()
            input_field.disable()
            stop_btn.set_visibility(True)
        else:
            send_btn.enable()
            input_field.enable()
            stop_btn.set_visibility(False)

    async def send_message() -> None:
        try:
            events = session.submit_turn(input_field.value or "")
        except SessionError as e:
            logger.debug(f"Submission refused: {e}")
            return

        input_field.value = ""
        set_streaming(True)
        refresh_messages()

        with messages_container:
            with ui.row().classes("w-full justify-start") as typing_row:
                ui.label("Typing....").classes(
                    "text-sm bg-gray-300 rounded-lg px-2 py-1 typing-animation"
                )
        response_html: ui.html | None = None

        try:
            async with aclosing(events):
                async for event in events:
                    if isinstance(event, Delta) and event.in_progress:
                        if response_html is None:
                            typing_row.delete()
                            with messages_container, ui.row().classes("w-full justify-start"):
                                with ui.element("div").classes(
                                    "message-assistant px-3 py-2 max-w-[75%]"
                                ):
                                    response_html = ui.html("", sanitize=False).classes(
                                        "text-sm leading-relaxed typing-animation"
                                    )
                        response_html.set_content(assistant_html(event.text))
                    elif isinstance(event, Rejected):
                        ui.notify(rejection_text(event), type="warning")
                    elif isinstance(event, Failed):
                        ui.notify(event.message, type="negative")
                    elif isinstance(event, Cancelled):
                        ui.notify("Response stopped", type="info")
        finally:
            set_streaming(False)
            refresh_messages()

    def stop_message() -> None:
        session.cancel()

    def new_chat() -> None:
        try:
            session.reset()
        except SessionError:
            ui.notify("Wait for the current response to finish", type="warning")
            return
        refresh_messages()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            ui.label(APP_TITLE).classes("text-2xl font-bold text-white")
            ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-4"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-center bg-white border-t"):
            with ui.element("div").classes("flex-grow input-box px-3 py-1"):
                input_field = (
                    ui.input(placeholder="Type a message...")
                    .props("borderless dense")
                    .classes("w-full")
                    .on("keydown.enter", send_message)
                )
            stop_btn = ui.button(icon="stop", on_click=stop_message).props("round flat")
            stop_btn.set_visibility(False)
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

