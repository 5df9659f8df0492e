"""NiceGUI chat interface with streamed replies."""

import os

from nicegui import app, ui

from multichat.models.schemas import Message, Role
from multichat.ui.api_client import ChatApiClient
from multichat.ui.conversation import ChatState, ConversationClient
from multichat.ui.formatting import markdown_to_html, plain_to_html
from multichat.ui.identity import IdentityStore

TITLE = "Multi-User Chat"
STORAGE_SECRET = os.getenv("NICEGUI_STORAGE_SECRET", "multichat-storage-secret")

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: #111827; }

    .message-user {
        background: #111827;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .avatar-user { background: #111827; }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #6b7280;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
    .input-box:focus-within { border-color: #111827; }

    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    conversation = ConversationClient(
        store=IdentityStore(app.storage.user),
        api=ChatApiClient(),
    )
    # Rendered assistant/user bubbles by message id, for in-place chunk updates
    bubbles: dict[str, ui.html] = {}

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.textarea
    login_dialog: ui.dialog
    name_input: ui.input
    email_input: ui.input

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        initial = conversation.identity.initial if is_user and conversation.identity else "A"
        avatar_classes = f"w-9 h-9 rounded-full flex items-center justify-center {css}"
        with ui.element("div").classes(avatar_classes):
            ui.label(initial).classes("text-white text-sm font-semibold")

    def render_message(message: Message) -> None:
        is_user = message.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    content = (
                        plain_to_html(message.content)
                        if is_user
                        else markdown_to_html(message.content)
                    )
                    bubbles[message.id] = ui.html(content, sanitize=False).classes(
                        "text-sm leading-relaxed"
                    )
                ui.label(message.time).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
            if is_user:
                render_avatar(True)

    def render_typing_indicator() -> None:
        with ui.row().classes("w-full justify-start gap-3 items-end"):
            render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def refresh_messages() -> None:
        bubbles.clear()
        messages_container.clear()
        with messages_container:
            if not conversation.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
                return
            for message in conversation.messages:
                render_message(message)
            # Dots until the first chunk creates the reply bubble
            if conversation.is_streaming and conversation.messages[-1].role == Role.USER:
                render_typing_indicator()

    def on_conversation_change() -> None:
        last = conversation.messages[-1] if conversation.messages else None
        streaming_into_last = (
            conversation.is_streaming
            and last is not None
            and last.id in bubbles
            and len(bubbles) == len(conversation.messages)
        )
        if streaming_into_last:
            bubbles[last.id].set_content(markdown_to_html(last.content))
        else:
            refresh_messages()
        scroll_area.scroll_to(percent=1.0)

    conversation.on_change = on_conversation_change

    async def send_message() -> None:
        conversation.input_buffer = input_field.value or ""
        await conversation.send()

    def login() -> None:
        try:
            conversation.login(name_input.value or "", email_input.value or "")
        except ValueError as e:
            ui.notify(str(e), type="negative")
            return
        login_dialog.close()
        refresh_messages()

    def logout() -> None:
        conversation.logout()
        name_input.value = ""
        email_input.value = ""
        login_dialog.open()

    # === Login dialog ===
    with ui.dialog().props("persistent") as login_dialog, ui.card().classes("w-96"):
        ui.label("Login to Chat").classes("text-lg font-semibold")
        ui.label("Please enter your name and email to continue.").classes(
            "text-sm text-gray-500"
        )
        name_input = ui.input("Name").classes("w-full")
        email_input = ui.input("Email").props("type=email").classes("w-full")
        ui.button("Login", on_click=login).classes("self-end")

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container gap-0").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("chat").classes("text-white text-3xl")
                ui.label().bind_text_from(
                    conversation,
                    "identity",
                    backward=lambda identity: f"Chat as {identity.name}" if identity else TITLE,
                ).classes("text-lg font-semibold text-white")
            ui.button("Logout", on_click=logout).props(
                "outline size=sm color=white"
            ).bind_visibility_from(conversation, "identity", backward=bool)

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50") as scroll_area,
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        # Error notice
        with ui.row().classes(
            "w-full px-4 py-2 bg-red-50 border-t items-center justify-between"
        ).bind_visibility_from(conversation, "last_error", backward=bool):
            with ui.row().classes("items-center gap-2"):
                ui.icon("error").classes("text-red-600")
                ui.label().bind_text_from(
                    conversation, "last_error", backward=lambda error: error or ""
                ).classes("text-sm text-red-700")
            ui.button(icon="close", on_click=conversation.dismiss_error).props(
                "flat round dense color=red"
            )

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Type your message...")
                    .props("autogrow borderless dense rows=1")
                    .classes("w-full")
                    .bind_value(conversation, "input_buffer")
                    .on("keydown.enter.prevent", send_message)
                )
            (
                ui.button(icon="send", on_click=send_message)
                .props("round unelevated color=dark")
                .bind_enabled_from(conversation, "is_streaming", backward=lambda s: not s)
            )

    if conversation.state is ChatState.UNIDENTIFIED:
        login_dialog.open()


def main() -> None:
    port = int(os.getenv("UI_PORT", "8080"))
    ui.run(title=TITLE, port=port, reload=False, storage_secret=STORAGE_SECRET)


if __name__ in {"__main__", "__mp_main__"}:
    main()
