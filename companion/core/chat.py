"""Core chat session management"""

import asyncio
import logging
import os
from pathlib import Path

from companion.core.ai_client import AIError, GeminiClient
from companion.core.browser import BrowserPlatform, DesktopBrowser
from companion.core.config import config_manager
from companion.core.history import HistoryError, HistoryManager
from companion.core.input_handler import ChatInputHandler
from companion.core.pipeline import RequestPipeline
from companion.core.tools import ToolRegistry
from companion.models.config import CompanionConfig, expand_path
from companion.models.gemini import ImageData
from companion.models.message import Conversation, Message, MessageRole
from companion.models.tools import ToolError
from companion.utils.formatting import (
    console,
    format_file_size,
    print_error,
    print_info,
    print_message,
    print_success,
)
from companion.utils.images import ImageAttachmentError, load_image

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "A request is already in progress. Please wait for it to finish."
GENERIC_FAILURE = "Sorry, something went wrong. Please try again."
GREETING = "Hello! How can I help you today?"


class ChatSession:
    """A single conversation: message list, pending image and in-flight guard"""

    def __init__(
        self,
        config: CompanionConfig,
        pipeline: RequestPipeline,
        history: HistoryManager | None = None,
    ):
        self.config = config
        self.pipeline = pipeline
        self.history = history
        self.conversation = self._load_conversation()
        self.pending_image: ImageData | None = None
        self.pending_image_name: str | None = None
        self._in_flight = False

    def _load_conversation(self) -> Conversation:
        max_length = self.config.chat.max_history_length
        if self.history is not None:
            try:
                return self.history.load_conversation(max_length)
            except HistoryError as e:
                logger.warning(f"Could not load chat history: {e}")
        return Conversation(max_length=max_length)

    def save_history(self) -> None:
        """Persist the conversation when a history store is attached"""
        if self.history is None:
            return
        try:
            self.history.save_conversation(self.conversation)
        except HistoryError as e:
            logger.warning(f"Could not save chat history: {e}")

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def attach_image(self, path: Path) -> ImageData:
        """Hold an image for the next message; raises ImageAttachmentError"""
        image = load_image(path, self.config.chat.max_image_bytes)
        self.pending_image = image
        self.pending_image_name = Path(path).name
        logger.debug(f"Attached image {self.pending_image_name} ({image.mime_type})")
        return image

    def clear_image(self) -> None:
        self.pending_image = None
        self.pending_image_name = None

    async def send(self, text: str) -> Message | None:
        """Send a user message and return the reply message.

        The reply is an ``assistant`` message, or an ``error`` message carrying
        the failure text. Blank input is ignored and returns None.
        """
        text = text.strip()
        if not text:
            return None

        if self._in_flight:
            logger.warning("Rejected message while a request is in flight")
            return self.conversation.add_message(MessageRole.ERROR, BUSY_MESSAGE)

        image = self.pending_image
        metadata = {"image": self.pending_image_name} if image else None
        self._in_flight = True
        try:
            self.conversation.add_message(MessageRole.USER, text, metadata)
            answer = await self.pipeline.ask(text, image)
            reply = self.conversation.add_message(MessageRole.ASSISTANT, answer)

        except (AIError, ToolError) as e:
            logger.error(f"Exchange failed: {e}")
            reply = self.conversation.add_message(MessageRole.ERROR, str(e))

        except Exception:
            logger.exception("Unexpected error while sending message")
            reply = self.conversation.add_message(MessageRole.ERROR, GENERIC_FAILURE)

        finally:
            self._in_flight = False
            if image is not None and self.pending_image is image:
                self.clear_image()

        self.save_history()
        return reply


def create_session(
    config: CompanionConfig,
    platform: BrowserPlatform | None = None,
    client: GeminiClient | None = None,
    history: HistoryManager | None = None,
) -> ChatSession:
    """Wire registry, client, platform and pipeline into a session"""
    registry = ToolRegistry(config.tools).initialize()
    pipeline = RequestPipeline(
        config,
        registry,
        client or GeminiClient(config.api),
        platform if platform is not None else DesktopBrowser(),
    )
    return ChatSession(config, pipeline, history)


class ChatManager:
    """Runs the interactive loop and one-shot questions"""

    def __init__(self, config_path: Path | None = None):
        self.config = config_manager.load_config(config_path)
        self.history = None
        if self.config.chat.auto_save and self.config.chat.state_file:
            self.history = HistoryManager(expand_path(self.config.chat.state_file))
            self._restore_selected_model()
        self.input_handler = ChatInputHandler()

    def _restore_selected_model(self) -> None:
        """Apply the model chosen with /model in an earlier run"""
        # COMPANION_MODEL still wins over the saved choice
        if os.getenv("COMPANION_MODEL"):
            return
        try:
            model_id = self.history.load_selected_model()
        except HistoryError as e:
            logger.warning(f"Could not load saved model: {e}")
            return
        if self.config.find_model(model_id):
            self.config.selected_model = model_id

    def _save_selected_model(self, model_id: str) -> None:
        if self.history is None:
            return
        try:
            self.history.save_selected_model(model_id)
        except HistoryError as e:
            logger.warning(f"Could not save model selection: {e}")

    def start_interactive_chat(self) -> None:
        asyncio.run(self._interactive_loop())

    def ask_once(self, message: str, image_path: Path | None = None) -> Message | None:
        return asyncio.run(self._ask_once(message, image_path))

    async def _ask_once(self, message: str, image_path: Path | None) -> Message | None:
        session = create_session(self.config)
        try:
            if image_path:
                session.attach_image(image_path)
            return await session.send(message)
        finally:
            await self._close(session)

    async def _interactive_loop(self) -> None:
        session = create_session(self.config, history=self.history)
        model = self.config.get_selected_model()

        print_success(f"Companion ready ({model.name if model else 'no model'})")
        if not session.pipeline.client.validate_config():
            print_error("No API key set. Export COMPANION_API_KEY or GEMINI_API_KEY")
        print_info("Type /help for commands, /quit to exit")
        if session.conversation.messages:
            print_info(
                f"Restored {len(session.conversation.messages)} messages "
                "(/history to show, /clear to forget)"
            )
        print_message("assistant", GREETING)

        try:
            while True:
                user_input = await self.input_handler.get_input()
                if user_input is None:
                    break
                if not user_input:
                    continue

                if user_input.startswith("/"):
                    if not self._handle_command(user_input, session):
                        break
                    continue

                print_message("user", user_input)
                with_image = session.pending_image is not None
                with print_status(with_image):
                    reply = await session.send(user_input)
                if reply is not None:
                    print_message(reply.role.value, reply.content)
        finally:
            await self._close(session)
            print_info("Goodbye!")

    def _handle_command(self, command: str, session: ChatSession) -> bool:
        """Handle a slash command; returns False when the loop should end"""
        cmd, _, arg = command.partition(" ")
        cmd = cmd.lower()
        arg = arg.strip()

        if cmd in ("/quit", "/exit", "/q"):
            return False

        elif cmd == "/help":
            print_info(
                "Commands: /help, /quit, /history, /clear, /models, /model <id>, "
                "/image <path>|off, /page <url>, /select <text>, /tools"
            )

        elif cmd == "/history":
            for msg in session.conversation.messages:
                print_message(msg.role.value, msg.content)

        elif cmd == "/clear":
            session.conversation.clear()
            session.save_history()
            print_success("Conversation cleared")

        elif cmd == "/models":
            for model in self.config.models:
                marker = "*" if model.id == self.config.selected_model else " "
                print_info(f"{marker} {model.id} - {model.name}: {model.description}")

        elif cmd == "/model":
            if not arg:
                print_info(f"Selected model: {self.config.selected_model}")
            elif self.config.find_model(arg):
                self.config.selected_model = arg
                self._save_selected_model(arg)
                print_success(f"Switched to model: {arg}")
            else:
                print_error(f"Unknown model: {arg}")

        elif cmd == "/image":
            if not arg:
                print_error("Usage: /image <path> | /image off")
            elif arg.lower() == "off":
                session.clear_image()
                print_info("Image attachment removed")
            else:
                try:
                    image = session.attach_image(Path(arg))
                except ImageAttachmentError as e:
                    print_error(str(e))
                else:
                    size = format_file_size(len(image.base64_data) * 3 // 4)
                    print_success(
                        f"Image attached ({size}) - write your prompt for the image"
                    )

        elif cmd == "/page":
            if not self._desktop(session) or not arg:
                print_error("Usage: /page <url>")
            else:
                self._desktop(session).set_active_page(arg)
                print_success(f"Active page: {arg}")

        elif cmd == "/select":
            if not self._desktop(session):
                print_error("Selection is not supported by this platform")
            else:
                self._desktop(session).set_selection(arg)
                print_success("Selection updated" if arg else "Selection cleared")

        elif cmd == "/tools":
            registry = session.pipeline.registry
            for name in registry.list_tool_names():
                print_info(f"{name}: {registry.get_tool_info(name).description}")
            stats = registry.get_execution_stats()
            print_info(
                f"Tool calls this session: {stats['total_calls']} "
                f"({stats['successful_calls']} succeeded, "
                f"{stats['failed_calls']} failed)"
            )

        else:
            print_error(f"Unknown command: {cmd}. Type /help for commands")

        return True

    @staticmethod
    def _desktop(session: ChatSession) -> DesktopBrowser | None:
        platform = session.pipeline.platform
        return platform if isinstance(platform, DesktopBrowser) else None

    @staticmethod
    async def _close(session: ChatSession) -> None:
        await session.pipeline.close()
        if isinstance(session.pipeline.platform, DesktopBrowser):
            await session.pipeline.platform.close()


def print_status(with_image: bool):
    """Spinner shown while waiting for the model"""
    label = "Analyzing image..." if with_image else "Thinking..."
    return console.status(label)
