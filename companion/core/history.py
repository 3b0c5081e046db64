"""Saved chat state: recent messages and the selected model"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from companion.models.message import Conversation, Message

logger = logging.getLogger(__name__)


class HistoryError(Exception):
    """History-related errors"""

    pass


class HistoryManager:
    """Keeps the last messages and the model selection in one YAML file"""

    def __init__(self, state_file: Path):
        self.state_file = Path(state_file).expanduser()

    def save_conversation(self, conversation: Conversation) -> None:
        """Store the newest ``conversation.max_length`` messages"""
        state = self._read_for_update()
        state["messages"] = [
            message.model_dump(mode="json")
            for message in conversation.messages[-conversation.max_length :]
        ]
        self._write(state)
        logger.debug(f"Saved {len(state['messages'])} messages to {self.state_file}")

    def load_conversation(self, max_length: int) -> Conversation:
        """Rebuild a conversation from the saved messages.

        Raises HistoryError when the file or one of its messages is invalid.
        """
        conversation = Conversation(max_length=max_length)
        raw_messages = self._read().get("messages") or []
        if not isinstance(raw_messages, list):
            raise HistoryError(f"Invalid message list in {self.state_file}")

        try:
            messages = [Message.model_validate(item) for item in raw_messages]
        except ValidationError as e:
            raise HistoryError(f"Invalid message in {self.state_file}: {e}") from e

        conversation.messages = messages[-max_length:]
        return conversation

    def save_selected_model(self, model_id: str) -> None:
        state = self._read_for_update()
        state["selected_model"] = model_id
        self._write(state)

    def load_selected_model(self) -> str | None:
        model_id = self._read().get("selected_model")
        return model_id if isinstance(model_id, str) else None

    def _read(self) -> dict:
        if not self.state_file.exists():
            return {}

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise HistoryError(f"Failed to read {self.state_file}: {e}") from e

        if not isinstance(data, dict):
            raise HistoryError(f"Invalid state file: {self.state_file}")
        return data

    def _read_for_update(self) -> dict:
        # An unreadable file is replaced rather than blocking every later save
        try:
            return self._read()
        except HistoryError as e:
            logger.warning(f"Discarding saved chat state: {e}")
            return {}

    def _write(self, state: dict) -> None:
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    state,
                    f,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
        except (OSError, yaml.YAMLError) as e:
            raise HistoryError(f"Failed to save {self.state_file}: {e}") from e
