"""Integration tests for chat CLI commands"""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from companion.main import app
from companion.models.config import CompanionConfig
from companion.models.message import Message, MessageRole
from companion.utils.images import ImageAttachmentError


def make_manager(reply=None) -> MagicMock:
    manager = MagicMock()
    manager.config = CompanionConfig()
    manager.ask_once.return_value = reply
    return manager


@patch("companion.cli.chat.setup_logging")
@patch("companion.cli.chat.ChatManager")
class TestChatCLI:
    """Test chat command integration"""

    def setup_method(self):
        """Set up test runner"""
        self.runner = CliRunner()

    def test_chat_start(self, mock_chat_manager, mock_setup_logging):
        """Test starting an interactive session"""
        manager = make_manager()
        mock_chat_manager.return_value = manager

        result = self.runner.invoke(app, ["chat", "start"])

        assert result.exit_code == 0
        mock_chat_manager.assert_called_once_with(None)
        manager.start_interactive_chat.assert_called_once_with()
        mock_setup_logging.assert_called_once_with(manager.config.monitoring, False)

    def test_chat_start_with_config(
        self, mock_chat_manager, mock_setup_logging, sample_config_yaml
    ):
        """Test starting chat with custom config and verbose logging"""
        mock_chat_manager.return_value = make_manager()

        result = self.runner.invoke(
            app, ["--config", str(sample_config_yaml), "-v", "chat", "start"]
        )

        assert result.exit_code == 0
        mock_chat_manager.assert_called_once_with(sample_config_yaml)
        assert mock_setup_logging.call_args.args[1] is True

    def test_ask_prints_reply(self, mock_chat_manager, mock_setup_logging):
        manager = make_manager(Message(role=MessageRole.ASSISTANT, content="Hi there"))
        mock_chat_manager.return_value = manager

        result = self.runner.invoke(app, ["chat", "ask", "Hello"])

        assert result.exit_code == 0
        assert "Hi there" in result.stdout
        manager.ask_once.assert_called_once_with("Hello", None)

    def test_ask_with_image(self, mock_chat_manager, mock_setup_logging, temp_dir):
        manager = make_manager(Message(role=MessageRole.ASSISTANT, content="A cat"))
        mock_chat_manager.return_value = manager
        image_path = temp_dir / "cat.png"

        result = self.runner.invoke(
            app, ["chat", "ask", "What is this?", "--image", str(image_path)]
        )

        assert result.exit_code == 0
        manager.ask_once.assert_called_once_with("What is this?", image_path)

    def test_ask_error_reply_exits_nonzero(self, mock_chat_manager, mock_setup_logging):
        mock_chat_manager.return_value = make_manager(
            Message(role=MessageRole.ERROR, content="Please set your API key in settings")
        )

        result = self.runner.invoke(app, ["chat", "ask", "Hello"])

        assert result.exit_code == 1
        assert "Please set your API key" in result.stdout

    def test_ask_bad_image(self, mock_chat_manager, mock_setup_logging):
        manager = make_manager()
        manager.ask_once.side_effect = ImageAttachmentError("Not an image file: a.txt")
        mock_chat_manager.return_value = manager

        result = self.runner.invoke(app, ["chat", "ask", "Hello", "-i", "a.txt"])

        assert result.exit_code == 1
        assert "Not an image file" in result.stdout

    def test_ask_blank_message(self, mock_chat_manager, mock_setup_logging):
        mock_chat_manager.return_value = make_manager(None)

        result = self.runner.invoke(app, ["chat", "ask", "   "])

        assert result.exit_code == 1
        assert "Message is empty" in result.stdout


class TestChatHelp:
    def test_chat_help(self):
        """Test chat command help"""
        result = CliRunner().invoke(app, ["chat", "--help"])

        assert result.exit_code == 0
        assert "start" in result.stdout
        assert "ask" in result.stdout

    def test_version(self):
        result = CliRunner().invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Companion v0.1.0" in result.stdout
