"""Line input with cursor navigation and message history"""

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory


class ChatInputHandler:
    """Reads user messages inside the running event loop"""

    def __init__(self):
        self.message_history = InMemoryHistory()
        # Left/Right move the cursor, Up/Down walk the history (emacs bindings)
        self.session = PromptSession(history=self.message_history)

    async def get_input(self, prompt_text: str = "You: ") -> str | None:
        """
        Prompt for one line.

        Args:
            prompt_text: The prompt to display to the user

        Returns:
            The stripped input, or None on Ctrl-C / Ctrl-D
        """
        try:
            user_input = await self.session.prompt_async(
                prompt_text, multiline=False, wrap_lines=True
            )
        except (EOFError, KeyboardInterrupt):
            return None

        return user_input.strip()
