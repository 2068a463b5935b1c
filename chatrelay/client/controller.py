from typing import Callable, Optional
from loguru import logger

from chatrelay.client.api_client import ChatApiClient
from chatrelay.client.speech import SpeechRecognizer
from chatrelay.client.state import ChatState


class ChatController:
    """Event handlers of the chat page.

    The page forwards user events here and renders `state` afterwards. One
    chat request is in flight at most; a speech session is released through
    its end callback on every exit path.
    """

    def __init__(
        self,
        client: ChatApiClient,
        recognizer_factory: Optional[Callable[[], SpeechRecognizer]] = None,
    ):
        self.client = client
        self.recognizer_factory = recognizer_factory
        self.state = ChatState()
        self._recognizer: Optional[SpeechRecognizer] = None

    @property
    def can_use_speech(self) -> bool:
        return self.recognizer_factory is not None

    @property
    def can_submit(self) -> bool:
        return bool(self.state.input.strip()) and not self.state.is_loading

    def set_input(self, text: str) -> None:
        self.state = self.state.model_copy(update={"input": text})

    def submit(self) -> bool:
        """Send the draft. Returns False when the guard ignored the event."""
        message = self.state.input.strip()
        if not message or self.state.is_loading:
            return False

        self.state = self.state.submitting()
        try:
            reply = self.client.ask(message)
        except Exception as e:
            logger.warning(f"Chat request failed: {e}")
            self.state = self.state.failed(str(e) or "Unknown error")
        else:
            self.state = self.state.succeeded(reply.answer)
        return True

    def handle_key(self, key: str, shift: bool = False) -> bool:
        """Enter sends, Shift+Enter adds a newline. True if a request went out.

        The Streamlit page gets the same behaviour from `st.chat_input`.
        """
        if key != "Enter":
            return False
        if shift:
            self.set_input(self.state.input + "\n")
            return False
        return self.submit()

    def toggle_listening(self) -> None:
        if not self.recognizer_factory:
            return

        if self.state.is_listening:
            if self._recognizer is not None:
                self._recognizer.stop()
            return

        if self.state.is_loading:
            return

        recognizer = self.recognizer_factory()
        self._recognizer = recognizer
        self.state = self.state.cleared().model_copy(update={"is_listening": True})

        try:
            recognizer.start(
                on_result=self._on_speech_result,
                on_error=self._on_speech_error,
                on_end=self._on_speech_end,
            )
        except Exception as e:
            self._recognizer = None
            self.state = self.state.failed(
                str(e) or "Cannot start speech recognition"
            ).model_copy(update={"is_listening": False})

    def _on_speech_result(self, transcript: str) -> None:
        transcript = transcript.strip()
        if transcript:
            self.set_input(transcript)

    def _on_speech_error(self, message: str) -> None:
        self.state = self.state.failed(message or "Speech recognition error")
        self._release_recognizer()

    def _on_speech_end(self) -> None:
        self._release_recognizer()

    def _release_recognizer(self) -> None:
        self._recognizer = None
        self.state = self.state.model_copy(update={"is_listening": False})
