from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Optional, Union
from loguru import logger
from openai import OpenAI

from chatrelay.config import settings

ResultCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]
EndCallback = Callable[[], None]


class SpeechRecognizer(ABC):
    """One speech-to-text session.

    `start` registers the callbacks and begins capture. Whatever way the
    session finishes (stop, natural end or error), `on_end` fires once.
    """

    def __init__(self):
        self._on_result: Optional[ResultCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._on_end: Optional[EndCallback] = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(
        self,
        on_result: ResultCallback,
        on_error: ErrorCallback,
        on_end: EndCallback,
    ) -> None:
        if self._active:
            raise RuntimeError("Speech recognition already started")

        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end
        self._active = True
        try:
            self._run()
        except Exception as e:
            self._emit_error(str(e))

    def stop(self) -> None:
        self._finish()

    @abstractmethod
    def _run(self) -> None:
        """Capture speech and report it through `_emit_result`."""

    def _emit_result(self, transcript: str) -> None:
        if self._active and self._on_result:
            self._on_result(transcript)

    def _emit_error(self, message: str) -> None:
        if self._active and self._on_error:
            self._on_error(message)
        self._finish()

    def _finish(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_end:
            self._on_end()


class WhisperRecognizer(SpeechRecognizer):
    """Transcribe a recorded clip with OpenAI's Whisper model."""

    def __init__(
        self,
        audio: Optional[Union[bytes, BinaryIO]],
        client: Optional[OpenAI] = None,
        model: str = settings.speech_model,
        language: str = settings.speech_language,
    ):
        super().__init__()
        self.audio = audio
        self.client = client
        self.model = model
        self.language = language

    def start(self, on_result, on_error, on_end) -> None:
        if not self.audio:
            raise ValueError("No audio captured")
        super().start(on_result, on_error, on_end)

    def _run(self) -> None:
        client = self.client or OpenAI(api_key=settings.openai_api_key)
        data = self.audio if isinstance(self.audio, bytes) else self.audio.read()

        transcription_response = client.audio.transcriptions.create(
            model=self.model,
            file=("speech.wav", data),
            language=self.language,
        )
        transcription = transcription_response.text
        logger.info(f"Transcription: {transcription}")

        self._emit_result(transcription)
        self._finish()
