import hashlib
import streamlit as st
import bleach
from loguru import logger

from chatrelay.config import settings
from chatrelay.client.api_client import ChatApiClient
from chatrelay.client.controller import ChatController
from chatrelay.client.speech import WhisperRecognizer


def speech_supported() -> bool:
    """Voice input needs a Streamlit build with the audio recorder"""
    return hasattr(st, "audio_input")


def init_session_state():
    """Initialize the chat controller if it doesn't exist"""
    if "controller" not in st.session_state:
        def recognizer_factory():
            return WhisperRecognizer(st.session_state.get("recording"))

        st.session_state.controller = ChatController(
            client=ChatApiClient(api_url=settings.api_url),
            recognizer_factory=recognizer_factory if speech_supported() else None,
        )

    if "recording_key" not in st.session_state:
        st.session_state.recording_key = 0


def sanitize_output(text: str) -> str:
    """Strip markup from text shown on the page"""
    return bleach.clean(text, tags=[], strip=True)


def display_status(controller: ChatController):
    """Show the last error or the last answer"""
    state = controller.state
    if state.error:
        st.error(sanitize_output(state.error))
    if state.answer is not None:
        st.success(sanitize_output(state.answer))


def send(controller: ChatController, text: str):
    controller.set_input(text)
    with st.spinner("Thinking..."):
        controller.submit()
    logger.info(f"Chat status: {controller.state.status.name}")


def voice_input(controller: ChatController):
    """Record a clip and transcribe it into the draft"""
    if not controller.can_use_speech:
        st.caption("Voice input is not supported")
        return

    recording = st.audio_input(
        "Voice input",
        key=f"audio_input_{st.session_state.recording_key}",
        disabled=controller.state.is_loading,
    )
    if recording is None:
        return

    st.session_state.recording = recording
    with st.spinner("Listening..."):
        controller.toggle_listening()

    # Force a fresh recorder for the next clip
    st.session_state.recording = None
    st.session_state.recording_key += 1
    st.rerun()


def transcript_draft(controller: ChatController):
    """Let the user review a transcribed draft before sending it"""
    if not controller.state.input.strip() or controller.state.is_loading:
        return

    # A new transcript gets a new widget, otherwise the old value sticks
    revision = hashlib.md5(controller.state.input.encode()).hexdigest()[:8]
    draft = st.text_area(
        "Draft", value=controller.state.input, key=f"draft_{revision}"
    )
    if st.button("Send", disabled=not draft.strip()):
        send(controller, draft)
        controller.set_input("")
        st.rerun()


def main():
    st.set_page_config(page_title="Chat", page_icon="💬", layout="centered")

    init_session_state()
    controller = st.session_state.controller

    st.markdown("**Hi there!**")
    st.title("What would you like to know?")
    st.caption("Ask your own question below")

    display_status(controller)
    transcript_draft(controller)
    voice_input(controller)

    # Enter sends, Shift+Enter inserts a newline
    user_input = st.chat_input(
        "Ask whatever you want", disabled=controller.state.is_loading
    )
    if user_input:
        send(controller, user_input)
        controller.set_input("")
        st.rerun()


if __name__ == "__main__":
    main()
