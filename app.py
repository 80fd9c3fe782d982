"""News chat web interface using Streamlit."""

import uuid

import streamlit as st

from newsrag.config import config
from newsrag.errors import NewsRagError
from newsrag.factory import build_chat_service

MAX_SOURCE_TITLE_LENGTH = 80

config.setup_logging()
logger = config.get_logger(__name__)


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        defaults = {
            "chat_service": None,
            "session_id": str(uuid.uuid4()),
            "sources_by_turn": {},
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def new_session() -> None:
        """Start a fresh chat session id in this browser tab."""
        st.session_state.session_id = str(uuid.uuid4())
        st.session_state.sources_by_turn = {}

    @staticmethod
    def is_system_ready() -> bool:
        """Check if the chat service is initialized.

        Returns:
            bool: True if the chat service exists, False otherwise.
        """
        return st.session_state.get("chat_service") is not None


def validate_configuration() -> bool:
    """Validate application configuration and show user feedback.

    Returns:
        bool: True if configuration is valid, False otherwise.
    """
    try:
        config.validate()
    except ValueError as e:
        st.error(f"Configuration Error: {e}")
        return False
    else:
        return True


def initialize_system() -> bool:
    """Build the chat service from configuration.

    Returns:
        bool: True if initialization succeeds, False otherwise.
    """
    try:
        with st.spinner("Connecting to the news index..."):
            st.session_state.chat_service = build_chat_service()
        logger.info(
            "Chat service initialized for session %s", st.session_state.session_id
        )
    except (NewsRagError, OSError, ValueError) as e:
        logger.exception("Failed to initialize chat service")
        st.error(f"Failed to initialize system: {e}")
        return False
    else:
        return True


def render_sidebar() -> None:
    """Render the sidebar with session controls."""
    with st.sidebar:
        st.header("Session")
        st.caption(f"Session id: `{st.session_state.session_id}`")

        service = st.session_state.chat_service
        if service is not None:
            ttl = service.history(st.session_state.session_id).ttl_seconds
            if ttl:
                st.write(f"**Expires in:** {round(ttl / 60)} min")

        if st.button("Clear Session", use_container_width=True) and service:
            service.clear(st.session_state.session_id)
            SessionState.new_session()
            st.success("Session cleared successfully")
            st.rerun()

        st.divider()
        st.subheader("System")
        st.write(f"**Chat model:** {config.CHAT_MODEL}")
        st.write(f"**Embedding model:** {config.EMBEDDING_MODEL}")
        st.write(f"**Passages per answer:** {config.RETRIEVAL_TOP_K}")


def render_sources(sources: list[dict]) -> None:
    """Render the numbered source list of one answer."""
    if not sources:
        return
    with st.expander(f"Sources ({len(sources)})", expanded=False):
        for i, source in enumerate(sources, start=1):
            title = source["title"][:MAX_SOURCE_TITLE_LENGTH]
            st.markdown(
                f"{i}. [{title}]({source['url']}) (score {source['score']:.3f})"
            )


def render_history() -> None:
    """Replay the stored messages of the current session."""
    service = st.session_state.chat_service
    history = service.history(st.session_state.session_id)
    assistant_turn = 0
    for message in history.messages:
        with st.chat_message(message.role):
            st.write(message.content)
            if message.role == "assistant":
                sources = st.session_state.sources_by_turn.get(assistant_turn, [])
                render_sources(sources)
                assistant_turn += 1


def render_chat_input() -> None:
    """Handle a new user message."""
    prompt = st.chat_input("Ask about the latest news...")
    if not prompt:
        return

    service = st.session_state.chat_service
    with st.spinner("Searching the news..."):
        try:
            result = service.handle_turn(st.session_state.session_id, prompt)
        except NewsRagError as e:
            logger.exception("Chat turn failed")
            st.error(f"Failed to process chat message: {e}")
            return

    turn = sum(
        1
        for message in service.history(st.session_state.session_id).messages
        if message.role == "assistant"
    ) - 1
    st.session_state.sources_by_turn[turn] = result.to_dict()["sources"]
    st.rerun()


def main() -> None:
    """Main entry point for the Streamlit web application."""
    st.set_page_config(page_title="News Chat", layout="centered")

    SessionState.initialize()
    st.title("News Chat")

    if not SessionState.is_system_ready():
        if not (validate_configuration() and initialize_system()):
            return

    render_sidebar()
    render_history()
    render_chat_input()


if __name__ == "__main__":
    main()
