"""SessionOrchestrator: binds the tool catalog into chat sessions.

This module provides the SessionOrchestrator class which handles:
- Creating and deleting in-memory chat sessions
- Building each session's reasoning binding from its effective tool view
- Rebuilding bindings when the tool selection or catalog changes
- Routing user messages to the binding and recording the replies
"""

import asyncio
import logging
from collections.abc import Iterable

from toolhub_server.exceptions import SessionNotInitialized
from toolhub_server.notifications import (
    EVENT_MESSAGE_ADDED,
    EVENT_SESSION_CREATED,
    EVENT_SESSION_DELETED,
    EVENT_SESSION_INITIALIZED,
    ChangeNotifier,
)
from toolhub_server.reasoning.base import ReasoningEngine, ReasoningSession
from toolhub_server.sessions.session import ChatSession
from toolhub_server.sessions.types import (
    APOLOGY_MESSAGE,
    DEFAULT_INSTRUCTIONS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TITLE,
    Message,
    SessionConfig,
)
from toolhub_server.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Owns the set of chat sessions and their reasoning bindings.

    Each session has at most one pending initialization task; scheduling a
    new one cancels the old. Replies within one session are serialized by a
    per-session lock, while different sessions never wait on each other.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        engine: ReasoningEngine,
        notifier: ChangeNotifier | None = None,
        default_instructions: str = DEFAULT_INSTRUCTIONS,
        default_temperature: float = DEFAULT_TEMPERATURE,
        default_max_response_tokens: int | None = None,
    ):
        """Initialize the SessionOrchestrator.

        Args:
            registry: Shared tool registry
            engine: Factory for reasoning bindings
            notifier: Where change events are published (default: the registry's)
            default_instructions: Instructions for sessions created without any
            default_temperature: Temperature for sessions created without one
            default_max_response_tokens: Reply length cap for new sessions
        """
        self.registry = registry
        self.engine = engine
        self.notifier = notifier or registry.notifier
        self.default_instructions = default_instructions
        self.default_temperature = default_temperature
        self.default_max_response_tokens = default_max_response_tokens

        self._sessions: dict[str, ChatSession] = {}
        self._init_tasks: dict[str, asyncio.Task[None]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # --- Session set ---

    def create_session(self, config: SessionConfig | None = None) -> ChatSession:
        """Create a session and start initializing it in the background.

        Returns immediately; the session has no binding until the
        initialization task finishes.
        """
        config = config or SessionConfig()

        session = ChatSession(
            title=config.title or DEFAULT_TITLE,
            system_instructions=(
                config.system_instructions
                if config.system_instructions is not None
                else self.default_instructions
            ),
            temperature=(
                config.temperature
                if config.temperature is not None
                else self.default_temperature
            ),
            max_response_tokens=(
                config.max_response_tokens
                if config.max_response_tokens is not None
                else self.default_max_response_tokens
            ),
            enabled_tool_names=config.enabled_tool_names,
        )

        self._sessions[session.session_id] = session
        self._locks[session.session_id] = asyncio.Lock()
        self.schedule_initialization(session)

        logger.info(f"Created new session {session.session_id}")
        self.notifier.publish(EVENT_SESSION_CREATED, session_id=session.session_id)
        return session

    def get_session(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[ChatSession]:
        """All sessions in creation order."""
        return list(self._sessions.values())

    def delete_session(self, session_id: str) -> bool:
        """Delete a session. No replacement session is created.

        Returns:
            True if the session existed
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            logger.warning(f"Session not found for deletion: {session_id}")
            return False

        task = self._init_tasks.pop(session_id, None)
        if task is not None and not task.done():
            task.cancel()
        self._locks.pop(session_id, None)

        logger.info(f"Deleted session {session_id}")
        self.notifier.publish(EVENT_SESSION_DELETED, session_id=session_id)
        return True

    def clear_session(self, session_id: str) -> bool:
        """Empty a session's message history, keeping its binding."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.error(f"Session not found: {session_id}")
            return False

        session.clear_messages()
        return True

    # --- Initialization ---

    async def initialize_session(self, session: ChatSession) -> ReasoningSession:
        """Build and store a fresh reasoning binding for ``session``.

        Waits for the tool catalog, then replaces any previous binding
        wholesale with one built from the session's effective tools. A
        session without its own selection uses the global one as it is now.
        """
        await self.registry.load_if_needed()

        enabled = session.enabled_tool_names
        if enabled is None:
            enabled = self.registry.enabled_tool_names
        tools = self.registry.get_effective_tools(enabled)
        binding = self.engine.create_session(
            instructions=session.system_instructions,
            temperature=session.temperature,
            max_response_tokens=session.max_response_tokens,
            tools=tools,
        )
        session.bind(binding, tools)

        logger.debug(f"Initialized session {session.session_id} with {len(tools)} tools")
        self.notifier.publish(
            EVENT_SESSION_INITIALIZED,
            session_id=session.session_id,
            tool_count=len(tools),
        )
        return binding

    def schedule_initialization(self, session: ChatSession) -> asyncio.Task[None]:
        """Start initializing ``session``, cancelling any pending initialization."""
        session_id = session.session_id

        pending = self._init_tasks.get(session_id)
        if pending is not None and not pending.done():
            pending.cancel()

        task = asyncio.create_task(
            self._initialize_in_background(session),
            name=f"session-init-{session_id}",
        )
        self._init_tasks[session_id] = task

        def _forget(done: asyncio.Task[None]) -> None:
            if self._init_tasks.get(session_id) is done:
                del self._init_tasks[session_id]

        task.add_done_callback(_forget)
        return task

    def session_init_task(self, session_id: str) -> asyncio.Task[None] | None:
        """The pending initialization task for a session, if any."""
        return self._init_tasks.get(session_id)

    async def wait_until_initialized(self, session_id: str) -> bool:
        """Wait for any pending initialization of a session.

        Returns:
            True if the session exists and has a binding afterwards
        """
        await self._await_pending_init(session_id)
        session = self._sessions.get(session_id)
        return session is not None and session.is_initialized

    async def reinitialize_session(self, session_id: str) -> bool:
        """Rebuild a session's binding, keeping its id and history.

        Returns:
            True if a new binding was stored. False if the session does not
            exist or the rebuild failed, in which case any previous binding
            is kept
        """
        session = self._sessions.get(session_id)
        if session is None:
            logger.error(f"Session not found for reinitialization: {session_id}")
            return False

        previous = session.binding
        self.schedule_initialization(session)
        await self._await_pending_init(session_id)
        return session.binding is not None and session.binding is not previous

    async def reinitialize_all(self) -> None:
        """Rebuild every session's binding, e.g. after the catalog changed."""
        session_ids = list(self._sessions)
        if session_ids:
            await asyncio.gather(
                *(self.reinitialize_session(session_id) for session_id in session_ids)
            )
            logger.info(f"Reinitialized {len(session_ids)} sessions")

    async def update_session_tools(
        self, session_id: str, enabled_tool_names: Iterable[str] | None
    ) -> bool:
        """Replace a session's tool selection and rebuild its binding.

        None drops the override so the session follows the global selection.
        """
        session = self._sessions.get(session_id)
        if session is None:
            logger.error(f"Session not found for tool update: {session_id}")
            return False

        session.set_enabled_tool_names(
            set(enabled_tool_names) if enabled_tool_names is not None else None
        )
        return await self.reinitialize_session(session_id)

    async def _initialize_in_background(self, session: ChatSession) -> None:
        try:
            await self.initialize_session(session)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to initialize session {session.session_id}: {e}",
                exc_info=True,
            )

    async def _await_pending_init(self, session_id: str) -> None:
        # A superseded initialization is cancelled; follow the newer one
        while True:
            task = self._init_tasks.get(session_id)
            if task is None:
                return
            try:
                await asyncio.shield(task)
                return
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
                if self._init_tasks.get(session_id) is task:
                    return

    # --- Messaging ---

    async def send_message(self, session_id: str, content: str) -> Message | None:
        """Record a user message and the reply to it.

        The user message is appended before anything is awaited. The reply
        is either the engine's answer or a fixed apology; failures are never
        raised to the caller.

        Returns:
            The reply message, or None if the session does not exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            logger.error(f"Session not found: {session_id}")
            return None

        lock = self._locks[session_id]
        user_message = Message(content=content, is_from_user=True)
        session.add_message(user_message)
        self._publish_message(session, user_message)

        async with lock:
            reply = await self._get_reply(session, content)
            session.add_message(reply)

        self._publish_message(session, reply)
        return reply

    async def _get_reply(self, session: ChatSession, user_input: str) -> Message:
        try:
            binding = await self._ensure_binding(session)
            content = await binding.respond(user_input)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Error getting AI response for session {session.session_id}: {e}",
                exc_info=True,
            )
            return Message(content=APOLOGY_MESSAGE, is_from_user=False)

        return Message(content=content, is_from_user=False)

    async def _ensure_binding(self, session: ChatSession) -> ReasoningSession:
        await self._await_pending_init(session.session_id)

        if session.binding is None:
            await self.initialize_session(session)

        if session.binding is None:
            raise SessionNotInitialized(session.session_id)
        return session.binding

    def _publish_message(self, session: ChatSession, message: Message) -> None:
        self.notifier.publish(
            EVENT_MESSAGE_ADDED,
            session_id=session.session_id,
            message_id=message.message_id,
            is_from_user=message.is_from_user,
        )

    # --- Lifecycle ---

    async def shutdown(self) -> None:
        """Cancel every pending session initialization."""
        tasks = [task for task in self._init_tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._init_tasks.clear()
