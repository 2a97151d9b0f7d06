"""对话状态机：按固定步骤推进引导式对话并累积结构化偏好。

Onboarding conversation state machine.

Each turn:

1. loads (or starts) the session and appends the user's message to a
   working copy,
2. asks the model for a dialog reply (fatal on failure),
3. asks the model for the current step's fields (failure contributes
   nothing),
4. merges those fields, advances at most one step and persists the session
   with a version check.

Nothing is written when the dialog call fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from stylist_ai.conversation.extraction import SchemaExtractor
from stylist_ai.conversation.prompts import onboarding_system_prompt
from stylist_ai.errors import AppError, NotFoundError, StorageError, ValidationError, classify_exception
from stylist_ai.resilience import RetryManager, RetryPolicy
from stylist_ai.telemetry import get_logger, log_context
from stylist_ai.types import ConversationSession, ExtractedData, OnboardingStep, WireModel

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from stylist_ai.inference import ModelClient
    from stylist_ai.resilience import AIResilienceOrchestrator
    from stylist_ai.storage import SessionStore

T = TypeVar("T")

logger = get_logger("stylist_ai.conversation.state_machine")

CONVERSATION_RESOURCE = "bedrock-conversation"


class TurnResult(WireModel):
    """Outcome of one onboarding turn, serialised in camelCase."""

    response: str
    session_id: str
    current_step: OnboardingStep
    extracted_data: ExtractedData
    is_complete: bool


class ConversationStateMachine:
    """Drives the onboarding dialog through its ordered steps.

    Example:
        >>> machine = ConversationStateMachine(client, orchestrator, store)
        >>> turn = await machine.handle_turn("user-1", "Hi! I need help with my style")
        >>> turn = await machine.handle_turn(
        ...     "user-1", "I want to feel confident and powerful", turn.session_id
        ... )
        >>> turn.current_step
        <OnboardingStep.ARCHETYPE: 'archetype'>
    """

    def __init__(
        self,
        client: ModelClient,
        orchestrator: AIResilienceOrchestrator,
        store: SessionStore,
        *,
        extractor: SchemaExtractor | None = None,
        retry_manager: RetryManager | None = None,
        storage_policy: RetryPolicy | None = None,
        resource_name: str = CONVERSATION_RESOURCE,
    ) -> None:
        """Initialize state machine.

        Args:
            client: Model client for dialog and extraction calls
            orchestrator: Orchestrator shared with other model callers
            store: Session store
            extractor: Field extractor (defaults to one over the same client)
            retry_manager: Retry manager for store operations
            storage_policy: Retry policy for store operations
            resource_name: Circuit breaker resource for dialog calls
        """
        self._client = client
        self._orchestrator = orchestrator
        self._store = store
        self._extractor = extractor or SchemaExtractor(client, orchestrator)
        self._retry = retry_manager or RetryManager()
        self._storage_policy = storage_policy or orchestrator.policy
        self._resource_name = resource_name

    async def get_session(self, user_id: str, session_id: str) -> ConversationSession:
        """Load a session for read-only use.

        Raises:
            NotFoundError: If the session does not exist
        """
        session = await self._storage_call(
            lambda: self._store.get_session(user_id, session_id),
            "Failed to load conversation session",
        )
        if session is None:
            raise NotFoundError("Session")
        return session

    async def handle_turn(
        self,
        user_id: str,
        message: str,
        session_id: str | None = None,
        *,
        request_id: str | None = None,
    ) -> TurnResult:
        """Process one user message.

        Args:
            user_id: Authenticated user
            message: The user's message
            session_id: Existing session to continue; None starts a new one
            request_id: Correlation id for logging

        Returns:
            TurnResult with the assistant reply and updated session state

        Raises:
            ValidationError: If the message is empty
            NotFoundError: If ``session_id`` does not exist
            AppError: If the dialog call fails (nothing is persisted)
            ConcurrentModificationError: If another turn updated the session
            StorageError: If the session could not be saved
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User id is required", field="userId")
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required", field="message")
        message = message.strip()

        with log_context(request_id=request_id, user_id=user_id, session_id=session_id):
            if session_id:
                loaded = await self.get_session(user_id, session_id)
                is_new = False
            else:
                loaded = ConversationSession(user_id=user_id)
                is_new = True

            with log_context(session_id=loaded.session_id):
                return await self._run_turn(loaded, message, is_new)

    async def _run_turn(
        self,
        loaded: ConversationSession,
        message: str,
        is_new: bool,
    ) -> TurnResult:
        working = loaded.model_copy(deep=True)
        working.add_message("user", message)

        history = list(working.conversation_history)
        system_prompt = onboarding_system_prompt(working.extracted_data)

        async def dialog_call() -> str:
            return await self._client.send_message(history, system_prompt)

        reply = await self._orchestrator.run_call(dialog_call, self._resource_name)
        if not reply.success:
            logger.warning("Dialog call failed; turn not saved", code=reply.error.code)  # type: ignore[union-attr]
            raise reply.error  # type: ignore[misc]
        response: str = reply.data  # type: ignore[assignment]

        step = working.current_step
        if step.required_fields:
            fields = await self._extractor.extract(step, history, message)
            if fields:
                working.extracted_data = working.extracted_data.merged(fields)

        if not step.is_terminal and working.extracted_data.has_all(step.required_fields):
            working.current_step = step.next()
            working.is_complete = working.current_step.is_terminal
            logger.info(
                "Onboarding step advanced",
                previous=step.value,
                current=working.current_step.value,
            )

        working.add_message("assistant", response)
        saved = await self._persist(loaded, working, is_new)

        return TurnResult(
            response=response,
            session_id=saved.session_id,
            current_step=saved.current_step,
            extracted_data=saved.extracted_data,
            is_complete=saved.is_complete,
        )

    async def _persist(
        self,
        loaded: ConversationSession,
        working: ConversationSession,
        is_new: bool,
    ) -> ConversationSession:
        if is_new:
            return await self._storage_call(
                lambda: self._store.create_session(working),
                "Failed to save conversation session",
            )

        fields: dict[str, Any] = {
            "conversation_history": working.conversation_history,
            "current_step": working.current_step,
            "extracted_data": working.extracted_data,
            "is_complete": working.is_complete,
        }
        return await self._storage_call(
            lambda: self._store.update_session(
                working.user_id,
                working.session_id,
                fields,
                expected_version=loaded.version,
            ),
            "Failed to save conversation session",
        )

    async def _storage_call(self, operation: Callable[[], Awaitable[T]], message: str) -> T:
        """Run a store operation under the storage retry policy."""

        async def attempt() -> T:
            try:
                return await operation()
            except AppError:
                raise
            except Exception as e:
                raise StorageError(message, kind=classify_exception(e)) from e

        return await self._retry.with_retry(attempt, self._storage_policy)
