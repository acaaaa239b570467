"""Agno agent service streaming Gemini replies.

The remote model capability behind ConversationSession.

Architecture Decisions:

1. **Stateless agent** - No agno storage is attached. The session owns the
   transcript and passes prior turns with every request, so the agent never
   keeps history of its own and nothing survives a restart.

2. **Singleton Pattern** - Agent initialization is expensive (client setup,
   model configuration). The singleton reuses one agent across page mounts.

3. **Errors propagate** - Provider errors are raised to the caller unchanged
   so the session can tell quota exhaustion from other failures. A run-error
   event in the stream is raised as ReplyStreamError.

4. **Provider status survives the run** - agno folds a failed model call into
   a run-error event that has no HTTP status. TrackedGemini records the
   provider error of the current run in a context variable, and the
   ReplyStreamError carries its status code and chains it as the cause.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextvars import ContextVar

from agno.agent import Agent
from agno.exceptions import ModelProviderError
from agno.models.google import Gemini
from agno.models.message import Message
from agno.models.response import ModelResponse

from src.agent.config import AgentConfig, get_agent_config
from src.models.schemas import Role, Turn
from src.session.errors import ReplyStreamError

logger = logging.getLogger(__name__)

# agno run event names
_CONTENT_EVENT = "RunContent"
_ERROR_EVENT = "RunError"

# Provider errors raised during the current run, newest last
_provider_errors: ContextVar[list[ModelProviderError] | None] = ContextVar(
    "provider_errors", default=None
)


class TrackedGemini(Gemini):
    """Gemini model that remembers provider errors of the current run."""

    async def ainvoke_stream(self, *args, **kwargs) -> AsyncIterator[ModelResponse]:
        try:
            async for response in super().ainvoke_stream(*args, **kwargs):
                yield response
        except ModelProviderError as e:
            errors = _provider_errors.get()
            if errors is not None:
                errors.append(e)
            raise


class AgentService:
    """Service for streaming replies from the Gemini agent.

    Wraps Agno's Agent with:
    - Generation settings from AgentConfig
    - Explicit conversation context per request
    - Clean fragment stream for ConversationSession
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the agent service.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._agent = self._create_agent()

    def _create_model(self) -> Gemini:
        return TrackedGemini(
            id=self._config.model_name,
            api_key=self._config.api_key,
            temperature=self._config.temperature,
            top_k=self._config.top_k,
            top_p=self._config.top_p,
            max_output_tokens=self._config.max_output_tokens,
        )

    def _create_agent(self) -> Agent:
        """Create the Agno agent instance.

        Returns:
            Configured Agent with the Gemini model and no storage.
        """
        return Agent(
            model=self._create_model(),
            description="A helpful chat assistant.",
            # Output as markdown for rich formatting in UI
            markdown=True,
        )

    @staticmethod
    def _build_messages(prompt: str, history: Sequence[Turn]) -> list[Message]:
        messages = [
            Message(
                role="assistant" if turn.role is Role.ASSISTANT else "user",
                content=turn.text,
            )
            for turn in history
        ]
        messages.append(Message(role="user", content=prompt))
        return messages

    async def stream_reply(
        self,
        prompt: str,
        history: Sequence[Turn],
    ) -> AsyncGenerator[str]:
        """Stream reply fragments for a prompt.

        Args:
            prompt: The user's message.
            history: Prior turns of the conversation, oldest first.

        Yields:
            Response text fragments as they arrive.

        Raises:
            ReplyStreamError: If the agent reports a run error. Carries the
                provider status code when the model call itself failed.
        """
        logger.debug(f"Streaming reply with {len(history)} context turns")
        # Set before the run starts so tasks agno spawns share the list
        errors: list[ModelProviderError] = []
        _provider_errors.set(errors)
        response_stream = self._agent.arun(
            self._build_messages(prompt, history),
            stream=True,
        )

        async for chunk in response_stream:
            event = getattr(chunk, "event", None)
            if event == _ERROR_EVENT:
                message = getattr(chunk, "content", None) or "agent run failed"
                if errors:
                    cause = errors[-1]
                    raise ReplyStreamError(message, status_code=cause.status_code) from cause
                raise ReplyStreamError(message)
            if event not in (None, _CONTENT_EVENT):
                continue
            content = getattr(chunk, "content", None)
            if isinstance(content, str) and content:
                yield content


# Module-level singleton instance
_agent_service: AgentService | None = None


def get_agent_service() -> AgentService:
    """Get or create the global agent service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The AgentService instance.
    """
    global _agent_service
    if _agent_service is None:
        _agent_service = AgentService()
    return _agent_service
