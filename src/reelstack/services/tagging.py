"""Tag generation built on Pydantic AI and LangGraph, with a deterministic platform fallback."""

from __future__ import annotations

import asyncio
import math
import time
from typing import Any, List, Optional, Protocol, Sequence, TypedDict

from langgraph.graph import END, START, StateGraph
from pydantic_ai import Agent
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.openai import OpenAIProvider
from rich.console import Console

from reelstack.config.settings import Settings, get_settings
from reelstack.models.video import MAX_TAG_LENGTH, MAX_TAGS
from reelstack.utils.validation import is_short_form

MAX_BACKOFF_SECONDS = 8.0
BASE_BACKOFF_SECONDS = 1.0
GENERIC_TAGS = ("video", "content")
_STRIP_CHARS = " \t\r\n\"'`#.*"


class TagAgent(Protocol):
    """Anything exposing Pydantic AI's ``Agent.run`` coroutine."""

    async def run(self, user_prompt: str) -> Any:
        ...


class TaggingState(TypedDict, total=False):
    """Workflow state propagated through the LangGraph pipeline."""

    prompt: str
    attempt: int
    output: Optional[str]
    error: Optional[str]


class TagGenerator:
    """Produce 1-7 short lowercase tags for a resolved video.

    A language model is used when credentials (or an injected agent) are available. Without
    one, or once the retry policy is exhausted, the static per-platform set from
    ``platforms.yaml`` is returned. :meth:`generate` never raises.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        agent: Optional[TagAgent] = None,
        max_attempts: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        backoff_base_seconds: float = BASE_BACKOFF_SECONDS,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console(stderr=True)
        self._model_name = self._settings.tag_model
        self._max_attempts = max(1, max_attempts or int(self._settings.tag_max_attempts))
        self._timeout_seconds = timeout_seconds or float(self._settings.tag_timeout_seconds)
        self._backoff_base_seconds = max(0.0, backoff_base_seconds)
        self._agent: Optional[TagAgent] = agent if agent is not None else self._create_agent()
        self._workflow = self._build_workflow()

    @property
    def ai_enabled(self) -> bool:
        """Whether a language model is available for tagging."""

        return self._agent is not None

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, title: str, description: str, url: str, platform: str) -> List[str]:
        """Return an ordered list of tags for the video.

        Parameters
        ----------
        title, description:
            Resolved metadata used as model context.
        url:
            Original link; its shape drives the short-form/long-form hint.
        platform:
            Platform label; selects the static fallback set.

        Returns
        -------
        list[str]
            Between one and seven lowercase tags, each shorter than 30 characters.
        """

        if self._agent is None:
            return self.fallback_tags(platform)

        state: TaggingState = {
            "prompt": self.build_prompt(title, description, url, platform),
            "attempt": 0,
            "output": None,
            "error": None,
        }

        try:
            final_state = await self._workflow.ainvoke(state)
        except Exception as exc:
            self._console.log(f"[yellow]Tagging workflow failed; using platform tags:[/yellow] {exc}")
            return self.fallback_tags(platform)

        output = final_state.get("output")
        if output is None:
            self._console.log(
                "[yellow]Tag generation failed; using platform tags:[/yellow] "
                f"{final_state.get('error') or 'unknown error'}"
            )
            return self.fallback_tags(platform)

        tags = self.parse_tags(output)
        if not tags:
            self._console.log("[yellow]Model returned no usable tags; using generic tags.[/yellow]")
            return self.generic_tags(platform)
        return tags

    def build_prompt(self, title: str, description: str, url: str, platform: str) -> str:
        """Compose the single prompt sent to the language model."""

        form = "short-form" if is_short_form(url) else "long-form"
        return (
            f"Generate 5-7 concise, descriptive tags for this {form} {platform} video.\n"
            f"Title: {title}\n"
            f"Description: {description}\n"
            f"URL: {url}\n"
            f"Platform: {platform}\n\n"
            "Return only the tags as a single comma-separated list, lowercase, with no numbering, "
            "hashtags, or any other text."
        )

    @staticmethod
    def parse_tags(output: str) -> List[str]:
        """Split a comma-separated model response into normalized tags."""

        tags: List[str] = []
        for chunk in output.split(","):
            tag = chunk.strip(_STRIP_CHARS).lower()
            if not tag or len(tag) >= MAX_TAG_LENGTH or tag in tags:
                continue
            tags.append(tag)
            if len(tags) >= MAX_TAGS:
                break
        return tags

    def fallback_tags(self, platform: str) -> List[str]:
        """Return the static tag set configured for ``platform``."""

        return _valid_tags(self._settings.platforms.tags_for(platform)) or list(self._settings.platforms.default_tags)

    @staticmethod
    def generic_tags(platform: str) -> List[str]:
        """Return ``[platform, "video", "content"]``, dropping a platform label that breaks tag rules."""

        return _valid_tags([platform.strip().lower(), *GENERIC_TAGS])

    def _build_workflow(self) -> Any:
        """Construct the LangGraph workflow that orchestrates model retries."""

        graph = StateGraph(TaggingState)
        graph.add_node("generate", self._generate_node)
        graph.add_node("backoff", self._backoff_node)
        graph.add_edge(START, "generate")
        graph.add_conditional_edges(
            "generate",
            self._route_post_generate,
            {
                "complete": END,
                "retry": "backoff",
                "fail": END,
            },
        )
        graph.add_edge("backoff", "generate")
        return graph.compile()

    async def _generate_node(self, state: TaggingState) -> TaggingState:
        """Invoke the agent once, bounded by the per-attempt timeout."""

        attempt = state.get("attempt", 0) + 1
        if self._agent is None:
            return {"attempt": attempt, "output": None, "error": "no tagging agent configured"}

        start_time = time.perf_counter()
        try:
            result = await asyncio.wait_for(self._agent.run(state["prompt"]), timeout=self._timeout_seconds)
            output = getattr(result, "output", result)
            duration_seconds = time.perf_counter() - start_time
            self._console.log(f"Tag generation succeeded (attempt={attempt}, duration={duration_seconds:.2f}s)")
            return {"attempt": attempt, "output": str(output), "error": None}
        except asyncio.TimeoutError:
            error_message = f"timed out after {self._timeout_seconds:.1f}s"
        except Exception as exc:
            error_message = f"{exc.__class__.__name__}: {exc}"

        duration_seconds = time.perf_counter() - start_time
        self._console.log(
            f"Tag generation attempt {attempt}/{self._max_attempts} failed "
            f"(duration={duration_seconds:.2f}s, error='{error_message}')"
        )
        return {"attempt": attempt, "output": None, "error": error_message}

    async def _backoff_node(self, state: TaggingState) -> TaggingState:
        """Sleep for an exponentially increasing duration before retrying."""

        attempt = state.get("attempt", 1)
        delay = min(self._backoff_base_seconds * math.pow(2, attempt - 1), MAX_BACKOFF_SECONDS)
        if delay > 0:
            await asyncio.sleep(delay)
        return {"error": state.get("error")}

    def _route_post_generate(self, state: TaggingState) -> str:
        if state.get("output") is not None:
            return "complete"
        if state.get("attempt", 0) >= self._max_attempts:
            return "fail"
        return "retry"

    def _create_agent(self) -> Optional[TagAgent]:
        """Instantiate the Pydantic AI agent from configured credentials, or ``None``."""

        openai_key = (
            self._settings.openai_api_key.get_secret_value()
            if self._settings.openai_api_key is not None
            else None
        )
        anthropic_key = (
            self._settings.anthropic_api_key.get_secret_value()
            if self._settings.anthropic_api_key is not None
            else None
        )

        try:
            if openai_key:
                model: Any = OpenAIChatModel(self._model_name, provider=OpenAIProvider(api_key=openai_key))
            elif anthropic_key:
                model = AnthropicModel(self._model_name, provider=AnthropicProvider(api_key=anthropic_key))
            else:
                self._console.log("No language model credentials configured - using platform tags.")
                return None
            return Agent(model=model, output_type=str, system_prompt=self._system_prompt())
        except Exception as exc:
            self._console.log(f"[red]Failed to initialise tagging agent:[/red] {exc}")
            return None

    @staticmethod
    def _system_prompt() -> str:
        return (
            "You label short videos for a personal catalog. Reply with comma-separated tags only: "
            "short, lowercase, descriptive of topic, format, and mood."
        )


def _valid_tags(candidates: Sequence[str]) -> List[str]:
    tags: List[str] = []
    for candidate in candidates:
        tag = candidate.strip().lower()
        if tag and len(tag) < MAX_TAG_LENGTH and tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


__all__ = ["TagAgent", "TagGenerator"]
