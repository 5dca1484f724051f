"""Built-in provider catalogue and client specializations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from streamchat.config import ProviderConfig, ProviderEntry
from streamchat.errors import NotFoundError
from streamchat.llm.client import LLMClient
from streamchat.llm.dispatcher import ProviderVariant, TokenCallback
from streamchat.llm.transport import Transport

_logger = logging.getLogger(__name__)

_DEEPSEEK_CHAT_URL = "https://api.deepseek.com/v1/chat/completions"


@dataclass(frozen=True)
class Persona:
    """Style preset applied to a client before every question."""
    system_prompt: str
    seed: tuple[tuple[str, str], ...] = ()
    temperature: float | None = None
    min_length: int = 0


@dataclass(frozen=True)
class ProviderSpec:
    """A concrete remote service: endpoint + model + dispatch behaviour."""
    name: str
    url: str
    model: str
    variant: ProviderVariant
    description: str = ""
    persona: Persona | None = None


GRUFF = Persona(
    system_prompt=(
        "You are a grumpy old mechanic. You answer every question, but you "
        "grumble, complain about kids these days and never sugar-coat anything."
    ),
    seed=(
        ("Hello there!", "Yeah, yeah, hello. What broke this time?"),
        ("Do you know Alice?", "Alice? Never pays on time. What about her?"),
        ("Can you help me?", "Depends. Is it going to take all afternoon?"),
    ),
    temperature=1.3,
    min_length=300,
)


PROVIDERS: dict[str, ProviderSpec] = {
    spec.name: spec
    for spec in (
        ProviderSpec(
            "deepseek-r1", _DEEPSEEK_CHAT_URL, "deepseek-reasoner",
            ProviderVariant.REASONER, "DeepSeek reasoning model"),
        ProviderSpec(
            "deepseek-v3", _DEEPSEEK_CHAT_URL, "deepseek-chat",
            ProviderVariant.CHAT, "DeepSeek general chat model"),
        ProviderSpec(
            "zhipu", "https://open.bigmodel.cn/api/paas/v4/chat/completions",
            "glm-4-flash", ProviderVariant.CHAT, "Zhipu GLM-4 Flash (free tier)"),
        ProviderSpec(
            "qwen",
            "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions",
            "qwq-32b", ProviderVariant.REASONER, "Qwen QwQ-32B reasoning model"),
        ProviderSpec(
            "doubao", "https://ark.cn-beijing.volces.com/api/v3/chat/completions",
            "doubao-1-5-pro-32k-character-250228", ProviderVariant.CHAT,
            "Doubao role-play model"),
        ProviderSpec(
            "deepseek-fim", "https://api.deepseek.com/beta/completions",
            "deepseek-chat", ProviderVariant.FIM,
            "DeepSeek fill-in-the-middle completion (beta)"),
        ProviderSpec(
            "gruff", _DEEPSEEK_CHAT_URL, "deepseek-chat",
            ProviderVariant.CHAT, "DeepSeek chat with the gruff persona", GRUFF),
    )
}


class PersonaClient(LLMClient):
    """Client that re-applies a :class:`Persona` around every exchange.

    The persona replaces system prompt, history and temperature on
    construction and again after each completed ``get()``, so the
    conversation never drifts away from the seed exchanges.
    """

    def __init__(self, provider: ProviderConfig, persona: Persona, **kwargs):
        super().__init__(provider, ProviderVariant.CHAT, **kwargs)
        self.persona = persona
        self.apply_persona()

    def apply_persona(self) -> None:
        self.set_system(self.persona.system_prompt)
        self.clear_history()
        for question, answer in self.persona.seed:
            self.add_history(question, answer)
        self.set_temperature(self.persona.temperature)

    def get(self, question: str, min_length: int | None = None) -> str:
        length = self.persona.min_length if min_length is None else min_length
        if length > 0:
            question = f"{question} Answer in no fewer than {length} words."
        try:
            return super().get(question)
        finally:
            self.apply_persona()


class FimClient(LLMClient):
    """Fill-in-the-middle completion: the model writes between prefix and suffix."""

    def __init__(self, provider: ProviderConfig, **kwargs):
        super().__init__(provider, ProviderVariant.FIM, **kwargs)

    def set_prefix(self, prefix: str) -> None:
        self.set("prompt", prefix, quote=True)

    def set_suffix(self, suffix: str) -> None:
        self.set("suffix", suffix, quote=True)

    def get(self, question: str = "") -> str:
        return super().get(question)


def resolve_spec(
    name: str, providers: Mapping[str, ProviderEntry] | None = None,
) -> ProviderSpec:
    """Find *name* among user-declared providers, then the built-in ones."""
    if providers and name in providers:
        entry = providers[name]
        try:
            variant = ProviderVariant(entry.variant)
        except ValueError:
            raise ValueError(
                f"Provider {name!r}: unknown variant {entry.variant!r}") from None
        return ProviderSpec(name, entry.url, entry.model, variant, entry.description)
    if name in PROVIDERS:
        return PROVIDERS[name]
    raise NotFoundError(f"Unknown provider: {name}")


def create_client(
    name: str,
    api_key: str,
    on_token: TokenCallback | None = None,
    *,
    transport: Transport | None = None,
    caller_encoding: str = "utf-8",
    wire_encoding: str = "utf-8",
    providers: Mapping[str, ProviderEntry] | None = None,
) -> LLMClient:
    """Build the client class matching provider *name*."""
    spec = resolve_spec(name, providers)
    config = ProviderConfig(
        url=spec.url,
        model=spec.model,
        api_key=api_key,
        caller_encoding=caller_encoding,
        wire_encoding=wire_encoding,
    )
    _logger.debug("Creating %s client for %s (%s)", spec.variant.value, name, spec.model)
    if spec.persona is not None:
        return PersonaClient(config, spec.persona, on_token=on_token, transport=transport)
    if spec.variant is ProviderVariant.FIM:
        return FimClient(config, on_token=on_token, transport=transport)
    return LLMClient(config, spec.variant, on_token=on_token, transport=transport)
