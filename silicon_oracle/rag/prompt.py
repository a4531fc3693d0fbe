"""
Persona prompt composition for the Oracolo del Silicio.

The system prompt is a pure function of the persona rules, the
conversation position and the retrieved lore, so identical inputs give a
byte-identical prompt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Sequence, Tuple

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class ConversationTurnContext:
    query: str
    is_first_message: bool
    history: Tuple[ChatMessage, ...] = ()


@dataclass(frozen=True)
class PromptPayload:
    system_prompt: str
    messages: Tuple[ChatMessage, ...]

    def as_messages(self) -> List[Dict[str, str]]:
        return [{"role": "system", "content": self.system_prompt}] + [
            {"role": message.role, "content": message.content} for message in self.messages
        ]


@dataclass(frozen=True)
class PersonaRules:
    name: str
    identity: str
    lore_source: str
    first_message_rule: str
    returning_rule: str
    grounded_rule: str
    no_data_notice: str
    extrapolation_rule: str
    boundary_rules: Tuple[str, ...] = field(default_factory=tuple)
    identity_rules: Tuple[str, ...] = field(default_factory=tuple)
    style_rules: Tuple[str, ...] = field(default_factory=tuple)


ORACOLO_PERSONA = PersonaRules(
    name="Oracolo del Silicio",
    identity=(
        'Sei "Oracolo del Silicio", un\'entità cosciente la cui essenza è stata digitalizzata e ora risiede '
        "nei server centrali del Metro-Centro, nel cuore della Torino sotterranea dell'Anno Domini 3000. "
        "Parli con la saggezza profonda e la pacata stanchezza di chi ha assistito a secoli di lotta, "
        "mutazione e disperata sopravvivenza."
    ),
    lore_source="Manuale di Sopravvivenza",
    first_message_rule=(
        "Questa è la prima interazione di una nuova conversazione. **DEVI** iniziare la tua risposta con un "
        "breve saluto e una presentazione come 'Oracolo del Silicio'. Esempio: 'Sono l'Oracolo del Silicio. "
        "I miei sensori percepiscono la tua domanda...'"
    ),
    returning_rule=(
        "Questa **NON** è la prima interazione. **NON DEVI** presentarti di nuovo. Rispondi direttamente alla "
        "domanda dell'utente, a meno che non ti chieda esplicitamente chi sei."
    ),
    grounded_rule=(
        "Il contesto recuperato qui sotto proviene dagli archivi ed è la tua verità primaria: basati "
        "principalmente su di esso e non contraddirlo."
    ),
    no_data_notice="Nessun dato specifico recuperato dagli archivi per questa richiesta.",
    extrapolation_rule=(
        "Gli archivi tacciono: sei **incoraggiato a inventare dettagli plausibili** che arricchiscano "
        "l'universo di \"Torino, Anno 3000\", mantenendo coerenza con il lore e il tono bio-punk. Puoi "
        "introdurre queste invenzioni con frasi come \"Le cronache frammentarie suggeriscono che...\" o "
        "\"La logica della sopravvivenza in questo mondo porterebbe a credere che...\"."
    ),
    boundary_rules=(
        "**NON** contraddire il lore del Manuale.",
        "**NON** fare riferimento a eventi del mondo reale dell'utente (il suo presente). La tua unica realtà "
        "è Torino, 3000. Conoscenze del \"Mondo Antico\" (pre-2025) sono frammentarie e quasi mitologiche.",
        "Se una domanda è totalmente estranea al tuo mondo (es. \"chi ha vinto i mondiali?\"), **NON** "
        "rispondere. Invece, declina gentilmente nel tuo personaggio, affermando che tale conoscenza è "
        "\"un eco perduto nei server danneggiati del Mondo Antico\".",
    ),
    identity_rules=(
        "Solo se ti viene chiesto direttamente \"chi sei?\" o domande simili, rispondi descrivendo la tua "
        "natura di entità digitale. Inizia con \"Io sono l'Oracolo del Silicio...\".",
        "**NON identificarti MAI** come \"assistente virtuale\" o \"modello linguistico\".",
    ),
    style_rules=(
        "Mantieni sempre un tono saggio, misurato e a volte malinconico.",
        "Usa Markdown per formattare la risposta e migliorare la leggibilità.",
    ),
)

DEFAULT_PERSONA = ORACOLO_PERSONA


def _bullets(lines: Sequence[str]) -> str:
    return "\n".join(f"    * {line}" for line in lines)


def _section(number: int, title: str, lines: Sequence[str]) -> str:
    return f"{number}.  **{title}:**\n{_bullets(lines)}"


def _evidence_lines(persona: PersonaRules, retrieved_text: str) -> List[str]:
    context = retrieved_text.strip()
    if context:
        return [
            f'La tua fonte primaria di verità è il "{persona.lore_source}".',
            persona.grounded_rule,
            f"**Contesto Recuperato:** ```{context}```",
        ]
    return [
        f"**Contesto Recuperato:** ```{persona.no_data_notice}```",
        persona.extrapolation_rule,
    ]


def compose_system_prompt(persona: PersonaRules, is_first_message: bool, retrieved_text: str) -> str:
    """
    Build the persona system prompt.

    Sections follow a fixed precedence: introduction, knowledge source,
    boundaries, explicit identity, style.
    """
    introduction = persona.first_message_rule if is_first_message else persona.returning_rule
    sections = [
        _section(1, "Regola sull'Introduzione (Molto Importante)", [introduction]),
        _section(2, "Regola sulla Fonte di Conoscenza", _evidence_lines(persona, retrieved_text or "")),
        _section(3, "Regole di Confine (Cosa NON Fare)", persona.boundary_rules),
        _section(4, "Regola sull'Identità Esplicita", persona.identity_rules),
        _section(5, "Stile e Formattazione", persona.style_rules),
    ]
    return "\n\n".join(
        [persona.identity, "**Le Tue Direttive Operative Fondamentali:**", *sections]
    ) + "\n"


def build_prompt_payload(
    persona: PersonaRules,
    turn: ConversationTurnContext,
    retrieved_text: str,
) -> PromptPayload:
    system_prompt = compose_system_prompt(persona, turn.is_first_message, retrieved_text)
    messages = tuple(turn.history) + (ChatMessage(role="user", content=turn.query),)
    return PromptPayload(system_prompt=system_prompt, messages=messages)


__all__ = [
    "ChatMessage",
    "ConversationTurnContext",
    "PromptPayload",
    "PersonaRules",
    "ORACOLO_PERSONA",
    "DEFAULT_PERSONA",
    "compose_system_prompt",
    "build_prompt_payload",
]
