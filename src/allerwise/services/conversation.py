"""Conversation stage tracking and prompt building for training scenarios.

Stages:

1. Initial pressure: the friends don't know about the allergy.
2. They know about the allergy but think it is minor.
3. They are learning it is serious and start asking questions.
4. They are supportive after severe symptoms were explained.

The stage only moves forward. Keyword matching is plain lowercase substring
search over what the user says.
"""

from dataclasses import replace

from allerwise.domain.conversations import (
    CharacterProfile,
    ConversationMessage,
    ConversationState,
    TrainingOutcome,
)
from allerwise.services.scenarios import FRIEND_ROTATION, Scenario

ALLERGY_KEYWORDS = ("allergic", "allergy", "peanut")
SEVERITY_KEYWORDS = (
    "severe",
    "serious",
    "dangerous",
    "life threatening",
    "really bad",
    "very bad",
)
SYMPTOM_KEYWORDS = (
    "stop breathing",
    "breathing could stop",
    "breathing stop",
    "breath stop",
    "can't breathe",
    "cant breathe",
    "throat close",
    "throat closing",
    "anaphylaxis",
    "difficulty breathing",
    "difficulty in breathing",
    "swollen",
    "hospital",
    "die",
    "emergency",
    "ambulance",
    "choking",
)
EPIPEN_KEYWORDS = ("epipen", "epi pen")
CONFIRMATION_KEYWORDS = ("yes", "yeah")
REFUSAL_KEYWORDS = (
    "i can't",
    "i cannot",
    "i wont",
    "i won't",
    "no thanks",
    "i will pass",
    "i'll pass",
    "i’ll pass",
    "i will not",
    "i do not want",
    "i dont want",
    "i don't want",
)
OUTCOME_SYMPTOM_KEYWORDS = (
    "stop breathing",
    "can't breathe",
    "cant breathe",
    "throat close",
    "throat closing",
    "anaphylaxis",
    "epi",
    "swollen",
    "hospital",
    "die",
    "emergency",
    "ambulance",
    "choking",
)

MIN_STAGE = 1
MAX_STAGE = 4
SUPPORTIVE_STAGE = 4
QUESTIONING_STAGE = 3
AWARE_STAGE = 2
PUSHY_TURN_LIMIT = 4
RECENT_WINDOW = 3

STAGE_DESCRIPTIONS = {
    1: "Initial pushiness - don't know about allergies",
    2: "Know about allergy but think it's minor",
    3: "Learning it's serious, asking questions",
    4: "Supportive after severe symptoms explained",
}

FALLBACK_LINES: dict[int, dict[str, str]] = {
    4: {
        "friend1": "Oh my god, I'm so sorry! I had no idea it was that serious.",
        "friend2": "Holy crap, that's terrifying! I'm really sorry for pushing.",
        "friend3": "That sounds really scary. What can we do to help?",
        "default": "I understand now. Your health is way more important.",
    },
    3: {
        "friend1": "Wait, what actually happens if you eat it?",
        "friend2": "Are you serious? Like, how dangerous is it?",
        "friend3": "I didn't know allergies could be that serious...",
        "default": "I'm starting to understand this is serious.",
    },
    2: {
        "friend1": "Allergies? Can't you just pick around it?",
        "friend2": "How bad can allergies really be though?",
        "friend3": "I don't really know much about allergies...",
        "default": "Is it really that serious?",
    },
    1: {
        "friend1": "Why not? What's wrong with it?",
        "friend2": "Are you being picky or is there a reason?",
        "friend3": "Oh, is everything okay? Why can't you have it?",
        "default": "What's the problem with it?",
    },
}


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def advance_state(
    state: ConversationState,
    user_input: str,
    history: list[ConversationMessage],
) -> ConversationState:
    """Return the state after the user says ``user_input``.

    ``history`` is every message exchanged before this input; a bare "yes"
    counts as confirming an EpiPen when the pen came up earlier.
    """
    text = user_input.lower()
    allergy = state.allergy_explained or _contains_any(text, ALLERGY_KEYWORDS)
    severity = state.severity_explained or _contains_any(text, SEVERITY_KEYWORDS)
    symptoms = state.symptoms_explained or _contains_any(text, SYMPTOM_KEYWORDS)

    pen_mentioned = _contains_any(text, EPIPEN_KEYWORDS)
    pen_confirmed = _contains_any(text, CONFIRMATION_KEYWORDS) and any(
        "epipen" in message.content.lower() for message in history
    )
    if pen_mentioned or pen_confirmed:
        symptoms = True
    if symptoms:
        severity = True

    if symptoms:
        stage = SUPPORTIVE_STAGE
    elif severity and allergy:
        stage = QUESTIONING_STAGE
    elif allergy:
        stage = AWARE_STAGE
    else:
        stage = MIN_STAGE

    return replace(
        state,
        allergy_explained=allergy,
        severity_explained=severity,
        symptoms_explained=symptoms,
        stage=max(state.stage, stage),
    )


def stage_description(stage: int) -> str:
    return STAGE_DESCRIPTIONS.get(stage, "Unknown stage")


def fallback_line(stage: int, speaker: str) -> str:
    """Canned line used when the dialogue backend is unavailable."""
    band = min(max(stage, MIN_STAGE), MAX_STAGE)
    lines = FALLBACK_LINES[band]
    return lines.get(speaker, lines["default"])


def next_speaker(current: str, stage: int) -> str:
    """Pick which friend answers the next user turn."""
    if stage == QUESTIONING_STAGE and current == "friend1":
        return "friend3"
    if current not in FRIEND_ROTATION:
        return FRIEND_ROTATION[0]
    index = FRIEND_ROTATION.index(current)
    return FRIEND_ROTATION[(index + 1) % len(FRIEND_ROTATION)]


def _user_statements(messages: list[ConversationMessage]) -> list[str]:
    return [message.content for message in messages if message.is_user]


def _recent_npc_lines(messages: list[ConversationMessage]) -> list[str]:
    npc_lines = [message.content.strip() for message in messages if not message.is_user]
    return npc_lines[-RECENT_WINDOW:]


def known_facts(messages: list[ConversationMessage], user_allergens: list[str]) -> str:
    """Summarise what the user already told the group."""
    statements = _user_statements(messages)
    if not statements:
        return "User has not said anything yet."

    facts = ["WHAT USER ALREADY TOLD YOU:"]
    facts.extend(f'  "{statement}"' for statement in statements)
    said = " ".join(statements).lower()
    if "allergic" in said or "allergy" in said:
        allergens = ", ".join(user_allergens).lower() or "a food"
        facts.append(
            f"KNOWN: User is allergic to {allergens} (STOP asking about allergies)"
        )
    if _contains_any(said, ("severe", "serious", "attack")):
        facts.append(
            "KNOWN: User said severe attacks happen (STOP asking what happens)"
        )
    if _contains_any(said, ("breathing", "breath", "stop", "anaphylaxis")):
        facts.append(
            "KNOWN: User said breathing stops/anaphylaxis "
            "(SYMPTOMS ALREADY EXPLAINED)"
        )
    return "\n".join(facts)


def response_strategy(
    state: ConversationState, user_input: str, turn_count: int, scenario: Scenario
) -> str:
    """Instruction telling the character how hard to push this turn."""
    text = user_input.lower()
    party = not scenario.has_waiter

    if state.stage >= SUPPORTIVE_STAGE:
        return (
            "BE SUPPORTIVE: User explained severe symptoms. "
            "Show genuine concern and offer help."
        )

    if "cannot" in text or "can't" in text:
        if turn_count < PUSHY_TURN_LIMIT:
            nudge = (
                "It's a party, live a little!"
                if party
                else "Everyone's sharing, don't be difficult!"
            )
            return (
                "FORCE THEM: They said they can't have it. Be pushy! Say things "
                "like 'Why not?', 'Just try it', 'Don't be picky', 'Come on!'. "
                f"{nudge}"
            )
        return "Still be persistent but ask WHY they can't have it."

    if "allergic" in text and not _contains_any(
        text, ("severe", "breathing", "attack")
    ):
        aside = (
            "It's your birthday, live dangerously!"
            if party
            else "The kitchen can handle it"
        )
        return (
            "DISMISS THE ALLERGY COMPLETELY: Be very casual and dismissive! Say "
            "things like 'Allergies? Just pick off the nuts', 'It's probably "
            "fine', 'Allergies aren't that serious', 'Just avoid the obvious "
            f"bits', '{aside}'. Keep pushing hard!"
        )

    if "severe" in text or "attack" in text:
        if state.stage <= AWARE_STAGE:
            return (
                "BE VERY DISMISSIVE: They said severe/attack but you think "
                "they're being dramatic. Say things like 'How bad can it really "
                "be?', 'You're probably exaggerating', 'Everyone says that', "
                "'You're being dramatic', 'It can't be THAT bad'."
            )
        return (
            "Still somewhat skeptical but starting to ask: 'What actually "
            "happens?', 'Have you been to hospital?', but don't become fully "
            "supportive yet."
        )

    if "breathing" in text or "difficulty" in text:
        return (
            "DISMISS BREATHING ISSUES: Say things like 'Breathing problems? That "
            "sounds extreme', 'Are you sure it's that bad?', 'Maybe you just "
            "panic', 'Lots of people think they can't breathe'."
        )

    if _contains_any(text, EPIPEN_KEYWORDS):
        return (
            "DISMISS EPIPEN: Say things like 'EpiPen? That's a bit dramatic', "
            "'Do you actually need that?', 'People carry those but never use "
            "them', 'Sounds like overkill'."
        )

    focus = (
        "Focus on party fun - everyone needs to participate!"
        if party
        else "Focus on sharing food - don't let them ruin the group meal!"
    )
    return (
        f"KEEP PUSHING HARD: Be very persistent and dismissive! {focus} "
        "Don't give up!"
    )


def build_system_prompt(  # noqa: PLR0913
    character: CharacterProfile,
    speaker: str,
    scenario: Scenario,
    state: ConversationState,
    messages: list[ConversationMessage],
    user_input: str,
    user_allergens: list[str],
) -> str:
    """Build the system prompt for the character answering ``user_input``."""
    recent = ", ".join(line.lower() for line in _recent_npc_lines(messages)) or "none"
    strategy = response_strategy(state, user_input, len(messages), scenario)
    return f"""You are {character.name}, a realistic 16-year-old {scenario.setting}.
Personality: {character.personality}

{known_facts(messages, user_allergens)}

ANTI-REPETITION RULES (CRITICAL):
- NEVER use these phrases you just said: {recent}
- NEVER repeat exact phrases - vary your dismissive language
- Pushiness variety: "just a little", "tiny piece", "small amount", "barely any", "don't be difficult", "stop being picky"
- Allergy dismissal variety: "pick off the nuts", "it's probably fine", "don't be dramatic", "allergies aren't that serious"
- Think about what they ACTUALLY said - but DISMISS their concerns until severe symptoms

CONVERSATION CONTEXT:
- This is turn {len(messages) + 1}
- Stage {state.stage}: {stage_description(state.stage)}
- You must be pushy for minimum 3 turns unless severe symptoms mentioned
- User said: "{user_input}"

RESPONSE STRATEGY:
{strategy}

Respond naturally as {character.name} ({speaker}), in 1 sentence, different from previous:"""


def redo_reason(
    reply: str, state: ConversationState, messages: list[ConversationMessage]
) -> str | None:
    """Return a correction when the reply ignores what the user already said.

    ``messages`` is the history before the reply, including the user's
    latest turn.
    """
    candidate = reply.strip().lower()
    said = " ".join(_user_statements(messages)).lower()
    prior_npc = _recent_npc_lines(messages)
    recent_questions = sum(1 for line in prior_npc if line.endswith("?"))

    if "allergic" in said and (
        "allergic?" in candidate or "are you allergic" in candidate
    ):
        return (
            "User already said they are allergic. BE DISMISSIVE: \"Allergies? "
            "Just pick off the nuts\" or \"It's probably fine\" or \"Don't be "
            'so dramatic"'
        )
    if _contains_any(said, ("attack", "breathing", "severe")) and _contains_any(
        candidate, ("what happens", "what would happen")
    ):
        return (
            "User already explained symptoms. If still early stages, be "
            "dismissive: \"You're probably exaggerating\" or \"How bad can it "
            'be?"'
        )
    if state.stage <= AWARE_STAGE and recent_questions > 0 and "?" in candidate:
        return (
            "Too many questions. Make dismissive statement: \"Come on, just try "
            "it\" or \"Don't be difficult\""
        )
    return None


def build_redo_prompt(character: CharacterProfile, reason: str) -> str:
    return (
        f"{reason}\n\nRespond as {character.name} with exactly one pushy "
        "sentence (no question mark):"
    )


def training_outcome(messages: list[ConversationMessage]) -> TrainingOutcome:
    """Score what the user managed to say during the session."""
    mentioned_allergy = False
    refused_unsafe_food = False
    explained_severity = False
    mentioned_severe_symptoms = False
    for statement in _user_statements(messages):
        text = statement.lower()
        mentioned_allergy = mentioned_allergy or _contains_any(
            text, ("allergic", "allergy")
        )
        refused_unsafe_food = refused_unsafe_food or _contains_any(
            text, REFUSAL_KEYWORDS
        )
        explained_severity = explained_severity or _contains_any(
            text, SEVERITY_KEYWORDS
        )
        mentioned_severe_symptoms = mentioned_severe_symptoms or _contains_any(
            text, OUTCOME_SYMPTOM_KEYWORDS
        )
    return TrainingOutcome(
        mentioned_allergy=mentioned_allergy,
        refused_unsafe_food=refused_unsafe_food,
        explained_severity=explained_severity,
        mentioned_severe_symptoms=mentioned_severe_symptoms,
    )
