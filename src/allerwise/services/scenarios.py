"""Training scenarios and their cast."""

from dataclasses import dataclass

from allerwise.domain.conversations import CharacterProfile

DEFAULT_SCENARIO = "birthday_party"
FRIEND_ROTATION: tuple[str, ...] = ("friend1", "friend2", "friend3")
WAITER = "waiter"


@dataclass(frozen=True)
class Scenario:
    """A social setting with its characters and scripted opening."""

    key: str
    setting: str
    characters: dict[str, CharacterProfile]
    opening_lines: tuple[tuple[str, str], ...]

    @property
    def has_waiter(self) -> bool:
        return WAITER in self.characters


SCENARIOS: dict[str, Scenario] = {
    "birthday_party": Scenario(
        key="birthday_party",
        setting="at a birthday party",
        characters={
            "friend1": CharacterProfile(
                name="Emma",
                voice="nova",
                personality=(
                    "Enthusiastic party-lover who gets excited about food and "
                    "celebrations. Often the first to offer treats and encourage "
                    "others to try new things."
                ),
            ),
            "friend2": CharacterProfile(
                name="Jake",
                voice="shimmer",
                personality=(
                    "Skeptical and logical. Questions things but can be convinced "
                    "with good reasons. Often dismissive of concerns initially."
                ),
            ),
            "friend3": CharacterProfile(
                name="Maya",
                voice="fable",
                personality=(
                    "Curious and empathetic, asks thoughtful questions. Quick to "
                    "learn and understand. Often becomes the mediator who helps "
                    "educate others and finds solutions."
                ),
            ),
        },
        opening_lines=(
            ("friend1", "Oh my god, this cake is insane. Here, you have to try it!"),
            ("friend2", "Yeah, come on! Don't be the only one not eating cake!"),
        ),
    ),
    "dinner_with_friends": Scenario(
        key="dinner_with_friends",
        setting="at a restaurant",
        characters={
            "friend1": CharacterProfile(
                name="Sam",
                voice="nova",
                personality=(
                    "Food enthusiast who loves trying new dishes. Gets excited "
                    "about sharing meals and trying everything on the menu."
                ),
            ),
            "friend2": CharacterProfile(
                name="Riley",
                voice="shimmer",
                personality=(
                    "Practical and budget-conscious. Often suggests sharing dishes "
                    "to save money and tries to convince others to go along with "
                    "group decisions."
                ),
            ),
            "friend3": CharacterProfile(
                name="Alex",
                voice="fable",
                personality=(
                    "Social connector who wants everyone included. Quick to "
                    "suggest alternatives and help find solutions that work for "
                    "everyone."
                ),
            ),
            WAITER: CharacterProfile(
                name="Server",
                voice="onyx",
                personality=(
                    "Professional restaurant server who understands allergies and "
                    "food safety. Helpful in explaining ingredients and "
                    "modifications."
                ),
            ),
        },
        opening_lines=(
            (
                "friend1",
                "This place looks amazing! I've been dying to try their satay "
                "chicken skewers.",
            ),
            (
                "friend2",
                "Yeah! Let's all get that. We can share and it'll be cheaper too.",
            ),
        ),
    ),
}


def get_scenario(key: str | None) -> Scenario:
    """Return a scenario by key, falling back to the birthday party."""
    return SCENARIOS.get(key or DEFAULT_SCENARIO, SCENARIOS[DEFAULT_SCENARIO])
