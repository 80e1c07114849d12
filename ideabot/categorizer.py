"""Keyword-based idea categorization."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Category:
    """A topical idea category with its reaction emoji and trigger keywords."""

    name: str
    emoji: str
    keywords: tuple[str, ...] = field(default=())

    def matches(self, lowered_text: str) -> bool:
        # Plain substring test: "ai" also matches inside "email"
        return any(keyword in lowered_text for keyword in self.keywords)


# Order matters: the first category with a matching keyword wins.
CATEGORIES: tuple[Category, ...] = (
    Category(
        name="🤖 AI & Automatisering",
        emoji="robot_face",
        keywords=("ai", "chatbot", "automatiser", "machine learning", "intelligent", "smart"),
    ),
    Category(
        name="🔗 Integrationer",
        emoji="link",
        keywords=("slack", "integration", "api", "connect", "sync", "webhook"),
    ),
    Category(
        name="⚙️ Procesoptimering",
        emoji="gear",
        keywords=("process", "workflow", "effektiv", "optimering", "automation", "streamline"),
    ),
    Category(
        name="📊 Data & Visualisering",
        emoji="bar_chart",
        keywords=("dashboard", "rapporter", "data", "analytics", "metrics", "visualization"),
    ),
    Category(
        name="🎨 UI/UX Forbedringer",
        emoji="art",
        keywords=("interface", "design", "bruger", "frontend", "ui", "ux", "mobile"),
    ),
)

DEFAULT_CATEGORY = Category(name="💡 Kreative Løsninger", emoji="bulb")

CATEGORY_NAMES: tuple[str, ...] = tuple(c.name for c in CATEGORIES) + (DEFAULT_CATEGORY.name,)


def categorize(text: str) -> Category:
    """Return the first category whose keywords occur in ``text``.

    Never fails: empty or unmatched text falls back to ``DEFAULT_CATEGORY``.

    Examples:
        >>> categorize("Ide: build an AI chatbot").emoji
        'robot_face'
        >>> categorize("Ide: fredagsbar hver torsdag").name
        '💡 Kreative Løsninger'
    """
    lowered = (text or "").lower()
    for category in CATEGORIES:
        if category.matches(lowered):
            return category
    return DEFAULT_CATEGORY
