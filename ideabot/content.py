"""Canned copy the bot posts: replies, jokes, reactions and reminder templates."""

from typing import Callable

FUNNY_RESPONSES = [
    "🚀 Den idé fik lige min indre nørd til at juble!",
    "💡 *Chef's kiss* - det er simpelt og smart!",
    "🤖 Beep boop! Min algoritme siger: GENIAL!",
    "⚡ Den idé sparkler som fresh commits på fredag eftermiddag!",
    "🎯 Bulls-eye! Det rammer lige i Forteil-filosofien!",
    "🔥 Hot take alert! Den her idé er 🔥🔥🔥",
    "🎪 *Standing ovation fra alle mine virtuelle personligheder*",
    "💎 Rare gem spotted! Den her går direkte til favorit-listen!",
    "🎨 Kreativitet level: Over 9000!",
    "🍕 Den idé fortjener pizza som belønning!",
]

DAD_JOKES = [
    "Hvorfor elsker programmører mørke? Fordi lys tiltrækker bugs! 🐛",
    "Hvad siger en AI når den er træt? 'Jeg trænger til at reboote!' 💤",
    "Hvorfor gik API'et til tandlægen? Det havde dårlige endpoints! 🦷",
    "Hvad kalder man en hacker der laver kaffe? En Java developer! ☕",
    "Hvorfor blev robotten fyret? Den havde for mange glitches i sin performance review! 🤖",
    "Hvad er forskellen på en programmør og en almindelig person? "
    "Programmøren tænker der er 10 typer mennesker i verden!",
    "Hvorfor gik udvikler til psykologen? Hun havde for mange issues!",
    "Hvad siger en database til en anden? Skal vi JOIN sammen?",
]

DAD_JOKE_PREFIX = "Bonus dad joke: "

REACTIONS = ["rocket", "bulb", "zap", "dart", "fire", "gem", "star", "clap", "tada", "muscle"]

MOTIVATIONAL_MESSAGES: list[Callable[[int], str]] = [
    lambda total: (
        f"🌅 God morgen, idé-maskiner, alle jer vidunderlige Forteilees! "
        f"Vi har {total} fantastiske idéer indtil nu!"
    ),
    lambda total: f"☕ Kaffe-tid! Vores idé-tæller står på {total} - skal vi runde op, kære Forteilees?",
    lambda total: f"🧠 Dagens brainstorm-update: {total} idéer og counting, fantastiske Forteilees!",
    lambda total: f"⚡ Lightning round! Vi har {total} idéer - hvad kommer der næst, dygtige Forteilees?",
    lambda total: f"🎯 Målrettet opdatering: {total} idéer på tavlen, vidunderlige Forteilees!",
]

LEADERBOARD_TIPS = [
    "🚀 Kom i gang med: `Ide: Din fantastiske idé her`",
    "💡 Brug `/hackathon-help` for at se alle commands",
    "🎯 Mål: 50+ idéer til hackathon!",
    "⚡ Jo flere idéer, jo bedre hackathon!",
]
