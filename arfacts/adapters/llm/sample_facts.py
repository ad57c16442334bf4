"""Offline fact source used when no chat-completion key is configured."""
from arfacts.adapters.llm.base import FactsAdapter

SAMPLE_FACTS: dict[str, str] = {
    "tree": (
        "Trees are incredible living organisms! Did you know they communicate underground "
        "through a network of fungi? They also clean our air by absorbing carbon dioxide."
    ),
    "book": (
        "Books have been around for over 5,000 years! The first books were written on "
        "clay tablets in ancient Mesopotamia."
    ),
    "cat": (
        "Cats sleep for around 16 hours a day! Their whiskers help them determine if they "
        "can fit through tight spaces."
    ),
    "chair": (
        "Chairs have been used by humans for over 5,000 years. Ancient Egyptian chairs "
        "were often made from ebony and ivory."
    ),
    "basketball": (
        "The first basketball was actually a soccer ball! The game was invented in 1891 "
        "by Dr. James Naismith."
    ),
}


def sample_facts_for(label: str) -> str:
    lowered = label.lower()
    for key, facts in SAMPLE_FACTS.items():
        if key in lowered:
            return facts
    return f"This is a {label}! These are fascinating objects that have many interesting properties and uses."


class SampleFacts(FactsAdapter):
    def __init__(self, status_store):
        self.status = status_store

    async def generate_facts(self, label: str) -> str:
        self.status.log(f"sample_facts: {label}")
        return sample_facts_for(label)
