class FactsAdapter:
    _ready = True

    async def generate_facts(self, label: str) -> str:
        """Return short spoken-style facts about *label*.

        Raises EmptyCompletion, or an HttpError for transport/service failures.
        """
        raise NotImplementedError

    async def aclose(self):
        pass
