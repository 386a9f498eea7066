class QuestlogError(Exception):
    pass


class NotFoundError(QuestlogError):
    pass


class PersistenceError(QuestlogError):
    pass


class ValidationError(QuestlogError):
    pass


class AmbiguousError(QuestlogError):
    def __init__(self, ref: str, count: int = 0, sample: list[str] | None = None):
        self.ref = ref
        self.count = count
        self.sample = sample or []
        count_note = f" ({count})" if count else ""
        note = f": {', '.join(self.sample)}" if self.sample else ""
        super().__init__(f"ambiguous ref '{ref}' matches multiple quests{count_note}{note}")
