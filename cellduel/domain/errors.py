class DuelError(Exception):
    """Base class of every rule violation reported by the duel engine."""


class NotFound(DuelError):
    pass


class InvalidState(DuelError):
    pass


class AlreadyOwned(DuelError):
    pass


class Uncapturable(DuelError):
    pass


class NotAdjacent(DuelError):
    pass


class InsufficientResources(DuelError):
    pass
