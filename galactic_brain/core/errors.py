"""Exception types raised by the progression engine."""


class GalacticBrainError(Exception):
    """Base class for all engine errors."""


class ProviderFailure(GalacticBrainError):
    """The content provider could not deliver usable questions."""


class TravelError(GalacticBrainError):
    """A travel sequence did not produce a mission."""


class TravelRejected(TravelError):
    """Travel was refused before it started (e.g. empty fuel tank)."""


class TravelCancelled(TravelError):
    """An in-flight travel sequence was abandoned."""


class InvariantViolation(GalacticBrainError):
    """A caller asked for something the current state does not allow."""


class AlreadyAnswered(InvariantViolation):
    """The current question has already received its one answer."""


class IllegalTransition(InvariantViolation):
    """No transition exists for the (phase, trigger) pair."""
