"""Typed errors raised by the lifecycle controller and the fairness engine.

Every error carries a stable ``code`` for API clients and a message that can
be shown to the host as-is. None of them is raised after state was mutated.
"""

from __future__ import annotations


class HearthGamesError(Exception):
    """Base class for all domain errors."""

    code = "error"


# --- Lifecycle ---


class LifecycleError(HearthGamesError):
    """A lifecycle operation was called in a state that does not allow it."""


class NoParticipantsError(LifecycleError):
    code = "no_participants"

    def __init__(self) -> None:
        super().__init__(
            "No players selected for this event. Add players before starting a game."
        )


class MissingTemplateError(LifecycleError):
    code = "missing_template"

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__("The selected game template could not be found in the catalog.")


class InvalidRoundCountError(LifecycleError):
    code = "invalid_round_count"

    def __init__(self, rounds_per_game: int) -> None:
        self.rounds_per_game = rounds_per_game
        super().__init__(f"This game has an invalid number of rounds ({rounds_per_game}).")


class InvalidTransitionError(LifecycleError):
    code = "invalid_transition"

    def __init__(self, entity: str, current: str, action: str) -> None:
        self.entity = entity
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action}: {entity} is {current}.")


class LockedRoundError(LifecycleError):
    code = "locked_round"

    def __init__(self, round_id: str) -> None:
        self.round_id = round_id
        super().__init__("This round is already finalized and can no longer be changed.")


class UnknownTeamError(LifecycleError):
    code = "unknown_team"

    def __init__(self, team_id: str) -> None:
        self.team_id = team_id
        super().__init__(f"Team {team_id} is not part of this round.")



class DuplicateTeamError(LifecycleError):
    code = "duplicate_team"

    def __init__(self, team_id: str) -> None:
        self.team_id = team_id
        super().__init__(f"Team {team_id} cannot take more than one place.")


# --- Fairness ---


class FairnessError(HearthGamesError):
    """Team generation could not produce a valid partition."""


class MissingEventGameError(FairnessError):
    code = "missing_event_game"

    def __init__(self, round_id: str) -> None:
        self.round_id = round_id
        super().__init__("Round is not attached to a game of this event.")


class NotEnoughPlayersError(FairnessError):
    code = "not_enough_players"

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Not enough players. Required {required}, available {available}.")


class NotEnoughCouplesError(FairnessError):
    code = "not_enough_couples"

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Not enough couples. Required {required}, available {available}.")


# --- Store ---


class NotFoundError(HearthGamesError):
    code = "not_found"

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")
