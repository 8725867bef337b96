"""Error taxonomy for the league engine.

Every engine operation either completes or raises one of these. The HTTP layer
maps them onto status codes; callers embedding the engine can catch
``LeagueError`` to handle all of them at once.
"""


class LeagueError(Exception):
    """Base class for all engine errors."""


class ValidationError(LeagueError, ValueError):
    """Malformed input: bad score, empty or undersized roster."""


class PreconditionError(LeagueError, ValueError):
    """The tournament is not in a state that allows the operation."""

    def __init__(self, message: str, *, tournament_id: str | None = None) -> None:
        super().__init__(message)
        self.tournament_id = tournament_id


class InsufficientPoolError(PreconditionError):
    def __init__(self, tournament_id: str | None, required: int, available: int) -> None:
        super().__init__(
            f"Draw pool too small: need at least {required} teams, "
            f"{available} available ({required - available} short).",
            tournament_id=tournament_id,
        )
        self.required = required
        self.available = available

    @property
    def shortfall(self) -> int:
        return self.required - self.available


class DrawRequiredError(PreconditionError):
    def __init__(self, tournament_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Lottery draw required before fixture generation: "
            f"{len(missing)} participant(s) without a team.",
            tournament_id=tournament_id,
        )
        self.missing = missing


class LockedTournamentError(PreconditionError):
    """Mutation attempted on a Finished tournament."""

    def __init__(self, tournament_id: str) -> None:
        super().__init__(
            f"Tournament {tournament_id} is finished and can no longer be changed.",
            tournament_id=tournament_id,
        )


class NotFoundError(LeagueError, LookupError):
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier
