"""Exception hierarchy shared by the engine and the API layer."""


class ArenaError(Exception):
    """Base class for all matchup-engine errors."""


class InvalidRequestError(ArenaError):
    """Malformed input: unknown category, missing identifiers."""


class NotFoundError(ArenaError):
    """A referenced entity does not exist."""


class MatchupNotFoundError(NotFoundError):
    def __init__(self, matchup_id: str) -> None:
        super().__init__(f"Matchup not found: {matchup_id}")
        self.matchup_id = matchup_id


class CandidateNotFoundError(NotFoundError):
    def __init__(self, candidate_id: str, category: str | None = None) -> None:
        where = f" in category {category}" if category else ""
        super().__init__(f"Candidate not found{where}: {candidate_id}")
        self.candidate_id = candidate_id
        self.category = category


class ConflictError(ArenaError):
    """Client-correctable conflict with the current state."""


class MatchupAlreadyDecidedError(ConflictError):
    def __init__(self, matchup_id: str) -> None:
        super().__init__(f"Matchup already decided: {matchup_id}")
        self.matchup_id = matchup_id


class InvalidWinnerError(ConflictError):
    def __init__(self, matchup_id: str, winner_id: str) -> None:
        super().__init__(f"Invalid winner {winner_id} - not part of matchup {matchup_id}")
        self.matchup_id = matchup_id
        self.winner_id = winner_id


class DuplicateCandidateError(ConflictError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Candidate already exists: {slug}")
        self.slug = slug


class InsufficientCandidatesError(ArenaError):
    """Fewer than two eligible candidates exist for a category."""

    def __init__(self, category: str, available: int) -> None:
        super().__init__(
            f"Not enough candidates available for category {category} "
            f"({available} eligible, need 2)"
        )
        self.category = category
        self.available = available


class TransientConflictError(ArenaError):
    """A unit of work kept hitting write conflicts and gave up."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Transaction conflicted on all {attempts} attempts")
        self.attempts = attempts
