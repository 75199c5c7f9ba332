"""
League error taxonomy.

Services raise these; routes translate them to HTTP responses via
league.utils.http_errors. Integrity problems found during aggregation are
not raised at all: they are logged and the offending match is skipped.
"""


class LeagueError(Exception):
    """Base exception for all league errors"""

    pass


# ========== Validation ==========


class LeagueValidationError(LeagueError):
    """Bad or missing input. Surfaced to the caller, never retried."""

    pass


class DuplicateScheduleError(LeagueValidationError):
    """Category already has a fixture"""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category {category_id} already has a fixture. Delete it before generating a new one.")


class InsufficientPlayersError(LeagueValidationError):
    """Not enough active players to build a fixture"""

    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(f"At least {required} active players are required to generate a fixture, found {found}")


class MalformedScoreError(LeagueValidationError):
    """Set scores are not a valid decisive result"""

    pass


class InvalidRoundDatesError(LeagueValidationError):
    """Round play window is inverted or otherwise invalid"""

    pass


# ========== Not found ==========


class NotFoundError(LeagueError):
    """Referenced record does not exist"""

    entity = "Record"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class CategoryNotFoundError(NotFoundError):
    entity = "Category"


class PlayerNotFoundError(NotFoundError):
    entity = "Player"


class RoundNotFoundError(NotFoundError):
    entity = "Round"


class MatchNotFoundError(NotFoundError):
    entity = "Match"


# ========== State ==========


class LeagueStateError(LeagueError):
    """Operation not legal given current lifecycle or ownership"""

    pass


class NotParticipantError(LeagueStateError):
    """Player is not one of the two sides of the match"""

    def __init__(self, match_id: int, player_id: int):
        self.match_id = match_id
        self.player_id = player_id
        super().__init__(f"Player {player_id} does not take part in match {match_id}")


class RoundNotActiveError(LeagueStateError):
    """Results can only be submitted while the round is active"""

    def __init__(self, round_id: int, status: str):
        self.round_id = round_id
        self.status = status
        super().__init__(f"Round {round_id} is '{status}'; results can only be submitted for active rounds")


class AlreadyDecidedError(LeagueStateError):
    """Match already has a decisive or walkover result"""

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} already has a result")


class UnresolvedMatchesError(LeagueStateError):
    """Round still has matches without a result or not-reported flag"""

    def __init__(self, round_id: int, count: int):
        self.round_id = round_id
        self.count = count
        super().__init__(
            f"Round {round_id} has {count} match(es) without a result. Every match must have a result "
            f"or be marked as not reported before closing the round."
        )


class InvalidTransitionError(LeagueStateError):
    """Lifecycle transition not allowed from the current status"""

    def __init__(self, round_id: int, current: str, target: str):
        self.round_id = round_id
        self.current = current
        self.target = target
        super().__init__(f"Round {round_id} cannot go from '{current}' to '{target}'")


class ActiveRoundExistsError(LeagueStateError):
    """Another round of the category is already active"""

    def __init__(self, category_id: int, active_round_id: int):
        self.category_id = category_id
        self.active_round_id = active_round_id
        super().__init__(f"Category {category_id} already has an active round ({active_round_id})")


class FixtureHasResultsError(LeagueStateError):
    """Fixture cannot be deleted once results were loaded"""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Fixture of category {category_id} cannot be deleted: some matches already have results")


class PlayerInUseError(LeagueStateError):
    """Player is referenced by matches or standings"""

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} is referenced by matches or standings and cannot be deleted")


class RoundClosedError(LeagueStateError):
    """Results of a closed round can only change after reopening it"""

    def __init__(self, round_id: int, status: str):
        self.round_id = round_id
        self.status = status
        super().__init__(f"Round {round_id} is '{status}'; reopen it before editing results")


class RoundNotElapsedError(LeagueStateError):
    """Play window has not ended yet"""

    def __init__(self, round_id: int, period_end):
        self.round_id = round_id
        self.period_end = period_end
        super().__init__(f"Round {round_id} play window ends {period_end}; it cannot expire yet")
