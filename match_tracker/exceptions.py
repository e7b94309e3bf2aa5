class MatchValidationError(Exception):
    pass


class InvalidStructureError(MatchValidationError):
    pass


class TeamLimitExceededError(MatchValidationError):
    pass


class DuplicateTeamCombinationError(MatchValidationError):
    pass
