"""
Exception hierarchy for MentorMatch.

Only InvalidRequest is meant to reach a caller of the matching engine;
the rest are either recovered locally (OracleSoftFailure,
RepositoryUnavailable) or belong to the surrounding case tooling.
"""


class MentorMatchError(Exception):
    """Base class for all MentorMatch errors."""
    pass


class InvalidRequest(MentorMatchError):
    """Raised when a required request field is missing or empty."""
    pass


class OracleSoftFailure(MentorMatchError):
    """The relevance oracle could not produce a usable ranking."""
    pass


class RepositoryUnavailable(MentorMatchError):
    """The mentor pool could not be loaded."""
    pass


class LLMError(MentorMatchError):
    """Text-generation call failed at transport or envelope level."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class CaseGenerationError(MentorMatchError):
    """Case document could not be generated."""
    pass


class CaseNotFound(MentorMatchError):
    """No archived case exists for the given id."""

    def __init__(self, case_id: str):
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id


class ConfigError(MentorMatchError):
    """Required configuration is missing."""
    pass
