"""
Error taxonomy.

Every public operation either returns normally or raises one of the classes
below.  Each carries a stable ``code`` (what API clients switch on) and the
HTTP status the app maps it to.

Vote outcomes (raised by the casting engine):
    InvalidSession     absent, expired or malformed token (never distinguished)
    ElectionNotFound   unknown election id
    ElectionNotOpen    election exists but is not active
    AlreadyVoted       terminal: this voter already voted in this election
    InvalidCandidate   candidate is not on this election's ballot
    StorageFailure     commit failed and was rolled back; safe to retry
"""


class VotingError(Exception):
    """Base class for every error the core raises."""

    code = "error"
    status_code = 400
    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.detail = message or self.message


# -- Vote errors --------------------------------------------------------------

class VoteError(VotingError):
    """An expected, user-facing outcome of a vote request."""


class InvalidSession(VoteError):
    code = "invalid_session"
    status_code = 401
    message = "Invalid session"


class ElectionNotFound(VoteError):
    code = "election_not_found"
    status_code = 404
    message = "Election not found"


class ElectionNotOpen(VoteError):
    code = "election_not_open"
    status_code = 409
    message = "Election is not active"


class AlreadyVoted(VoteError):
    code = "already_voted"
    status_code = 409
    message = "You have already voted in this election"


class InvalidCandidate(VoteError):
    code = "invalid_candidate"
    status_code = 400
    message = "Invalid candidate"


class StorageFailure(VoteError):
    """The commit did not complete and left no partial state. Retryable."""

    code = "storage_failure"
    status_code = 503
    message = "Vote could not be recorded, please retry"


# -- Identity / admin errors --------------------------------------------------

class AuthError(VotingError):
    code = "auth_failed"
    status_code = 401
    message = "Invalid credentials"


class AccessDenied(VotingError):
    code = "access_denied"
    status_code = 403
    message = "Access denied"


class DuplicateIdentity(VotingError):
    code = "duplicate_identity"
    status_code = 409
    message = "User already registered"


class IdentityNotFound(VotingError):
    code = "identity_not_found"
    status_code = 404
    message = "Identity not found"


class InvalidTransition(VotingError):
    code = "invalid_transition"
    status_code = 400
    message = "Cannot change election status"


class ReceiptNotFound(VotingError):
    code = "receipt_not_found"
    status_code = 404
    message = "Receipt not found"


class DuplicateVoteId(VotingError):
    """Generated vote id collided with an existing one.

    Ids carry 128 bits of entropy, so this is an invariant violation rather
    than a condition anyone retries.  The engine reports it as StorageFailure.
    """

    code = "duplicate_vote_id"
    status_code = 500
    message = "Vote id collision"
