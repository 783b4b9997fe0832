"""
Security utilities.

Covers:
  - Credential hashing (bcrypt via passlib)
  - Session tokens (JWT via python-jose wrapping a random session id)
  - Identifier generation (identities, votes, device fingerprints)
  - Ballot hash chain (SHA-256) backing the public audit trail

Session token protocol
----------------------
1. On login a random session id is drawn with ``secrets.token_urlsafe``.
2. The id is wrapped in an HS256 JWT, so a forged or truncated token is
   rejected by signature before any store lookup.
3. The JWT carries no identity; the server-side session record does.
   Expiry is decided by the session store's clock, not by the JWT.
"""

import hashlib
import secrets
from datetime import datetime

from jose import JWTError, jwt
from passlib.context import CryptContext

# ---------------------------------------------------------------------------
# Credential hashing
# ---------------------------------------------------------------------------

def make_password_context(rounds: int = 12) -> CryptContext:
    """Return a bcrypt CryptContext with the given cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(context: CryptContext, password: str) -> str:
    """Hash a password using bcrypt via passlib."""
    return context.hash(password)


def verify_password(context: CryptContext, password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return context.verify(password, hashed)


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def generate_session_id(length: int = 32) -> str:
    """Generate a cryptographically secure session id."""
    return secrets.token_urlsafe(length)


def encode_session_token(session_id: str, issued_at: datetime, secret: str,
                         algorithm: str = "HS256") -> str:
    """Wrap a session id in a signed JWT."""
    return jwt.encode(
        {"sid": session_id, "iat": int(issued_at.timestamp())},
        secret, algorithm=algorithm,
    )


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> str | None:
    """Return the session id inside ``token``, or None if it is not ours."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm],
                             options={"verify_exp": False})
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def generate_identity_id() -> str:
    return "user_" + secrets.token_hex(8)


def generate_vote_id() -> str:
    """128 bits of randomness; collisions are treated as an invariant breach."""
    return "vote_" + secrets.token_hex(16)


def generate_activity_id() -> str:
    return "act_" + secrets.token_hex(6)


def generate_device_fingerprint() -> str:
    """Placeholder fingerprint used when the client supplies none."""
    return "device_" + secrets.token_hex(8)


def generate_hash_salt() -> str:
    return secrets.token_hex(16)


# ---------------------------------------------------------------------------
# Hash utilities
# ---------------------------------------------------------------------------

def hash_vote(vote_id, election_id, candidate_id, cast_at, salt):
    """Generate a SHA-256 hash for a vote record."""
    data = f"{vote_id}{election_id}{candidate_id}{cast_at}{salt}"
    return hashlib.sha256(data.encode()).hexdigest()


def create_hash_chain(previous_hash, current_data):
    """Create a hash-chain entry: SHA-256(previous_hash || current_data)."""
    combined = f"{previous_hash or ''}{current_data}"
    return hashlib.sha256(combined.encode()).hexdigest()


def ballot_hash(vote_id, election_id, candidate_id, cast_at: datetime, salt,
                previous_hash):
    """Chain a vote onto its election's previous ballot hash."""
    return create_hash_chain(
        previous_hash,
        hash_vote(vote_id, election_id, candidate_id, cast_at.isoformat(), salt),
    )
