"""
Runtime configuration, read from the environment.

Environment variables:
    SESSION_TTL_HOURS       Session validity window            (default: 24)
    SESSION_PURGE_INTERVAL  Logins between expiry sweeps       (default: 100)
    JWT_SECRET              Signing key for session tokens
    JWT_ALGORITHM           JWT signing algorithm              (default: HS256)
    BCRYPT_ROUNDS           bcrypt cost for stored credentials (default: 12)
    ACTIVITY_LOG_SIZE       Activity entries kept in memory    (default: 1000)
    ELECTION_DURATION_DAYS  Voting window of seeded elections  (default: 30)
    SEED_DATA               Load the demo elections/identities (default: true)
    LOG_LEVEL               Root log level                     (default: INFO)
"""
import os
from dataclasses import dataclass

# -- Defaults -----------------------------------------------------------------
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
SESSION_PURGE_INTERVAL = int(os.getenv("SESSION_PURGE_INTERVAL", "100"))
JWT_SECRET = os.getenv("JWT_SECRET", "session-secret-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
ACTIVITY_LOG_SIZE = int(os.getenv("ACTIVITY_LOG_SIZE", "1000"))
ELECTION_DURATION_DAYS = int(os.getenv("ELECTION_DURATION_DAYS", "30"))
SEED_DATA = os.getenv("SEED_DATA", "true").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    """Settings bundle injected into a VotingSystem.

    Defaults come from the environment; tests build their own instance.
    """

    session_ttl_hours: int = SESSION_TTL_HOURS
    session_purge_interval: int = SESSION_PURGE_INTERVAL
    jwt_secret: str = JWT_SECRET
    jwt_algorithm: str = JWT_ALGORITHM
    bcrypt_rounds: int = BCRYPT_ROUNDS
    activity_log_size: int = ACTIVITY_LOG_SIZE
    election_duration_days: int = ELECTION_DURATION_DAYS
    seed_data: bool = SEED_DATA
    log_level: str = LOG_LEVEL
