"""
Identity registry and session store: the authentication boundary.

Every other component trusts a Session only after ``SessionStore.validate``
has returned it.  Absent, expired and malformed tokens all raise the same
InvalidSession so callers cannot tell them apart.
"""
import logging
import threading
from datetime import timedelta

from passlib.context import CryptContext

from .clock import Clock, utcnow
from .config import Settings
from .errors import AuthError, DuplicateIdentity, IdentityNotFound, InvalidSession
from .schemas import Identity, Role, Session
from .security import (
    decode_session_token, encode_session_token, generate_identity_id,
    generate_session_id, hash_password, verify_password,
)

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Registered voters, admins and agents, keyed by identity id."""

    def __init__(self, pwd_context: CryptContext, clock: Clock = utcnow):
        self._pwd = pwd_context
        self._clock = clock
        self._lock = threading.Lock()
        self._identities: dict[str, Identity] = {}
        self._by_national_id: dict[str, str] = {}
        self._by_email: dict[str, str] = {}

    def register(self, national_id: str, password: str, first_name: str,
                 last_name: str, email: str, role: Role = "voter",
                 verified: bool = False, identity_id: str | None = None,
                 **profile) -> Identity:
        """Create an identity.  New self-registrations start unverified."""
        credential_hash = hash_password(self._pwd, password)
        email_key = email.lower()
        with self._lock:
            if national_id in self._by_national_id or email_key in self._by_email:
                raise DuplicateIdentity()
            identity = Identity(
                id=identity_id or generate_identity_id(),
                national_id=national_id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                role=role,
                is_verified=verified,
                credential_hash=credential_hash,
                registered_at=self._clock(),
                **profile,
            )
            self._identities[identity.id] = identity
            self._by_national_id[national_id] = identity.id
            self._by_email[email_key] = identity.id
        logger.info(f"Registered {role} identity {identity.id}")
        return identity.model_copy()

    def get(self, identity_id: str) -> Identity:
        identity = self._identities.get(identity_id)
        if identity is None:
            raise IdentityNotFound()
        return identity.model_copy()

    def by_national_id(self, national_id: str) -> Identity | None:
        identity_id = self._by_national_id.get(national_id)
        return self.get(identity_id) if identity_id else None

    def verify(self, identity_id: str) -> Identity:
        with self._lock:
            identity = self._identities.get(identity_id)
            if identity is None:
                raise IdentityNotFound()
            identity.is_verified = True
        logger.info(f"Identity {identity_id} verified")
        return identity.model_copy()

    def check_credentials(self, national_id: str, password: str) -> Identity:
        """Return the identity whose credential matches, else raise AuthError.

        Unknown national ids and wrong passwords fail identically, and an
        unknown id still pays for one bcrypt verification.
        """
        identity = self.by_national_id(national_id)
        if identity is None:
            self._pwd.dummy_verify()
            raise AuthError()
        if not verify_password(self._pwd, password, identity.credential_hash):
            raise AuthError()
        if not identity.is_verified:
            raise AuthError("Identity not verified")
        return identity

    def touch_login(self, identity_id: str) -> None:
        with self._lock:
            identity = self._identities.get(identity_id)
            if identity is not None:
                identity.last_login = self._clock()

    def count(self, role: Role | None = None) -> int:
        if role is None:
            return len(self._identities)
        return sum(1 for i in list(self._identities.values()) if i.role == role)


class SessionStore:
    """Maps opaque bearer tokens to authenticated sessions."""

    def __init__(self, registry: IdentityRegistry, settings: Settings,
                 clock: Clock = utcnow):
        self._registry = registry
        self._settings = settings
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._logins_since_purge = 0

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self._settings.session_ttl_hours)

    def authenticate(self, identity_id: str, credential_proof: str) -> Session:
        """Check a national id + password and open a new session."""
        try:
            identity = self._registry.check_credentials(identity_id, credential_proof)
        except AuthError as e:
            logger.warning(f"Authentication failed: {e.detail}")
            raise

        now = self._clock()
        sid = generate_session_id()
        token = encode_session_token(sid, now, self._settings.jwt_secret,
                                     self._settings.jwt_algorithm)
        session = Session(
            identity_id=identity.id,
            token=token,
            role=identity.role,
            issued_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._sessions[sid] = session
            self._logins_since_purge += 1
            sweep = self._logins_since_purge >= self._settings.session_purge_interval
            if sweep:
                self._logins_since_purge = 0
        if sweep:
            self.purge_expired()
        self._registry.touch_login(identity.id)
        logger.info(f"Session issued for {identity.id} ({identity.role})")
        return session

    def validate(self, token: str | None) -> Session:
        """Return the live session for ``token`` or raise InvalidSession."""
        sid = self._session_id(token)
        if sid is None:
            raise InvalidSession()
        session = self._sessions.get(sid)
        if session is None:
            raise InvalidSession()
        if not session.is_valid_at(self._clock()):
            with self._lock:
                self._sessions.pop(sid, None)
            logger.debug(f"Evicted expired session of {session.identity_id}")
            raise InvalidSession()
        return session

    def invalidate(self, token: str | None) -> None:
        """Idempotent logout."""
        sid = self._session_id(token)
        if sid is None:
            return
        with self._lock:
            session = self._sessions.pop(sid, None)
        if session is not None:
            logger.info(f"Session closed for {session.identity_id}")

    def record_biometric(self, token: str | None, verified: bool) -> Session:
        """Store the external verifier's verdict on a live session."""
        session = self.validate(token)
        sid = self._session_id(token)
        updated = session.model_copy(update={"biometric_verified": verified})
        with self._lock:
            if sid not in self._sessions:
                raise InvalidSession()
            self._sessions[sid] = updated
        return updated

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if not s.is_valid_at(now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def _session_id(self, token: str | None) -> str | None:
        if not token:
            return None
        return decode_session_token(token, self._settings.jwt_secret,
                                    self._settings.jwt_algorithm)
