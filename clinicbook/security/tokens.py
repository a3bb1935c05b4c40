import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional

from jose import JWTError, jwt

from clinicbook.services.errors import Unauthenticated

logger = logging.getLogger(__name__)

EXTENSION_KEY = "clinicbook.token_verifier"
HMAC_MIN_SECRET_LENGTH = 32
PEM_BEGIN = "-----BEGIN "
PEM_END = "-----END "


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str] = None


class TokenVerifier:
    """Verifies bearer JWTs with key material fixed at startup."""

    def __init__(self, key: str, algorithm: str, audience=None, issuer=None, leeway: int = 0):
        self.key = key
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer
        self.leeway = leeway

    def verify(self, token: str) -> Identity:
        if not token:
            raise Unauthenticated("Missing Bearer token")
        try:
            claims = jwt.decode(
                token,
                self.key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None, "leeway": self.leeway},
            )
        except JWTError as exc:
            logger.info("rejected bearer token: %s", exc)
            raise Unauthenticated("Invalid or expired token") from exc

        uid = claims.get("sub")
        if not isinstance(uid, str) or not uid.strip():
            raise Unauthenticated("Token has no subject")
        email = claims.get("email")
        return Identity(uid=uid, email=email if isinstance(email, str) else None)


def _public_key_from_config(config) -> str:
    # Base64 wins when both are set; otherwise literal "\n" sequences become newlines
    encoded = config.get("AUTH_JWT_PUBLIC_KEY_B64")
    if encoded:
        try:
            return base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise RuntimeError("AUTH_JWT_PUBLIC_KEY_B64 is not valid base64") from exc

    key = config.get("AUTH_JWT_PUBLIC_KEY") or ""
    if "\\n" in key:
        key = key.replace("\\n", "\n")
    return key


def build_verifier(config) -> TokenVerifier:
    """
    Validate the signing configuration once and fail fast.
    Raises RuntimeError when the key is missing or malformed.
    """
    algorithm = (config.get("AUTH_JWT_ALGORITHM") or "HS256").upper()

    if algorithm.startswith("HS"):
        key = config.get("AUTH_JWT_SECRET") or ""
        if not key:
            raise RuntimeError("AUTH_JWT_SECRET is missing")
        if len(key) < HMAC_MIN_SECRET_LENGTH:
            raise RuntimeError(f"AUTH_JWT_SECRET must be at least {HMAC_MIN_SECRET_LENGTH} characters")
    elif algorithm.startswith(("RS", "ES", "PS")):
        key = _public_key_from_config(config).strip()
        if not key:
            raise RuntimeError("AUTH_JWT_PUBLIC_KEY (or AUTH_JWT_PUBLIC_KEY_B64) is missing")
        if not key.startswith(PEM_BEGIN) or PEM_END not in key or not key.endswith("-----"):
            raise RuntimeError(
                "AUTH_JWT_PUBLIC_KEY is malformed: expected a PEM block starting with "
                "'-----BEGIN ...-----' and ending with '-----END ...-----'"
            )
    else:
        raise RuntimeError(f"Unsupported AUTH_JWT_ALGORITHM: {algorithm}")

    leeway = int(config.get("AUTH_JWT_LEEWAY_SECONDS") or 0)
    return TokenVerifier(
        key=key,
        algorithm=algorithm,
        audience=config.get("AUTH_JWT_AUDIENCE") or None,
        issuer=config.get("AUTH_JWT_ISSUER") or None,
        leeway=leeway,
    )


def init_authenticator(app) -> TokenVerifier:
    verifier = build_verifier(app.config)
    app.extensions[EXTENSION_KEY] = verifier
    logger.info("bearer token verification ready (alg=%s)", verifier.algorithm)
    return verifier


def get_verifier(app) -> TokenVerifier:
    return app.extensions[EXTENSION_KEY]


def bearer_token_from_header(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
