# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Authenticated encryption of cached values.

Values are serialized, then sealed with an AEAD cipher under a 32-byte
secret key.  AES-256-GCM is preferred when the ``cryptography`` backend
supports it; otherwise IETF ChaCha20-Poly1305 is used.  Both take a 12-byte
nonce and append a 16-byte tag, so the stored :class:`Envelope` has the same
shape either way.

Nonces come from a per-instance counter: the first one is random, each
subsequent one is the previous value plus one (96-bit, big-endian).  The
counter is advanced *before* every encryption and the advance plus the
encryption happen under one lock.

Opening an envelope never raises.  Missing fields, a failed tag check, or a
plaintext that does not deserialize all produce a failed
:class:`DecryptResult`, which the cache treats as a miss.
"""

from __future__ import annotations

import functools
import logging
import re
import secrets
import threading
from dataclasses import dataclass
from typing import Any

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from sealcache.cache.serialization import JsonSerializer, Serializer
from sealcache.core.constants import (
    NONCE_BYTES,
    SECRET_KEY_BYTES,
    SELF_TEST_NONCE,
    SELF_TEST_PLAINTEXT,
    TAG_BYTES,
    CipherChoice,
    CipherName,
)
from sealcache.core.exceptions import (
    CacheTypeError,
    CipherUnavailableError,
    DecryptError,
    InvalidSecretKeyError,
    NonceError,
    SerializationError,
    SetupError,
)
from sealcache.core.logging import cache_context

logger = logging.getLogger("sealcache.cache.crypto")

_HEX_KEY = re.compile(r"[0-9a-fA-F]+")
_NONCE_MODULUS = 1 << (8 * NONCE_BYTES)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Envelope:
    """A sealed value: the nonce and the ciphertext with its trailing tag."""

    nonce: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        """Wire form: ``nonce || ciphertext``."""
        return self.nonce + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> Envelope | None:
        """Split the wire form, or return ``None`` if it is too short."""
        if len(data) < NONCE_BYTES + TAG_BYTES:
            return None
        return cls(nonce=data[:NONCE_BYTES], ciphertext=data[NONCE_BYTES:])


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of opening an envelope."""

    ok: bool
    value: Any = None
    error: DecryptError | None = None

    @classmethod
    def success(cls, value: Any) -> DecryptResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> DecryptResult:
        return cls(ok=False, error=DecryptError(reason))

    def value_or(self, default: Any) -> Any:
        return self.value if self.ok else default


# ---------------------------------------------------------------------------
# Cipher selection and key handling
# ---------------------------------------------------------------------------


def _aead(cipher: CipherName, key: bytes) -> AESGCM | ChaCha20Poly1305:
    if cipher is CipherName.AES_256_GCM:
        return AESGCM(key)
    return ChaCha20Poly1305(key)


def _cipher_works(cipher: CipherName) -> bool:
    try:
        aead = _aead(cipher, bytes(SECRET_KEY_BYTES))
        sealed = aead.encrypt(SELF_TEST_NONCE, SELF_TEST_PLAINTEXT, SELF_TEST_NONCE)
        return aead.decrypt(SELF_TEST_NONCE, sealed, SELF_TEST_NONCE) == SELF_TEST_PLAINTEXT
    except UnsupportedAlgorithm:
        return False


@functools.lru_cache(maxsize=1)
def probe_cipher() -> CipherName:
    """Pick the AEAD cipher for this process.

    The result is cached, so every cache instance in the process agrees.

    Raises:
        CipherUnavailableError: If neither cipher is usable.
    """
    if _cipher_works(CipherName.AES_256_GCM):
        logger.info("Using AES-256-GCM for cache encryption")
        return CipherName.AES_256_GCM
    if _cipher_works(CipherName.CHACHA20_POLY1305):
        logger.info("AES-256-GCM unavailable; using ChaCha20-Poly1305 for cache encryption")
        return CipherName.CHACHA20_POLY1305
    raise CipherUnavailableError("No supported AEAD cipher is available.")


def resolve_cipher(choice: CipherChoice | str = CipherChoice.AUTO) -> CipherName:
    """Map a configured cipher choice to a concrete, usable cipher."""
    choice = CipherChoice(choice)
    if choice is CipherChoice.AUTO:
        return probe_cipher()
    cipher = CipherName(choice.value)
    if not _cipher_works(cipher):
        raise CipherUnavailableError(f"The configured cipher {cipher} is not supported.")
    return cipher


def parse_secret_key(raw: bytes | bytearray | str) -> bytes:
    """Return the 32-byte key encoded by *raw*.

    *raw* may be 64 hex digits (``str`` or ``bytes``) or 32 raw bytes.

    Raises:
        CacheTypeError: If *raw* is not ``str`` or ``bytes``.
        InvalidSecretKeyError: If the key is not 32 bytes, or consists only of
            printable ASCII (a passphrase used verbatim).
    """
    if isinstance(raw, str):
        candidate = raw.strip()
        if not _HEX_KEY.fullmatch(candidate):
            raise InvalidSecretKeyError(
                "The secret key must be given as hex digits or as 32 raw bytes."
            )
        if len(candidate) % 2:
            raise InvalidSecretKeyError(
                f"The secret key must be {SECRET_KEY_BYTES} bytes. "
                f"You provided {len(candidate)} hex digits."
            )
        key = bytes.fromhex(candidate)
    elif isinstance(raw, (bytes, bytearray)):
        key = bytes(raw)
        if len(key) == 2 * SECRET_KEY_BYTES and _HEX_KEY.fullmatch(key.decode("latin-1")):
            key = bytes.fromhex(key.decode("ascii"))
    else:
        raise CacheTypeError(f"The secret key MUST be a string or bytes. You supplied a {type(raw).__name__}.")

    if len(key) != SECRET_KEY_BYTES:
        raise InvalidSecretKeyError(
            f"The secret key must be {SECRET_KEY_BYTES} bytes. You provided a {len(key)} byte key."
        )
    if all(0x20 <= b <= 0x7E for b in key):
        raise InvalidSecretKeyError("The secret key you supplied only contains printable characters.")
    return key


def generate_secret_key() -> bytes:
    """Return a fresh random 32-byte key that passes :func:`parse_secret_key`."""
    while True:
        key = secrets.token_bytes(SECRET_KEY_BYTES)
        if not all(0x20 <= b <= 0x7E for b in key):
            return key


# ---------------------------------------------------------------------------
# Nonces
# ---------------------------------------------------------------------------


class NonceCounter:
    """A 96-bit big-endian counter seeded from a random value.

    Not thread-safe on its own; :class:`CryptoEnvelope` serializes access.
    """

    __slots__ = ("_nonce",)

    def __init__(self, initial: bytes | None = None) -> None:
        if initial is not None and len(initial) != NONCE_BYTES:
            raise NonceError(f"A nonce must be {NONCE_BYTES} bytes.")
        self._nonce = initial

    @property
    def current(self) -> bytes | None:
        return self._nonce

    def advance(self) -> bytes:
        """Move to the next nonce and return it.

        Raises:
            NonceError: If the new nonce equals the previous one.
        """
        previous = self._nonce
        if previous is None:
            nonce = secrets.token_bytes(NONCE_BYTES)
        else:
            value = (int.from_bytes(previous, "big") + 1) % _NONCE_MODULUS
            nonce = value.to_bytes(NONCE_BYTES, "big")
        if nonce == previous:
            raise NonceError(
                "The nonce failed to increment. This should not have happened, something is broken."
            )
        self._nonce = nonce
        return nonce


# ---------------------------------------------------------------------------
# Envelope encryption
# ---------------------------------------------------------------------------


class CryptoEnvelope:
    """Seals and opens cache values under one secret key.

    Args:
        cipher: ``auto`` to use the per-process probe result, or a pinned
            cipher name.
        serializer: Serializer applied before sealing and after opening.
    """

    def __init__(
        self,
        cipher: CipherChoice | str = CipherChoice.AUTO,
        serializer: Serializer | None = None,
    ) -> None:
        self._cipher = resolve_cipher(cipher)
        self._serializer = serializer or JsonSerializer()
        self._aead: AESGCM | ChaCha20Poly1305 | None = None
        self._nonces = NonceCounter()
        self._lock = threading.Lock()

    @property
    def cipher(self) -> CipherName:
        return self._cipher

    @property
    def enabled(self) -> bool:
        """``True`` once a key has been installed and passed the self-test."""
        return self._aead is not None

    def install_key(self, secret_key: bytes | bytearray | str) -> None:
        """Validate *secret_key*, self-test it, and start using it.

        Raises:
            InvalidSecretKeyError: If the key is malformed or weak.
            CipherUnavailableError: If the round-trip self-test fails.
        """
        key = parse_secret_key(secret_key)
        aead = _aead(self._cipher, key)
        try:
            sealed = aead.encrypt(SELF_TEST_NONCE, SELF_TEST_PLAINTEXT, SELF_TEST_NONCE)
            roundtrip = aead.decrypt(SELF_TEST_NONCE, sealed, SELF_TEST_NONCE)
        except (InvalidTag, UnsupportedAlgorithm) as exc:
            raise CipherUnavailableError("The secret key failed the encryption self-test.") from exc
        if roundtrip != SELF_TEST_PLAINTEXT:
            raise CipherUnavailableError("The secret key failed the encryption self-test.")
        with self._lock:
            self._aead = aead
        logger.info("Secret key installed (%s)", self._cipher, extra=cache_context(cipher=self._cipher))

    def _require_key(self) -> AESGCM | ChaCha20Poly1305:
        if self._aead is None:
            raise SetupError("No secret key is installed; cannot encrypt or decrypt.")
        return self._aead

    # ------------------------------------------------------------------
    # Sealing
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: bytes) -> Envelope:
        """Encrypt *plaintext* under the next nonce."""
        aead = self._require_key()
        with self._lock:
            nonce = self._nonces.advance()
            ciphertext = aead.encrypt(nonce, plaintext, nonce)
        return Envelope(nonce=nonce, ciphertext=ciphertext)

    def seal(self, value: Any) -> Envelope:
        """Serialize and encrypt *value*.

        Raises:
            SerializationError: If *value* cannot be serialized.
        """
        self._require_key()
        return self.encrypt(self._serializer.dumps(value))

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    def decrypt(self, payload: object) -> DecryptResult:
        """Open *payload* (an :class:`Envelope` or its wire bytes).

        The result's ``value`` is the plaintext bytes.
        """
        aead = self._require_key()
        if isinstance(payload, (bytes, bytearray)):
            envelope = Envelope.from_bytes(bytes(payload))
        elif isinstance(payload, Envelope):
            envelope = payload
        else:
            envelope = None
        if envelope is None or not envelope.nonce or not envelope.ciphertext:
            return DecryptResult.failure("payload is not an envelope")
        if len(envelope.nonce) != NONCE_BYTES:
            return DecryptResult.failure("envelope nonce has the wrong length")
        try:
            plaintext = aead.decrypt(envelope.nonce, envelope.ciphertext, envelope.nonce)
        except InvalidTag:
            logger.warning("Discarding cached envelope that failed authentication")
            return DecryptResult.failure("authentication failed")
        return DecryptResult.success(plaintext)

    def open(self, payload: object) -> bytes | None:
        """Return the plaintext bytes of *payload*, or ``None`` if it does not open."""
        return self.decrypt(payload).value_or(None)

    def unseal(self, payload: object) -> DecryptResult:
        """Open *payload* and deserialize the plaintext."""
        opened = self.decrypt(payload)
        if not opened.ok:
            return opened
        try:
            return DecryptResult.success(self._serializer.loads(opened.value))
        except SerializationError as exc:
            logger.warning("Discarding cached envelope that did not deserialize: %s", exc)
            return DecryptResult.failure("deserialization failed")
