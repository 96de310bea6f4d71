# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations and fixed constants shared across the cache layer."""

from enum import StrEnum


class CipherName(StrEnum):
    AES_256_GCM = "aes-256-gcm"
    CHACHA20_POLY1305 = "chacha20-poly1305"


class CipherChoice(StrEnum):
    AUTO = "auto"
    AES_256_GCM = "aes-256-gcm"
    CHACHA20_POLY1305 = "chacha20-poly1305"


class DriverName(StrEnum):
    MEMORY = "memory"
    REDIS = "redis"


# Key validation
MAX_KEY_LENGTH = 255
RESERVED_KEY_CHARACTERS = frozenset("[]{}()/\\@:")
KEY_SEPARATOR = "_"

# Configuration bounds
MIN_SALT_LENGTH = 8
MIN_PREFIX_LENGTH = 3
MAX_PREFIX_LENGTH = 32

DEFAULT_SALT = "6Dxypt3ePw2SM2zYzEVAFkDBQpxbk16z1"
DEFAULT_PREFIX = "DEFAULT"
DEFAULT_TTL = 0

# Hash windows used for internal keys: (offset, length) into the hex digest.
KEYLESS_HASH_WINDOW = (17, 16)
KEYED_HASH_WINDOW = (6, 20)
KEYED_HASH_DIGEST_SIZE = 16

# AEAD parameters (AES-256-GCM and IETF ChaCha20-Poly1305 agree on these)
SECRET_KEY_BYTES = 32
NONCE_BYTES = 12
TAG_BYTES = 16

SELF_TEST_PLAINTEXT = b"ABC test 123 test xyz"
SELF_TEST_NONCE = bytes.fromhex("74b9e852b172df7f57ff4ab4")
