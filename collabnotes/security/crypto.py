"""Random tokens: invitation hashes and note public ids."""

import secrets

from ..config import Config

# No 0/O, 1/l/I: hashes get read aloud and retyped
UNAMBIGUOUS_ALPHABET = "23456789abcdefghijkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ"


def random_string(length: int, alphabet: str = UNAMBIGUOUS_ALPHABET) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def create_invitation_hash(length: int | None = None) -> str:
    return random_string(length or Config.INVITATION_HASH_LENGTH)


def create_public_id(length: int | None = None) -> str:
    return random_string(length or Config.PUBLIC_ID_LENGTH)
