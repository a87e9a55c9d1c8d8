import secrets
import string
from typing import TypeAlias

# Prefixed random ids used as primary keys
# Examples: proj-XSqS5h9vFTSgP, pmem-yb6GG995oiBf
NanoIdType: TypeAlias = str

_ALPHABET = string.digits + string.ascii_letters


def generate_custom_nanoid(size: int = 8, char_pool: str | None = None) -> NanoIdType:
    """
    Generate a short random url safe id great for public links / urls
    Entropy here -> https://zelark.github.io/nano-id-cc/
    """
    char_pool = char_pool or _ALPHABET
    return ''.join(secrets.choice(char_pool) for _ in range(size))


class NanoId:
    """
    ID used as primary key
    """

    _CHAR_SIZE = 13

    @classmethod
    def gen(cls, abbrev: str | None = None) -> NanoIdType:
        nano_id = generate_custom_nanoid(size=cls._CHAR_SIZE)
        if abbrev:
            nano_id = f'{abbrev}-{nano_id}'

        return nano_id

    @classmethod
    def has_prefix(cls, value: str, abbrev: str) -> bool:
        prefix, _, body = value.partition('-')
        return prefix == abbrev and len(body) == cls._CHAR_SIZE
