"""Security adapters - Token signing and link encryption."""

from .fernet_cipher import FernetCipher
from .jwt_codec import JwtTokenCodec

__all__ = ["FernetCipher", "JwtTokenCodec"]
