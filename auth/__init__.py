"""
Auth package: HS256 token codec and provider, credential verification and the
signup / login / authorize flow.
"""
from . import errors, jwt, keys, provider

__all__ = ["errors", "jwt", "keys", "provider"]
