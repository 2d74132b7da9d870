"""Signing of runtime filter sets into cache paths."""

import base64
import hashlib
import hmac
import json
from collections.abc import Mapping
from typing import Any

from filtercache.models import validate_runtime_filters


def canonical_runtime_filters(runtime_filters: Mapping[str, Mapping[str, Any]]) -> str:
    """
    Serialize runtime filters deterministically.

    Loader order is kept (it changes the output image); option keys
    within a loader are sorted.

    Raises:
        InvalidRuntimeFiltersError: Filters are not a mapping of loader name -> options
    """
    runtime_filters = validate_runtime_filters(runtime_filters)
    pairs = [[name, options] for name, options in runtime_filters.items()]
    return json.dumps(pairs, sort_keys=True, separators=(",", ":"), default=str)


class Signer:
    """HMAC-SHA256 signatures over a path and its runtime filters."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Signer secret must not be empty")
        self._secret = secret.encode("utf-8")

    def sign(self, path: str, runtime_filters: Mapping[str, Mapping[str, Any]] | None = None) -> str:
        message = path + "\n" + canonical_runtime_filters(runtime_filters)
        digest = hmac.new(self._secret, message.encode("utf-8"), hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
