"""OAuth 1.0a (HMAC-SHA1) request signing for the Yahoo weather endpoint.

The signature covers the request method, the endpoint URL and every query and
``oauth_*`` parameter. Parameters are escaped with standard query escaping and
sorted before they are joined, so the server can rebuild the same base string
regardless of the order the client sent them in.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
import uuid
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple
from urllib.parse import quote_plus

from .errors import SigningError
from .logging import get_logger

logger = get_logger(__name__)

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def make_nonce() -> str:
    """Return a 32 character hex token, unique per call."""
    return uuid.uuid4().hex


def percent_encode(value: str) -> str:
    return quote_plus(value, safe="")


def normalized_parameters(params: Mapping[str, str]) -> str:
    pairs = sorted((percent_encode(key), percent_encode(value)) for key, value in params.items())
    return "&".join(f"{key}={value}" for key, value in pairs)


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    return "&".join(
        [method.upper(), percent_encode(url), percent_encode(normalized_parameters(params))]
    )


def compute_signature(base_string: str, client_secret: str, token_secret: str = "") -> str:
    key = f"{percent_encode(client_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def build_authorization_header(oauth_params: Iterable[Tuple[str, str]]) -> str:
    return "OAuth " + ", ".join(f'{key}="{value}"' for key, value in oauth_params)


class OAuth1Signer:
    """Produces ``Authorization`` header values for signed GET requests.

    ``clock`` and ``nonce_factory`` are injectable so a signature can be
    reproduced from fixed inputs.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = make_nonce,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._nonce_factory = nonce_factory

    def oauth_parameters(self, *, nonce: Optional[str] = None, timestamp: Optional[str] = None) -> Dict[str, str]:
        try:
            nonce = nonce if nonce is not None else self._nonce_factory()
            timestamp = timestamp if timestamp is not None else str(int(self._clock()))
        except Exception as exc:
            logger.warning("signer.parameters.failed", error=str(exc))
            raise SigningError(f"unable to generate OAuth nonce or timestamp: {exc}") from exc

        return {
            "oauth_consumer_key": self.client_id,
            "oauth_nonce": nonce,
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": timestamp,
            "oauth_version": OAUTH_VERSION,
        }

    def sign(
        self,
        url: str,
        query: Mapping[str, str],
        *,
        nonce: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> str:
        oauth = self.oauth_parameters(nonce=nonce, timestamp=timestamp)

        merged = dict(oauth)
        merged.update(query)

        base_string = signature_base_string("GET", url, merged)
        oauth["oauth_signature"] = compute_signature(base_string, self._client_secret)

        return build_authorization_header(oauth.items())
