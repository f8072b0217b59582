"""HTTP client for the SPARQL endpoint: retrying session, timeouts, error mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import StoreError

RESULTS_JSON = "application/sparql-results+json"

_LOGGER = logging.getLogger("rating_service.http")
# SPARQL updates go out as POST; retry them too, the delete/insert pair is idempotent.
_ALLOWED_METHODS = frozenset({"GET", "POST"})


@dataclass(frozen=True)
class HttpSettings:
    """Runtime configuration for outgoing requests."""

    timeout: float = 60.0  # read timeout, seconds
    connect_timeout: float = 10.0
    retries: int = 3
    backoff_factor: float = 0.5
    status_forcelist: Iterable[int] = (429, 502, 503, 504)

    def timeouts(self) -> tuple[float, float]:
        connect = max(0.1, float(self.connect_timeout))
        read = max(connect + 1.0, float(self.timeout))
        return connect, read


def _build_retry(settings: HttpSettings) -> Retry:
    return Retry(
        total=max(0, settings.retries),
        connect=max(0, settings.retries),
        read=max(0, settings.retries),
        backoff_factor=max(0.0, settings.backoff_factor),
        status_forcelist=tuple(settings.status_forcelist),
        allowed_methods=_ALLOWED_METHODS,
        raise_on_status=False,
    )


def _create_session(settings: HttpSettings) -> Session:
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=_build_retry(settings))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class SparqlHttpClient:
    """Form-encoded POSTs to a SPARQL endpoint.

    Transport failures, HTTP error statuses and unparsable JSON bodies all
    surface as :class:`StoreError`.
    """

    def __init__(self, settings: Optional[HttpSettings] = None, *, session: Optional[Session] = None) -> None:
        self.settings = settings or HttpSettings()
        self.session = session if session is not None else _create_session(self.settings)
        self.timeout = self.settings.timeouts()
        _LOGGER.debug(
            "SPARQL HTTP client: timeout=%ss connect=%ss retries=%s backoff=%s",
            self.settings.timeout,
            self.settings.connect_timeout,
            self.settings.retries,
            self.settings.backoff_factor,
        )

    def post(
        self,
        url: str,
        form: Mapping[str, str],
        *,
        headers: Optional[Mapping[str, str]] = None,
        sudo: bool = False,
    ) -> Response:
        sent = {"Accept": RESULTS_JSON, **(headers or {})}
        if sudo:
            sent["mu-auth-sudo"] = "true"
        try:
            response = self.session.request("POST", url, data=dict(form), headers=sent, timeout=self.timeout)
        except requests.RequestException as exc:
            _LOGGER.warning("HTTP POST %s failed: %s", url, exc)
            raise StoreError(f"SPARQL endpoint unreachable: {exc}") from exc
        if response.status_code >= 400:
            snippet = (response.text or "")[:500]
            operation = next(iter(form), "request")
            raise StoreError(
                f"SPARQL {operation} failed with HTTP {response.status_code}: {snippet}",
                status=response.status_code,
            )
        return response

    def post_json(self, url: str, form: Mapping[str, str], **kwargs: Any) -> Any:
        response = self.post(url, form, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"SPARQL endpoint returned invalid JSON: {exc}") from exc
