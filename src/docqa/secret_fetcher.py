"""
Client for the AWS Parameters and Secrets Lambda Extension.

The extension runs next to the function, keeps secrets cached for its
configured TTL and serves them on a loopback port. Requests must carry the
function's session token in ``X-Aws-Parameters-Secrets-Token``.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from docqa.models import SecretBundle

log = logging.getLogger("docqa.secrets")

DEFAULT_PORT = 2773
TOKEN_HEADER = "X-Aws-Parameters-Secrets-Token"
SECRETS_PATH = "/secretsmanager/get"
PARAMETERS_PATH = "/systemsmanager/parameters/get"


class SecretFetchError(RuntimeError):
    def __init__(self, message: str, secret_id: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.secret_id = secret_id
        self.status_code = status_code


def extension_port() -> int:
    raw = os.getenv("PARAMETERS_SECRETS_EXTENSION_HTTP_PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as e:
        raise SecretFetchError(f"Invalid PARAMETERS_SECRETS_EXTENSION_HTTP_PORT: {raw!r}") from e


def parse_secret_string(secret_id: str, secret_string: str) -> Dict[str, Any]:
    """
    Key/value secrets are JSON objects; anything else is a plain string secret.
    """
    try:
        data = json.loads(secret_string)
    except json.JSONDecodeError:
        return {secret_id: secret_string}
    if isinstance(data, dict):
        return data
    return {secret_id: secret_string}


class SecretsExtensionClient:
    """
    Reads secrets and parameters from the extension's local HTTP endpoint.

    Holds no cache of its own: caching, refresh and expiry belong to the extension.
    """

    def __init__(
        self,
        port: Optional[int] = None,
        session_token: Optional[str] = None,
        timeout_s: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        token = session_token or os.getenv("AWS_SESSION_TOKEN")
        if not token:
            raise SecretFetchError("AWS_SESSION_TOKEN is not set; the secrets extension requires it")

        self.port = port or extension_port()
        self._client = httpx.Client(
            base_url=f"http://localhost:{self.port}",
            headers={TOKEN_HEADER: token},
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SecretsExtensionClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # The extension can still be starting during the first invocation
    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.TransportError)),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _get(self, path: str, params: Dict[str, str]) -> httpx.Response:
        return self._client.get(path, params=params)

    def _get_json(self, path: str, params: Dict[str, str], name: str) -> Dict[str, Any]:
        try:
            resp = self._get(path, params)
        except httpx.HTTPError as e:
            raise SecretFetchError(
                f"Secrets extension unreachable on port {self.port} for {name!r}: {type(e).__name__}",
                secret_id=name,
            ) from e

        if resp.status_code != 200:
            raise SecretFetchError(
                f"Secrets extension returned HTTP {resp.status_code} for {name!r}: {resp.text[:200]}",
                secret_id=name,
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise SecretFetchError(
                f"Secrets extension returned invalid JSON for {name!r}",
                secret_id=name,
                status_code=resp.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise SecretFetchError(f"Unexpected response shape for {name!r}", secret_id=name)
        return payload

    def get_secret(self, secret_id: str) -> SecretBundle:
        """
        Fetch one secret (name or ARN) and parse its SecretString.
        """
        if not secret_id or not secret_id.strip():
            raise ValueError("secret_id must not be empty")

        log.debug("Fetching secret %s from extension on port %d", secret_id, self.port)
        payload = self._get_json(SECRETS_PATH, {"secretId": secret_id}, secret_id)

        secret_string = payload.get("SecretString")
        if not isinstance(secret_string, str):
            raise SecretFetchError(f"Secret {secret_id!r} has no SecretString", secret_id=secret_id)

        created = payload.get("CreatedDate")
        return SecretBundle(
            secret_id=secret_id,
            values=parse_secret_string(secret_id, secret_string),
            version_id=payload.get("VersionId"),
            created_date=str(created) if created is not None else None,
        )

    def get_secret_value(self, secret_id: str, key: str) -> str:
        bundle = self.get_secret(secret_id)
        value = bundle.get(key)
        if value is None:
            raise SecretFetchError(f"Secret {secret_id!r} has no key {key!r}", secret_id=secret_id)
        return value

    def get_parameter(self, name: str, decrypt: bool = True) -> str:
        """
        Fetch one SSM Parameter Store value through the same extension.
        """
        if not name or not name.strip():
            raise ValueError("parameter name must not be empty")

        log.debug("Fetching parameter %s from extension on port %d", name, self.port)
        payload = self._get_json(
            PARAMETERS_PATH,
            {"name": name, "withDecryption": "true" if decrypt else "false"},
            name,
        )

        try:
            return str(payload["Parameter"]["Value"])
        except (KeyError, TypeError) as e:
            raise SecretFetchError(f"Parameter {name!r} missing from response", secret_id=name) from e


def fetch_secret(secret_id: str, **client_kwargs: Any) -> SecretBundle:
    with SecretsExtensionClient(**client_kwargs) as client:
        return client.get_secret(secret_id)
