"""Authenticated account API calls used by command handlers.

Hides the endpoints, request bodies and error mapping of the SSO
organization APIs. Every non-2xx response becomes an APIError.
"""

from typing import Any

import httpx
from pydantic import BaseModel, Field

from ..config import DEFAULT_HTTP_TIMEOUT, DEFAULT_SSO_BASE_URL, ENV_PROD
from ..errors import APIError

PROD_SSO_BASE_URL = "https://sso.redhat.com"

AUTH_POLICY_PATH = "/auth/realms/redhat-external/apis/organizations/v1/my/authentication-policy"
SERVICE_ACCOUNTS_PATH = "/auth/realms/redhat-external/apis/service_accounts/v1"


class ServiceAccountRequest(BaseModel):
    """Payload for creating a service account."""

    name: str = Field(min_length=1)
    description: str = ""
    environment: str


class ServiceAccount(BaseModel):
    """A freshly created service account.

    The secret is only ever returned once, by the create call.
    """

    name: str
    description: str = ""
    client_id: str
    secret: str


class AccountAPI:
    """Thin wrapper around httpx.AsyncClient for the organization APIs."""

    def __init__(
        self,
        base_url: str = DEFAULT_SSO_BASE_URL,
        prod_base_url: str = PROD_SSO_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._prod_base_url = prod_base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def set_org_2fa(self, enabled: bool, token: str, environment: str) -> None:
        """Require or stop requiring OTP for the user's organization."""
        body = {"authenticationFactors": {"otp": {"required": enabled}}}
        await self._request("POST", self._url(AUTH_POLICY_PATH, environment), token, body)

    async def create_service_account(self, request: ServiceAccountRequest, token: str) -> ServiceAccount:
        """Create a service account and return its one-time credentials."""
        body = {"name": request.name, "description": request.description}
        data = await self._request(
            "POST",
            self._url(SERVICE_ACCOUNTS_PATH, request.environment),
            token,
            body
        )
        if not isinstance(data, dict) or "clientId" not in data or "secret" not in data:
            raise APIError(status_code=200, message="Malformed service account response")
        return ServiceAccount(
            name=data.get("name") or request.name,
            description=data.get("description") or request.description,
            client_id=data["clientId"],
            secret=data["secret"],
        )

    def _url(self, path: str, environment: str) -> str:
        base = self._prod_base_url if environment == ENV_PROD else self._base_url
        return f"{base}{path}"

    async def _request(self, method: str, url: str, token: str, body: dict[str, Any]) -> Any:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }
        resp = await self._client.request(method, url, json=body, headers=headers)
        if 200 <= resp.status_code < 300:
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        message = f"Request failed: {method} {url}"
        response_text = ""
        try:
            data = resp.json()
            if isinstance(data, dict) and "error_description" in data:
                message = str(data["error_description"])
            else:
                message = str(data)
        except ValueError:
            response_text = resp.text or ""

        raise APIError(status_code=resp.status_code, message=message, response_text=response_text)
