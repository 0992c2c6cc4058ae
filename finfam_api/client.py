"""
Python client for the FinFam API.

``FinFamClient`` is a thin wrapper over an ``httpx.Client`` with one method
per endpoint. ``FamilyStore`` sits on top of it and keeps the budgets and
expenses of the currently selected family cached until a mutation
invalidates them.
"""

from typing import Optional

import httpx
import structlog

from . import summary

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[dict] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or {}


class NoFamilySelected(Exception):
    pass


class FinFamClient:
    def __init__(self, http: httpx.Client, token: Optional[str] = None, prefix: str = "/api"):
        self.http = http
        self.token = token
        self.prefix = prefix.rstrip("/")

    def _request(self, method: str, path: str, json: Optional[dict] = None):
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self.http.request(method, f"{self.prefix}{path}", json=json, headers=headers)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            if response.status_code == 401:
                # token expired or revoked
                self.token = None
            raise ApiError(response.status_code, body.get("message", response.reason_phrase), body.get("errors"))
        return response.json()

    # Auth
    def register(self, name: str, email: str, password: str, role: Optional[str] = None) -> dict:
        payload = {"name": name, "email": email, "password": password}
        if role:
            payload["role"] = role
        data = self._request("POST", "/auth/register", payload)
        self.token = data["token"]
        return data["user"]

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", {"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def logout(self) -> dict:
        data = self._request("POST", "/auth/logout")
        self.token = None
        return data

    def me(self) -> dict:
        return self._request("GET", "/auth/me")["user"]

    # Families
    def list_families(self) -> list:
        return self._request("GET", "/families")

    def get_family(self, family_id: int) -> dict:
        return self._request("GET", f"/families/{family_id}")

    def create_family(self, name: str) -> dict:
        return self._request("POST", "/families", {"name": name})

    def update_family(self, family_id: int, name: str) -> dict:
        return self._request("PUT", f"/families/{family_id}", {"name": name})

    def family_summary(self, family_id: int) -> dict:
        return self._request("GET", f"/families/{family_id}/summary")

    # Budgets and expenses
    def list_records(self, resource: str, family_id: int) -> list:
        return self._request("GET", f"/{resource}/family/{family_id}")

    def get_record(self, resource: str, record_id: int) -> dict:
        return self._request("GET", f"/{resource}/{record_id}")

    def create_record(self, resource: str, data: dict) -> dict:
        return self._request("POST", f"/{resource}", data)

    def update_record(self, resource: str, record_id: int, data: dict) -> dict:
        return self._request("PUT", f"/{resource}/{record_id}", data)

    def delete_record(self, resource: str, record_id: int) -> dict:
        return self._request("DELETE", f"/{resource}/{record_id}")


class FamilyStore:
    """
    Budgets and expenses of the selected family, cached per resource.

    Lists are fetched on first access and refetched after any successful
    create, update or delete. The last failure is kept in ``error``.
    """

    def __init__(self, client: FinFamClient, family_id: Optional[int] = None):
        self.client = client
        self.family_id = family_id
        self.error: Optional[ApiError] = None
        self._cache: dict = {}

    def select_family(self, family_id: Optional[int]):
        if family_id != self.family_id:
            self.family_id = family_id
            self._cache.clear()

    def invalidate(self, resource: Optional[str] = None):
        if resource is None:
            self._cache.clear()
        else:
            self._cache.pop((resource, self.family_id), None)

    def is_cached(self, resource: str) -> bool:
        return (resource, self.family_id) in self._cache

    def _require_family(self) -> int:
        if not self.family_id:
            raise NoFamilySelected("No family selected")
        return self.family_id

    def _call(self, fn, *args):
        try:
            result = fn(*args)
        except ApiError as e:
            self.error = e
            logger.warning("api_request_failed", status=e.status_code, message=e.message)
            raise
        self.error = None
        return result

    def items(self, resource: str) -> list:
        if not self.family_id:
            return []
        key = (resource, self.family_id)
        if key not in self._cache:
            self._cache[key] = self._call(self.client.list_records, resource, self.family_id)
        return self._cache[key]

    @property
    def budgets(self) -> list:
        return self.items("budgets")

    @property
    def expenses(self) -> list:
        return self.items("expenses")

    def create(self, resource: str, data: dict) -> dict:
        family_id = self._require_family()
        created = self._call(self.client.create_record, resource, {**data, "familyId": family_id})
        self.invalidate(resource)
        return created

    def update(self, resource: str, record_id: int, data: dict) -> dict:
        family_id = self._require_family()
        updated = self._call(self.client.update_record, resource, record_id, {**data, "familyId": family_id})
        self.invalidate(resource)
        return updated

    def delete(self, resource: str, record_id: int) -> dict:
        result = self._call(self.client.delete_record, resource, record_id)
        self.invalidate(resource)
        return result

    def summary(self) -> dict:
        return summary.budget_summary(self.budgets, self.expenses)
