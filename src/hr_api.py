from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.api_client import ApiClient
from src.api_client import ApiResponse
from src.gui_kit.autocomplete import AutocompleteOption


def company_to_option(company: Mapping[str, Any]) -> AutocompleteOption:
    """Autocomplete row for a company: name, then "CODE - description"."""

    code = str(company.get("code") or "")
    description = str(company.get("description") or "").strip()
    subtitle = f"{code} - {description}" if description else code
    return AutocompleteOption(
        id=str(company["id"]),
        label=str(company.get("name") or company["id"]),
        subtitle=subtitle or None,
        image_url=company.get("profileImageUrl") or None,
    )


def employee_display_name(employee: Mapping[str, Any]) -> str:
    name = f"{employee.get('firstName') or ''} {employee.get('lastName') or ''}".strip()
    return name or str(employee.get("userCompEmail") or employee.get("id") or "")


class CompaniesApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def search_companies(
        self,
        *,
        search_term: str | None = None,
        limit: int | None = None,
        page: int | None = None,
        status: str | None = None,
    ) -> ApiResponse:
        return self._client.get(
            "/api/companies",
            params={"page": page, "limit": limit, "searchTerm": search_term, "status": status},
        )

    def get_company(self, company_id: str) -> ApiResponse:
        return self._client.get(f"/api/companies/{company_id}")

    def search_company_options(self, search_term: str, *, limit: int = 20) -> list[AutocompleteOption]:
        result = self.search_companies(search_term=search_term, limit=limit, status="active")
        companies = result.response or []
        return [company_to_option(company) for company in companies if isinstance(company, Mapping)]


class EmployeesApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def get_current_employee(self) -> ApiResponse:
        return self._client.get("/api/employees/me")

    def create_employee(self, payload: Mapping[str, Any]) -> ApiResponse:
        body = {key: value for key, value in payload.items() if value not in (None, "")}
        return self._client.post("/api/employees", body)


class AuthApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def login(self, email: str, password: str) -> ApiResponse:
        return self._client.post(
            "/api/auth/login",
            {"email": email.strip(), "password": password, "deviceType": "web"},
        )

    def refresh_token(self, refresh_token: str) -> ApiResponse:
        return self._client.post("/api/auth/refresh-token", {"refreshToken": refresh_token})

    def change_password(self, current_password: str, new_password: str) -> ApiResponse:
        return self._client.post(
            "/api/auth/change-password",
            {"currentPassword": current_password, "newPassword": new_password},
        )
