from typing import Annotated

from fastapi import Header, HTTPException, Request

from config import Settings


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def require_admin(
    request: Request,
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Strict admin-only guard. Requires the X-Admin-Token header to match the
    service-role key.
    """
    service_key = _settings(request).supabase_service_role_key
    if not service_key:
        raise HTTPException(
            status_code=500, detail="SUPABASE_SERVICE_ROLE_KEY not configured on server."
        )
    if x_admin_token != service_key:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def require_client(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Client/API guard. Accepts either:
      - X-Admin-Token that matches the service-role key (admins always allowed), or
      - X-Api-Key that matches the anon key.
    With no anon key configured the API is open (local development).
    """
    settings = _settings(request)

    # Service-role key grants access
    if settings.supabase_service_role_key and x_admin_token == settings.supabase_service_role_key:
        return

    if not settings.supabase_anon_key:
        return
    if x_api_key != settings.supabase_anon_key:
        raise HTTPException(status_code=401, detail="Unauthorized.")
