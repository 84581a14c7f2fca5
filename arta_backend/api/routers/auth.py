"""Login route.

Invalid credentials and inactive accounts produce the same 401 body so
that the response never reveals whether an account exists.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from arta_backend.api.dependencies import auth_rate_limit, auth_service
from arta_backend.models.auth_models import AuthErrorCode
from arta_backend.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

GENERIC_LOGIN_FAILURE = "Invalid email or password."


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
def login(
    body: LoginRequest,
    service: AuthService = Depends(auth_service),
) -> JSONResponse:
    """Authenticate with email and password.

    Returns the sanitised profile on success.
    """
    result = service.login(body.email, body.password)

    if result.success and result.profile is not None:
        return JSONResponse(
            status_code=200,
            content={
                "success": True,
                "profile": result.profile.model_dump(by_alias=True, mode="json"),
            },
        )

    if result.error_code in (AuthErrorCode.INVALID_CREDENTIALS, AuthErrorCode.ACCOUNT_INACTIVE):
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": GENERIC_LOGIN_FAILURE},
        )

    return JSONResponse(
        status_code=500,
        content={"success": False, "error": result.error_message or "Login failed."},
    )
