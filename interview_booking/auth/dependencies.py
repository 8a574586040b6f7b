from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from interview_booking.auth import jwt_handler

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenPrincipal:
    email: str
    role: str
    id: int | None = None


def require_role(role: str):
    """Build a dependency that admits only bearer tokens issued for ``role``.

    Missing header and bad signature/expiry are 401s; a valid token for the
    other role is a 403.
    """

    def dependency(
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ) -> TokenPrincipal:
        if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

        try:
            payload = jwt_handler.decode_access_token(credentials.credentials)
        except jwt.InvalidTokenError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
            ) from exc

        if payload.get("type") != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token type")

        email = payload.get("email")
        if not email or (role == jwt_handler.INTERVIEWER_ROLE and payload.get("id") is None):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

        return TokenPrincipal(email=email, role=role, id=payload.get("id"))

    return dependency


require_student = require_role(jwt_handler.STUDENT_ROLE)
require_interviewer = require_role(jwt_handler.INTERVIEWER_ROLE)
