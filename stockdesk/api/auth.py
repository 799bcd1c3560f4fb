from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from stockdesk.config import settings
from stockdesk.database import get_db
from stockdesk.models.user import User
from stockdesk.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    display_name: str
    role: str
    active: bool = True

    model_config = {"from_attributes": True}


class CreateUserRequest(BaseModel):
    username: str
    password: str
    display_name: str = ""
    role: str = "staff"


def _token_from_request(request: Request, cookie_token: str | None) -> str | None:
    auth_header = request.headers.get("authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return cookie_token


def get_optional_user(
    request: Request,
    token: str | None = Cookie(default=None, alias="token"),
    db: Session = Depends(get_db),
) -> User | None:
    """Dependency: the caller if a valid token was sent, else None."""
    raw = _token_from_request(request, token)
    if not raw:
        return None
    payload = auth_service.decode_token(raw)
    if not payload:
        return None
    user = auth_service.get_user_by_id(db, payload["sub"])
    if not user or not user.active:
        return None
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Dependency: extract user from JWT bearer header or cookie."""
    if user is None:
        raise HTTPException(401, "Not authenticated")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(403, "Admin only")
    return user


@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.username, data.password)
    if not user:
        raise HTTPException(401, "Invalid username or password")
    token = auth_service.create_access_token(user)
    response.set_cookie("token", token, httponly=True, samesite="lax", max_age=3600 * settings.ACCESS_TOKEN_EXPIRE_HOURS)
    return {"token": token, "user": UserOut.model_validate(user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie("token")
    return {"ok": True}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=list[UserOut])
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.list_users(db)


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(data: CreateUserRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.create_user(db, data.username, data.password, data.display_name, data.role)
