"""
Sign in / sign up / sign out. Identity lives in the signed session cookie.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from api.deps import get_user_service, templates
from core.config import Role
from core.exceptions import AccountSuspended, ValidationError
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

ACCOUNT_TYPES = {
    "student": Role.STUDENT,
    "instructor": Role.INSTRUCTOR,
}


def _start_session(request: Request, user: dict) -> RedirectResponse:
    request.session.clear()
    request.session["user"] = {
        "id": user["id"],
        "role_id": user["role_id"],
        "name": user["name"],
        "email": user["email"],
    }
    return RedirectResponse(Role.HOME.get(user["role_id"], "/"), status_code=303)


@router.get("/signin")
def signin_page(request: Request, error: Optional[str] = None):
    return templates.TemplateResponse(request, "auth/signin.html", {"error": error})


@router.post("/signin")
def signin(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    users: UserService = Depends(get_user_service),
):
    if not email or not password:
        return templates.TemplateResponse(
            request,
            "auth/signin.html",
            {"error": "Please provide both email and password", "email": email},
            status_code=400,
        )

    try:
        user = users.authenticate(email, password)
    except AccountSuspended as e:
        return templates.TemplateResponse(
            request, "auth/signin.html", {"error": e.message, "email": email}, status_code=403
        )

    if not user:
        return templates.TemplateResponse(
            request,
            "auth/signin.html",
            {"error": "Invalid Email or password!", "email": email},
            status_code=401,
        )

    logger.info(f"User {user['id']} signed in as {Role.NAMES.get(user['role_id'])}")
    return _start_session(request, user)


@router.get("/signup")
def signup_page(request: Request):
    return templates.TemplateResponse(request, "auth/signup.html", {"form": {}})


@router.post("/signup")
def signup(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    account_type: str = Form("student"),
    users: UserService = Depends(get_user_service),
):
    form = {"name": name, "email": email, "account_type": account_type}
    role_id = ACCOUNT_TYPES.get(account_type)
    try:
        if role_id is None:
            raise ValidationError(["Unsupported account type"])
        user = users.create_user(name, email, password, role_id)
    except ValidationError as e:
        return templates.TemplateResponse(
            request,
            "auth/signup.html",
            {"error": e.message, "errors": e.errors, "form": form},
            status_code=400,
        )
    return _start_session(request, user)


@router.get("/signout")
def signout(request: Request):
    request.session.clear()
    return RedirectResponse("/signin", status_code=303)
