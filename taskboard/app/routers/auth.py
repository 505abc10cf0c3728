from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from taskboard.app.auth import bearer_token
from taskboard.app.config import get_settings
from taskboard.app.deps import get_auth_service
from taskboard.app.schemas import LoginBody, RegisterBody
from taskboard.app.services.auth_service import AuthService
from taskboard.app.web.templates import get_templates

router = APIRouter(prefix="/api/auth", tags=["auth"])
pages_router = APIRouter()
templates = get_templates()


@router.post("/register", status_code=201)
async def register(body: RegisterBody, service: AuthService = Depends(get_auth_service)):
    user = await service.register(body.email, body.password)
    return {
        "success": True,
        "message": "User registered successfully",
        "user": user.model_dump(by_alias=True),
    }


@router.post("/login")
async def login(body: LoginBody, service: AuthService = Depends(get_auth_service)):
    token, user = await service.login(body.email, body.password)
    return {"success": True, "token": token, "user": user.model_dump(by_alias=True)}


@router.post("/logout")
async def logout():
    # Tokens are stateless; the client drops its copy.
    return {"success": True, "message": "Logged out successfully"}


@router.post("/validate")
async def validate(request: Request, service: AuthService = Depends(get_auth_service)):
    user = await service.validate(bearer_token(request))
    return {"success": True, "user": user.model_dump(by_alias=True)}


@router.post("/clear")
async def clear(service: AuthService = Depends(get_auth_service)):
    if not get_settings().allow_auth_reset:
        raise HTTPException(status_code=404, detail="Not Found")
    await service.clear()
    return JSONResponse(content={"success": True, "message": "Users cleared"})


@pages_router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {"mode": "login"})


@pages_router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {"mode": "register"})
