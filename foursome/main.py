import logging
import os

from fastapi import FastAPI, Request, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from .db import Base, engine
from .rendering import templates
from .routers import admin, api, public

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Foursome Scores")

ADMIN_KEY = os.getenv("ADMIN_KEY", "")  # empty: admin is open (local dev)


# ================================================================================
# =============================== PASSWORD ADMIN =================================
# ================================================================================

@app.get("/admin/login", response_class=HTMLResponse)
def admin_login_form(request: Request):
    return templates.TemplateResponse(request, "admin_login.html", {"request": request})


@app.post("/admin/login")
def admin_login_submit(request: Request, key: str = Form(...)):
    if not ADMIN_KEY:
        return RedirectResponse("/admin", status_code=303)

    if key != ADMIN_KEY:
        logger.warning("Rejected admin login from %s", request.client.host if request.client else "?")
        return templates.TemplateResponse(
            request,
            "admin_login.html",
            {"request": request, "error": "Wrong key"},
            status_code=401,
        )

    resp = RedirectResponse("/admin", status_code=303)
    resp.set_cookie(
        "admin_key",
        key,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * 12,  # 12 hours
    )
    return resp


@app.get("/admin/logout")
def admin_logout():
    resp = RedirectResponse("/", status_code=303)
    resp.delete_cookie("admin_key")
    return resp


@app.middleware("http")
async def admin_guard(request: Request, call_next):
    path = request.url.path

    if path.startswith("/admin"):
        if path in ("/admin/login", "/admin/logout"):
            return await call_next(request)

        if not ADMIN_KEY:
            return await call_next(request)

        if request.cookies.get("admin_key") == ADMIN_KEY:
            return await call_next(request)

        return RedirectResponse("/admin/login", status_code=303)

    return await call_next(request)


app.include_router(public.router)
app.include_router(admin.router)
app.include_router(api.router)
