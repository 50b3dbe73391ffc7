"""FastAPI application for the vendor dashboard and public menu pages."""

import logging
from typing import Annotated, Any

from fastapi import BackgroundTasks, Cookie, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, Field

from qr_menu_service.auth.auth_errors import AuthError
from qr_menu_service.auth.session_dependencies import (
    HANDOFF_COOKIE,
    SESSION_COOKIE,
    LoginRequiredError,
    get_session_token,
    get_vendor_from_session,
)
from qr_menu_service.models.analytics_models import DailyViewSummary, DashboardAnalytics, DeviceViewShare
from qr_menu_service.models.menu_models import Category
from qr_menu_service.models.vendor_models import AuthUser
from qr_menu_service.services.analytics_service import AnalyticsService, summarize_devices
from qr_menu_service.services.auth_service import AuthService, SignInResult
from qr_menu_service.services.cart import Cart
from qr_menu_service.services.menu_editor import MenuDraft
from qr_menu_service.services.menu_service import (
    MenuAccess,
    MenuAlreadyExistsError,
    MenuSaveError,
    MenuService,
    ViewContext,
)
from qr_menu_service.services.qr_service import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    QRCodeService,
    SharePayload,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save menu. Please try again."
HANDOFF_COOKIE_MAX_AGE = 300


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class SignUpRequest(BaseModel):
    email: str = ""
    password: str = ""
    restaurant_name: str | None = None


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class GoogleSignInRequest(BaseModel):
    id_token: str


class SimulatedGoogleRequest(BaseModel):
    """Developer-mode Google sign-in form."""

    email: str = ""
    mode: str = "login"
    redirect: str = "/login"


class SessionResponse(BaseModel):
    """The signed-in user after a successful sign-in."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    provider_id: str


class DashboardResponse(BaseModel):
    restaurant_name: str
    has_menu: bool
    menu_id: str | None = None
    view_count: int = 0
    next_action: str
    analytics: DashboardAnalytics
    notice: str | None = None


class NewMenuResponse(BaseModel):
    can_create: bool
    draft: MenuDraft


class MenuCreatedResponse(BaseModel):
    menu_id: str
    qr_codes_url: str


class MenuEditResponse(BaseModel):
    menu_id: str
    draft: MenuDraft


class MenuUpdatedResponse(BaseModel):
    menu_id: str
    updated: bool


class MenuSummary(BaseModel):
    id: str
    name: str
    view_count: int


class QRCodesResponse(BaseModel):
    """QR page: the vendor's menus and, for the selected one, its link and views."""

    menus: list[MenuSummary]
    menu_id: str | None = None
    menu_url: str | None = None
    total_views: int = 0
    daily_views: list[DailyViewSummary] = Field(default_factory=list)
    device_breakdown: list[DeviceViewShare] = Field(default_factory=list)


class PublicMenuResponse(BaseModel):
    id: str
    name: str
    description: str
    whatsapp_number: str
    categories: list[Category]


class OrderLine(BaseModel):
    name: str
    quantity: int = Field(default=1, ge=1)


class OrderRequest(BaseModel):
    items: list[OrderLine] = Field(default_factory=list)


class OrderResponse(BaseModel):
    message: str
    total: float
    order_url: str


def _safe_redirect(target: str) -> str:
    # Only same-site paths
    if not target.startswith("/") or target.startswith("//"):
        return "/login"
    return target


def create_app(
    menu_service: MenuService,
    analytics_service: AnalyticsService,
    auth_service: AuthService,
    qr_service: QRCodeService,
    cookie_secure: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Menu creation, editing and view tracking
        analytics_service: View aggregation
        auth_service: Sign-in flows and sessions
        qr_service: QR code rendering
        cookie_secure: Whether cookies get the Secure flag

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="QR Menu Service",
        description="Digital menus for restaurants, shared through QR codes",
        version="1.0.0",
    )

    app.state.menu_service = menu_service
    app.state.analytics_service = analytics_service
    app.state.auth_service = auth_service
    app.state.qr_service = qr_service

    def log_auth_state(user: AuthUser | None) -> None:
        if user is None:
            logger.info("Auth state changed: signed out")
        else:
            logger.info(f"Auth state changed: signed in as {user.uid} via {user.provider_id}")

    app.state.unsubscribe_auth_state = auth_service.notifier.subscribe(log_auth_state)

    session_max_age = int(auth_service.session_store.ttl.total_seconds())

    def set_session_cookie(response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            token,
            max_age=session_max_age,
            httponly=True,
            secure=cookie_secure,
            samesite="lax",
        )

    def session_response(result: SignInResult, response: Response) -> SessionResponse:
        set_session_cookie(response, result.session_token)
        return SessionResponse(**result.user.model_dump())

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.user_message})

    @app.exception_handler(LoginRequiredError)
    async def handle_login_required(request: Request, exc: LoginRequiredError) -> RedirectResponse:
        return RedirectResponse("/login", status_code=303)

    def require_vendor(token: str | None = Depends(get_session_token)) -> AuthUser:
        """Dependency resolving the signed-in vendor; redirects to /login otherwise."""
        return get_vendor_from_session(token, app.state.auth_service.session_store)

    async def load_owned_menu(user: AuthUser, menu_id: str) -> Any:
        access, menu = await app.state.menu_service.get_menu_for_edit(user.uid, menu_id)
        if access is MenuAccess.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Menu not found")
        if access is MenuAccess.UNAUTHORIZED:
            raise HTTPException(status_code=403, detail="You do not have permission to access this menu")
        return menu

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy")

    # Auth

    @app.post("/auth/signup", response_model=SessionResponse, status_code=201, tags=["Auth"])
    async def sign_up(body: SignUpRequest, response: Response) -> SessionResponse:
        """Register a vendor account and open a session."""
        result = await app.state.auth_service.sign_up(body.email, body.password, body.restaurant_name)
        return session_response(result, response)

    @app.post("/auth/login", response_model=SessionResponse, tags=["Auth"])
    async def login(body: LoginRequest, response: Response) -> SessionResponse:
        """Sign in with email and password."""
        result = await app.state.auth_service.sign_in(body.email, body.password)
        return session_response(result, response)

    @app.post("/auth/google", response_model=SessionResponse, tags=["Auth"])
    async def google_sign_in(body: GoogleSignInRequest, response: Response) -> SessionResponse:
        """Sign in with a Google ID token."""
        result = await app.state.auth_service.sign_in_with_google(body.id_token)
        return session_response(result, response)

    @app.post("/auth/google/simulate", tags=["Auth"])
    async def simulate_google(body: SimulatedGoogleRequest) -> RedirectResponse:
        """Developer-mode Google sign-in.

        Stores the simulated result as a one-shot hand-off and sends the
        browser back to the login page, which completes the sign-in.
        """
        if not app.state.auth_service.simulated_google_enabled:
            raise HTTPException(status_code=404, detail="Not found")

        token = app.state.auth_service.start_simulated_google(body.email)
        response = RedirectResponse(_safe_redirect(body.redirect), status_code=303)
        response.set_cookie(
            HANDOFF_COOKIE,
            token,
            max_age=HANDOFF_COOKIE_MAX_AGE,
            httponly=True,
            secure=cookie_secure,
            samesite="lax",
        )
        return response

    @app.get("/login", tags=["Auth"], response_model=None)
    async def login_page(
        handoff: Annotated[str | None, Cookie(alias=HANDOFF_COOKIE)] = None,
        token: str | None = Depends(get_session_token),
    ) -> Response | dict[str, str]:
        """Complete a pending Google hand-off or report that login is needed."""
        if handoff:
            result = await app.state.auth_service.complete_google_handoff(handoff)
            response: Response
            if result is None:
                response = JSONResponse({"status": "login_required"})
            else:
                response = RedirectResponse("/dashboard", status_code=303)
                set_session_cookie(response, result.session_token)
            response.delete_cookie(HANDOFF_COOKIE)
            return response

        if app.state.auth_service.resolve_session(token) is not None:
            return RedirectResponse("/dashboard", status_code=303)

        return {"status": "login_required"}

    @app.post("/auth/logout", tags=["Auth"])
    async def logout(response: Response, token: str | None = Depends(get_session_token)) -> dict[str, str]:
        await app.state.auth_service.sign_out(token)
        response.delete_cookie(SESSION_COOKIE)
        return {"status": "signed_out"}

    # Dashboard

    @app.get("/dashboard", response_model=DashboardResponse, tags=["Dashboard"])
    async def dashboard(
        notice: str | None = None,
        user: AuthUser = Depends(require_vendor),
    ) -> DashboardResponse:
        """Restaurant name, the vendor's menu and its analytics."""
        profile = app.state.auth_service.get_vendor_profile(user.uid)
        menu = await app.state.menu_service.get_vendor_menu(user.uid)

        analytics = DashboardAnalytics()
        if menu is not None and menu.id is not None:
            analytics = await app.state.analytics_service.get_dashboard_analytics(user.uid, menu.id)

        return DashboardResponse(
            restaurant_name=profile.restaurant_name,
            has_menu=menu is not None,
            menu_id=menu.id if menu else None,
            view_count=menu.view_count if menu else 0,
            next_action="edit" if menu else "create",
            analytics=analytics,
            notice=notice,
        )

    @app.get("/dashboard/menus/new", tags=["Menus"], response_model=None)
    async def new_menu(user: AuthUser = Depends(require_vendor)) -> Response | NewMenuResponse:
        if not await app.state.menu_service.can_create_menu(user.uid):
            return RedirectResponse("/dashboard?notice=menu_exists", status_code=303)
        return NewMenuResponse(can_create=True, draft=MenuDraft.blank())

    @app.post("/dashboard/menus", response_model=MenuCreatedResponse, status_code=201, tags=["Menus"])
    async def create_menu(draft: MenuDraft, user: AuthUser = Depends(require_vendor)) -> MenuCreatedResponse:
        """Create the vendor's single menu."""
        try:
            menu_id = await app.state.menu_service.create_menu(user.uid, draft)
        except MenuAlreadyExistsError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except MenuSaveError as e:
            raise HTTPException(status_code=503, detail=SAVE_FAILED_MESSAGE) from e

        return MenuCreatedResponse(menu_id=menu_id, qr_codes_url=f"/dashboard/qr-codes?menu_id={menu_id}")

    @app.get("/dashboard/menus/{menu_id}/edit", tags=["Menus"], response_model=None)
    async def edit_menu(menu_id: str, user: AuthUser = Depends(require_vendor)) -> Response | MenuEditResponse:
        access, menu = await app.state.menu_service.get_menu_for_edit(user.uid, menu_id)
        if access is not MenuAccess.OK:
            return RedirectResponse(f"/dashboard?notice={access.value}", status_code=303)
        return MenuEditResponse(menu_id=menu_id, draft=MenuDraft.from_menu(menu))

    @app.put("/dashboard/menus/{menu_id}", response_model=MenuUpdatedResponse, tags=["Menus"])
    async def update_menu(
        menu_id: str, draft: MenuDraft, user: AuthUser = Depends(require_vendor)
    ) -> MenuUpdatedResponse:
        """Replace the menu's content with the submitted form."""
        try:
            access = await app.state.menu_service.update_menu(user.uid, menu_id, draft)
        except MenuSaveError as e:
            raise HTTPException(status_code=503, detail=SAVE_FAILED_MESSAGE) from e

        if access is MenuAccess.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Menu not found")
        if access is MenuAccess.UNAUTHORIZED:
            raise HTTPException(status_code=403, detail="You do not have permission to edit this menu")

        return MenuUpdatedResponse(menu_id=menu_id, updated=True)

    # QR codes

    @app.get("/dashboard/qr-codes", response_model=QRCodesResponse, tags=["QR Codes"])
    async def qr_codes(
        menu_id: str | None = None,
        user: AuthUser = Depends(require_vendor),
    ) -> QRCodesResponse:
        """The vendor's menus; with ``menu_id``, that menu's link, daily views and devices."""
        menus = await app.state.menu_service.list_vendor_menus(user.uid)
        response = QRCodesResponse(
            menus=[MenuSummary(id=m.id, name=m.name, view_count=m.view_count) for m in menus if m.id]
        )

        if menu_id:
            menu = await load_owned_menu(user, menu_id)
            response.menu_id = menu_id
            response.menu_url = app.state.qr_service.menu_url(menu_id)
            response.total_views = menu.view_count
            response.daily_views = await app.state.analytics_service.get_daily_views(menu_id)
            response.device_breakdown = summarize_devices(response.daily_views, menu.view_count)

        return response

    @app.get("/dashboard/qr-codes/{menu_id}.png", tags=["QR Codes"])
    async def qr_code_image(
        menu_id: str,
        foreground: str = DEFAULT_FOREGROUND,
        background: str = DEFAULT_BACKGROUND,
        user: AuthUser = Depends(require_vendor),
    ) -> Response:
        await load_owned_menu(user, menu_id)
        try:
            png = app.state.qr_service.render_png(menu_id, foreground, background)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return Response(content=png, media_type="image/png")

    @app.get("/dashboard/qr-codes/{menu_id}/download", tags=["QR Codes"])
    async def download_qr_code(
        menu_id: str,
        foreground: str = DEFAULT_FOREGROUND,
        background: str = DEFAULT_BACKGROUND,
        user: AuthUser = Depends(require_vendor),
    ) -> Response:
        """Printable QR code with the menu name and caption, as an attachment."""
        menu = await load_owned_menu(user, menu_id)
        try:
            png = app.state.qr_service.render_download(menu_id, menu.name, foreground, background)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        filename = app.state.qr_service.download_filename(menu.name)
        return Response(
            content=png,
            media_type="image/png",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/dashboard/qr-codes/{menu_id}/share", response_model=SharePayload, tags=["QR Codes"])
    async def share_qr_code(menu_id: str, user: AuthUser = Depends(require_vendor)) -> SharePayload:
        await load_owned_menu(user, menu_id)
        payload: SharePayload = app.state.qr_service.share_payload(menu_id)
        return payload

    # Public menu

    @app.get("/menu/{menu_id}", response_model=PublicMenuResponse, tags=["Public Menu"])
    async def public_menu(
        menu_id: str,
        background_tasks: BackgroundTasks,
        screen: str | None = None,
        user_agent: Annotated[str | None, Header()] = None,
        referer: Annotated[str | None, Header()] = None,
        accept_language: Annotated[str | None, Header()] = None,
    ) -> PublicMenuResponse:
        """Public, read-only menu page. Views are tracked after the response is sent."""
        menu = await app.state.menu_service.get_public_menu(menu_id)
        if menu is None:
            raise HTTPException(status_code=404, detail="Menu not found")

        context = ViewContext(
            user_agent=user_agent or "",
            referrer=referer or "direct",
            screen_size=screen or "unknown",
            language=(accept_language or "unknown").split(",")[0].strip() or "unknown",
        )
        background_tasks.add_task(app.state.menu_service.record_view, menu, context)

        return PublicMenuResponse(
            id=menu_id,
            name=menu.name,
            description=menu.description,
            whatsapp_number=menu.whatsapp_number,
            categories=menu.categories,
        )

    @app.post("/menu/{menu_id}/order", response_model=OrderResponse, tags=["Public Menu"])
    async def place_order(menu_id: str, body: OrderRequest) -> OrderResponse:
        """Build the WhatsApp order link for a cart. Nothing is stored."""
        menu = await app.state.menu_service.get_public_menu(menu_id)
        if menu is None:
            raise HTTPException(status_code=404, detail="Menu not found")

        if not menu.whatsapp_number:
            raise HTTPException(status_code=400, detail="This menu does not accept WhatsApp orders")

        cart = Cart()
        for line in body.items:
            item = menu.find_item(line.name)
            if item is None:
                raise HTTPException(status_code=400, detail=f"Unknown item: {line.name}")
            cart.add(item, line.quantity)

        if cart.is_empty:
            raise HTTPException(status_code=400, detail="Your cart is empty")

        return OrderResponse(
            message=cart.build_order_message(menu.name),
            total=cart.total,
            order_url=cart.order_link(menu.whatsapp_number, menu.name),
        )

    return app
