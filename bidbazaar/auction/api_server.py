"""
FastAPI server for live auction control.

Provides HTTP endpoints for the admin panel (teams, products, sales,
countdowns, mystery effects) and a websocket that pushes every state change
to the display and player views.
"""

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import (
    Depends,
    FastAPI,
    File,
    Form,
    Header,
    HTTPException,
    UploadFile,
    WebSocket,
    WebSocketDisconnect
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import config
from .admin_policy import AdminPolicy
from .api_serializers import (
    AdminLoginRequest,
    AdminLoginResponse,
    CountdownStartRequest,
    CountdownStateResponse,
    CreateTeamRequest,
    EffectResponse,
    EventEndResponse,
    LeaderboardToggleRequest,
    MarkSoldRequest,
    MessageResponse,
    MysteryEffectRequest,
    StealPowerRequest,
    TeamResponse
)
from .auction_event import ProductType
from .auction_session import AuctionSession, load_checkpoint
from .auction_state import AuctionState
from .errors import AuctionError
from .event_store import AuctionEventStore
from .image_store import ImageStore
from .mystery_effects import EffectType
from .standings_calculator import get_standings_summary

logger = logging.getLogger(__name__)


def build_default_session() -> AuctionSession:
    """
    Create the session used by the running server.

    Resumes from the checkpoint file when one exists, otherwise starts a
    fresh event.
    """
    checkpoint_path = Path(config.STATE_CHECKPOINT_FILE)

    if checkpoint_path.exists():
        state = load_checkpoint(checkpoint_path)
    else:
        logger.info("Starting fresh auction event")
        state = AuctionState()

    return AuctionSession(
        state=state,
        event_store=AuctionEventStore(Path(config.AUCTION_EVENTS_FILE)),
        checkpoint_path=checkpoint_path,
        results_dir=Path(config.OUTPUT_DIR)
    )


def _http_error(action: str, e: Exception) -> HTTPException:
    """Translate an exception raised while handling a command."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, AuctionError):
        logger.warning(f"Cannot {action}: {e}")
        return HTTPException(status_code=e.status_code, detail=str(e))
    if isinstance(e, ValueError):
        logger.warning(f"Cannot {action}: {e}")
        return HTTPException(status_code=400, detail=str(e))

    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Failed to {action}: {e}")


def create_app(
    session: Optional[AuctionSession] = None,
    admin_policy: Optional[AdminPolicy] = None,
    upload_dir: Optional[Path] = None
) -> FastAPI:
    """
    Build the FastAPI application around one auction session.

    Args:
        session: Auction session to serve (default: build_default_session())
        admin_policy: Credential check (default: from config)
        upload_dir: Directory for uploaded images (default: config.UPLOADS_DIR)

    Returns:
        Configured FastAPI app
    """
    session = session or build_default_session()
    admin_policy = admin_policy or AdminPolicy(config.ADMIN_USERNAME, config.ADMIN_PASSWORD)
    image_store = ImageStore(Path(upload_dir or config.UPLOADS_DIR))

    app = FastAPI(
        title=config.API_TITLE,
        description="Drive a live auction event and push updates to every viewer",
        version=config.API_VERSION
    )
    app.state.session = session
    app.state.admin_policy = admin_policy

    # CORS middleware for web UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount(
        config.UPLOADS_URL_PREFIX,
        StaticFiles(directory=image_store.upload_dir),
        name="uploads"
    )

    def require_admin(
        admin_token: Optional[str] = Header(None, alias=config.ADMIN_TOKEN_HEADER)
    ) -> None:
        try:
            admin_policy.verify(admin_token)
        except AuctionError as e:
            raise _http_error("authorize admin request", e)

    admin = [Depends(require_admin)]

    # ===== Admin =====

    @app.post("/api/admin/login", response_model=AdminLoginResponse)
    def admin_login(request: AdminLoginRequest):
        """Exchange admin credentials for a token sent in the admin header."""
        try:
            return AdminLoginResponse(token=admin_policy.login(request.username, request.password))
        except Exception as e:
            raise _http_error("log in", e)

    @app.post("/api/admin/logout", response_model=MessageResponse)
    def admin_logout(
        admin_token: Optional[str] = Header(None, alias=config.ADMIN_TOKEN_HEADER)
    ):
        """Revoke the token sent in the admin header."""
        if admin_token:
            admin_policy.logout(admin_token)
        return MessageResponse(message="Logged out")

    # ===== Teams =====

    @app.get("/api/teams", response_model=List[TeamResponse])
    def list_teams():
        """All teams sorted by points descending."""
        return [team.to_dict() for team in session.list_teams()]

    @app.post("/api/teams", response_model=TeamResponse, dependencies=admin)
    async def create_team(request: CreateTeamRequest):
        """
        Register a team.

        Raises:
            400 Bad Request: If the team name already exists
        """
        try:
            team = await session.create_team(request.team_name)
            return team.to_dict()
        except Exception as e:
            raise _http_error("create team", e)

    @app.get("/api/teams/{team_name}", response_model=TeamResponse)
    def get_team(team_name: str):
        """Verify a team exists (used by the player view to log in)."""
        try:
            return session.get_team(team_name).to_dict()
        except Exception as e:
            raise _http_error("get team", e)

    @app.delete("/api/teams/{team_name}", response_model=MessageResponse, dependencies=admin)
    async def delete_team(team_name: str):
        try:
            await session.delete_team(team_name)
            return MessageResponse(message="Team deleted successfully")
        except Exception as e:
            raise _http_error("delete team", e)

    # ===== Products =====

    @app.get("/api/products")
    def list_products():
        """All products, newest first."""
        return [product.to_dict() for product in session.list_products()]

    @app.post("/api/products", dependencies=admin)
    async def add_product(
        name: str = Form(...),
        description: str = Form(...),
        baseMoneyPrice: int = Form(0),
        pointValue: int = Form(...),
        productType: ProductType = Form(ProductType.NORMAL),
        isMystery: bool = Form(False),
        image: UploadFile = File(...)
    ):
        """
        Add a product from the admin form (multipart, image required).

        The stored image is removed again if the product is rejected.
        """
        image_url = None
        try:
            image_url = await image_store.save(image)
            if image_url is None:
                raise ValueError("Product image is required")
            product = await session.add_product(
                name=name,
                description=description,
                base_money_price=baseMoneyPrice,
                point_value=pointValue,
                product_type=productType,
                is_mystery=isMystery,
                image_url=image_url
            )
            return product.to_dict()
        except Exception as e:
            image_store.discard(image_url)
            raise _http_error("add product", e)

    @app.put("/api/products/{product_id}", dependencies=admin)
    async def update_product(
        product_id: str,
        name: str = Form(...),
        description: str = Form(...),
        baseMoneyPrice: int = Form(0),
        pointValue: int = Form(...),
        productType: ProductType = Form(ProductType.NORMAL),
        isMystery: bool = Form(False),
        image: Optional[UploadFile] = File(None)
    ):
        """Edit a product. The image is replaced only if a new one is sent."""
        image_url = None
        try:
            session.state.catalog.get_product(product_id)
            image_url = await image_store.save(image)
            product = await session.update_product(
                product_id,
                name=name,
                description=description,
                base_money_price=baseMoneyPrice,
                point_value=pointValue,
                product_type=productType,
                is_mystery=isMystery,
                image_url=image_url
            )
            return product.to_dict()
        except Exception as e:
            image_store.discard(image_url)
            raise _http_error("update product", e)

    @app.delete("/api/products/{product_id}", response_model=MessageResponse, dependencies=admin)
    async def delete_product(product_id: str):
        try:
            await session.delete_product(product_id)
            return MessageResponse(message="Product deleted successfully")
        except Exception as e:
            raise _http_error("delete product", e)

    # ===== Auction lifecycle =====

    @app.post("/api/products/{product_id}/current", response_model=MessageResponse, dependencies=admin)
    @app.post("/api/products/{product_id}/live", response_model=MessageResponse, dependencies=admin)
    async def set_current_product(product_id: str):
        """
        Open a product for bidding.

        Any other current product goes back to pending.

        Raises:
            404 Not Found: If the product does not exist
        """
        try:
            await session.set_current(product_id)
            return MessageResponse(message="Product set as current")
        except Exception as e:
            raise _http_error("set current product", e)

    @app.post("/api/products/{product_id}/sold", dependencies=admin)
    async def mark_product_sold(product_id: str, request: MarkSoldRequest):
        """
        Award the product to the winning team.

        Raises:
            404 Not Found: If the product or the team does not exist
        """
        try:
            outcome = await session.mark_sold(product_id, request.winner_team)
            return {
                'message': "Product marked as sold and rewards awarded",
                **outcome.to_dict()
            }
        except Exception as e:
            raise _http_error("mark product sold", e)

    # ===== Countdown =====

    @app.post("/api/showcase/start", response_model=MessageResponse, dependencies=admin)
    async def start_showcase(request: CountdownStartRequest):
        try:
            await session.start_countdown('showcase', request.duration)
            return MessageResponse(message="Showcase started successfully")
        except Exception as e:
            raise _http_error("start showcase", e)

    @app.post("/api/preview/start", response_model=MessageResponse, dependencies=admin)
    async def start_preview(request: CountdownStartRequest):
        try:
            await session.start_countdown('preview', request.duration)
            return MessageResponse(message="Preview started successfully")
        except Exception as e:
            raise _http_error("start preview", e)

    @app.get("/api/showcase/state", response_model=CountdownStateResponse)
    @app.get("/api/preview/state", response_model=CountdownStateResponse)
    def get_countdown_state():
        """The shared countdown (showcase and preview use the same one)."""
        return session.countdown_state().to_dict()

    # ===== Mystery effects =====

    @app.post("/api/mystery-effect", response_model=EffectResponse, dependencies=admin)
    async def apply_mystery_effect(request: MysteryEffectRequest):
        """
        Spend one of the owner's mystery cards on steal, deduct or double.

        Raises:
            400 Bad Request: No cards, self-steal, short target balance
            404 Not Found: If a team does not exist
        """
        try:
            outcome = await session.apply_mystery_effect(
                request.owner_team,
                request.effect,
                target_team=request.target_team,
                points=request.points
            )
            return outcome.to_dict()
        except Exception as e:
            raise _http_error("apply mystery effect", e)

    @app.post("/api/steal-power", response_model=MessageResponse, dependencies=admin)
    async def use_steal_power(request: StealPowerRequest):
        """Legacy steal endpoint; same rules as the steal mystery effect."""
        try:
            await session.apply_mystery_effect(
                request.stealing_team,
                EffectType.STEAL,
                target_team=request.target_team,
                points=request.points_to_steal
            )
            return MessageResponse(message="Points stolen successfully")
        except Exception as e:
            raise _http_error("steal points", e)

    # ===== Display and event =====

    @app.get("/api/display/state")
    def get_display_state():
        return session.display_state()

    @app.post("/api/display/leaderboard", dependencies=admin)
    async def toggle_leaderboard(request: LeaderboardToggleRequest):
        teams = await session.toggle_leaderboard(request.show)
        return {'show': request.show, 'teams': teams}

    @app.post("/api/event/end", response_model=EventEndResponse, dependencies=admin)
    async def end_event():
        """Announce the team with the most points as the winner."""
        try:
            return await session.end_event()
        except Exception as e:
            raise _http_error("end event", e)

    @app.get("/api/event/summary")
    def get_event_summary():
        return get_standings_summary(session.state)

    @app.get("/api/events")
    def get_event_log(limit: Optional[int] = None):
        """Recorded admin actions, oldest first."""
        if session.event_store is None:
            return []
        events = session.event_store.load_all_events()
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return [event.to_dict() for event in events]

    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": config.API_TITLE,
            "version": config.API_VERSION,
            "viewers": len(session.hub.active_connections)
        }

    # ===== Push updates =====

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Send the latest snapshot, then every event until the viewer leaves."""
        await session.hub.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            session.hub.disconnect(websocket)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Auction API server started")
        logger.info(
            f"{len(session.state.ledger)} teams, {len(session.state.catalog)} products loaded"
        )
        if not admin_policy.enabled:
            logger.warning("No admin password configured; admin endpoints are open")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop the countdown and checkpoint on shutdown."""
        logger.info("Auction API server shutting down")
        try:
            await session.shutdown()
        except Exception as e:
            logger.error(f"Error stopping session during shutdown: {e}")

    return app
