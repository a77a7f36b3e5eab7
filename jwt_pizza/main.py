import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jwt_pizza.core.config import Settings, load_settings
from jwt_pizza.core.database import Database
from jwt_pizza.core.errors import ConflictError, register_exception_handlers
from jwt_pizza.core.identity import Role, RoleAssignment
from jwt_pizza.core.logging_setup import configure_logging
from jwt_pizza.core.metrics import InMemoryRequestMetrics, PizzaMetrics
from jwt_pizza.deps import get_settings
from jwt_pizza.middleware.auth_session import AuthSessionMiddleware
from jwt_pizza.middleware.observability import ObservabilityMiddleware
from jwt_pizza.routers.auth import router as auth_router
from jwt_pizza.routers.franchise import router as franchise_router
from jwt_pizza.routers.internal_metrics import router as internal_metrics_router
from jwt_pizza.routers.order import router as order_router
from jwt_pizza.services.auth_session import AuthSessionManager
from jwt_pizza.services.franchises import FranchiseStore
from jwt_pizza.services.fulfillment import FulfillmentClient
from jwt_pizza.services.menu import MenuStore
from jwt_pizza.services.order_workflow import OrderWorkflow
from jwt_pizza.services.orders import OrderStore
from jwt_pizza.services.sessions import SessionStore
from jwt_pizza.services.tokens import TokenCodec
from jwt_pizza.services.users import UserStore

configure_logging()

logger = logging.getLogger(__name__)
BOOTSTRAP_PREFIX = "[ADMIN_BOOTSTRAP]"

# catálogo devolvido por GET /api/docs
ENDPOINTS = [
    {"method": "POST", "path": "/api/auth", "description": "Register a new user", "requiresAuth": False},
    {"method": "PUT", "path": "/api/auth", "description": "Login existing user", "requiresAuth": False},
    {"method": "PUT", "path": "/api/auth/:userId", "description": "Update user", "requiresAuth": True},
    {"method": "DELETE", "path": "/api/auth", "description": "Logout a user", "requiresAuth": True},
    {"method": "GET", "path": "/api/order/menu", "description": "Get the pizza menu", "requiresAuth": False},
    {"method": "PUT", "path": "/api/order/menu", "description": "Add an item to the menu", "requiresAuth": True},
    {"method": "GET", "path": "/api/order", "description": "Get the orders for the authenticated user", "requiresAuth": True},
    {"method": "POST", "path": "/api/order", "description": "Create a order for the authenticated user", "requiresAuth": True},
    {"method": "GET", "path": "/api/franchise", "description": "List all the franchises", "requiresAuth": False},
    {"method": "GET", "path": "/api/franchise/:userId", "description": "List a user's franchises", "requiresAuth": True},
    {"method": "POST", "path": "/api/franchise", "description": "Create a new franchise", "requiresAuth": True},
    {"method": "DELETE", "path": "/api/franchise/:franchiseId", "description": "Delete a franchise", "requiresAuth": True},
    {"method": "POST", "path": "/api/franchise/:franchiseId/store", "description": "Create a new franchise store", "requiresAuth": True},
    {"method": "DELETE", "path": "/api/franchise/:franchiseId/store/:storeId", "description": "Delete a store", "requiresAuth": True},
]


def _bootstrap_initial_admin(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    if not settings.default_admin_password:
        logger.info("%s skipped: configure DEFAULT_ADMIN_PASSWORD.", BOOTSTRAP_PREFIX)
        return

    users: UserStore = app.state.user_store
    existing = users.find_user_by_email(settings.default_admin_email)
    if existing is not None:
        logger.info("%s exists id=%s email=%s", BOOTSTRAP_PREFIX, existing.id, existing.email)
        return

    try:
        admin = users.add_user(
            name=settings.default_admin_name,
            email=settings.default_admin_email,
            password=settings.default_admin_password,
            roles=[RoleAssignment(Role.ADMIN)],
        )
    except ConflictError:
        # outro worker criou primeiro
        logger.info("%s created concurrently email=%s", BOOTSTRAP_PREFIX, settings.default_admin_email)
        return
    logger.info("%s created success id=%s email=%s", BOOTSTRAP_PREFIX, admin.id, admin.email)


def _startup_tasks(app: FastAPI) -> None:
    try:
        if app.state.settings.create_tables_on_startup:
            app.state.database.create_all()
        _bootstrap_initial_admin(app)
    except Exception:
        logger.exception("%s ERROR startup failed", BOOTSTRAP_PREFIX)
        raise


def _shutdown_tasks(app: FastAPI) -> None:
    app.state.fulfillment.close()
    app.state.database.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _startup_tasks(app)
    yield
    _shutdown_tasks(app)


def _build_services(
    app: FastAPI,
    settings: Settings,
    database: Database,
    fulfillment: FulfillmentClient,
) -> None:
    request_metrics = InMemoryRequestMetrics()
    pizza_metrics = PizzaMetrics()

    user_store = UserStore(database)
    session_store = SessionStore(database)
    menu_store = MenuStore(database)
    order_store = OrderStore(database, list_per_page=settings.list_per_page)
    franchise_store = FranchiseStore(database)
    codec = TokenCodec(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.fulfillment = fulfillment
    app.state.request_metrics = request_metrics
    app.state.pizza_metrics = pizza_metrics
    app.state.user_store = user_store
    app.state.session_store = session_store
    app.state.menu_store = menu_store
    app.state.order_store = order_store
    app.state.franchise_store = franchise_store
    app.state.auth_manager = AuthSessionManager(user_store, session_store, codec, metrics=pizza_metrics)
    app.state.order_workflow = OrderWorkflow(order_store, fulfillment, pizza_metrics)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    fulfillment: Optional[FulfillmentClient] = None,
) -> FastAPI:
    settings = settings or load_settings()
    database = database or Database(settings.database_url)
    fulfillment = fulfillment or FulfillmentClient(
        settings.factory_url,
        settings.factory_api_key,
        timeout=settings.factory_timeout_seconds,
    )

    app = FastAPI(
        title="JWT Pizza Service",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    _build_services(app, settings, database, fulfillment)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    # o último adicionado é o mais externo: observability envolve a autenticação
    app.add_middleware(AuthSessionMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(order_router)
    app.include_router(franchise_router)
    app.include_router(internal_metrics_router)

    @app.get("/")
    def root(current: Settings = Depends(get_settings)):
        return {"message": "welcome to JWT Pizza", "version": current.app_version}

    @app.get("/api/docs")
    def api_docs(current: Settings = Depends(get_settings)):
        return {
            "version": current.app_version,
            "endpoints": ENDPOINTS,
            "config": {"factory": current.factory_url},
        }

    return app


app = create_app()
