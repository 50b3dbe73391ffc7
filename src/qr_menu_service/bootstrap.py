"""Application wiring shared by the local server and the Lambda entry point.

The backend is chosen once, at process start: developer mode runs on the
in-memory store with the dev identity provider, otherwise DynamoDB and
Cognito are used.
"""

import logging
import os
from datetime import timedelta
from typing import Any

import boto3
from fastapi import FastAPI

from qr_menu_service.auth.auth_state import AuthStateNotifier
from qr_menu_service.auth.cognito_provider import CognitoIdentityProvider, GoogleTokenVerifier
from qr_menu_service.auth.dev_provider import DevIdentityProvider
from qr_menu_service.auth.identity_provider import IdentityProvider
from qr_menu_service.auth.session_store import HandoffStore, SessionStore
from qr_menu_service.handlers.api_handler import create_app
from qr_menu_service.repositories.demo_data import seed_demo_data
from qr_menu_service.repositories.document_store import DocumentStore
from qr_menu_service.repositories.dynamodb_store import DynamoDBDocumentStore
from qr_menu_service.repositories.memory_store import InMemoryDocumentStore
from qr_menu_service.repositories.menu_repositories import (
    MenuRepository,
    UserProfileRepository,
    VendorRepository,
    ViewEventRepository,
)
from qr_menu_service.services.analytics_service import AnalyticsService
from qr_menu_service.services.auth_service import AuthService
from qr_menu_service.services.menu_service import MenuService
from qr_menu_service.services.qr_service import QRCodeService

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_BASE_URL = "http://localhost:8001"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def is_dev_mode() -> bool:
    """Developer mode is on when DEV_MODE is set, or when Cognito is not configured."""
    if _env_flag("DEV_MODE"):
        return True

    if not os.getenv("COGNITO_CLIENT_ID"):
        logger.warning("COGNITO_CLIENT_ID is not set, falling back to developer mode")
        return True

    return False


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    return boto3.resource("dynamodb", region_name=region)


def create_document_store(dev_mode: bool) -> DocumentStore:
    """Create the document store for the selected backend.

    In developer mode the in-memory store is seeded with the demo vendor and
    menu unless SEED_DEMO_DATA is false.
    """
    if dev_mode:
        store = InMemoryDocumentStore()
        if _env_flag("SEED_DEMO_DATA", "true"):
            seed_demo_data(store)
        logger.info("Using in-memory document store")
        return store

    table_prefix = os.getenv("DYNAMODB_TABLE_PREFIX", "qr-menu-")
    logger.info(f"Using DynamoDB document store with table prefix {table_prefix}")
    return DynamoDBDocumentStore(get_dynamodb_resource(), table_prefix=table_prefix)


def create_identity_provider(dev_mode: bool) -> IdentityProvider:
    """Create the identity provider for the selected backend.

    Raises:
        ValueError: If Cognito is selected but COGNITO_CLIENT_ID is missing
    """
    if dev_mode:
        return DevIdentityProvider()

    client = boto3.client("cognito-idp", region_name=os.getenv("AWS_REGION", "us-east-1"))
    return CognitoIdentityProvider(
        cognito_client=client,
        client_id=os.getenv("COGNITO_CLIENT_ID", ""),
        user_pool_id=os.getenv("COGNITO_USER_POOL_ID"),
        google_verifier=GoogleTokenVerifier(client_id=os.getenv("GOOGLE_CLIENT_ID")),
    )


def build_application(store: DocumentStore, identity_provider: IdentityProvider) -> FastAPI:
    """Wire repositories and services onto a store and provider and create the app."""
    view_event_repository = ViewEventRepository(store)
    session_ttl = timedelta(hours=int(os.getenv("SESSION_TTL_HOURS", "168")))

    auth_service = AuthService(
        identity_provider=identity_provider,
        session_store=SessionStore(store, ttl=session_ttl),
        handoff_store=HandoffStore(store),
        vendor_repository=VendorRepository(store),
        user_repository=UserProfileRepository(store),
        notifier=AuthStateNotifier(),
    )

    return create_app(
        menu_service=MenuService(MenuRepository(store), view_event_repository),
        analytics_service=AnalyticsService(view_event_repository),
        auth_service=auth_service,
        qr_service=QRCodeService(os.getenv("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL)),
        cookie_secure=_env_flag("COOKIE_SECURE"),
    )


def create_application() -> FastAPI:
    """Select the backend from the environment and build the app on it."""
    dev_mode = is_dev_mode()
    app = build_application(create_document_store(dev_mode), create_identity_provider(dev_mode))
    logger.info(f"QR menu service initialized ({'developer' if dev_mode else 'production'} mode)")
    return app
