"""Dependency wiring helpers."""

from fastapi import FastAPI

from .config import AppConfig
from .notifications.notifications_api import router as push_router
from .notifications.notifications_models import TargetKind
from .notifications.notifications_senders import EmailSender, PushSender
from .notifications.notifications_service import ExpirySweeper
from .products.products_api import router as expiry_router
from .products.products_repository import ProductRepository
from .products.products_service import ExpiryResolver
from .providers.providers_factory import create_image_finder, create_oracle


def build_sweeper(config: AppConfig, repo: ProductRepository) -> ExpirySweeper:
    """Create the sweeper with senders for every supported channel."""
    senders = {
        TargetKind.EMAIL: EmailSender(
            user=config.email.user,
            password=config.email.password,
            smtp_host=config.email.smtp_host,
            smtp_port=config.email.smtp_port,
        ),
        TargetKind.PUSH: PushSender(
            private_key=config.push.private_key,
            contact=config.push.contact,
        ),
    }
    return ExpirySweeper(repo, config.sweep.targets, senders)


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    product_repo = ProductRepository(config.session_factory)
    resolver = ExpiryResolver(
        repo=product_repo,
        oracle=create_oracle(config.oracle),
        image_finder=create_image_finder(config.image_search),
    )

    app.state.config = config
    app.state.product_repo = product_repo
    app.state.expiry_resolver = resolver
    app.state.expiry_sweeper = build_sweeper(config, product_repo)

    app.include_router(expiry_router)
    app.include_router(push_router)
