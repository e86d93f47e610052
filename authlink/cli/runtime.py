"""Shared plumbing for CLI commands that talk to the identity backend."""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable, Iterable

from authlink.application.di import create_container
from authlink.cli.console import get_console
from authlink.config import Config, configure_logging
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import LinkResult
from authlink.domain.linking.port.authorizer import Authorizer
from authlink.domain.linking.service.linking import AccountLinkingService
from authlink.domain.shared.error import FatalError
from authlink.infrastructure.auth.authorizer import PresetAuthorizer
from authlink.util.di.scope import Scope

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_FATAL = 2

Action = Callable[[AccountLinkingService], Awaitable[LinkResult]]


def load_config() -> Config:
    """Load config from env/YAML and configure logging."""
    config = Config()
    configure_logging(config.logging)
    return config


def cli_user(uid: str, id_token: str | None, linked: Iterable[str] = ()) -> User:
    return User.create(uid, providers=linked, id_token=id_token)


async def run_linking(config: Config, user: User, action: Action) -> LinkResult:
    """Run `action` against a linking service for `user`."""
    container = create_container(config)
    try:
        context = {User: user, Authorizer: PresetAuthorizer()}
        async with container(context, scope=Scope.REQUEST) as request:
            service = await request.get(AccountLinkingService)
            return await action(service)
    finally:
        await container.close()


def execute(user: User, action: Action, *, verb: str) -> LinkResult:
    """Run a link/unlink action and report it. Exits non-zero on failure."""
    console = get_console()
    config = load_config()

    if not config.backend.enabled:
        console.info("No backend API key configured: dry run against the in-memory backend")

    try:
        result = asyncio.run(run_linking(config, user, action))
    except FatalError as e:
        logger.critical("Aborting: %s (%s)", e.message, e.code)
        console.error(e.message, hint=e.code)
        sys.exit(EXIT_FATAL)

    console.link_result(result, action=verb)
    if not result.success:
        sys.exit(EXIT_FAILED)
    return result
