"""Account linking state machine."""

import hmac
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import field

import logfire

from authlink.domain.linking.event import LinkFailed, LinkSucceeded, UnlinkFailed, UnlinkSucceeded
from authlink.domain.linking.model.challenge import PendingChallenge
from authlink.domain.linking.model.credential import (
    Credential,
    OAuthCredential,
    email_password_credential,
    oauth_credential,
)
from authlink.domain.linking.model.provider import AuthProvider
from authlink.domain.linking.model.user import User
from authlink.domain.linking.model.value import LinkResult, LinkRow, LinkState
from authlink.domain.linking.port.auth_backend import AuthBackend
from authlink.domain.linking.port.authorizer import (
    AppleIDCredential,
    Authorization,
    AuthorizationRequest,
    Authorizer,
    Scope,
)
from authlink.domain.linking.service.digest import digest
from authlink.domain.linking.service.identity_token import decode_identity_token, peek_nonce_claim
from authlink.domain.linking.service.nonce import DEFAULT_NONCE_LENGTH, NonceGenerator
from authlink.domain.linking.service.registry import LinkProcedure, ProviderRegistry
from authlink.domain.shared.error import (
    BackendError,
    ErrorKind,
    ExternalAuthError,
    InternalSequencingError,
    InvalidStateError,
    LinkingError,
    NonceMismatchError,
)
from authlink.domain.shared.port.event_bus import EventBus
from authlink.domain.shared.service import Service

logger = logging.getLogger(__name__)

APPLE_PROVIDER_ID = AuthProvider.APPLE.provider_id

PasswordPrompt = Callable[[], Awaitable[tuple[str, str] | None]]
"""Asks the user for (email, password); returns None if the user cancels."""


class AccountLinkingService(Service):
    """Links and unlinks auth providers for one signed-in user.

    - select_provider: Entry point for the linking screen (unlink if checked, link otherwise)
    - begin_apple_link: Nonce handshake with Sign in with Apple, then link
    - begin_password_link: Link an email/password credential
    - link_account / unlink: Backend calls; the user's provider data is only
      replaced with what the backend confirms

    Recoverable failures come back as failed LinkResults and are published as
    LinkFailed / UnlinkFailed events. RandomSourceFailure and
    InternalSequencingError propagate to the caller.

    At most one Apple challenge is pending. Starting a new Apple link replaces
    it, and completions for older challenge IDs are rejected as stale.
    """

    _user: User
    _backend: AuthBackend
    _authorizer: Authorizer
    _registry: ProviderRegistry
    _nonce_generator: NonceGenerator
    _event_bus: EventBus
    _nonce_length: int = DEFAULT_NONCE_LENGTH
    _scopes: tuple[Scope, ...] = (Scope.FULL_NAME, Scope.EMAIL)

    _state: LinkState = field(default=LinkState.IDLE, init=False)
    _pending: PendingChallenge | None = field(default=None, init=False)
    _last_challenge_id: int = field(default=0, init=False)
    _in_flight: set[str] = field(default_factory=set, init=False)

    @property
    def user(self) -> User:
        return self._user

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def pending_challenge(self) -> PendingChallenge | None:
        return self._pending

    # -------------------------------------------------------------------------
    # Projection
    # -------------------------------------------------------------------------

    def list_linkable(self) -> list[LinkRow]:
        """Rows for the linking screen, computed from the current provider data."""
        return self._registry.list_linkable(self._user)

    async def refresh(self) -> list[LinkRow]:
        """Re-read the provider list from the backend and project it."""
        providers = await self._backend.get_provider_data(self._user)
        self._user.replace_provider_data(providers)
        return self.list_linkable()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    async def select_provider(
        self,
        row: LinkRow,
        password_prompt: PasswordPrompt | None = None,
    ) -> LinkResult | None:
        """Handle a tap on a linking-screen row.

        Returns None when the selection has no affiliated action (unknown
        provider, provider without a link procedure, cancelled prompt).
        """
        provider = self._registry.resolve(row.provider_id) or self._registry.resolve(row.title)
        if provider is None:
            logger.debug("Selected row has no affiliated provider: %s", row.title)
            return None

        if row.is_checked:
            return await self.unlink(provider.provider_id)

        procedure = self._registry.link_procedure(provider)
        if procedure is LinkProcedure.APPLE:
            return await self.begin_apple_link()

        if procedure is LinkProcedure.PASSWORD:
            if password_prompt is None:
                logger.debug("No password prompt available, ignoring selection")
                return None
            answer = await password_prompt()
            if answer is None:
                return None
            email, password = answer
            return await self.begin_password_link(email, password)

        logger.info("No linking procedure for provider %s", provider.provider_id)
        return None

    # -------------------------------------------------------------------------
    # Sign in with Apple
    # -------------------------------------------------------------------------

    def issue_challenge(self) -> PendingChallenge:
        """Generate a nonce and make it the pending challenge.

        Any unconsumed previous challenge is discarded.

        Raises:
            RandomSourceFailure: If no nonce can be generated
        """
        nonce = self._nonce_generator.generate(self._nonce_length)

        if self._pending is not None:
            logger.info(
                "Discarding unconsumed challenge %d in favour of a new one",
                self._pending.challenge_id,
            )

        self._last_challenge_id += 1
        self._pending = PendingChallenge(
            challenge_id=self._last_challenge_id,
            nonce=nonce,
            hashed_nonce=digest(nonce),
        )
        self._state = LinkState.CHALLENGE_ISSUED
        logger.debug("Issued challenge %d", self._last_challenge_id)
        return self._pending

    async def begin_apple_link(self) -> LinkResult:
        """Run the Sign in with Apple handshake and link the resulting credential.

        Raises:
            InvalidStateError: If an Apple link or unlink is already in flight
        """
        self._ensure_not_in_flight(APPLE_PROVIDER_ID)
        challenge = self.issue_challenge()
        request = AuthorizationRequest(
            challenge_id=challenge.challenge_id,
            scopes=self._scopes,
            nonce=challenge.hashed_nonce,
        )

        try:
            authorization = await self._authorizer.authorize(request)
        except ExternalAuthError as e:
            return await self.fail_apple_authorization(challenge.challenge_id, e)

        return await self.complete_apple_authorization(challenge.challenge_id, authorization)

    async def complete_apple_authorization(
        self,
        challenge_id: int,
        authorization: Authorization,
    ) -> LinkResult:
        """Exchange a completed authorization for a credential and link it.

        Raises:
            InternalSequencingError: If `challenge_id` was never issued or its
                nonce was already consumed
            InvalidStateError: If an Apple link or unlink is already in flight.
                The challenge stays pending.
        """
        if self._is_stale(challenge_id):
            return self._reject_stale(challenge_id)

        pending = self._current_pending()
        self._ensure_not_in_flight(APPLE_PROVIDER_ID)

        try:
            credential = self._exchange(pending, authorization)
        except LinkingError as e:
            logger.warning("Apple authorization unusable: %s (%s)", e.message, e.code)
            self._pending = None
            self._state = LinkState.FAILED
            await self._event_bus.publish(
                LinkFailed(
                    uid=self._user.uid,
                    provider_id=APPLE_PROVIDER_ID,
                    kind=e.kind,
                    message=e.message,
                )
            )
            return LinkResult.failed(APPLE_PROVIDER_ID, e.kind, e.message, e.code)

        return await self.link_account(credential)

    async def fail_apple_authorization(
        self,
        challenge_id: int,
        error: ExternalAuthError,
    ) -> LinkResult:
        """Record that the external authorization for `challenge_id` failed. No retry.

        Raises:
            InternalSequencingError: If `challenge_id` was never issued or its
                nonce was already consumed
        """
        if self._is_stale(challenge_id):
            return self._reject_stale(challenge_id)

        self._current_pending()
        logger.warning("Sign in with Apple errored: %s (%s)", error.message, error.code)
        self._pending = None
        self._state = LinkState.IDLE
        await self._event_bus.publish(
            LinkFailed(
                uid=self._user.uid,
                provider_id=APPLE_PROVIDER_ID,
                kind=error.kind,
                message=error.message,
            )
        )
        return LinkResult.failed(APPLE_PROVIDER_ID, error.kind, error.message, error.code)

    def _is_stale(self, challenge_id: int) -> bool:
        if challenge_id <= 0 or challenge_id > self._last_challenge_id:
            raise InternalSequencingError(
                f"Invalid state: callback for challenge {challenge_id}, "
                "but no such authorization request was sent",
                code="unknown_challenge",
            )
        return challenge_id < self._last_challenge_id

    def _current_pending(self) -> PendingChallenge:
        pending = self._pending
        if pending is None or pending.is_consumed:
            raise InternalSequencingError(
                "Invalid state: an authorization callback was received, "
                "but no authorization request is pending",
                code="no_pending_challenge",
            )
        return pending

    def _reject_stale(self, challenge_id: int) -> LinkResult:
        logger.warning(
            "Ignoring completion for stale challenge %d (current is %d)",
            challenge_id,
            self._last_challenge_id,
        )
        return LinkResult.failed(
            APPLE_PROVIDER_ID,
            ErrorKind.STALE_CHALLENGE,
            "Authorization belongs to a superseded request",
            "stale_challenge",
        )

    def _exchange(self, pending: PendingChallenge, authorization: Authorization) -> OAuthCredential:
        apple_credential = authorization.credential
        if not isinstance(apple_credential, AppleIDCredential):
            raise LinkingError(
                "Unable to retrieve AppleIDCredential", code="unsupported_credential"
            )

        id_token = decode_identity_token(apple_credential.identity_token)

        claimed_nonce = peek_nonce_claim(id_token)
        if claimed_nonce is not None and not hmac.compare_digest(
            claimed_nonce, pending.hashed_nonce
        ):
            raise NonceMismatchError(
                "Identity token was issued for a different nonce", code="nonce_mismatch"
            )

        self._state = LinkState.CREDENTIAL_EXCHANGED
        raw_nonce = pending.consume()
        self._pending = None
        return oauth_credential(APPLE_PROVIDER_ID, id_token, raw_nonce)

    # -------------------------------------------------------------------------
    # Email & password
    # -------------------------------------------------------------------------

    async def begin_password_link(self, email: str, password: str) -> LinkResult:
        """Link an email/password credential. Format checks are left to the backend."""
        credential = email_password_credential(email, password)
        self._ensure_not_in_flight(credential.provider_id)
        self._state = LinkState.CREDENTIAL_EXCHANGED
        return await self.link_account(credential)

    # -------------------------------------------------------------------------
    # Backend calls
    # -------------------------------------------------------------------------

    async def link_account(self, credential: Credential) -> LinkResult:
        """Link `credential` to the user through the backend.

        Raises:
            InvalidStateError: If a backend call for the same provider is in flight
        """
        provider_id = credential.provider_id
        error: BackendError | None = None

        with self._backend_call(provider_id), logfire.span("LinkAccount", provider_id=provider_id):
            try:
                providers = await self._backend.link(self._user, credential)
            except BackendError as e:
                error = e

        if error is not None:
            logger.warning("Linking %s failed: %s (%s)", provider_id, error.message, error.code)
            self._state = LinkState.FAILED
            await self._event_bus.publish(
                LinkFailed(
                    uid=self._user.uid,
                    provider_id=provider_id,
                    kind=error.kind,
                    message=error.message,
                )
            )
            return LinkResult.failed(provider_id, error.kind, error.message, error.code)

        self._user.replace_provider_data(providers)
        self._state = LinkState.LINKED
        logger.info("Linked user %s to auth provider: %s", self._user.uid, provider_id)
        await self._event_bus.publish(LinkSucceeded(uid=self._user.uid, provider_id=provider_id))
        return LinkResult.ok(provider_id)

    async def unlink(self, provider_id: str) -> LinkResult:
        """Unlink `provider_id` from the user. On failure nothing changes locally.

        Raises:
            InvalidStateError: If a backend call for the same provider is in flight
        """
        error: BackendError | None = None

        with self._backend_call(provider_id), logfire.span(
            "UnlinkProvider", provider_id=provider_id
        ):
            try:
                providers = await self._backend.unlink(self._user, provider_id)
            except BackendError as e:
                error = e

        if error is not None:
            logger.warning("Unlinking %s failed: %s (%s)", provider_id, error.message, error.code)
            await self._event_bus.publish(
                UnlinkFailed(
                    uid=self._user.uid,
                    provider_id=provider_id,
                    kind=error.kind,
                    message=error.message,
                )
            )
            return LinkResult.failed(provider_id, error.kind, error.message, error.code)

        self._user.replace_provider_data(p for p in providers if p.provider_id != provider_id)
        self._state = LinkState.UNLINKED
        logger.info("Unlinked user %s from auth provider: %s", self._user.uid, provider_id)
        await self._event_bus.publish(UnlinkSucceeded(uid=self._user.uid, provider_id=provider_id))
        return LinkResult.ok(provider_id)

    def _ensure_not_in_flight(self, provider_id: str) -> None:
        if provider_id in self._in_flight:
            raise InvalidStateError(
                f"A link or unlink for {provider_id} is already in progress",
                code="operation_in_progress",
            )

    @contextmanager
    def _backend_call(self, provider_id: str) -> Iterator[None]:
        self._ensure_not_in_flight(provider_id)
        self._in_flight.add(provider_id)
        try:
            yield
        finally:
            self._in_flight.discard(provider_id)
