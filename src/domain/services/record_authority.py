"""Record authority: ownership-checked operations on profiles and posts."""

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

import structlog

from core.exceptions import (
    AddressDerivationError,
    AddressMismatchError,
    AppException,
    ContentTooLongError,
    CounterOverflowError,
    HandleTooLongError,
    RecordNotFoundError,
    TitleTooLongError,
    UnauthorizedError,
)
from domain.entities.address import Address
from domain.entities.post import MAX_CONTENT_LEN, MAX_TITLE_LEN, Post
from domain.entities.profile import MAX_HANDLE_LEN, Profile
from domain.entities.record import U64_MAX, RecordHandle, text_length
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.address_deriver import (
    POST_NAMESPACE,
    PROFILE_NAMESPACE,
    AddressDeriver,
    encode_sequence_id,
)

logger = structlog.get_logger()

T = TypeVar("T")

# A predicate and the error raised when it does not hold.
Check = tuple[Callable[[], bool], Callable[[], AppException]]


def enforce(operation: str, checks: Iterable[Check]) -> None:
    """Evaluate checks in order, raising the error of the first that fails."""
    for predicate, error in checks:
        if not predicate():
            exc = error()
            logger.info(
                "operation_rejected",
                operation=operation,
                error_code=exc.error_code.value,
            )
            raise exc


def within(value: str, limit: int, error: Callable[[int, int], AppException]) -> Check:
    """Check that ``value`` fits in ``limit`` UTF-8 bytes."""
    return (
        lambda: text_length(value) <= limit,
        lambda: error(text_length(value), limit),
    )


class RecordAuthority:
    """Service layer for profile and post records.

    Every operation runs in its own unit of work. All checks run before the
    first write, and any error rolls the unit of work back, so a failed call
    leaves the stored bytes untouched.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        deriver: AddressDeriver,
    ) -> None:
        self._uow_factory = uow_factory
        self._deriver = deriver

    # --- Profile operations ---

    async def initialize_profile(
        self, caller: Address, profile_ref: Address | None = None
    ) -> Profile:
        """Create the caller's profile at its derived address."""
        derived = self._deriver.profile_address(caller)
        presented = derived.address if profile_ref is None else profile_ref
        enforce(
            "initialize_profile",
            [
                (
                    lambda: presented == derived.address,
                    lambda: AddressMismatchError(str(presented), str(derived.address)),
                ),
            ],
        )

        async with self._uow_factory() as uow:
            handle = await uow.records.create(derived.address, Profile.SPACE, payer=caller)
            profile = Profile(owner=caller, derivation_nonce=derived.nonce)
            await uow.records.write(handle, profile.to_bytes())
            await uow.commit()

        logger.info("profile_initialized", owner=str(caller), address=str(derived.address))
        return profile

    async def set_handle(
        self, caller: Address, new_handle: str, profile_ref: Address | None = None
    ) -> Profile:
        """Replace the display handle of the caller's profile."""
        profile_ref = self._resolve_profile_ref(caller, profile_ref)

        async with self._uow_factory() as uow:
            handle, profile = await self._load(uow, profile_ref, Profile.from_bytes)
            enforce(
                "set_handle",
                [
                    *self._profile_checks(caller, profile_ref, profile),
                    within(new_handle, MAX_HANDLE_LEN, HandleTooLongError),
                ],
            )

            profile.handle = new_handle
            await uow.records.write(handle, profile.to_bytes())
            await uow.commit()

        logger.info("handle_set", owner=str(caller), address=str(profile_ref))
        return profile

    async def get_profile(self, owner: Address) -> Profile:
        """Fetch the profile stored at the owner's derived address."""
        async with self._uow_factory() as uow:
            address = self._deriver.profile_address(owner).address
            _, profile = await self._load(uow, address, Profile.from_bytes)
            return profile

    # --- Post operations ---

    async def create_post(
        self,
        caller: Address,
        title: str,
        content: str,
        profile_ref: Address | None = None,
        post_ref: Address | None = None,
    ) -> Post:
        """Create the next post for the caller's profile.

        The post's sequence id is the profile's current ``post_count``,
        which is then advanced. Sequence ids are never reissued.
        """
        profile_ref = self._resolve_profile_ref(caller, profile_ref)

        async with self._uow_factory() as uow:
            profile_handle, profile = await self._load(uow, profile_ref, Profile.from_bytes)

            def next_address() -> Address:
                return self._deriver.post_address(profile_ref, profile.post_count).address

            enforce(
                "create_post",
                [
                    *self._profile_checks(caller, profile_ref, profile),
                    (
                        lambda: post_ref is None or post_ref == next_address(),
                        lambda: AddressMismatchError(str(post_ref), str(next_address())),
                    ),
                    within(title, MAX_TITLE_LEN, TitleTooLongError),
                    within(content, MAX_CONTENT_LEN, ContentTooLongError),
                    (lambda: profile.post_count < U64_MAX, CounterOverflowError),
                ],
            )

            sequence_id = profile.issue_sequence_id()
            derived = self._deriver.post_address(profile_ref, sequence_id)
            post_handle = await uow.records.create(derived.address, Post.SPACE, payer=caller)
            post = Post(
                owner=profile.owner,
                profile_ref=profile_ref,
                sequence_id=sequence_id,
                title=title,
                content=content,
                derivation_nonce=derived.nonce,
            )
            await uow.records.write(post_handle, post.to_bytes())
            await uow.records.write(profile_handle, profile.to_bytes())
            await uow.commit()

        logger.info(
            "post_created",
            owner=str(caller),
            address=str(derived.address),
            sequence_id=sequence_id,
        )
        return post

    async def update_post(
        self,
        caller: Address,
        post_ref: Address,
        new_title: str,
        new_content: str,
        profile_ref: Address | None = None,
    ) -> Post:
        """Replace a post's title and content. Owner and sequence id are fixed."""
        profile_ref = self._resolve_profile_ref(caller, profile_ref)

        async with self._uow_factory() as uow:
            _, profile = await self._load(uow, profile_ref, Profile.from_bytes)
            post_handle, post = await self._load(uow, post_ref, Post.from_bytes)
            enforce(
                "update_post",
                [
                    *self._profile_checks(caller, profile_ref, profile),
                    *self._post_checks(caller, profile_ref, post_ref, post),
                    within(new_title, MAX_TITLE_LEN, TitleTooLongError),
                    within(new_content, MAX_CONTENT_LEN, ContentTooLongError),
                ],
            )

            post.title = new_title
            post.content = new_content
            await uow.records.write(post_handle, post.to_bytes())
            await uow.commit()

        logger.info("post_updated", owner=str(caller), address=str(post_ref))
        return post

    async def delete_post(
        self,
        caller: Address,
        post_ref: Address,
        profile_ref: Address | None = None,
    ) -> int:
        """Close a post and refund its deposit to the caller.

        The profile's ``post_count`` is left as is, so the post's address
        is never derived again.
        """
        profile_ref = self._resolve_profile_ref(caller, profile_ref)

        async with self._uow_factory() as uow:
            _, profile = await self._load(uow, profile_ref, Profile.from_bytes)
            post_handle, post = await self._load(uow, post_ref, Post.from_bytes)
            enforce(
                "delete_post",
                [
                    *self._profile_checks(caller, profile_ref, profile),
                    *self._post_checks(caller, profile_ref, post_ref, post),
                ],
            )

            refund = await uow.records.close(post_handle, refund_to=caller)
            await uow.commit()

        logger.info(
            "post_deleted",
            owner=str(caller),
            address=str(post_ref),
            sequence_id=post.sequence_id,
            refund=refund,
        )
        return refund

    async def get_post(self, post_ref: Address) -> Post:
        """Fetch a live post."""
        async with self._uow_factory() as uow:
            _, post = await self._load(uow, post_ref, Post.from_bytes)
            return post

    # --- Shared validation ---

    def _resolve_profile_ref(self, caller: Address, profile_ref: Address | None) -> Address:
        if profile_ref is None:
            return self._deriver.profile_address(caller).address
        return profile_ref

    async def _load(
        self,
        uow: IUnitOfWork,
        address: Address,
        decode: Callable[[bytes], T],
    ) -> tuple[RecordHandle, T]:
        handle = await uow.records.get(address)
        if handle is None:
            raise RecordNotFoundError(str(address))
        return handle, decode(await uow.records.read(handle))

    def _rederive(
        self, namespace: bytes, key_parts: Sequence[bytes], nonce: int
    ) -> Address | None:
        try:
            return self._deriver.address_for(namespace, key_parts, nonce)
        except AddressDerivationError:
            return None

    def _profile_checks(
        self, caller: Address, profile_ref: Address, profile: Profile
    ) -> list[Check]:
        def expected() -> Address | None:
            return self._rederive(
                PROFILE_NAMESPACE, [profile.owner.value], profile.derivation_nonce
            )

        return [
            (
                lambda: expected() == profile_ref,
                lambda: AddressMismatchError(str(profile_ref), str(expected())),
            ),
            (lambda: profile.owner == caller, UnauthorizedError),
        ]

    def _post_checks(
        self, caller: Address, profile_ref: Address, post_ref: Address, post: Post
    ) -> list[Check]:
        def expected() -> Address | None:
            return self._rederive(
                POST_NAMESPACE,
                [post.profile_ref.value, encode_sequence_id(post.sequence_id)],
                post.derivation_nonce,
            )

        return [
            (
                lambda: expected() == post_ref,
                lambda: AddressMismatchError(str(post_ref), str(expected())),
            ),
            (lambda: post.owner == caller, UnauthorizedError),
            (
                lambda: post.profile_ref == profile_ref,
                lambda: UnauthorizedError("Post does not belong to this profile"),
            ),
        ]
