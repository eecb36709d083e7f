import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from trustbadges.core.cache import InMemoryCache, SETTINGS_LIST_KEY, group_cache_key
from trustbadges.core.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ProtectedGroupError,
    ValidationError,
)
from trustbadges.repositories.unit_of_work import AbstractUnitOfWork
from trustbadges.schemas.badge_group import BadgeGroup
from trustbadges.schemas.badge_settings import normalize
from trustbadges.services.settings_normalizer import SettingsNormalizer, incoming_id

logger = logging.getLogger(__name__)

DEFAULT_GROUPS = (
    BadgeGroup(
        id="product_page",
        name="Product Page",
        is_default=True,
        is_active=True,
        settings=normalize({"showAfterAddToCart": True}),
    ),
    BadgeGroup(
        id="checkout",
        name="Checkout",
        is_default=True,
        is_active=True,
        settings=normalize({"headerText": "Secure Payment Methods", "showOnCheckout": True}),
    ),
    BadgeGroup(
        id="footer",
        name="Footer",
        is_default=True,
        is_active=False,
        settings=normalize({"headerText": "Payment Options", "alignment": "right"}),
    ),
)

DEFAULT_GROUP_IDS = tuple(group.id for group in DEFAULT_GROUPS)


class SettingsStore:
    """Persistence of badge groups with a read-through cache.

    Reads are served from the cache when possible. Every write runs in one
    transaction and removes the affected cache keys before returning, so a
    ``get`` right after a write always sees the new value.
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        cache: InMemoryCache,
        normalizer: Optional[SettingsNormalizer] = None,
    ):
        self.uow = uow
        self.cache = cache
        self.normalizer = normalizer or SettingsNormalizer()

    async def list(self) -> List[BadgeGroup]:
        """All groups in insertion order."""
        cached = self.cache.get(SETTINGS_LIST_KEY)
        if cached is not None:
            return list(cached)

        rows = await self.uow.badge_groups.list_groups()
        groups = [BadgeGroup.from_row(row) for row in rows]
        self.cache.set(SETTINGS_LIST_KEY, tuple(groups))
        return groups

    async def get(self, group_id: str) -> BadgeGroup:
        key = group_cache_key(group_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        row = await self.uow.badge_groups.get_by_group_id(group_id)
        if row is None:
            raise NotFoundError(f"Group {group_id} not found")

        group = BadgeGroup.from_row(row)
        self.cache.set(key, group)
        return group

    async def find(self, group_id: str) -> Optional[BadgeGroup]:
        """Like :meth:`get`, but None for unknown ids."""
        try:
            return await self.get(group_id)
        except NotFoundError:
            return None

    async def next_custom_id(self) -> str:
        """One past the highest numeric id among user-created groups."""
        ids = await self.uow.badge_groups.list_custom_group_ids()
        numeric = [int(group_id) for group_id in ids if group_id.isdigit()]
        return str(max(numeric) + 1) if numeric else "1"

    async def save_incoming(self, raw_group: Any) -> BadgeGroup:
        """Normalize a client-submitted group and save it.

        A group sent without an id is inserted under the next free id and never
        replaces an existing group. When a concurrent save claims that id first,
        the id is recomputed once; a second clash raises ``ConflictError``.
        """
        next_id = await self.next_custom_id()
        group = self.normalizer.normalize_incoming(raw_group, next_id=next_id)
        if incoming_id(raw_group) is not None:
            return await self.upsert(group)

        try:
            saved = await self._create(group)
        except IntegrityError:
            taken = group.id
            group = group.model_copy(update={"id": await self.next_custom_id()})
            logger.warning(f"Group id {taken} was taken concurrently, retrying as {group.id}")
            try:
                saved = await self._create(group)
            except IntegrityError:
                raise ConflictError(
                    f"Group id {group.id} was taken by a concurrent save",
                    details={"group": group.id},
                )

        self._invalidate(group.id)
        logger.info(f"Created badge group {group.id}")
        return saved

    async def _create(self, group: BadgeGroup) -> BadgeGroup:
        """Insert ``group`` and commit. Unique-id clashes propagate as ``IntegrityError``."""
        try:
            saved = await self._insert(group)
            await self.uow.commit()
        except IntegrityError:
            await self.uow.rollback()
            raise
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to create group {group.id}: {e}")
            raise PersistenceError(f"Failed to save group {group.id}", details={"group": group.id})
        return saved

    async def upsert(self, group: BadgeGroup, seeded: bool = False) -> BadgeGroup:
        """Insert ``group`` or update it in place. Existing groups keep their default flag."""
        try:
            saved = await self._write(group, seeded=seeded)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to save group {group.id}: {e}")
            raise PersistenceError(f"Failed to save group {group.id}", details={"group": group.id})

        self._invalidate(group.id)
        logger.info(f"Saved badge group {group.id}")
        return saved

    async def save_batch(self, raw_groups: Iterable[Any]) -> List[BadgeGroup]:
        """Upsert every group in one transaction; the first failure aborts the lot."""
        saved: List[BadgeGroup] = []
        touched: List[str] = []

        for position, raw_group in enumerate(raw_groups):
            label = _member_label(raw_group, position)
            try:
                generated = False
                if isinstance(raw_group, BadgeGroup):
                    group = raw_group
                else:
                    next_id = await self.next_custom_id()
                    group = self.normalizer.normalize_incoming(raw_group, next_id=next_id)
                    generated = incoming_id(raw_group) is None
                label = group.id
                if generated:
                    saved.append(await self._insert(group))
                else:
                    saved.append(await self._write(group))
                touched.append(group.id)
            except ValidationError as e:
                await self.uow.rollback()
                logger.warning(f"Batch save aborted at group {label}: {e.message}")
                raise ValidationError(
                    f"Group {label} is invalid",
                    errors=[dict(error, group=label) for error in e.details],
                )
            except IntegrityError as e:
                await self.uow.rollback()
                logger.warning(f"Batch save aborted at group {label}: {e}")
                raise ConflictError(
                    f"Group {label} was taken by a concurrent save",
                    details={"group": label},
                )
            except SQLAlchemyError as e:
                await self.uow.rollback()
                logger.error(f"Batch save aborted at group {label}: {e}")
                raise PersistenceError(f"Failed to save group {label}", details={"group": label})

        try:
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to commit settings batch: {e}")
            raise PersistenceError("Failed to save settings", details={"groups": touched})

        self._invalidate(*touched)
        logger.info(f"Saved {len(saved)} badge groups")
        return saved

    async def delete(self, group_id: str) -> None:
        row = await self.uow.badge_groups.get_by_group_id(group_id)
        if row is None:
            raise NotFoundError(f"Group {group_id} not found")
        if row.is_default:
            raise ProtectedGroupError(f"Cannot delete default group {group_id}")

        try:
            await self.uow.badge_groups.delete_group(group_id)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to delete group {group_id}: {e}")
            raise PersistenceError(f"Failed to delete group {group_id}", details={"group": group_id})

        self._invalidate(group_id)
        logger.info(f"Deleted badge group {group_id}")

    async def seed_defaults(self) -> List[str]:
        """Insert whichever default groups are missing. Returns the ids created."""
        created = []
        try:
            for group in DEFAULT_GROUPS:
                if await self.uow.badge_groups.group_exists(group.id):
                    continue
                await self._write(group, seeded=True)
                created.append(group.id)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to seed default groups: {e}")
            raise PersistenceError("Failed to seed default groups")

        if created:
            self._invalidate(*created)
            logger.info(f"Seeded default groups: {', '.join(created)}")
        return created

    async def _write(self, group: BadgeGroup, seeded: bool = False) -> BadgeGroup:
        row = await self.uow.badge_groups.update_group(group.id, {
            "group_name": group.name,
            "is_active": group.is_active,
            "required_plugin": group.required_plugin,
            "settings": group.settings.to_wire(),
        })
        if row is None:
            return await self._insert(group, seeded=seeded)
        return BadgeGroup.from_row(row)

    async def _insert(self, group: BadgeGroup, seeded: bool = False) -> BadgeGroup:
        row = await self.uow.badge_groups.create_group(
            group_id=group.id,
            name=group.name,
            settings=group.settings.to_wire(),
            is_active=group.is_active,
            is_default=seeded,
            required_plugin=group.required_plugin,
        )
        return BadgeGroup.from_row(row)

    def _invalidate(self, *group_ids: str) -> None:
        self.cache.delete(SETTINGS_LIST_KEY, *(group_cache_key(group_id) for group_id in group_ids))


def _member_label(raw_group: Any, position: int) -> str:
    """How a batch member is named in errors: its id when it carries one, else its position."""
    if isinstance(raw_group, BadgeGroup):
        return raw_group.id
    group_id = incoming_id(raw_group)
    return group_id if group_id is not None else f"#{position}"
