"""
Base Repository Pattern
Generic repository for guard-named entities plus pivot-table helpers
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Column, Table, delete, func, select, tuple_
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
import structlog

from permguard.core.database import Base
from permguard.core.exceptions import NotFoundError, StorageFailureError, TransactionAbortedError
from permguard.core.pagination import Pagination, paginate

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)

_CONFLICT_IGNORING_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


@asynccontextmanager
async def unit_of_work(db: AsyncSession, operation: str, **context: Any):
    """
    Run the enclosed statements as one transaction

    Commits on success. On any failure, cancellation included, the session
    is rolled back; storage errors surface as TransactionAbortedError.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Transaction rolled back", operation=operation, error=str(e), **context)
        raise TransactionAbortedError(operation) from e
    except BaseException:
        await db.rollback()
        logger.warning("Transaction rolled back", operation=operation, **context)
        raise


async def scalars(db: AsyncSession, query: Select, operation: str) -> List[Any]:
    try:
        result = await db.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Query failed", operation=operation, error=str(e))
        raise StorageFailureError(operation) from e


async def count(db: AsyncSession, query: Select, operation: str) -> int:
    """Count the rows a query would return"""
    try:
        count_query = select(func.count()).select_from(query.subquery())
        return (await db.execute(count_query)).scalar() or 0
    except SQLAlchemyError as e:
        logger.error("Count failed", operation=operation, error=str(e))
        raise StorageFailureError(operation) from e


async def pluck_ids(
    db: AsyncSession,
    query: Select,
    pagination: Optional[Pagination],
    operation: str,
) -> Tuple[List[int], int]:
    """
    Run an id projection

    Returns:
        Ids of the requested page and the total before pagination
    """
    total = await count(db, query, operation)
    ids = await scalars(db, paginate(query, pagination), operation)
    return ids, total


async def insert_pairs(db: AsyncSession, table: Table, rows: List[Dict[str, int]]) -> None:
    """Insert pivot pairs, skipping pairs that already exist"""
    if not rows:
        return

    dialect = db.get_bind().dialect.name
    insert = _CONFLICT_IGNORING_INSERTS.get(dialect)
    if insert is not None:
        await db.execute(insert(table).values(rows).on_conflict_do_nothing())
        return

    # Generic path: look up the existing pairs first
    columns = [table.c[name] for name in rows[0].keys()]
    wanted = [tuple(row[c.name] for c in columns) for row in rows]
    existing = await db.execute(select(*columns).where(tuple_(*columns).in_(wanted)))
    present = {tuple(row) for row in existing.all()}
    missing = [row for row, key in zip(rows, wanted) if key not in present]
    if missing:
        await db.execute(table.insert().values(missing))


async def delete_pairs(
    db: AsyncSession,
    table: Table,
    owner_column: Column,
    owner_id: int,
    related_column: Column,
    related_ids: Optional[Sequence[int]] = None,
) -> None:
    """Delete the owner's pairs; all of them when related_ids is None"""
    statement = delete(table).where(owner_column == owner_id)
    if related_ids is not None:
        statement = statement.where(related_column.in_(list(related_ids)))
    await db.execute(statement)


async def count_pairs(
    db: AsyncSession,
    table: Table,
    owner_column: Column,
    owner_ids: Iterable[int],
    related_column: Column,
    related_ids: Iterable[int],
    operation: str,
) -> int:
    """Count pivot rows matching any owner and any related id"""
    query = (
        select(func.count())
        .select_from(table)
        .where(owner_column.in_(list(owner_ids)))
        .where(related_column.in_(list(related_ids)))
    )
    try:
        return (await db.execute(query)).scalar() or 0
    except SQLAlchemyError as e:
        logger.error("Count failed", operation=operation, error=str(e))
        raise StorageFailureError(operation) from e


class GuardedRepository(Generic[ModelType]):
    """
    Repository for entities keyed by a unique guard name

    Subclasses list the pivot columns that reference the entity id so
    delete can purge them in the same transaction.
    """

    pivot_columns: Tuple[Column, ...] = ()

    def __init__(self, model: Type[ModelType]):
        """
        Initialize repository

        Args:
            model: SQLAlchemy model class
        """
        self.model = model
        self.entity = model.__name__

    def _select(self, with_relations: bool = False) -> Select:
        return select(self.model)

    # ==================== Single fetch ====================

    async def _first(self, db: AsyncSession, query: Select, reference: Any) -> ModelType:
        try:
            result = await db.execute(query)
            record = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Error retrieving record", model=self.entity, reference=reference, error=str(e))
            raise StorageFailureError(f"get {self.entity}") from e

        if record is None:
            logger.warning("Record not found", model=self.entity, reference=reference)
            raise NotFoundError(self.entity, reference)

        logger.debug("Record retrieved", model=self.entity, id=record.id)
        return record

    async def get_by_id(self, db: AsyncSession, id: int, with_relations: bool = False) -> ModelType:
        query = self._select(with_relations).where(self.model.id == id)
        return await self._first(db, query, id)

    async def get_by_guard_name(self, db: AsyncSession, guard_name: str, with_relations: bool = False) -> ModelType:
        query = self._select(with_relations).where(self.model.guard_name == guard_name)
        return await self._first(db, query, guard_name)

    # ==================== Multiple fetch ====================

    async def get_many(self, db: AsyncSession, ids: Sequence[int], with_relations: bool = False) -> List[ModelType]:
        """Rows for the given ids; unknown ids are skipped"""
        if not ids:
            return []
        query = self._select(with_relations).where(self.model.id.in_(list(ids))).order_by(self.model.id)
        records = await scalars(db, query, f"get many {self.entity}")
        logger.debug("Multiple records retrieved", model=self.entity, requested=len(ids), count=len(records))
        return records

    async def get_many_by_guard_names(
        self,
        db: AsyncSession,
        guard_names: Sequence[str],
        with_relations: bool = False,
    ) -> List[ModelType]:
        """Rows for the given guard names; unknown names are skipped"""
        if not guard_names:
            return []
        query = (
            self._select(with_relations)
            .where(self.model.guard_name.in_(list(guard_names)))
            .order_by(self.model.id)
        )
        records = await scalars(db, query, f"get many {self.entity}")
        logger.debug("Multiple records retrieved", model=self.entity, requested=len(guard_names), count=len(records))
        return records

    # ==================== Id projections ====================

    async def get_ids(self, db: AsyncSession, pagination: Optional[Pagination] = None) -> Tuple[List[int], int]:
        query = select(self.model.id).order_by(self.model.id)
        return await pluck_ids(db, query, pagination, f"get {self.entity} ids")

    # ==================== Find or create & Update & Delete ====================

    async def find_or_create(self, db: AsyncSession, obj_in_data: Dict[str, Any]) -> ModelType:
        """
        Return the row with the given guard name, inserting it when absent

        An existing row is returned untouched; the other input fields are
        not written to it.
        """
        guard_name = obj_in_data["guard_name"]
        query = select(self.model).where(self.model.guard_name == guard_name)

        existing = await scalars(db, query, f"find {self.entity}")
        if existing:
            logger.debug("Record already exists", model=self.entity, guard_name=guard_name)
            return existing[0]

        db_obj = self.model(**obj_in_data)
        try:
            db.add(db_obj)
            await db.commit()
        except IntegrityError:
            # Inserted concurrently by someone else
            await db.rollback()
            logger.debug("Record created concurrently", model=self.entity, guard_name=guard_name)
            return await self._first(db, query, guard_name)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Error creating record", model=self.entity, guard_name=guard_name, error=str(e))
            raise TransactionAbortedError(f"create {self.entity}") from e

        await db.refresh(db_obj)
        logger.info("Record created", model=self.entity, id=db_obj.id, guard_name=guard_name)
        return db_obj

    async def update(self, db: AsyncSession, db_obj: ModelType, obj_in_data: Dict[str, Any]) -> ModelType:
        """Apply a partial field map"""
        obj_id = db_obj.id
        async with unit_of_work(db, f"update {self.entity}", id=obj_id):
            for field, value in obj_in_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            db.add(db_obj)

        await db.refresh(db_obj)
        logger.info("Record updated", model=self.entity, id=obj_id, fields=sorted(obj_in_data))
        return db_obj

    async def delete(self, db: AsyncSession, db_obj: ModelType) -> None:
        """Delete the row and every pivot row referencing it, atomically"""
        obj_id = db_obj.id
        async with unit_of_work(db, f"delete {self.entity}", id=obj_id):
            await self._purge_pivots(db, obj_id)
            await self._delete_row(db, obj_id)

        if db_obj in db:
            db.expunge(db_obj)
        logger.info("Record deleted", model=self.entity, id=obj_id)

    async def _purge_pivots(self, db: AsyncSession, id: int) -> None:
        for column in self.pivot_columns:
            await db.execute(delete(column.table).where(column == id))

    async def _delete_row(self, db: AsyncSession, id: int) -> None:
        await db.execute(delete(self.model).where(self.model.id == id))
