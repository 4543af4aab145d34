"""基于 SQLAlchemy 的统计存储（SQLite）。"""

from pathlib import Path

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    Index,
    Integer,
    String,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..exceptions import DatabaseError, StatsSerializationError
from ..models.constants import SizeRange
from ..models.stats import CompressionStat, StatsCriteria
from ..utils.logging_helpers import get_logger
from .base import StatsStore


logger = get_logger()

Base = declarative_base()


class CompressionStatRecord(Base):
    """compression_stats 表"""

    __tablename__ = "compression_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    input_format = Column(String(16), nullable=False)
    output_format = Column(String(16), nullable=False)
    input_size_range = Column(String(16), nullable=False)
    quality_setting = Column(Integer, nullable=False)
    lossy_mode = Column(Boolean, nullable=False)
    size_reduction_percent = Column(Float, nullable=False)
    original_size = Column(Integer, nullable=False)
    compressed_size = Column(Integer, nullable=False)
    compression_time_ms = Column(Integer, nullable=True)
    timestamp = Column(String(40), nullable=False)
    image_type = Column(String(32), nullable=True)

    __table_args__ = (
        Index("idx_compression_stats_formats", "input_format", "output_format"),
    )

    def to_stat(self) -> CompressionStat:
        try:
            return CompressionStat(
                id=self.id,
                input_format=self.input_format,
                output_format=self.output_format,
                input_size_range=SizeRange(self.input_size_range),
                quality_setting=self.quality_setting,
                lossy_mode=self.lossy_mode,
                size_reduction_percent=self.size_reduction_percent,
                original_size=self.original_size,
                compressed_size=self.compressed_size,
                compression_time_ms=self.compression_time_ms,
                timestamp=self.timestamp,
                image_type=self.image_type,
            )
        except ValueError as e:
            raise StatsSerializationError(f"无法解析统计记录 #{self.id}: {e}") from e

    @classmethod
    def from_stat(cls, stat: CompressionStat) -> "CompressionStatRecord":
        return cls(**stat.model_dump(exclude={"id"}, mode="json"))


def _where(criteria: StatsCriteria) -> list:
    """把筛选条件转换为 SQL 条件列表"""
    table = CompressionStatRecord
    conditions = []
    if criteria.input_format is not None:
        conditions.append(table.input_format == criteria.input_format)
    if criteria.output_format is not None:
        conditions.append(table.output_format == criteria.output_format)
    if criteria.min_quality is not None:
        conditions.append(table.quality_setting >= criteria.min_quality)
    if criteria.max_quality is not None:
        conditions.append(table.quality_setting <= criteria.max_quality)
    if criteria.lossy_mode is not None:
        conditions.append(table.lossy_mode == criteria.lossy_mode)
    if criteria.size_range is not None:
        conditions.append(table.input_size_range == criteria.size_range.value)
    if criteria.require_time:
        conditions.append(table.compression_time_ms.is_not(None))
    return conditions


class SqlStatsStore(StatsStore):
    """SQLite 统计存储

    使用单一连接（StaticPool），配合基类的锁保证单写者语义。
    """

    def __init__(self, url: str | None = None, path: str | Path | None = None):
        super().__init__()
        if url is None:
            if path is None:
                url = "sqlite://"
            else:
                path = Path(path).expanduser()
                path.parent.mkdir(parents=True, exist_ok=True)
                url = f"sqlite:///{path}"

        try:
            self._engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise DatabaseError(f"无法打开统计数据库 {url}: {e}") from e

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        self.url = url
        logger.debug(f"统计数据库已就绪: {url}")

    def _session(self) -> Session:
        return self._session_factory()

    def close(self) -> None:
        self._engine.dispose()

    def _select(self, criteria: StatsCriteria) -> list[CompressionStat]:
        stmt = select(CompressionStatRecord).where(*_where(criteria))
        try:
            with self._session() as session:
                records = session.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"查询统计数据失败: {e}") from e
        return [record.to_stat() for record in records]

    def _insert(self, stat: CompressionStat) -> int:
        record = CompressionStatRecord.from_stat(stat)
        try:
            with self._session() as session, session.begin():
                session.add(record)
                session.flush()
                return int(record.id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"保存统计数据失败: {e}") from e

    def _delete_all(self) -> None:
        try:
            with self._session() as session, session.begin():
                session.execute(delete(CompressionStatRecord))
        except SQLAlchemyError as e:
            raise DatabaseError(f"清空统计数据失败: {e}") from e

    def _count(self) -> int:
        try:
            with self._session() as session:
                return session.scalar(
                    select(func.count()).select_from(CompressionStatRecord)
                ) or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"统计记录计数失败: {e}") from e

    def _delete_oldest(self, keep: int) -> int:
        newest = (
            select(CompressionStatRecord.id)
            .order_by(CompressionStatRecord.id.desc())
            .limit(keep)
        )
        stmt = delete(CompressionStatRecord).where(
            CompressionStatRecord.id.not_in(newest)
        )
        try:
            with self._session() as session, session.begin():
                result = session.execute(stmt)
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"清理旧统计数据失败: {e}") from e

    def _recent(self, limit: int) -> list[CompressionStat]:
        stmt = (
            select(CompressionStatRecord)
            .order_by(CompressionStatRecord.id.desc())
            .limit(limit)
        )
        try:
            with self._session() as session:
                records = session.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise DatabaseError(f"查询最近统计数据失败: {e}") from e
        return [record.to_stat() for record in records]
