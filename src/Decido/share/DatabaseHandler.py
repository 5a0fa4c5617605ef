import logging
import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# --- 初始化 ---
load_dotenv()
logger = logging.getLogger(__name__)


class DatabaseHandler:
    """
    数据库处理程序
    负责数据库的初始化、连接和会话管理。
    运行时的实例应该被视为一个单例，通过 initialize_db_handler 和 get_db_handler 进行管理；
    测试中可以直接构造并指定独立的数据库文件。
    """

    def __init__(self):
        self._async_engine: Optional[AsyncEngine] = None
        self._initialized = False

    def initialize(self, database_name: Optional[str] = None):
        """
        执行实际的初始化，设置数据库引擎。
        这个方法应该只被调用一次。

        Args:
            database_name: SQLite 数据库文件路径。为 None 时读取环境变量 DATABASE_NAME。
        """
        if self._initialized:
            logger.warning("DatabaseHandler 已经初始化，跳过重复初始化。")
            return

        logger.info("正在初始化 DatabaseHandler...")

        db_name = database_name or os.getenv("DATABASE_NAME", "data/decido.db")
        db_dir = os.path.dirname(db_name)
        if db_dir and not os.path.exists(db_dir):
            logger.info(f"数据库目录 '{db_dir}' 不存在，正在创建...")
            os.makedirs(db_dir)

        sqlite_url = f"sqlite+aiosqlite:///{db_name}"
        # 写事务之间依靠 SQLite 的写锁串行化，timeout 即等待写锁的最长秒数
        connect_args = {"timeout": 15}

        sql_echo_str = os.getenv("SQL_ECHO", "False")
        sql_echo = sql_echo_str.lower() in ("true", "1", "t")

        self._async_engine = create_async_engine(
            sqlite_url, echo=sql_echo, connect_args=connect_args
        )

        @event.listens_for(self._async_engine.sync_engine, "connect")
        def _enable_wal(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA journal_mode=WAL;")
            finally:
                cursor.close()

        self._initialized = True
        logger.info(f"DatabaseHandler 初始化完成，数据库文件: {db_name}")

    async def init_db(self):
        """
        初始化数据库，创建所有定义的表 (包含索引和唯一约束)。
        """
        if not self._initialized or not self._async_engine:
            raise RuntimeError("DatabaseHandler 尚未初始化。请先调用 initialize_db_handler。")

        import Decido.models  # noqa: F401

        async with self._async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    def get_session(self) -> AsyncSession:
        """
        创建一个新的异步数据库会话实例。
        """
        if not self._initialized or not self._async_engine:
            raise RuntimeError("DatabaseHandler 尚未初始化。请先调用 initialize_db_handler。")
        return AsyncSession(self._async_engine, expire_on_commit=False)

    async def close(self):
        """释放连接池。"""
        if self._async_engine is not None:
            await self._async_engine.dispose()
            logger.info("数据库连接池已释放。")
        self._async_engine = None
        self._initialized = False


# --- 单例管理 ---

_db_handler_instance: Optional[DatabaseHandler] = None


def initialize_db_handler(database_name: Optional[str] = None) -> DatabaseHandler:
    """
    创建并初始化 DatabaseHandler 的单例实例。
    """
    global _db_handler_instance
    if _db_handler_instance is None:
        _db_handler_instance = DatabaseHandler()
        _db_handler_instance.initialize(database_name)
    return _db_handler_instance


def get_db_handler() -> DatabaseHandler:
    """
    获取 DatabaseHandler 的单例实例。
    如果实例尚未初始化，将引发 RuntimeError。
    """
    if _db_handler_instance is None:
        raise RuntimeError(
            "DatabaseHandler 实例尚未创建。请确保在程序启动时调用了 initialize_db_handler。"
        )
    return _db_handler_instance
