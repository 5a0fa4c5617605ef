import logging
import os
import sys

import aiorun
from dotenv import load_dotenv

from Decido.engine.Lifecycle.DecisionLifecycle import DecisionLifecycle
from Decido.engine.Lifecycle.tasks.DecisionSweeper import DecisionSweeper
from Decido.share.AppConfig import AppConfig
from Decido.share.DatabaseHandler import get_db_handler, initialize_db_handler
from Decido.share.LoggingConfigurator import LoggingConfigurator

# --- .env 和 日志配置 ---
load_dotenv()
log_level = os.getenv("LOG_LEVEL", "INFO")
configurator = LoggingConfigurator(rootLogLevel=log_level)
configurator.configure()

logger = logging.getLogger("Decido")
# --- 日志配置结束 ---


if sys.platform != "win32":
    try:
        import uvloop

        uvloop.install()
        logger.info("已成功启用 uvloop 作为 asyncio 事件循环")
    except ImportError:
        logger.warning("尝试启用 uvloop 失败，将使用默认事件循环")


sweeper = None
db_handler = None


async def shutdown(loop):
    """专门用于清理资源的关闭回调函数"""
    logger.info("收到关闭信号，正在关闭资源...")
    if sweeper:
        await sweeper.stop()

    if db_handler:
        await db_handler.close()

    logger.info("所有资源已清理，程序退出。")


async def main_async():
    """初始化数据库并启动决策扫描任务"""
    global sweeper, db_handler

    config = AppConfig.load()

    initialize_db_handler()
    db_handler = get_db_handler()

    logger.info("正在检查数据库表...")
    try:
        await db_handler.init_db()
        logger.info("数据库表处理成功。")
    except Exception as e:
        logger.exception(f"数据库表处理失败: {e}")
        raise

    lifecycle = DecisionLifecycle(db_handler, config=config)
    sweeper = DecisionSweeper(lifecycle, interval_minutes=config.sweep_interval_minutes)
    sweeper.start()
    logger.info("------ Decido 已准备就绪 ------")


def main():
    """主入口函数"""
    aiorun.run(main_async(), shutdown_callback=shutdown, stop_on_unhandled_errors=True)


if __name__ == "__main__":
    main()
