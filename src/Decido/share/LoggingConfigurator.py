import logging
import os


class LoggingConfigurator:
    """
    一个用于集中配置项目日志记录器的类。
    """

    def __init__(self, rootLogLevel: str = "INFO"):
        """
        初始化配置器。
        :param rootLogLevel: 从 .env 文件读取的根日志级别字符串。
        """
        self.logLevel = getattr(logging, rootLogLevel.upper(), logging.INFO)
        self.formatter = logging.Formatter("%(asctime)s:%(levelname)s:%(name)s: %(message)s")
        self.streamHandler = logging.StreamHandler()
        self.streamHandler.setFormatter(self.formatter)

    def configure(self):
        """
        应用所有日志配置。
        """
        self._configurePackageLogger()
        self._configureSqlAlchemyLogger()
        self._configureAiosqliteLogger()
        logging.getLogger(__name__).info("日志记录器配置完成。")

    def _configurePackageLogger(self):
        """配置包级别的日志记录器，项目内所有模块 logger 都挂在它下面。"""
        logger = logging.getLogger("Decido")
        logger.setLevel(self.logLevel)
        if not logger.handlers:
            logger.addHandler(self.streamHandler)
        logger.propagate = False

    def _configureSqlAlchemyLogger(self):
        """配置 SQLAlchemy 的日志记录器。"""
        # 从环境变量获取 SQLAlchemy 的日志级别，默认为 WARNING
        log_level_str = os.getenv("SQLALCHEMY_LOG_LEVEL", "WARNING").upper()
        log_level = getattr(logging, log_level_str, logging.WARNING)

        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(log_level)
        if not sql_logger.handlers:
            sql_logger.addHandler(self.streamHandler)
        sql_logger.propagate = False

    def _configureAiosqliteLogger(self):
        """aiosqlite 在 DEBUG 级别会逐条打印操作，默认只保留警告。"""
        aiosqlite_logger = logging.getLogger("aiosqlite")
        aiosqlite_logger.setLevel(logging.WARNING)
        if not aiosqlite_logger.handlers:
            aiosqlite_logger.addHandler(self.streamHandler)
        aiosqlite_logger.propagate = False
