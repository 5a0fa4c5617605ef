from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

if TYPE_CHECKING:
    from Decido.services.ConsentService import ConsentService
    from Decido.services.DecisionLogService import DecisionLogService
    from Decido.services.DecisionService import DecisionService
    from Decido.services.ParticipantService import ParticipantService
    from Decido.services.ProposalService import ProposalService
    from Decido.services.VoteLedgerService import VoteLedgerService
    from Decido.share.DatabaseHandler import DatabaseHandler


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    一个实现了工作单元模式的异步上下文管理器。

    它封装了数据库会话和事务管理，并提供了对各个服务（仓库）的访问。
    单个业务操作中的所有数据库更改要么一起提交，要么一起回滚；
    被拒绝的提交因此不会在投票账本中留下任何痕迹。

    用法:
        async with UnitOfWork(db_handler) as uow:
            await uow.ledger.upsert_ballot(...)
            await uow.commit()
    """

    def __init__(self, db_handler: Optional["DatabaseHandler"]):
        self._db_handler = db_handler
        self._session: Optional[AsyncSession] = None
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        """在进入上下文时，获取一个新的数据库会话。服务在第一次访问时才创建。"""
        if self._db_handler is None:
            raise RuntimeError(
                "UnitOfWork 在没有有效 DatabaseHandler 的情况下被使用。"
                "请确保已调用 initialize_db_handler。"
            )
        self._session = self._db_handler.get_session()
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, traceback):
        """
        在退出上下文时，根据是否发生异常来提交或回滚事务，并最终关闭会话。
        """
        if not self._session:
            return

        try:
            if exc_type:
                if not self._committed:
                    logger.debug(
                        f"UnitOfWork 检测到异常，正在回滚事务: {exc_type.__name__}: {exc_val}"
                    )
                    await self.rollback()
            else:
                if not self._committed:
                    await self.commit()
        finally:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> AsyncSession:
        """获取当前的数据库会话。"""
        if self._session is None:
            raise RuntimeError("会话尚未初始化。请在 'async with' 块中使用 UnitOfWork。")
        return self._session

    async def commit(self):
        """提交当前事务。"""
        await self.session.commit()
        self._committed = True

    async def rollback(self):
        """回滚当前事务。"""
        await self.session.rollback()
        self._committed = True

    async def flush(self, objects=None):
        """
        将当前会话中的挂起更改刷新到数据库，用于在提交前取得自增ID。
        """
        await self.session.flush(objects)

    # --- 服务/仓库访问属性 ---

    @property
    def decision(self) -> "DecisionService":
        """获取决策服务实例。"""
        if not hasattr(self, "_decision_service"):
            from Decido.services.DecisionService import DecisionService

            self._decision_service = DecisionService(self.session)
        return self._decision_service

    @property
    def proposal(self) -> "ProposalService":
        """获取提案服务实例。"""
        if not hasattr(self, "_proposal_service"):
            from Decido.services.ProposalService import ProposalService

            self._proposal_service = ProposalService(self.session)
        return self._proposal_service

    @property
    def participant(self) -> "ParticipantService":
        """获取参与者名单服务实例。"""
        if not hasattr(self, "_participant_service"):
            from Decido.services.ParticipantService import ParticipantService

            self._participant_service = ParticipantService(self.session)
        return self._participant_service

    @property
    def ledger(self) -> "VoteLedgerService":
        """获取投票账本服务实例。"""
        if not hasattr(self, "_ledger_service"):
            from Decido.services.VoteLedgerService import VoteLedgerService

            self._ledger_service = VoteLedgerService(self.session)
        return self._ledger_service

    @property
    def consent(self) -> "ConsentService":
        """获取同意式决策提案状态服务实例。"""
        if not hasattr(self, "_consent_service"):
            from Decido.services.ConsentService import ConsentService

            self._consent_service = ConsentService(self.session)
        return self._consent_service

    @property
    def decision_log(self) -> "DecisionLogService":
        """获取决策历史服务实例。"""
        if not hasattr(self, "_decision_log_service"):
            from Decido.services.DecisionLogService import DecisionLogService

            self._decision_log_service = DecisionLogService(self.session)
        return self._decision_log_service
