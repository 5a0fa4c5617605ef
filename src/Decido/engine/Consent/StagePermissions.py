from typing import Dict, FrozenSet, Optional

from Decido.share.enums.ConsentStage import ConsentStage
from Decido.share.enums.EntryKind import EntryKind
from Decido.share.errors.StageClosed import StageClosed


class StagePermissions:
    """
    同意式决策各阶段允许的条目类型。
    回答澄清问题与提案状态的写入仅限发起人，其余条目由参与者提交。
    """

    TABLE: Dict[EntryKind, FrozenSet[ConsentStage]] = {
        EntryKind.CLARIFICATION_QUESTION: frozenset(
            {ConsentStage.CLARIFICATIONS, ConsentStage.CLARIFAVIS}
        ),
        EntryKind.CLARIFICATION_ANSWER: frozenset(
            {
                ConsentStage.CLARIFICATIONS,
                ConsentStage.CLARIFAVIS,
                ConsentStage.AVIS,
                ConsentStage.AMENDEMENTS,
            }
        ),
        EntryKind.OPINION: frozenset({ConsentStage.CLARIFAVIS, ConsentStage.AVIS}),
        EntryKind.PROPOSAL_STATE: frozenset({ConsentStage.AMENDEMENTS}),
        EntryKind.OBJECTION: frozenset({ConsentStage.OBJECTIONS}),
    }

    CREATOR_ONLY: FrozenSet[EntryKind] = frozenset(
        {EntryKind.CLARIFICATION_ANSWER, EntryKind.PROPOSAL_STATE}
    )

    @classmethod
    def allows(cls, stage: Optional[ConsentStage], kind: EntryKind) -> bool:
        if stage is None:
            return False
        return stage in cls.TABLE.get(kind, frozenset())

    @classmethod
    def ensure_allowed(cls, stage: Optional[ConsentStage], kind: EntryKind):
        """
        Raises:
            StageClosed: 当前阶段不接受该类型的条目。
        """
        if not cls.allows(stage, kind):
            stage_name = stage.value if stage else "未开始"
            raise StageClosed(f"当前阶段 ({stage_name}) 不接受 {kind.value} 类型的提交。")
