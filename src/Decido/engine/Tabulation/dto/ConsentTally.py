from typing import Optional

from Decido.share.enums.ConsentAmendmentAction import ConsentAmendmentAction
from Decido.share.enums.ConsentStage import ConsentStage

from .TallyDto import TallyDto


class ConsentTally(TallyDto):
    stage: Optional[ConsentStage] = None
    amendment_action: Optional[ConsentAmendmentAction] = None
    current_proposal: Optional[str] = None
    eligible_count: int = 0
    question_count: int = 0
    unanswered_count: int = 0
    opinion_count: int = 0
    no_objection_count: int = 0
    objection_count: int = 0
    no_position_count: int = 0
    pending_count: int = 0
    vetoed: bool = False
