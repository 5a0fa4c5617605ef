from typing import Optional

from Decido.share.BaseDto import BaseDto


class ProposalDto(BaseDto):
    """
    提案的数据传输对象
    """

    id: int
    decision_id: int
    title: str
    description: Optional[str] = None
    display_order: int
