from typing import Optional

from Decido.share.BaseDto import BaseDto


class AddProposalQo(BaseDto):
    """
    为草稿决策追加提案的查询对象
    """

    title: str
    description: Optional[str] = None
