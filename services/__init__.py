# Business flows that span several tables in one transaction
from .checkout import purchase_account, redeem_key

__all__ = ["purchase_account", "redeem_key"]
