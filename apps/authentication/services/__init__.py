from .account_service import AccountService

__all__ = ['AccountService']
