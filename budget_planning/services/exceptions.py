class BudgetPlanningError(Exception):
    """Base exception for rejected budget operations"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistrationError(BudgetPlanningError):
    """Raised when a user cannot be registered"""
    pass


class AccountUpdateError(BudgetPlanningError):
    """Raised when an account operation breaks a balance or ownership rule"""
    pass


class LimitUpdateError(BudgetPlanningError):
    """Raised when a usage limit cannot be changed"""
    pass


class BankHistoryError(BudgetPlanningError):
    """Raised when account history cannot be produced"""
    pass
