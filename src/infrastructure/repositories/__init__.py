from .credentials import CredentialPortfolio, CredentialRepository, count_statuses
from .unit_of_work import UnitOfWork
from .users import UserRepository
from .verification_requests import VerificationRequestRepository

__all__ = [
    "CredentialPortfolio",
    "CredentialRepository",
    "UnitOfWork",
    "UserRepository",
    "VerificationRequestRepository",
    "count_statuses",
]
