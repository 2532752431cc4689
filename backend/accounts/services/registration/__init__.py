from .dto import UserRegistrationIn
from .service import UserRegistrationService

__all__ = ["UserRegistrationIn", "UserRegistrationService"]
