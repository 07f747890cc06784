from transcriptor.models.transcript import Transcript
from transcriptor.models.user import User

__all__ = [
    "Transcript",
    "User",
]
