"""Password-strength validation for the local credential strategy."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from zxcvbn import zxcvbn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RejectionReason:
    """Why a password was refused.

    Attributes:
        message: User-facing explanation
        score: Strength score from 0 (weakest) to 4
    """

    message: str
    score: int = 0

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class PasswordValidator:
    """Rejects passwords below a minimum strength score.

    Attributes:
        bypass: Accept every password (development-like environments)
        minimum_score: Lowest accepted zxcvbn score
    """

    bypass: bool = False
    minimum_score: int = 3

    def validate(self, password: str) -> Optional[RejectionReason]:
        """Return ``None`` if ``password`` is accepted, else the reason it is not."""
        if self.bypass:
            return None
        if not password:
            return RejectionReason("Password not strong enough", 0)
        score = zxcvbn(password)["score"]
        if score < self.minimum_score:
            logger.debug(f"Password rejected with score {score}")
            return RejectionReason("Password not strong enough", score)
        return None

    def __call__(
        self,
        password: str,
        callback: Callable[[Optional[RejectionReason]], None] | None = None,
    ) -> Optional[RejectionReason]:
        """Validate, handing the result to ``callback`` when one is given."""
        reason = self.validate(password)
        if callback is not None:
            callback(reason)
        return reason
