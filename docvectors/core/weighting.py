"""
Term weighting for document vector construction.
weight = local_weight(frequency) * global_weight(term, field)
"""

import math
from typing import Callable, Optional

from util.logging import logger

TERMFREQUENCY = "termfrequency"
LOGENTROPY = "logentropy"

SCHEMES = (TERMFREQUENCY, LOGENTROPY)

GlobalWeightFn = Callable[[str, str], float]


class WeightingScheme:
    """Scores a (term, field, frequency) observation.

    termfrequency: local = frequency, global = 1
    logentropy:    local = 1 + ln(frequency), global from the corpus term statistics

    Unrecognized names behave as termfrequency.
    """

    def __init__(self, name: str = TERMFREQUENCY, global_weight: Optional[GlobalWeightFn] = None):
        self.requested = name
        if name in SCHEMES:
            self.name = name
        else:
            logger.log_unknown_term_weight(name, TERMFREQUENCY)
            self.name = TERMFREQUENCY
        self._global_weight = global_weight

    def local_weight(self, frequency: int) -> float:
        if frequency < 1:
            raise ValueError(f"Term frequency must be >= 1, got {frequency}")
        if self.name == LOGENTROPY:
            return 1.0 + math.log(frequency)
        return float(frequency)

    def global_weight(self, term: str, field: str) -> float:
        if self.name != LOGENTROPY or self._global_weight is None:
            return 1.0
        return self._global_weight(term, field)

    def weight(self, term: str, field: str, frequency: int) -> float:
        return self.local_weight(frequency) * self.global_weight(term, field)
