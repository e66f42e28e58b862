"""Bull/bear/flat trend classification"""

from collections.abc import Iterable

from ..models.events import TrendState


def classify(delta: float, epsilon: float) -> TrendState:
    """
    Classify a price delta into a trend state

    FLAT when |delta| < epsilon, otherwise the sign picks BULL or BEAR.
    epsilon must be positive so a zero delta always lands on FLAT.

    Args:
        delta: Price change
        epsilon: Noise threshold in price units

    Returns:
        TrendState for the delta
    """
    if not epsilon > 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")

    if abs(delta) < epsilon:
        return TrendState.FLAT
    if delta > 0:
        return TrendState.BULL
    return TrendState.BEAR


def classify_window(deltas: Iterable[float], epsilon: float) -> TrendState:
    """Classify the net change of a short window of consecutive deltas"""
    return classify(sum(deltas), epsilon)


class TrendClassifier:
    """Trend classifier with a fixed noise threshold"""

    def __init__(self, epsilon: float, window: int = 1):
        if not epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        self.epsilon = epsilon
        self.window = window

    def classify(self, delta: float) -> TrendState:
        return classify(delta, self.epsilon)
