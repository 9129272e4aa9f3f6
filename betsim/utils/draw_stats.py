from dataclasses import dataclass

import numpy as np
from scipy import stats


@dataclass
class UniformityReport:
    draws: int
    outcomes: int
    counts: np.ndarray
    statistic: float
    p_value: float
    critical_value: float
    alpha: float

    @property
    def passed(self) -> bool:
        return self.p_value >= self.alpha

    @property
    def unseen_outcomes(self) -> int:
        return int(np.count_nonzero(self.counts == 0))


def uniformity_report(draws, outcomes: int, alpha: float = 0.001) -> UniformityReport:
    """
    Pearson chi-square goodness-of-fit of integer draws in [0, outcomes) against
    the uniform distribution.
    """
    samples = np.asarray(draws, dtype=np.int64)
    if samples.size == 0:
        raise ValueError("Cannot test uniformity of zero draws.")
    if samples.min() < 0 or samples.max() >= outcomes:
        raise ValueError(f"Draws fall outside [0, {outcomes}).")

    counts = np.bincount(samples, minlength=outcomes)
    result = stats.chisquare(counts)
    return UniformityReport(
        draws=int(samples.size),
        outcomes=outcomes,
        counts=counts,
        statistic=float(result.statistic),
        p_value=float(result.pvalue),
        critical_value=float(stats.chi2.ppf(1.0 - alpha, outcomes - 1)),
        alpha=alpha,
    )
