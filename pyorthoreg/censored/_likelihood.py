"""
Likelihood model for orthogonal regression with censored data.

For trial parameters theta = (a, b, s) (intercept, slope, intrinsic
scatter) every point contributes a likelihood chosen by its censoring
branch. The effective variance of a point, measured perpendicular to
the line y = a + b x, is

    sigma^2 = (b^2 sx^2 + sy^2 - 2 b rho sx sy) / (1 + b^2) + s^2

and the orthogonal distance is nu^2 = (y - a - b x)^2 / (1 + b^2).

    BOTH_DETECTED:
        L = exp(-nu^2 / sigma^2) / sqrt(2 pi sigma^2)

    X_DETECTED_Y_CENSORED (y is an upper limit):
        the limit is a non-detection in linear units. At the detected x the
        line predicts log y = a + b x with vertical spread
        tau_y = sqrt((1 + b^2) sigma^2). Mapping both the prediction and
        its spread to linear units at the limit base^y gives
        L = erfc((base^(a + b x - y) - 1) / (sqrt 2 ln(base) tau_y)) / 2

    Y_DETECTED_X_CENSORED (x is an upper limit):
        the same test along x. At the detected y the line predicts
        log x = (y - a) / b with horizontal spread tau_x = tau_y / |b|,
        L = erfc((base^((y - a) / b - x) - 1) / (sqrt 2 ln(base) tau_x)) / 2

    As base approaches 1 both reduce to the log-space Gaussian CDF
    erfc(offset / (sqrt 2 tau)) / 2. A line far below a limit gives L -> 1;
    one far above it gives L -> 0.

    BOTH_CENSORED:
        no closed form; L = 1e10 so that 1/L is negligible.

The minimizer objective is the elementwise reciprocal 1/L: driving it
down maximizes every point's likelihood.

References:
    Pihajoki, P. (2017). A geometric approach to non-linear correlations
        with intrinsic scatter. MNRAS, 472(3), 3407-3420. Appendix B.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.special import erfc

from pyorthoreg.core.exceptions import ValidationError
from pyorthoreg.censored._censoring import CensorClass, classify, classify_array
from pyorthoreg.censored._common import FitParameters
from pyorthoreg.censored.design import CensoredDesign, DataPoint

logger = logging.getLogger(__name__)

CENSORED_FLOOR = 1e-5
DOUBLY_CENSORED_LIKELIHOOD = 1e10

# Smallest effective variance and |slope| used as divisors.
_MIN_VARIANCE = 1e-12
_MIN_ABS_SLOPE = 1e-8
# exp(300)**2 is still finite, so the summed squared residuals cannot overflow.
_MAX_EXPONENT = 300.0

_SQRT2 = np.sqrt(2.0)


@dataclass(frozen=True)
class LikelihoodDiagnostics:
    """Counts of numerically degenerate points for one evaluation."""

    n_floored: int              # censored likelihoods raised to CENSORED_FLOOR
    n_soft_excluded: int        # doubly-censored points
    n_exponent_capped: int      # detected points whose reciprocal was capped

    def as_dict(self) -> dict[str, int]:
        return {
            "n_floored": self.n_floored,
            "n_soft_excluded": self.n_soft_excluded,
            "n_exponent_capped": self.n_exponent_capped,
        }


@dataclass(frozen=True)
class LikelihoodModel:
    """Per-point likelihood of a censored orthogonal regression.

    Parameters
    ----------
    base : float
        Logarithmic base of the measured quantities (10 for dex). The
        censored branches compare the line with each limit in linear
        units, so base changes their likelihood.
    rho : float
        Correlation between the x and y measurement errors. Only rho=0
        has been validated; other values are accepted with a warning.
    """

    base: float = 10.0
    rho: float = 0.0

    def __post_init__(self):
        if not np.isfinite(self.base) or self.base <= 1:
            raise ValidationError(f"base must be finite and > 1, got {self.base}")
        if not -1.0 <= self.rho <= 1.0:
            raise ValidationError(f"rho must be in [-1, 1], got {self.rho}")
        if self.rho != 0.0:
            message = (
                f"rho={self.rho}: correlated measurement errors are "
                f"unverified; results with rho != 0 are not validated"
            )
            logger.warning(message)
            warnings.warn(message, UserWarning, stacklevel=3)

    @property
    def _ln_base(self) -> float:
        return float(np.log(self.base))

    # --- branch formulas (broadcast over arrays) ---

    def _variance(self, b, s, sigma_x, sigma_y):
        num = (b * sigma_x) ** 2 + sigma_y ** 2 - 2.0 * b * self.rho * sigma_x * sigma_y
        return np.maximum(num / (1.0 + b * b) + s * s, _MIN_VARIANCE)

    def _detected(self, a, b, s, x, sigma_x, y, sigma_y):
        var = self._variance(b, s, sigma_x, sigma_y)
        nu2 = (y - a - b * x) ** 2 / (1.0 + b * b)
        return np.exp(-nu2 / var) / np.sqrt(2.0 * np.pi * var)

    def _detected_reciprocal(self, a, b, s, x, sigma_x, y, sigma_y):
        var = self._variance(b, s, sigma_x, sigma_y)
        exponent = (y - a - b * x) ** 2 / (1.0 + b * b) / var
        capped = exponent > _MAX_EXPONENT
        recip = np.sqrt(2.0 * np.pi * var) * np.exp(np.minimum(exponent, _MAX_EXPONENT))
        return recip, int(np.sum(capped))

    def _limit_test(self, offset, spread):
        """P(linear prediction + noise < linear limit) for log offset and spread."""
        # base**offset - 1, accurate for offsets near zero
        excess = np.expm1(np.minimum(offset * self._ln_base, _MAX_EXPONENT))
        return 0.5 * erfc(excess / (_SQRT2 * self._ln_base * spread))

    def _y_upper_limit(self, a, b, s, x, sigma_x, y, sigma_y):
        var = self._variance(b, s, sigma_x, sigma_y)
        spread = np.sqrt((1.0 + b * b) * var)
        return self._limit_test(a + b * x - y, spread)

    def _x_upper_limit(self, a, b, s, x, sigma_x, y, sigma_y):
        var = self._variance(b, s, sigma_x, sigma_y)
        # sign-preserving guard; b == 0 is treated as +_MIN_ABS_SLOPE
        safe_b = np.copysign(max(abs(b), _MIN_ABS_SLOPE), b)
        spread = np.sqrt((1.0 + b * b) * var) / abs(safe_b)
        return self._limit_test((y - a) / safe_b - x, spread)

    # --- public API ---

    def point_likelihood(self, point: DataPoint, params) -> float:
        """Likelihood of a single point under params = (a, b, s)."""
        a, b, s = (float(v) for v in params)
        args = (a, b, s, point.x, point.sigma_x, point.y, point.sigma_y)
        match classify(point.censored_x, point.censored_y):
            case CensorClass.BOTH_DETECTED:
                return float(self._detected(*args))
            case CensorClass.X_DETECTED_Y_CENSORED:
                return float(max(self._y_upper_limit(*args), CENSORED_FLOOR))
            case CensorClass.Y_DETECTED_X_CENSORED:
                return float(max(self._x_upper_limit(*args), CENSORED_FLOOR))
            case CensorClass.BOTH_CENSORED:
                return DOUBLY_CENSORED_LIKELIHOOD

    def likelihoods(self, design: CensoredDesign, params) -> NDArray:
        """Per-point likelihood vector, shape (n,)."""
        L, _ = self._evaluate(design, params)
        return L

    def residuals(self, design: CensoredDesign, params) -> NDArray:
        """Reciprocal likelihoods, the objective handed to the minimizer."""
        recip, _ = self._evaluate_reciprocal(design, params)
        return recip

    def diagnostics(self, design: CensoredDesign, params) -> LikelihoodDiagnostics:
        """Count floored, capped and soft-excluded points at params."""
        _, diag = self._evaluate_reciprocal(design, params)
        return diag

    def objective(self, design: CensoredDesign):
        """Bind a design, returning theta -> residuals for the minimizer."""
        def fn(theta):
            return self.residuals(design, theta)
        return fn

    # --- vector evaluation ---

    def _branch_args(self, design, mask, params):
        a, b, s = (float(v) for v in FitParameters(*params))
        return (
            a, b, s,
            design.x[mask], design.sigma_x[mask],
            design.y[mask], design.sigma_y[mask],
        )

    def _censored(self, design, codes, params):
        """Raw censored-branch likelihoods and their floor mask."""
        out = {}
        for code, branch in (
            (CensorClass.X_DETECTED_Y_CENSORED, self._y_upper_limit),
            (CensorClass.Y_DETECTED_X_CENSORED, self._x_upper_limit),
        ):
            mask = codes == code
            if np.any(mask):
                out[code] = (mask, branch(*self._branch_args(design, mask, params)))
        return out

    def _evaluate(self, design, params):
        codes = classify_array(design.censored_x, design.censored_y)
        L = np.empty(design.n, dtype=np.float64)

        mask = codes == CensorClass.BOTH_DETECTED
        if np.any(mask):
            L[mask] = self._detected(*self._branch_args(design, mask, params))

        n_floored = 0
        for mask, values in self._censored(design, codes, params).values():
            low = values < CENSORED_FLOOR
            n_floored += int(np.sum(low))
            L[mask] = np.where(low, CENSORED_FLOOR, values)

        both = codes == CensorClass.BOTH_CENSORED
        L[both] = DOUBLY_CENSORED_LIKELIHOOD
        return L, n_floored

    def _evaluate_reciprocal(self, design, params):
        codes = classify_array(design.censored_x, design.censored_y)
        recip = np.empty(design.n, dtype=np.float64)
        n_capped = 0

        mask = codes == CensorClass.BOTH_DETECTED
        if np.any(mask):
            recip[mask], n_capped = self._detected_reciprocal(
                *self._branch_args(design, mask, params)
            )

        n_floored = 0
        for mask, values in self._censored(design, codes, params).values():
            low = values < CENSORED_FLOOR
            n_floored += int(np.sum(low))
            recip[mask] = 1.0 / np.where(low, CENSORED_FLOOR, values)

        both = codes == CensorClass.BOTH_CENSORED
        recip[both] = 1.0 / DOUBLY_CENSORED_LIKELIHOOD

        diag = LikelihoodDiagnostics(
            n_floored=n_floored,
            n_soft_excluded=int(np.sum(both)),
            n_exponent_capped=n_capped,
        )
        if n_floored or n_capped:
            logger.debug(
                "degenerate likelihoods at theta=%s: %s",
                tuple(params), diag.as_dict(),
            )
        return recip, diag
