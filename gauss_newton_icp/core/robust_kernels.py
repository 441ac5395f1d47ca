"""
Robust kernels for Iteratively Reweighted Least Squares.

Each kernel is returned as a function of the squared residual norm e² which yields
sqrt(w(e)), the factor both residual and Jacobian are multiplied with.
"""
import enum
from typing import Callable

import numpy as np

RobustSqrtWeightFunc = Callable[[float], float]


class RobustKernel(enum.Enum):
    NONE = "none"
    GEMAN_MCCLURE = "gemanmcclure"
    CAUCHY = "cauchy"
    HUBER = "huber"

    @staticmethod
    def from_name(name: str) -> "RobustKernel":
        key = name.strip().lower().replace("-", "").replace("_", "")
        for kernel in RobustKernel:
            if kernel.value == key:
                return kernel
        raise ValueError(f"Unknown robust kernel '{name}'!")


def create_robust_kernel(kernel: RobustKernel, param: float) -> RobustSqrtWeightFunc | None:
    """
    :param kernel: which kernel to use
    :param param: the kernel's scale parameter k (residual norm at which down-weighting becomes relevant)
    :return: None for RobustKernel.NONE (ordinary least squares), else the sqrt-weight function
    """
    if kernel == RobustKernel.NONE:
        return None
    if param <= 0:
        raise ValueError(f"Robust kernel parameter must be positive, got {param}.")

    k2 = param * param

    if kernel == RobustKernel.GEMAN_MCCLURE:
        # rho(e) = (k² e² / 2) / (k² + e²)  =>  w = k⁴ / (k² + e²)²
        def geman_mcclure(err_sqr: float) -> float:
            return k2 / (k2 + err_sqr)
        return geman_mcclure

    if kernel == RobustKernel.CAUCHY:
        # rho(e) = (k² / 2) log(1 + e² / k²)  =>  w = 1 / (1 + e² / k²)
        def cauchy(err_sqr: float) -> float:
            return 1.0 / np.sqrt(1.0 + err_sqr / k2)
        return cauchy

    if kernel == RobustKernel.HUBER:
        # quadratic up to k, linear beyond  =>  w = min(1, k / e)
        def huber(err_sqr: float) -> float:
            if err_sqr <= k2:
                return 1.0
            return np.sqrt(param / np.sqrt(err_sqr))
        return huber

    raise ValueError(f"Robust kernel {kernel} not yet implemented!")
