from dataclasses import dataclass

import numpy as np

# names of the tangent space components, in the order used by se3.py
dof_names = ['tx', 'ty', 'tz', 'roll', 'pitch', 'yaw']


@dataclass
class HessianObservability:
    largest_eigenvalue: float
    smallest_eigenvalue: float
    condition_number: float
    nullspace_vector: np.ndarray  # eigenvector of the smallest eigenvalue
    dominant_dof: str  # tangent component contributing most to nullspace_vector

    def is_degenerate(self, threshold: float = 1e12) -> bool:
        return not np.isfinite(self.condition_number) or self.condition_number > threshold


def hessian_observability(H: np.ndarray) -> HessianObservability:
    """
    From the 6x6 Gauss-Newton Hessian approximation H = J^T J, compute:
      - largest and smallest eigenvalue (squared singular values of J)
      - condition number = largest/smallest
      - the least constrained direction in the tangent space and its dominant component

    Degenerate pairing geometry (e.g. all points on one line) shows up as a (near) zero smallest eigenvalue.
    """
    # eigh returns eigenvalues in ascending order; clip tiny negative values caused by rounding
    eigenvalues, eigenvectors = np.linalg.eigh(0.5 * (H + H.T))
    eigenvalues = np.clip(eigenvalues, 0.0, None)

    largest = float(eigenvalues[-1])
    smallest = float(eigenvalues[0])
    cond = largest / smallest if smallest > 0 else float('inf')

    nullspace_vector = eigenvectors[:, 0]
    dominant_dof = dof_names[int(np.argmax(np.abs(nullspace_vector)))]

    return HessianObservability(largest, smallest, cond, nullspace_vector, dominant_dof)
