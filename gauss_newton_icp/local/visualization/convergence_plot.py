import matplotlib.pyplot as plt
import numpy as np


def plot_convergence(error_history: list[float]):
    """Plots the residual norm of each Gauss-Newton iteration (log scale)."""
    errors = np.asarray(error_history, dtype=float)
    # zero errors cannot be drawn on a log scale
    errors = np.maximum(errors, np.finfo(float).tiny)
    plt.semilogy(np.arange(len(errors)), errors, marker="o")
    plt.ylabel("Residual norm")
    plt.xlabel("Iteration")
    plt.show()
