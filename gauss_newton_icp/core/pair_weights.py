import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class PairWeights:
    """Default weight for each kind of pairing."""
    pt2pt: float = 1.0
    pt2ln: float = 1.0
    pt2pl: float = 1.0
    pl2pl: float = 1.0
    ln2ln: float = 1.0


class PointWeightResolver:
    """
    Walks through a table of (block length, weight) entries which partitions the
    point-to-point pairings into contiguous blocks sharing a weight.
    Indices must be queried in increasing order.
    """

    def __init__(self, blocks: Sequence[tuple[int, float]], default_weight: float):
        """
        :param blocks: the block table, empty if all point pairs use `default_weight`
        :param default_weight: the point-to-point weight used when no table is given
        """
        self._blocks = list(blocks)
        for length, _ in self._blocks:
            if length < 0:
                raise ValueError(f"Malformed point weight table, negative block length {length}.")
        self._default_weight = default_weight
        self._block_index = 0
        self._block_start = 0

    @property
    def has_blocks(self) -> bool:
        return len(self._blocks) > 0

    @property
    def covered(self) -> int:
        """Number of point pairs covered by the whole table."""
        return int(sum(length for length, _ in self._blocks))

    def weight_for(self, idx: int) -> float:
        if not self.has_blocks:
            return self._default_weight

        # advance exactly when idx reaches the end of the current block (skipping empty blocks)
        while idx >= self._block_start + self._blocks[self._block_index][0]:
            self._block_start += self._blocks[self._block_index][0]
            self._block_index += 1
            if self._block_index >= len(self._blocks):
                raise ValueError(
                    f"Point weight blocks cover only {self._block_start} point pairs, "
                    f"but a weight for point pair {idx} was requested."
                )
        return float(self._blocks[self._block_index][1])


def expand_point_weights(blocks: Sequence[tuple[int, float]], n: int, default_weight: float) -> np.ndarray:
    """
    Resolves the weight of each of the `n` point-to-point pairings up front, so the
    accumulation can look them up by index.

    :param blocks: (block length, weight) table, may be empty
    :param n: number of point-to-point pairings
    :param default_weight: weight used for all pairs if `blocks` is empty
    :return: numpy array of shape (n,)
    """
    resolver = PointWeightResolver(blocks, default_weight)
    weights = np.array([resolver.weight_for(i) for i in range(n)], dtype=float)
    if resolver.has_blocks and resolver.covered > n:
        logger.warning(f"Malformed point weight table: blocks cover {resolver.covered} point pairs, "
                       f"but only {n} exist. Ignoring the surplus.")
    return weights
