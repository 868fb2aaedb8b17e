"""Dice rolling and two-die roll resolution.

A roll in ClashKeeper throws two dice of possibly different sizes. The
higher face plus a modifier is the damage; both faces must beat the gate
to hit, except that double ones always fumble and a matching pair of six
or more always lands as a critical.

Die faces come from a RandomRoller. The default DiceRoller draws them with
the d20 library; tests inject scripted rollers.
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable

import d20

from clashkeeper.core.exceptions import DiceRollError
from clashkeeper.core.logging import get_logger
from clashkeeper.models.results import RollOutcome


logger = get_logger(__name__)


@runtime_checkable
class RandomRoller(Protocol):
    """Source of uniformly distributed die faces."""

    def roll_die(self, sides: int) -> int:
        """Return a face in ``[1, sides]``."""
        ...


def _check_sides(sides: int) -> None:
    if isinstance(sides, bool) or not isinstance(sides, int) or sides < 1:
        raise DiceRollError("Die size must be a positive integer", sides=sides)


class DiceRoller:
    """Uniform die roller backed by the d20 library.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> 1 <= roller.roll_die(12) <= 12
        True
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
        """
        self._seed = seed
        if seed is not None:
            random.seed(seed)
        logger.debug("DiceRoller initialized", seed=seed)

    def roll_die(self, sides: int) -> int:
        """Roll one die.

        Args:
            sides: Number of faces, at least 1.

        Returns:
            A face between 1 and ``sides`` inclusive.

        Raises:
            DiceRollError: If ``sides`` is not a positive integer.
        """
        _check_sides(sides)
        result = d20.roll(f"1d{sides}")
        return result.total


class RollResolver:
    """Resolve opposed two-die rolls.

    Example:
        >>> resolver = RollResolver(DiceRoller())
        >>> outcome = resolver.resolve(10, 8, modifier=3, gate=4)
        >>> outcome.damage == outcome.high_roll + 3
        True
    """

    def __init__(self, roller: RandomRoller | None = None) -> None:
        """Initialize the resolver.

        Args:
            roller: Source of die faces; defaults to a d20-backed DiceRoller.
        """
        self._roller = roller if roller is not None else DiceRoller()

    @property
    def roller(self) -> RandomRoller:
        """The roller supplying die faces."""
        return self._roller

    @staticmethod
    def validate_sizes(die1_size: int, die2_size: int) -> None:
        """Reject die sizes before anything is spent or rolled.

        Raises:
            DiceRollError: If either size is not a positive integer.
        """
        _check_sides(die1_size)
        _check_sides(die2_size)

    def resolve(
        self,
        die1_size: int,
        die2_size: int,
        modifier: int = 0,
        gate: int = 0,
    ) -> RollOutcome:
        """Roll both dice once and classify the result.

        Args:
            die1_size: Sides of the first die.
            die2_size: Sides of the second die.
            modifier: Flat bonus added to the high roll.
            gate: Threshold each die must strictly exceed.

        Returns:
            RollOutcome with faces, damage and hit/fumble/critical flags.

        Raises:
            DiceRollError: If either size is not a positive integer. Both
                sizes are checked before any die is rolled.
        """
        self.validate_sizes(die1_size, die2_size)

        die1 = self._roller.roll_die(die1_size)
        die2 = self._roller.roll_die(die2_size)

        outcome = RollOutcome(
            die1=die1,
            die2=die2,
            die1_size=die1_size,
            die2_size=die2_size,
            modifier=modifier,
            gate=gate,
        )

        logger.info(
            "Dice rolled",
            dice=f"d{die1_size}+d{die2_size}",
            faces=(die1, die2),
            gate=gate,
            damage=outcome.damage,
            verdict=outcome.verdict,
        )
        return outcome


__all__ = [
    "RandomRoller",
    "DiceRoller",
    "RollResolver",
]
