"""Pydantic V2 result records returned by the engine.

Every engine operation returns one of these records instead of rendered
text. The presentation layer owns all formatting; these models only carry
old/new values, maxima and outcome flags.

The module also defines the ``Adjustment`` tagged variant (full, zero or a
signed delta) that the argument parser produces for pool commands.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from clashkeeper.core.constants import CRITICAL_MIN_FACE, FUMBLE_FACE
from clashkeeper.models.combatant import Baseline
from clashkeeper.models.enums import DamageKind, FollowUpChoice, Resource, RollVerdict


_RECORD_CONFIG = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Pool Adjustments
# =============================================================================


class SetFull(BaseModel):
    """Set a pool to its maximum."""

    model_config = _RECORD_CONFIG

    kind: Literal["full"] = "full"


class SetZero(BaseModel):
    """Empty a pool."""

    model_config = _RECORD_CONFIG

    kind: Literal["zero"] = "zero"


class Delta(BaseModel):
    """Add a signed amount to a pool."""

    model_config = _RECORD_CONFIG

    kind: Literal["delta"] = "delta"
    amount: int


Adjustment = Annotated[SetFull | SetZero | Delta, Field(discriminator="kind")]


# =============================================================================
# Dice
# =============================================================================


class RollOutcome(BaseModel):
    """Outcome of one opposed two-die roll.

    Attributes:
        die1: Face shown by the first die.
        die2: Face shown by the second die.
        die1_size: Sides of the first die.
        die2_size: Sides of the second die.
        modifier: Flat bonus added to the high roll.
        gate: Threshold each die must exceed.
    """

    model_config = _RECORD_CONFIG

    die1: int = Field(ge=1)
    die2: int = Field(ge=1)
    die1_size: int = Field(ge=1)
    die2_size: int = Field(ge=1)
    modifier: int = 0
    gate: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def high_roll(self) -> int:
        """The larger of the two faces."""
        return max(self.die1, self.die2)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        """Sum of both faces."""
        return self.die1 + self.die2

    @computed_field  # type: ignore[prop-decorator]
    @property
    def damage(self) -> int:
        """High roll plus modifier."""
        return self.high_roll + self.modifier

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fumble(self) -> bool:
        """Both dice show their minimum face."""
        return self.die1 == FUMBLE_FACE and self.die2 == FUMBLE_FACE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def critical(self) -> bool:
        """Both dice show the same face, at least six, and it is not a fumble."""
        return not self.fumble and self.die1 == self.die2 and self.die1 >= CRITICAL_MIN_FACE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hit(self) -> bool:
        """Fumbles always miss, criticals always hit, otherwise both dice must clear the gate."""
        if self.fumble:
            return False
        if self.critical:
            return True
        return self.die1 > self.gate and self.die2 > self.gate

    @computed_field  # type: ignore[prop-decorator]
    @property
    def verdict(self) -> RollVerdict:
        """Headline verdict for presentation."""
        if self.fumble:
            return RollVerdict.FUMBLE
        if self.critical:
            return RollVerdict.CRITICAL
        return RollVerdict.HIT if self.hit else RollVerdict.MISS


# =============================================================================
# Ledger Records
# =============================================================================


class ResourceChange(BaseModel):
    """Before/after values of one pool."""

    model_config = _RECORD_CONFIG

    resource: Resource
    old: int
    new: int
    maximum: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def delta(self) -> int:
        """Signed change actually applied."""
        return self.new - self.old


class ResourceLevel(BaseModel):
    """Current and maximum value of a pool."""

    model_config = _RECORD_CONFIG

    current: int
    maximum: int


class PoolSnapshot(BaseModel):
    """Read-only view of one combatant's pools."""

    model_config = _RECORD_CONFIG

    combatant_id: str
    display_name: str
    character_name: str
    levels: dict[Resource, ResourceLevel]

    def current(self, resource: Resource) -> int:
        """Current value of ``resource``."""
        return self.levels[resource].current

    def maximum(self, resource: Resource) -> int:
        """Maximum value of ``resource``."""
        return self.levels[resource].maximum


class LedgerResult(BaseModel):
    """Result of a single-combatant pool action (adjust, defend, turn, rest).

    Attributes:
        combatant_id: Who was changed.
        character_name: Character name at the time of the change.
        action: Name of the action that ran.
        changes: Per-pool before/after values, in application order.
        turn_marked: Whether the action also marked the clash turn as done.
    """

    model_config = _RECORD_CONFIG

    combatant_id: str
    character_name: str
    action: str
    changes: list[ResourceChange] = Field(default_factory=list)
    turn_marked: bool = False


class SelfRollResult(BaseModel):
    """Result of an attack or cast rolled by the acting combatant."""

    model_config = _RECORD_CONFIG

    combatant_id: str
    character_name: str
    action: Literal["attack", "cast"]
    outcome: RollOutcome
    mp_change: ResourceChange | None = None


class TargetDamage(BaseModel):
    """Damage resolution for one target.

    Attributes:
        combatant_id: Target id.
        character_name: Target character name.
        kind: Damage kind applied.
        damage: Incoming damage before absorption.
        defended: Whether the target raised defenses before absorbing.
        changes: Pool changes in order (defenses, absorbing pool, HP).
        overflow: Damage that passed the absorbing pool into HP.
    """

    model_config = _RECORD_CONFIG

    combatant_id: str
    character_name: str
    kind: DamageKind
    damage: int
    defended: bool = False
    changes: list[ResourceChange] = Field(default_factory=list)
    overflow: int = 0


class DirectedDamageResult(BaseModel):
    """Result of a directed attack applied immediately to every target."""

    model_config = _RECORD_CONFIG

    outcome: RollOutcome
    kind: DamageKind
    applied: bool
    targets: list[TargetDamage] = Field(default_factory=list)


class PendingAttackResult(BaseModel):
    """Result of a GM attack whose targets answer later.

    ``token`` is None when the roll missed and nothing is awaiting an answer.
    """

    model_config = _RECORD_CONFIG

    outcome: RollOutcome
    kind: DamageKind
    target_ids: list[str]
    token: str | None = None
    expires_at: datetime | None = None


class FollowUpResult(BaseModel):
    """Result of a target answering a deferred GM attack."""

    model_config = _RECORD_CONFIG

    token: str
    choice: FollowUpChoice
    target: TargetDamage
    remaining_target_ids: list[str] = Field(default_factory=list)


# =============================================================================
# Clash Records
# =============================================================================


class ClashEntry(BaseModel):
    """One enrolled combatant as seen in a clash listing."""

    model_config = _RECORD_CONFIG

    combatant_id: str
    has_acted: bool
    pool: PoolSnapshot | None = None


class ClashResult(BaseModel):
    """Result of a clash lifecycle command.

    Attributes:
        action: Sub-command that ran (start, end, add, remove, list, done, round).
        active: Whether a clash is active afterwards.
        round_number: Current round (0 when inactive).
        entries: Enrolled combatants in join order.
        added: Ids newly enrolled by this command.
        removed: Ids removed by this command.
        marked: Ids marked as having acted by this command.
    """

    model_config = _RECORD_CONFIG

    action: str
    active: bool
    round_number: int
    entries: list[ClashEntry] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    marked: list[str] = Field(default_factory=list)


# =============================================================================
# Sheet Records
# =============================================================================


class SheetResult(BaseModel):
    """Result of setting or importing a character sheet."""

    model_config = _RECORD_CONFIG

    combatant_id: str
    baseline: Baseline
    pool: PoolSnapshot
    source: Literal["command", "import"]
    persisted: bool


class CommandHelp(BaseModel):
    """Catalogue entry for one command."""

    model_config = _RECORD_CONFIG

    verb: str
    usage: str
    summary: str
    aliases: list[str] = Field(default_factory=list)


class GuideResult(BaseModel):
    """The command catalogue."""

    model_config = _RECORD_CONFIG

    commands: list[CommandHelp]


class ErrorReport(BaseModel):
    """A failure reported back through the dispatch boundary."""

    model_config = _RECORD_CONFIG

    kind: str
    message: str
    remediation: str | None = None


__all__ = [
    "SetFull",
    "SetZero",
    "Delta",
    "Adjustment",
    "RollOutcome",
    "ResourceChange",
    "ResourceLevel",
    "PoolSnapshot",
    "LedgerResult",
    "SelfRollResult",
    "TargetDamage",
    "DirectedDamageResult",
    "PendingAttackResult",
    "FollowUpResult",
    "ClashEntry",
    "ClashResult",
    "SheetResult",
    "CommandHelp",
    "GuideResult",
    "ErrorReport",
]
