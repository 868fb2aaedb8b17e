"""Transport-agnostic command dispatch.

A chat transport splits a message into a verb, plain argument tokens and
the ids of the users it mentions, then hands a ``Command`` to
``CommandDispatcher.dispatch``. The dispatcher parses the tokens, calls the
ActionCoordinator and returns a ``CommandResponse`` holding the structured
result record or an ``ErrorReport``. It never renders text.

Every command runs under one re-entrant lock, so commands are processed
one at a time to completion.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from pydantic import BaseModel

from clashkeeper.commands.parsing import (
    parse_adjustment,
    parse_choice,
    parse_int,
    parse_roll_args,
    require_args,
    split_damage_kind,
)
from clashkeeper.core.config import Settings, get_settings
from clashkeeper.core.exceptions import (
    ClashKeeperError,
    MalformedArgumentError,
    UnknownCommandError,
)
from clashkeeper.core.logging import bind_context, clear_context, configure_logging, get_logger
from clashkeeper.engine.coordinator import ActionCoordinator, Participant
from clashkeeper.engine.session import ClashSession
from clashkeeper.importers.sheets import SheetImporter
from clashkeeper.models.combatant import Baseline
from clashkeeper.models.enums import Resource
from clashkeeper.models.results import CommandHelp, ErrorReport, GuideResult
from clashkeeper.storage.database import BaselineDatabase


logger = get_logger(__name__)

INTERNAL_ERROR_KIND = "internal"
INTERNAL_ERROR_MESSAGE = "Something went wrong while running that command."

_SHEET_USAGE = "set <name> <hp> <mp> <ip> <armor> <barrier> [@player]"

CATALOGUE: tuple[CommandHelp, ...] = (
    CommandHelp(verb="set", usage=_SHEET_USAGE, summary="Set a character sheet and refill HP/MP/IP"),
    CommandHelp(verb="view", usage="view [@player]", summary="Show current pools"),
    CommandHelp(verb="import", usage="import <sheet link> [@player]", summary="Load a sheet from Google Sheets"),
    CommandHelp(verb="name", usage="name <character name>", summary="Rename your character"),
    CommandHelp(verb="attack", usage="a <d1> <d2> <mod> <gate>", summary="Roll an attack", aliases=["a"]),
    CommandHelp(verb="cast", usage="c <d1> <d2> <mod> <gate> [cost]", summary="Spend MP and roll a cast", aliases=["c"]),
    CommandHelp(verb="hp", usage="hp <amount|full|zero> [@player]", summary="Adjust HP"),
    CommandHelp(verb="mp", usage="mp <amount|full|zero> [@player]", summary="Adjust MP"),
    CommandHelp(verb="ip", usage="ip <amount|full|zero> [@player]", summary="Adjust IP"),
    CommandHelp(verb="armor", usage="armor <amount|full|zero> [@player]", summary="Adjust Armor"),
    CommandHelp(verb="barrier", usage="barrier <amount|full|zero> [@player]", summary="Adjust Barrier"),
    CommandHelp(verb="defend", usage="defend", summary="Raise Armor and Barrier by their maxima"),
    CommandHelp(verb="turn", usage="turn [@player]", summary="End the turn: drop Armor and Barrier"),
    CommandHelp(verb="rest", usage="rest", summary="Refill HP and MP"),
    CommandHelp(
        verb="gmattack",
        usage="gmattack <d1> <d2> <mod> <gate> @targets [armor|barrier|true]",
        summary="Roll once; each target answers with respond",
    ),
    CommandHelp(
        verb="damage",
        usage="damage <d1> <d2> <mod> <gate> @targets [armor|barrier|true]",
        summary="Roll once and damage every target immediately",
    ),
    CommandHelp(verb="respond", usage="respond <token> <defend|take>", summary="Answer a GM attack"),
    CommandHelp(
        verb="clash",
        usage="clash <start|end|add|remove|list|done|round> [@players]",
        summary="Run an encounter",
    ),
    CommandHelp(verb="guide", usage="guide", summary="List every command"),
)

VERB_ALIASES: Mapping[str, str] = {"a": "attack", "c": "cast"}


@dataclass(frozen=True)
class Command:
    """A tokenised command as delivered by the transport.

    Attributes:
        verb: Command name, without any prefix character.
        args: Plain argument tokens, mentions already removed.
        acting_id: Id of the user who issued the command.
        mentioned_ids: Ids of mentioned users, in message order.
        display_names: Transport display names keyed by id.
    """

    verb: str
    args: Sequence[str] = ()
    acting_id: str = ""
    mentioned_ids: Sequence[str] = ()
    display_names: Mapping[str, str] = field(default_factory=dict)

    @property
    def actor(self) -> Participant:
        return Participant(self.acting_id, self.display_names.get(self.acting_id))

    @property
    def mentioned(self) -> list[Participant]:
        return [Participant(i, self.display_names.get(i)) for i in self.mentioned_ids]

    @property
    def subject(self) -> Participant:
        """The first mentioned user, else the actor."""
        mentioned = self.mentioned
        return mentioned[0] if mentioned else self.actor


@dataclass(frozen=True)
class CommandResponse:
    """Outcome of one dispatched command.

    Exactly one of ``result`` and ``error`` is set.
    """

    ok: bool
    verb: str
    result: BaseModel | None = None
    error: ErrorReport | None = None


Handler = Callable[[Command], BaseModel]


class CommandDispatcher:
    """Routes tokenised commands to the ActionCoordinator.

    Example:
        >>> dispatcher = CommandDispatcher(ClashSession.create())
        >>> response = dispatcher.dispatch(Command("hp", ["-5"], acting_id="42"))
        >>> response.ok
        True
    """

    def __init__(self, session: ClashSession) -> None:
        """Initialize the dispatcher.

        Args:
            session: Engine instance every command acts on.
        """
        self.session = session
        self._lock = threading.RLock()
        self._handlers: dict[str, Handler] = {
            "set": self._set,
            "view": self._view,
            "import": self._import,
            "name": self._name,
            "attack": self._attack,
            "cast": self._cast,
            "defend": self._defend,
            "turn": self._turn,
            "rest": self._rest,
            "gmattack": self._gm_attack,
            "damage": self._damage,
            "respond": self._respond,
            "clash": self._clash,
            "guide": self._guide,
        }
        for resource in Resource:
            self._handlers[resource.value.lower()] = self._adjuster(resource)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> CommandDispatcher:
        """Build a dispatcher with logging, storage and sheet import wired from settings.

        A SQLite store is attached only when ``storage.database_path`` is set.
        """
        settings = settings or get_settings()
        configure_logging(
            settings.effective_log_level,
            json_format=settings.json_logs,
            log_file=settings.log_file,
            app=settings.app_name,
        )
        store = None
        if settings.storage.database_path is not None:
            store = BaselineDatabase(settings.storage.database_path)
        importer = SheetImporter(settings.sheets)
        session = ClashSession.create(settings, store=store, importer=importer)
        return cls(session)

    @property
    def coordinator(self) -> ActionCoordinator:
        return self.session.coordinator

    @property
    def verbs(self) -> list[str]:
        """Every verb the dispatcher accepts, aliases included."""
        return sorted([*self._handlers, *VERB_ALIASES])

    def dispatch(self, command: Command) -> CommandResponse:
        """Run one command to completion.

        Domain failures become an ErrorReport with their kind and any
        remediation hint. Unexpected exceptions are logged with traceback
        and reported as kind ``internal``. Mutations that already committed
        are kept in both cases.
        """
        verb = command.verb.strip().lower()
        verb = VERB_ALIASES.get(verb, verb)

        with self._lock:
            bind_context(acting_id=command.acting_id, verb=verb)
            try:
                handler = self._handlers.get(verb)
                if handler is None:
                    raise UnknownCommandError(
                        f"Unknown command '{command.verb}'",
                        details={"verb": command.verb},
                    )
                result = handler(command)
                logger.debug("Command completed", result_type=type(result).__name__)
                return CommandResponse(ok=True, verb=verb, result=result)
            except ClashKeeperError as exc:
                logger.warning("Command failed", kind=exc.kind, error=exc.message, details=exc.details)
                return CommandResponse(
                    ok=False,
                    verb=verb,
                    error=ErrorReport(
                        kind=exc.kind,
                        message=exc.message,
                        remediation=getattr(exc, "remediation", None),
                    ),
                )
            except Exception:
                logger.exception("Unexpected command failure")
                return CommandResponse(
                    ok=False,
                    verb=verb,
                    error=ErrorReport(kind=INTERNAL_ERROR_KIND, message=INTERNAL_ERROR_MESSAGE),
                )
            finally:
                clear_context()

    # =========================================================================
    # Sheets
    # =========================================================================

    def _set(self, command: Command) -> BaseModel:
        require_args(command.args, 6, _SHEET_USAGE)
        name = command.args[0]
        labels = ("hp", "mp", "ip", "armor", "barrier")
        values = {label: parse_int(token, label) for label, token in zip(labels, command.args[1:6])}
        for label, value in values.items():
            if value < 0:
                raise MalformedArgumentError(
                    f"{label} must not be negative",
                    argument=label,
                    token=str(value),
                )
        if len(name) > 100:
            raise MalformedArgumentError("Character name is too long", argument="name", token=name)

        baseline = Baseline(
            character_name=name,
            max_hp=values["hp"],
            max_mp=values["mp"],
            max_ip=values["ip"],
            max_armor=values["armor"],
            max_barrier=values["barrier"],
        )
        return self.coordinator.set_sheet(command.subject, baseline)

    def _view(self, command: Command) -> BaseModel:
        return self.coordinator.view(command.subject)

    def _import(self, command: Command) -> BaseModel:
        require_args(command.args, 1, "import <sheet link>")
        return self.coordinator.import_sheet(command.subject, command.args[0])

    def _name(self, command: Command) -> BaseModel:
        require_args(command.args, 1, "name <character name>")
        return self.coordinator.rename(command.actor, " ".join(command.args))

    # =========================================================================
    # Pools
    # =========================================================================

    def _adjuster(self, resource: Resource) -> Handler:
        def handler(command: Command) -> BaseModel:
            adjustment = parse_adjustment(command.args[0] if command.args else None)
            return self.coordinator.adjust(command.subject, resource, adjustment)

        return handler

    def _defend(self, command: Command) -> BaseModel:
        return self.coordinator.defend(command.actor)

    def _turn(self, command: Command) -> BaseModel:
        return self.coordinator.end_turn(command.subject)

    def _rest(self, command: Command) -> BaseModel:
        return self.coordinator.rest(command.actor)

    # =========================================================================
    # Rolls
    # =========================================================================

    def _attack(self, command: Command) -> BaseModel:
        return self.coordinator.attack(command.actor, *parse_roll_args(command.args))

    def _cast(self, command: Command) -> BaseModel:
        d1, d2, mod, gate = parse_roll_args(command.args)
        cost = parse_int(command.args[4], "cost") if len(command.args) > 4 else None
        return self.coordinator.cast(command.actor, d1, d2, mod, gate, cost)

    def _gm_attack(self, command: Command) -> BaseModel:
        args, kind = split_damage_kind(command.args)
        d1, d2, mod, gate = parse_roll_args(args)
        return self.coordinator.gm_attack(command.mentioned, d1, d2, mod, gate, kind)

    def _damage(self, command: Command) -> BaseModel:
        args, kind = split_damage_kind(command.args)
        d1, d2, mod, gate = parse_roll_args(args)
        return self.coordinator.directed_damage(command.mentioned, d1, d2, mod, gate, kind)

    def _respond(self, command: Command) -> BaseModel:
        require_args(command.args, 2, "respond <token> <defend|take>")
        choice = parse_choice(command.args[1])
        return self.coordinator.respond(command.actor, command.args[0], choice)

    # =========================================================================
    # Clash
    # =========================================================================

    def _clash(self, command: Command) -> BaseModel:
        require_args(command.args, 1, "clash <start|end|add|remove|list|done|round>")
        sub = command.args[0].lower()
        match sub:
            case "start":
                return self.coordinator.clash_start()
            case "end":
                return self.coordinator.clash_end()
            case "add":
                return self.coordinator.clash_enroll(command.mentioned)
            case "remove":
                return self.coordinator.clash_unenroll(command.mentioned)
            case "list":
                return self.coordinator.clash_list()
            case "done":
                return self.coordinator.mark_turn_done(command.mentioned or [command.actor])
            case "round":
                return self.coordinator.new_round()
        raise UnknownCommandError(
            f"Unknown clash action '{command.args[0]}'",
            details={"verb": "clash", "action": command.args[0]},
        )

    def _guide(self, command: Command) -> BaseModel:
        return GuideResult(commands=list(CATALOGUE))


__all__ = [
    "CATALOGUE",
    "VERB_ALIASES",
    "INTERNAL_ERROR_KIND",
    "Command",
    "CommandResponse",
    "CommandDispatcher",
]
