"""
Turn Resolver - Step-based resolution of one full turn.

This module handles the reaction protocol of a declared action:
- Challenges against the actor's claimed role
- Blocks, and the actor's counter-challenge of a block
- Influence loss and card replacement after a challenge
- Effect application, including Exchange card selection

The resolver pauses whenever a participant has to decide something and
hands back a PendingDecision. provide_decision() resumes it. Exactly one
decision is pending at a time, and state only changes between pauses.

Stages:
    DECLARING -> CHALLENGING_ACTION -> BLOCKING -> CHALLENGING_BLOCK
    -> APPLYING_EFFECT -> TURN_COMPLETE
RESOLVING_CHALLENGE is entered from either challenge stage.

Reaction candidates are visited in seating order starting at seat 0,
not from the seat after the actor. Earlier seats get first refusal.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generator
import itertools
import logging
import random

from .state import GameState, Participant, Role
from .action import (
    ActionDeclaration,
    ActionKind,
    ActionResult,
    ChallengeRecord,
    DecisionKind,
    PendingDecision,
    TurnOutcome,
    PASS,
    CHALLENGE,
    BLOCK,
)
from .catalog import ACTION_CATALOG, ActionRule, get_rule
from .action_generator import ActionGenerator, check_action_kind
from .errors import CoupError, InvalidDecisionChoice, InvariantViolation
from .events import EventBus, EventType
from .reducer import Reducer

logger = logging.getLogger(__name__)

# A step generator yields decisions, receives chosen option values
Steps = Generator[PendingDecision, Any, Any]


class TurnStage(Enum):
    """Stage of the turn being resolved."""
    DECLARING = "declaring"
    CHALLENGING_ACTION = "challenging_action"
    BLOCKING = "blocking"
    CHALLENGING_BLOCK = "challenging_block"
    RESOLVING_CHALLENGE = "resolving_challenge"
    APPLYING_EFFECT = "applying_effect"
    TURN_COMPLETE = "turn_complete"
    GAME_OVER = "game_over"


def holds_claimed_role(participant: Participant, role: Role) -> bool:
    """Challenge verdict: does the accused hold an unrevealed card of the role?"""
    return participant.has_role(role)


@dataclass
class TurnResolver:
    """
    Resolves one turn step-by-step.

    The resolver owns the game state for the duration of the turn and
    replaces it with each reducer result.

    Usage:
        resolver = TurnResolver(reducer=Reducer(rng))
        pending = resolver.begin_turn(state)
        while pending:
            pending = resolver.provide_decision(pending.participant_id, choose(pending))
        state, outcome = resolver.game_state, resolver.outcome
    """
    reducer: Reducer = field(default_factory=Reducer)
    bus: EventBus | None = None

    stage: TurnStage = TurnStage.TURN_COMPLETE
    game_state: GameState | None = None
    pending_decision: PendingDecision | None = None
    outcome: TurnOutcome | None = None

    _steps: Steps | None = field(default=None, repr=False)
    _decision_seq: Any = field(default=None, repr=False)

    @property
    def is_complete(self) -> bool:
        return self._steps is None

    def begin_turn(self, game_state: GameState) -> PendingDecision | None:
        """
        Start resolving the current participant's turn.

        Returns the first pending decision, or None if the turn completed
        without needing one.
        """
        if self._steps is not None:
            raise CoupError("A turn is already being resolved")
        if game_state.is_over:
            raise CoupError("Game is over")
        self.game_state = game_state
        self.outcome = None
        self._decision_seq = itertools.count(1)
        self._commit(self.reducer.start_turn(game_state))
        self._steps = self._run_turn()
        return self._advance(None)

    def provide_decision(self, participant_id: int, choice_index: int) -> PendingDecision | None:
        """
        Answer the pending decision and continue resolution.

        Raises InvalidDecisionChoice for a wrong participant or an index
        outside the offered options; the same decision stays pending.
        """
        if self.pending_decision is None:
            raise InvalidDecisionChoice("No decision pending")
        value = self.pending_decision.validate(participant_id, choice_index)
        logger.debug(
            "participant %s chose %r for %s",
            participant_id, value, self.pending_decision.kind.value,
        )
        return self._advance(value)

    def _advance(self, value: Any) -> PendingDecision | None:
        try:
            self.pending_decision = self._steps.send(value)
        except StopIteration as stop:
            self.pending_decision = None
            self.outcome = stop.value
            self._steps = None
        return self.pending_decision

    def _commit(self, result: ActionResult) -> None:
        """Adopt a reducer result and publish its events."""
        if not result.success:
            raise InvariantViolation(f"Engine transition failed: {result.error}")
        self.game_state = result.new_state
        if self.bus:
            for event in result.events:
                self.bus.publish(event)

    def _ask(
        self,
        participant_id: int,
        kind: DecisionKind,
        prompt: str,
        options: list[Any],
        **context: Any,
    ) -> PendingDecision:
        return PendingDecision(
            decision_id=f"t{self.game_state.turn_number}-d{next(self._decision_seq)}",
            participant_id=participant_id,
            kind=kind,
            prompt=prompt,
            options=options,
            context=context,
        )

    def _player(self, participant_id: int) -> Participant:
        return self.game_state.get_player(participant_id)

    # =========================================================================
    # Turn
    # =========================================================================

    def _run_turn(self) -> Steps:
        actor_id = self.game_state.current_player.participant_id
        outcome = TurnOutcome(turn_number=self.game_state.turn_number, actor_id=actor_id)

        self.stage = TurnStage.DECLARING
        declaration = yield from self._declare(actor_id)
        outcome.declaration = declaration
        rule = get_rule(declaration.kind)

        goes_through = yield from self._react(declaration, rule, outcome)

        if goes_through:
            self.stage = TurnStage.APPLYING_EFFECT
            outcome.effect_applied = yield from self._apply_effect(declaration)

        self.stage = TurnStage.TURN_COMPLETE
        self._commit(self.reducer.end_turn(self.game_state))
        state = self.game_state

        outcome.eliminated = [
            e.data["participant_id"] for e in state.event_log
            if e.type == EventType.PLAYER_ELIMINATED and e.turn_number == outcome.turn_number
        ]
        if state.is_over:
            self.stage = TurnStage.GAME_OVER
            outcome.winner_id = state.winner_id
        else:
            outcome.next_player_id = state.current_player.participant_id
        logger.info(
            "turn %d: %s, effect %s, %d alive",
            outcome.turn_number, declaration.describe(state),
            "applied" if outcome.effect_applied else "discarded",
            len(state.alive_players),
        )
        return outcome

    def _declare(self, actor_id: int) -> Steps:
        """Ask the actor for an action (and target) until one is accepted."""
        error = None
        while True:
            actor = self._player(actor_id)
            kind = yield self._ask(
                actor_id,
                DecisionKind.ACTION_SELECTION,
                f"{actor.name}, choose an action ({actor.coins} coins)",
                list(ACTION_CATALOG),
                coins=actor.coins,
                legal=ActionGenerator().legal_kinds(self.game_state, actor),
                error=error,
            )
            try:
                check_action_kind(actor, kind)
            except CoupError as e:
                logger.warning("Rejected %s for %s: %s", kind.value, actor.name, e.message)
                error = e.message
                continue

            target_id = None
            if get_rule(kind).requires_target:
                targets = [p.participant_id for p in self.game_state.alive_opponents(actor_id)]
                target_id = yield self._ask(
                    actor_id,
                    DecisionKind.TARGET_SELECTION,
                    f"Who to {kind.value}?",
                    targets,
                    action=kind.value,
                )

            declaration = ActionDeclaration(kind=kind, actor_id=actor_id, target_id=target_id)
            result = self.reducer.declare(self.game_state, declaration)
            if result.success:
                self._commit(result)
                return declaration
            logger.warning("Rejected declaration for %s: %s", actor.name, result.error)
            error = result.error

    # =========================================================================
    # Reactions
    # =========================================================================

    def _react(self, declaration: ActionDeclaration, rule: ActionRule, outcome: TurnOutcome) -> Steps:
        """
        Run the challenge and block phases.

        Returns True when the effect should be applied.
        """
        actor_id = declaration.actor_id
        actor = self._player(actor_id)

        if rule.challengeable:
            self.stage = TurnStage.CHALLENGING_ACTION
            candidates = [p.participant_id for p in self.game_state.alive_opponents(actor_id)]
            challenger_id = yield from self._scan(
                candidates,
                DecisionKind.CHALLENGE_OR_PASS,
                [PASS, CHALLENGE],
                CHALLENGE,
                lambda p: f"{p.name}: challenge {actor.name}'s {declaration.kind.value}?",
                claimant_id=actor_id,
                claimed_role=rule.claimed_role.value,
                action=declaration.kind.value,
            )
            if challenger_id is not None:
                record = yield from self._challenge(actor_id, challenger_id, rule.claimed_role)
                outcome.action_challenge = record
                return record.accused_was_honest

        if rule.blockable:
            self.stage = TurnStage.BLOCKING
            if rule.requires_target:
                target = self._player(declaration.target_id)
                candidates = [target.participant_id] if target.alive else []
            else:
                candidates = [p.participant_id for p in self.game_state.alive_opponents(actor_id)]
            roles_text = " or ".join(r.value for r in rule.blocking_roles)
            blocker_id = yield from self._scan(
                candidates,
                DecisionKind.BLOCK_OR_PASS,
                [PASS, BLOCK],
                BLOCK,
                lambda p: f"{p.name}: block {actor.name}'s {declaration.kind.value} with {roles_text}?",
                actor_id=actor_id,
                action=declaration.kind.value,
                blocking_roles=[r.value for r in rule.blocking_roles],
            )
            if blocker_id is not None:
                block_stood = yield from self._counter_challenge(actor_id, blocker_id, rule, outcome)
                outcome.blocker_id = blocker_id
                outcome.block_role = rule.block_claim.value
                outcome.block_stood = block_stood
                return not block_stood

        return True

    def _scan(
        self,
        candidates: list[int],
        kind: DecisionKind,
        options: list[str],
        accept: str,
        prompt_for,
        **context: Any,
    ) -> Steps:
        """Offer each candidate in order; return the first who accepts."""
        for participant_id in candidates:
            participant = self._player(participant_id)
            choice = yield self._ask(participant_id, kind, prompt_for(participant), list(options), **context)
            if choice == accept:
                return participant_id
        return None

    def _counter_challenge(self, actor_id: int, blocker_id: int, rule: ActionRule, outcome: TurnOutcome) -> Steps:
        """
        Let the actor dispute a block.

        Returns True when the block stands.
        """
        actor = self._player(actor_id)
        blocker = self._player(blocker_id)
        claim = rule.block_claim
        self._commit(self.reducer.announce(
            self.game_state, EventType.BLOCK_DECLARED,
            f"{blocker.name} BLOCKS with {claim.value}!",
            blocker_id=blocker_id,
            actor_id=actor_id,
            role=claim.value,
        ))

        self.stage = TurnStage.CHALLENGING_BLOCK
        choice = yield self._ask(
            actor_id,
            DecisionKind.CHALLENGE_OR_PASS,
            f"{actor.name}: challenge {blocker.name}'s block ({claim.value})?",
            [PASS, CHALLENGE],
            claimant_id=blocker_id,
            claimed_role=claim.value,
            action="Block",
        )

        if choice == CHALLENGE:
            record = yield from self._challenge(blocker_id, actor_id, claim)
            outcome.block_challenge = record
            block_stood = record.accused_was_honest
        else:
            block_stood = True

        self._commit(self.reducer.announce(
            self.game_state, EventType.BLOCK_RESOLVED,
            "Block successful." if block_stood else "Block failed.",
            blocker_id=blocker_id,
            stood=block_stood,
        ))
        return block_stood

    def _challenge(self, accused_id: int, challenger_id: int, role: Role) -> Steps:
        """
        Resolve a challenge against a claimed role.

        Honest: the challenger loses influence and the accused swaps the
        proven card for a fresh one. Bluffing: the accused loses influence.
        """
        previous_stage = self.stage
        self.stage = TurnStage.RESOLVING_CHALLENGE
        accused = self._player(accused_id)
        challenger = self._player(challenger_id)
        self._commit(self.reducer.announce(
            self.game_state, EventType.CHALLENGE_ISSUED,
            f"{challenger.name} CHALLENGES!",
            challenger_id=challenger_id,
            accused_id=accused_id,
            role=role.value,
        ))

        honest = holds_claimed_role(accused, role)
        if honest:
            message = f"{accused.name} HAS the {role.value}! {challenger.name} loses influence."
        else:
            message = f"{accused.name} was BLUFFING! {accused.name} loses influence."
        self._commit(self.reducer.announce(
            self.game_state, EventType.CHALLENGE_RESOLVED, message,
            challenger_id=challenger_id,
            accused_id=accused_id,
            role=role.value,
            accused_was_honest=honest,
        ))

        if honest:
            yield from self._lose_influence(challenger_id)
            self._commit(self.reducer.replace_claimed_card(self.game_state, accused_id, role))
        else:
            yield from self._lose_influence(accused_id)

        self.stage = previous_stage
        return ChallengeRecord(
            challenger_id=challenger_id,
            accused_id=accused_id,
            claimed_role=role.value,
            accused_was_honest=honest,
        )

    def _lose_influence(self, participant_id: int) -> Steps:
        """
        Reveal one of the participant's cards.

        With a single unrevealed card there is nothing to ask.
        """
        participant = self._player(participant_id)
        live = participant.live_indices
        if not live:
            return
        if len(live) == 1:
            index = live[0]
        else:
            index = yield self._ask(
                participant_id,
                DecisionKind.CARD_TO_LOSE,
                f"{participant.name}, choose a card to lose",
                live,
                roles=[participant.hand[i].role.value for i in live],
            )
        self._commit(self.reducer.lose_influence(self.game_state, participant_id, index))

    # =========================================================================
    # Effects
    # =========================================================================

    def _apply_effect(self, declaration: ActionDeclaration) -> Steps:
        """
        Apply the declared effect.

        Returns True if anything was applied. Nothing applies once the actor
        is eliminated, or when the target already is.
        """
        actor = self._player(declaration.actor_id)
        if not actor.alive:
            return False
        target = self._player(declaration.target_id) if declaration.target_id is not None else None
        if target is not None and not target.alive:
            return False

        kind = declaration.kind
        if kind in (ActionKind.ASSASSINATE, ActionKind.COUP):
            verb = "Assassinated" if kind == ActionKind.ASSASSINATE else "Couped"
            self._commit(self.reducer.announce(
                self.game_state, EventType.EFFECT_APPLIED, f"{target.name} {verb}!",
                actor_id=actor.participant_id,
                action=kind.value,
                target_id=target.participant_id,
            ))
            yield from self._lose_influence(target.participant_id)
        elif kind == ActionKind.EXCHANGE:
            yield from self._exchange(actor.participant_id)
        else:
            self._commit(self.reducer.apply_effect(self.game_state))
        return True

    def _exchange(self, actor_id: int) -> Steps:
        """Draw two, keep as many as the actor had unrevealed, return the rest."""
        keep_count = self._player(actor_id).influence
        self._commit(self.reducer.begin_exchange(self.game_state, actor_id))

        kept: list[int] = []
        for _ in range(keep_count):
            actor = self._player(actor_id)
            remaining = [i for i in actor.live_indices if i not in kept]
            index = yield self._ask(
                actor_id,
                DecisionKind.CARD_TO_KEEP,
                f"{actor.name}, choose a card to keep ({len(kept) + 1} of {keep_count})",
                remaining,
                roles=[actor.hand[i].role.value for i in remaining],
            )
            kept.append(index)

        self._commit(self.reducer.finish_exchange(self.game_state, actor_id, kept))


def resolve_turn(
    game_state: GameState,
    decide,
    rng: random.Random | None = None,
    bus: EventBus | None = None,
) -> tuple[GameState, TurnOutcome]:
    """
    Resolve one turn, answering every decision with `decide(state, pending) -> index`.

    Convenience wrapper for callers that can answer synchronously.
    """
    resolver = TurnResolver(reducer=Reducer(rng=rng or random.Random()), bus=bus)
    pending = resolver.begin_turn(game_state)
    while pending is not None:
        pending = resolver.provide_decision(
            pending.participant_id, decide(resolver.game_state, pending)
        )
    return resolver.game_state, resolver.outcome
