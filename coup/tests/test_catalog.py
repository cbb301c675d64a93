"""
Tests for the action catalog and declaration legality.
"""

import pytest

from ..engine_core.action import ActionDeclaration, ActionKind
from ..engine_core.action_generator import (
    ActionGenerator,
    check_action_kind,
    is_legal,
    legal_actions,
    validate_declaration,
)
from ..engine_core.catalog import ACTION_CATALOG, get_rule
from ..engine_core.errors import (
    CoupError,
    IllegalActionAtHighCoins,
    InsufficientFunds,
    InvalidTarget,
)
from ..engine_core.state import Role
from .conftest import build_state


class TestCatalog:
    """The catalog is the single source of the rules."""

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            ACTION_CATALOG[ActionKind.INCOME] = None

    def test_costs(self):
        assert get_rule(ActionKind.COUP).coin_cost == 7
        assert get_rule(ActionKind.ASSASSINATE).coin_cost == 3
        assert get_rule(ActionKind.TAX).coin_cost == 0

    def test_claims_and_blocks(self):
        steal = get_rule(ActionKind.STEAL)
        assert steal.claimed_role == Role.CAPTAIN
        assert steal.blocking_roles == (Role.CAPTAIN, Role.AMBASSADOR)
        assert steal.block_claim == Role.CAPTAIN
        assert get_rule(ActionKind.FOREIGN_AID).block_claim == Role.DUKE
        assert not get_rule(ActionKind.FOREIGN_AID).challengeable
        assert get_rule(ActionKind.INCOME).block_claim is None

    def test_unblockable_unchallengeable_actions(self):
        for kind in (ActionKind.INCOME, ActionKind.COUP):
            rule = get_rule(kind)
            assert not rule.blockable
            assert not rule.challengeable


class TestDeclarationChecks:
    """Tests for declaration validation."""

    def test_ten_coins_must_coup(self):
        state = build_state([[Role.DUKE, Role.DUKE], [Role.CAPTAIN, Role.CONTESSA]], coins=[10, 2])
        with pytest.raises(IllegalActionAtHighCoins):
            check_action_kind(state.players[0], ActionKind.TAX)
        check_action_kind(state.players[0], ActionKind.COUP)

    def test_cost_checked(self):
        state = build_state([[Role.DUKE, Role.DUKE], [Role.CAPTAIN, Role.CONTESSA]], coins=[2, 2])
        with pytest.raises(InsufficientFunds):
            check_action_kind(state.players[0], ActionKind.ASSASSINATE)

    @pytest.mark.parametrize("target_id", [None, 1, 9])
    def test_bad_targets(self, three_player_state, target_id):
        """Missing, self and unknown targets are rejected."""
        declaration = ActionDeclaration(ActionKind.STEAL, actor_id=1, target_id=target_id)
        with pytest.raises(InvalidTarget):
            validate_declaration(three_player_state, declaration)

    def test_dead_target_rejected(self):
        state = build_state([
            [Role.DUKE, Role.CAPTAIN],
            [(Role.CONTESSA, True), (Role.ASSASSIN, True)],
            [Role.AMBASSADOR, Role.DUKE],
        ])
        with pytest.raises(InvalidTarget):
            validate_declaration(state, ActionDeclaration(ActionKind.STEAL, 1, 2))

    def test_untargeted_action_with_target_rejected(self, three_player_state):
        with pytest.raises(InvalidTarget):
            validate_declaration(three_player_state, ActionDeclaration(ActionKind.TAX, 1, 2))

    def test_only_current_participant_declares(self, three_player_state):
        with pytest.raises(CoupError):
            validate_declaration(three_player_state, ActionDeclaration(ActionKind.INCOME, 2))


class TestActionGenerator:
    """Tests for legal declaration listing."""

    def test_two_coins(self, three_player_state):
        kinds = ActionGenerator().legal_kinds(three_player_state, three_player_state.players[0])
        assert kinds == [
            ActionKind.INCOME,
            ActionKind.FOREIGN_AID,
            ActionKind.TAX,
            ActionKind.STEAL,
            ActionKind.EXCHANGE,
        ]

    def test_ten_coins_only_coup(self):
        state = build_state(
            [[Role.DUKE, Role.DUKE], [Role.CAPTAIN, Role.CONTESSA], [Role.DUKE, Role.AMBASSADOR]],
            coins=[10, 2, 2],
        )
        declarations = legal_actions(state)
        assert {d.kind for d in declarations} == {ActionKind.COUP}
        assert sorted(d.target_id for d in declarations) == [2, 3]

    def test_targets_skip_the_dead(self):
        state = build_state(
            [[Role.DUKE, Role.DUKE], [(Role.CAPTAIN, True), (Role.CONTESSA, True)], [Role.DUKE, Role.AMBASSADOR]],
            coins=[7, 2, 2],
        )
        coups = [d for d in legal_actions(state) if d.kind == ActionKind.COUP]
        assert [d.target_id for d in coups] == [3]

    def test_is_legal(self, three_player_state):
        assert is_legal(three_player_state, ActionDeclaration(ActionKind.INCOME, 1))
        assert not is_legal(three_player_state, ActionDeclaration(ActionKind.COUP, 1, 2))
