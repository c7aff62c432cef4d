import uuid
from decimal import Decimal
from types import SimpleNamespace

from app.models.enums import SettlementMode, SettlementStatus
from app.services.settlement_generator import (
    generate_detailed,
    generate_simplified,
    settlement_id,
)

A, B, C, D = 1, 2, 3, 4


def debt(debtor, creditor, amount):
    return SimpleNamespace(debtor_id=debtor, creditor_id=creditor, amount=Decimal(amount))


class TestSettlementId:
    def test_same_inputs_same_id(self):
        assert settlement_id(1, A, C, Decimal("50.00")) == settlement_id(1, A, C, Decimal("50.00"))

    def test_amount_formatting_does_not_change_id(self):
        assert settlement_id(1, A, C, Decimal("50")) == settlement_id(1, A, C, Decimal("50.00"))

    def test_any_component_changes_id(self):
        base = settlement_id(1, A, C, Decimal("50.00"))
        assert base != settlement_id(2, A, C, Decimal("50.00"))
        assert base != settlement_id(1, C, A, Decimal("50.00"))
        assert base != settlement_id(1, A, C, Decimal("50.01"))

    def test_is_name_based_uuid(self):
        assert uuid.UUID(settlement_id(1, A, C, Decimal("50.00"))).version == 3


class TestSimplified:
    def test_chain_collapses_to_one_payment(self):
        txns = generate_simplified(1, {A: Decimal("-50"), B: Decimal("0"), C: Decimal("50")})

        assert len(txns) == 1
        t = txns[0]
        assert (t.from_user_id, t.to_user_id, t.amount) == (A, C, Decimal("50.00"))
        assert t.mode == SettlementMode.SIMPLIFIED
        assert t.status == SettlementStatus.PENDING
        assert t.group_id == 1

    def test_largest_first_matching(self):
        balances = {A: Decimal("100.00"), B: Decimal("-60.00"), C: Decimal("-30.00"), D: Decimal("-10.00")}
        txns = generate_simplified(1, balances)

        assert [(t.from_user_id, t.to_user_id, t.amount) for t in txns] == [
            (B, A, Decimal("60.00")),
            (C, A, Decimal("30.00")),
            (D, A, Decimal("10.00")),
        ]

    def test_payments_clear_every_balance(self):
        balances = {A: Decimal("45.10"), B: Decimal("-20.05"), C: Decimal("30.00"), D: Decimal("-55.05")}
        remaining = dict(balances)
        for t in generate_simplified(7, balances):
            remaining[t.from_user_id] += t.amount
            remaining[t.to_user_id] -= t.amount

        assert all(v == 0 for v in remaining.values())
        # input is not mutated
        assert balances[A] == Decimal("45.10")

    def test_repeated_runs_yield_identical_ids_in_order(self):
        balances = {A: Decimal("30.00"), B: Decimal("-10.00"), C: Decimal("-10.00"), D: Decimal("-10.00")}
        first = generate_simplified(3, balances)
        second = generate_simplified(3, dict(reversed(list(balances.items()))))
        assert [t.id for t in first] == [t.id for t in second]

    def test_empty_balances(self):
        assert generate_simplified(1, {}) == []


class TestDetailed:
    def test_chain_keeps_both_pairs(self):
        txns = generate_detailed(1, [debt(A, B, "50.00"), debt(B, C, "50.00")])

        assert [(t.from_user_id, t.to_user_id, t.amount) for t in txns] == [
            (A, B, Decimal("50.00")),
            (B, C, Decimal("50.00")),
        ]
        assert all(t.mode == SettlementMode.DETAILED for t in txns)

    def test_same_direction_debts_are_summed(self):
        txns = generate_detailed(1, [debt(A, B, "30.00"), debt(A, B, "20.00")])
        assert len(txns) == 1
        assert txns[0].amount == Decimal("50.00")

    def test_opposite_directions_are_not_cancelled(self):
        txns = generate_detailed(1, [debt(A, B, "30.00"), debt(B, A, "10.00")])
        assert {(t.from_user_id, t.to_user_id) for t in txns} == {(A, B), (B, A)}

    def test_ids_are_stable(self):
        debts = [debt(A, B, "30.00"), debt(C, B, "20.00")]
        assert [t.id for t in generate_detailed(1, debts)] == [t.id for t in generate_detailed(1, debts)]

    def test_empty_debts(self):
        assert generate_detailed(1, []) == []

    def test_two_user_group_has_one_payment_in_both_modes(self):
        debts = [debt(A, B, "30.00"), debt(A, B, "20.00")]
        detailed = generate_detailed(1, debts)
        simplified = generate_simplified(1, {A: Decimal("-50.00"), B: Decimal("50.00")})

        assert len(detailed) == len(simplified) == 1
        assert detailed[0].amount == simplified[0].amount == Decimal("50.00")
