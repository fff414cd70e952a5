import threading
from datetime import date

from tests.fakes import at, set_balance


def balance_of(container, uow, employee_id, month, year):
    with uow.transaction() as tx:
        return container.ledger.get_or_create(tx.leave_balances, employee_id, month, year)


def test_new_month_gets_the_full_grant(container, uow):
    balance = balance_of(container, uow, 1, 3, 2026)
    assert balance.balance_minutes == 1080
    assert balance.utilized_minutes == 0
    assert balance.carryover_minutes == 0


def test_unused_leave_carries_over_capped_at_one_day(container, uow):
    set_balance(uow, 1, 2, 2026, balance=1080, utilized=300)

    balance = balance_of(container, uow, 1, 3, 2026)
    assert balance.carryover_minutes == 540
    assert balance.balance_minutes == 1620

    # Carryover is folded in once.
    assert balance_of(container, uow, 1, 3, 2026).balance_minutes == 1620


def test_small_remainder_carries_over_in_full(container, uow):
    set_balance(uow, 1, 2, 2026, balance=1080, utilized=1000)
    assert balance_of(container, uow, 1, 3, 2026).carryover_minutes == 80


def test_future_month_does_not_pull_carryover_yet(container, uow):
    balance = balance_of(container, uow, 1, 4, 2026)
    assert balance.carryover_minutes == 0
    assert balance.balance_minutes == 1080


def test_carryover_crosses_the_year_boundary(container, uow, clock):
    clock.current = at(date(2027, 1, 5), 9, 0)
    set_balance(uow, 1, 12, 2026, balance=1080, utilized=700)
    assert balance_of(container, uow, 1, 1, 2027).carryover_minutes == 380


def test_insufficient_balance_fails_without_change(container, uow):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=1000)
    with uow.transaction() as tx:
        result = container.ledger.utilize(tx.leave_balances, 1, 3, 2026, 81)
    assert not result.success
    assert result.remaining_minutes == 80
    assert uow.state.leave_balances[(1, 3, 2026)].utilized_minutes == 1000


def test_utilize_exact_remaining(container, uow):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=1000)
    with uow.transaction() as tx:
        result = container.ledger.utilize(tx.leave_balances, 1, 3, 2026, 80)
    assert result.success
    assert result.remaining_minutes == 0


def test_release_never_goes_below_zero(container, uow):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=50)
    with uow.transaction() as tx:
        released = container.ledger.release(tx.leave_balances, 1, 3, 2026, 200)
    assert released == 50
    assert uow.state.leave_balances[(1, 3, 2026)].utilized_minutes == 0


def test_concurrent_utilize_never_overdraws(container, uow):
    results = []

    def worker():
        with uow.transaction() as tx:
            results.append(container.ledger.utilize(tx.leave_balances, 1, 3, 2026, 135))

    threads = [threading.Thread(target=worker) for _ in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.success) == 8
    assert uow.state.leave_balances[(1, 3, 2026)].utilized_minutes == 1080


def test_current_balance_view(container, uow):
    set_balance(uow, 1, 3, 2026, balance=1620, utilized=100, carryover=540)
    view = container.leave_service.current_balance(1)
    assert view.balance_minutes == 1620
    assert view.available_minutes == 1520
    assert view.carryover_minutes == 540
