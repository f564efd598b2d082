from storefront.core.query import CancelReason, CancelToken, FocusEvents


def test_notify_calls_every_listener() -> None:
    events = FocusEvents()
    calls = []
    events.subscribe(lambda: calls.append("a"))
    events.subscribe(lambda: calls.append("b"))

    assert events.notify() == 2
    assert calls == ["a", "b"]


def test_unsubscribe_is_safe_to_repeat() -> None:
    events = FocusEvents()
    unsubscribe = events.subscribe(lambda: None)

    unsubscribe()
    unsubscribe()

    assert events.listener_count == 0
    assert events.notify() == 0


def test_failing_listener_does_not_starve_others() -> None:
    events = FocusEvents()
    calls = []

    def broken() -> None:
        raise RuntimeError("boom")

    events.subscribe(broken)
    events.subscribe(lambda: calls.append("ok"))

    assert events.notify() == 2
    assert calls == ["ok"]


def test_cancel_token_keeps_first_reason() -> None:
    token = CancelToken()
    assert token.cancelled is False
    assert token.reason is None

    token.cancel(CancelReason.UNBOUND)
    token.cancel(CancelReason.SUPERSEDED)

    assert token.cancelled is True
    assert token.reason is CancelReason.UNBOUND
