"""Unit tests for the session-transport broker."""

import pytest

from mcp_hello.mcp.broker import SessionBroker, NoChannelAvailable, BrokerSnapshot


def test_single_staged_channel_binds_and_is_reused(broker, make_channel):
    """A fresh id promotes the staged channel; the same id then reuses it."""
    channel = make_channel()
    broker.register_staged(channel)

    first = broker.resolve("A")
    assert first is channel
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=("A",))

    second = broker.resolve("A")
    assert second is channel
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=("A",))


def test_resolve_with_no_channels_is_unavailable(broker):
    result = broker.resolve("A")

    assert isinstance(result, NoChannelAvailable)
    assert not result
    assert result.session_id == "A"
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=())


def test_resolve_without_session_id_falls_back_to_staged(broker, make_channel):
    channel = make_channel()
    broker.register_staged(channel)

    assert broker.resolve(None) is channel
    # Fallback does not promote
    assert broker.snapshot() == BrokerSnapshot(staged=1, bound=())


def test_resolve_without_session_id_falls_back_to_latest_bound(broker, make_channel):
    older, newer = make_channel(), make_channel()
    broker.register_staged(older)
    broker.resolve("A")
    broker.register_staged(newer)
    broker.resolve("B")

    assert broker.resolve(None) is newer


def test_resolve_without_session_id_and_no_channels(broker):
    assert isinstance(broker.resolve(None), NoChannelAvailable)


def test_promotion_claims_most_recently_staged(broker, make_channel):
    first, second = make_channel(), make_channel()
    broker.register_staged(first)
    broker.register_staged(second)

    assert broker.resolve("A") is second
    assert broker.resolve("B") is first
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=("A", "B"))


def test_promotion_prefers_channel_announcing_the_id(broker, make_channel):
    first, second = make_channel("s-1"), make_channel("s-2")
    broker.register_staged(first)
    broker.register_staged(second)

    assert broker.resolve("s-1") is first
    assert broker.resolve("s-2") is second


def test_bound_channel_is_not_promoted_again(broker, make_channel):
    channel = make_channel()
    broker.register_staged(channel)
    broker.resolve("A")

    result = broker.resolve("B")

    assert isinstance(result, NoChannelAvailable)
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=("A",))


def test_unregister_staged_channel(broker, make_channel):
    channel = make_channel()
    broker.register_staged(channel)

    broker.unregister(channel)

    assert channel not in broker
    assert isinstance(broker.resolve(None), NoChannelAvailable)


def test_unregister_is_idempotent(broker, make_channel):
    channel = make_channel()
    broker.register_staged(channel)
    broker.resolve("A")

    broker.unregister(channel)
    broker.unregister(channel)

    assert channel not in broker
    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=())


def test_unregister_unknown_channel_is_noop(broker, make_channel):
    known, unknown = make_channel(), make_channel()
    broker.register_staged(known)

    broker.unregister(unknown)

    assert known in broker
    assert broker.snapshot().staged == 1


def test_unregister_only_removes_the_given_channel(broker, make_channel):
    first, second = make_channel(), make_channel()
    broker.register_staged(first)
    broker.register_staged(second)
    broker.resolve("A")

    broker.unregister(first)

    assert broker.resolve("A") is second
    assert first not in broker


def test_close_notification_unregisters(broker, make_channel):
    channel = make_channel()
    broker.register_staged(channel)
    channel.on_close(broker.unregister)
    broker.resolve("A")

    channel.close()
    channel.close()

    assert broker.snapshot() == BrokerSnapshot(staged=0, bound=())
    assert isinstance(broker.resolve("A"), NoChannelAvailable)


def test_session_id_reusable_after_close(broker, make_channel):
    """Once a session's channel closes its id can bind a new stream."""
    old = make_channel()
    broker.register_staged(old)
    old.on_close(broker.unregister)
    broker.resolve("A")
    old.close()

    new = make_channel()
    broker.register_staged(new)

    assert broker.resolve("A") is new


@pytest.mark.parametrize("session_id", ["", None])
def test_empty_session_id_treated_as_absent(broker, make_channel, session_id):
    channel = make_channel()
    broker.register_staged(channel)

    assert broker.resolve(session_id) is channel
    assert broker.snapshot().bound == ()


def test_brokers_do_not_share_state(make_channel):
    one, two = SessionBroker(), SessionBroker()
    one.register_staged(make_channel())

    assert isinstance(two.resolve(None), NoChannelAvailable)
