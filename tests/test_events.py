from semiweak.events import Signal


def test_fire_calls_handlers_in_connection_order():
    sig = Signal('s')
    calls = []
    sig.connect(lambda *a: calls.append(('first', a)))
    sig.connect(lambda *a: calls.append(('second', a)))
    sig.fire(1, 2)
    assert calls == [('first', (1, 2)), ('second', (1, 2))]


def test_disconnect_is_idempotent():
    sig = Signal('s')
    calls = []
    conn = sig.connect(lambda: calls.append(1))
    assert conn.connected
    conn.disconnect()
    conn.disconnect()
    assert not conn.connected
    sig.fire()
    assert calls == []
    assert len(sig) == 0


def test_handler_disconnecting_a_later_handler_skips_it():
    sig = Signal('s')
    calls = []
    conns = []
    conns.append(sig.connect(lambda: conns[1].disconnect()))
    conns.append(sig.connect(lambda: calls.append('late')))
    sig.fire()
    assert calls == []


def test_handler_connected_during_fire_waits_for_next_fire():
    sig = Signal('s')
    calls = []

    def first():
        calls.append('first')
        if len(sig) == 1:
            sig.connect(lambda: calls.append('added'))

    sig.connect(first)
    sig.fire()
    assert calls == ['first']
    sig.fire()
    assert calls == ['first', 'first', 'added']


def test_disconnect_all():
    sig = Signal('s')
    c1 = sig.connect(lambda: None)
    c2 = sig.connect(lambda: None)
    sig.disconnect_all()
    assert len(sig) == 0
    assert not c1.connected and not c2.connected


def test_raising_handler_does_not_stop_later_handlers(caplog):
    import logging
    sig = Signal('s')
    calls = []

    def broken(*args):
        raise RuntimeError('handler bug')

    sig.connect(broken)
    sig.connect(lambda *a: calls.append(a))
    with caplog.at_level(logging.ERROR, logger='semiweak.events'):
        sig.fire('x')
    assert calls == [('x',)]
    assert any('handler' in r.getMessage() and 'failed' in r.getMessage()
               for r in caplog.records)
