from lifestream.utils.task_scope import TaskScope


class ManualLoop:
    """Collects dispatched callbacks so a test decides when the 'UI' runs them."""

    def __init__(self):
        self.pending = []

    def dispatch(self, callback):
        self.pending.append(callback)

    def run(self):
        pending, self.pending = self.pending, []
        for callback in pending:
            callback()


def _run_now(target, name):
    target()


def test_result_is_delivered_through_dispatch(logger):
    loop = ManualLoop()
    scope = TaskScope(loop.dispatch, logger, spawn=_run_now)
    received = []

    scope.submit(lambda: 42, received.append)
    assert received == []

    loop.run()
    assert received == [42]


def test_closed_scope_drops_late_results(logger):
    loop = ManualLoop()
    scope = TaskScope(loop.dispatch, logger, spawn=_run_now)
    received = []

    scope.submit(lambda: "late", received.append)
    scope.close()
    loop.run()

    assert received == []
    assert scope.closed


def test_cancelled_handle_is_not_delivered(logger):
    loop = ManualLoop()
    scope = TaskScope(loop.dispatch, logger, spawn=_run_now)
    received = []

    handle = scope.submit(lambda: 1, received.append)
    handle.cancel()
    loop.run()

    assert received == []


def test_submit_after_close_never_runs(logger):
    loop = ManualLoop()
    scope = TaskScope(loop.dispatch, logger, spawn=_run_now)
    ran = []
    scope.close()

    handle = scope.submit(lambda: ran.append("work"), lambda _: None)

    assert handle.cancelled
    assert ran == []


def test_crashing_work_is_logged_not_delivered(logger, caplog):
    loop = ManualLoop()
    scope = TaskScope(loop.dispatch, logger, spawn=_run_now)
    received = []

    def boom():
        raise RuntimeError("bug")

    scope.submit(boom, received.append, name="load-users")
    loop.run()

    assert received == []
    assert any("load-users" in r.getMessage() for r in caplog.records)
