def run_until_stimulus(scheduler, engine, limit=50):
    """Fire pending timers one by one until the engine accepts responses."""
    for _ in range(limit):
        if engine.phase == "stimulus" or engine.is_finished():
            return
        due = scheduler.next_due_ms()
        if due is None:
            return
        scheduler.update(due)
