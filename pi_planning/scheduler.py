"""
Recurring duplicate reconciliation.

Hosts do not report paste/duplicate events, so reconciliation runs on a fixed
interval and again, debounced, after selection changes. Passes never overlap
and never run while an import or export holds the context busy flag.
"""

from __future__ import annotations

import asyncio

from pi_planning import config
from pi_planning._utils import error_message, log_event
from pi_planning.exceptions import PlanningError
from pi_planning.reconciler import reconcile_duplicates


class ReconcileScheduler:
    def __init__(self, canvas, context, interval=None, debounce=None, on_report=None):
        self.canvas = canvas
        self.context = context
        self.interval = config.RECONCILE_INTERVAL_SECONDS if interval is None else interval
        self.debounce = config.RECONCILE_DEBOUNCE_SECONDS if debounce is None else debounce
        self.on_report = on_report
        self.passes = 0
        self._running = False
        self._stopped = False
        self._pending: asyncio.TimerHandle | None = None

    def run_pass(self):
        """Run one guarded pass. Returns the report, or None when skipped."""
        if self._running or self.context.busy:
            return None
        self._running = True
        try:
            report = reconcile_duplicates(self.canvas, self.context)
        except PlanningError as e:
            log_event("RECONCILE", event="pass_failed", error=error_message(e))
            self.canvas.notify_user(f"Duplicate check failed: {error_message(e)}")
            return None
        finally:
            self._running = False
        self.passes += 1
        if self.on_report is not None and report.demoted:
            self.on_report(report)
        return report

    def on_selection_change(self):
        """Schedule a pass after the debounce delay, replacing any pending one."""
        loop = asyncio.get_running_loop()
        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(self.debounce, self._fire_pending)

    def _fire_pending(self):
        self._pending = None
        if not self._stopped:
            self.run_pass()

    async def run(self, max_passes=None):
        """Reconcile every interval until stop() or *max_passes* passes."""
        self._stopped = False
        ticks = 0
        while not self._stopped:
            self.run_pass()
            ticks += 1
            if max_passes is not None and ticks >= max_passes:
                break
            await asyncio.sleep(self.interval)

    def stop(self):
        self._stopped = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
