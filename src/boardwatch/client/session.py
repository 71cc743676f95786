"""Polling session that tracks vehicles of one line approaching one stop.

A :class:`TrackingSession` mirrors the rider's boarding request locally
(``pending``) and owns the alert debounce state. While polling it issues
one nearby-vehicles query immediately and then one per interval; queries
may overlap and resolve out of order, so each carries a sequence number
and only results newer than the last applied one are used.

``stop()`` is synchronous: once it returns no further poll can start and
no in-flight result will be applied.
"""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from boardwatch.client.api import BoardingApiClient, NearbyResult
from boardwatch.client.retry import submit_with_retry
from boardwatch.core.errors import (
    BoardwatchError,
    InvalidInputError,
    RequestPendingError,
    SessionInvalidError,
    UnauthenticatedError,
)
from boardwatch.core.settings import settings
from boardwatch.services.eta import AlertHysteresis, EtaEstimate, estimate
from boardwatch.services.geo import normalize_line

__all__ = ["SessionState", "StopLocation", "TrackingSession", "TrackingUpdate"]

logger = logging.getLogger(__name__)

NO_VEHICLE_LABEL = "No vehicle of this line approaching"


class SessionState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"
    STOPPED = "stopped"


@dataclass(frozen=True)
class StopLocation:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class TrackingUpdate:
    """Snapshot applied after one successful poll."""

    vehicles: list[dict[str, Any]]
    nearest: dict[str, Any] | None
    eta: EtaEstimate | None
    last_update: datetime | None
    alert_fired: bool

    @property
    def label(self) -> str:
        if self.nearest is None or self.eta is None:
            return NO_VEHICLE_LABEL
        return self.eta.label


def _current_task() -> asyncio.Task[Any] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


def _matching_vehicles(buses: list[dict[str, Any]], line_id: str) -> list[dict[str, Any]]:
    wanted = normalize_line(line_id)
    matching = [
        bus
        for bus in buses
        if normalize_line(bus.get("line_id")) == wanted
        and isinstance(bus.get("distance"), (int, float))
    ]
    matching.sort(key=lambda bus: (bus["distance"], str(bus.get("vehicle_id", ""))))
    return matching


@dataclass
class TrackingSession:
    """Client-side mirror of one boarding request plus its polling loop."""

    api: BoardingApiClient
    stop_location: StopLocation | None = None
    line_id: str | None = None
    pending: bool = False
    alerts_enabled: bool = True
    interval_s: float = settings.poll_interval_seconds
    watchdog_s: float = settings.poll_watchdog_seconds
    radius_km: float = settings.nearby_default_radius_km
    on_update: Callable[[TrackingUpdate], None] | None = None
    on_alert: Callable[[TrackingUpdate], None] | None = None
    on_session_invalid: Callable[[SessionInvalidError], None] | None = None
    hysteresis: AlertHysteresis = field(default_factory=AlertHysteresis)

    state: SessionState = field(default=SessionState.IDLE, init=False)
    loading: bool = field(default=False, init=False)
    last_update: TrackingUpdate | None = field(default=None, init=False)
    _sequence: itertools.count = field(default_factory=lambda: itertools.count(1), init=False)
    _applied_seq: int = field(default=0, init=False)
    _ticker: asyncio.Task[None] | None = field(default=None, init=False)
    _watchdog: asyncio.TimerHandle | None = field(default=None, init=False)
    _inflight: set[asyncio.Task[None]] = field(default_factory=set, init=False)

    @property
    def armed(self) -> bool:
        return self.hysteresis.armed

    async def submit(self, origin: str) -> int:
        """Send the boarding request for this session's line, with bounded retry.

        Raises:
            RequestPendingError: If a previous request is still pending locally.
            InvalidInputError: If the line is not set.
            UnauthenticatedError: If the credential was rejected.
        """
        if self.pending:
            raise RequestPendingError(
                "A boarding request is already pending; confirm it before starting another"
            )
        if not self.line_id:
            raise InvalidInputError("line_id is required")
        line_id = self.line_id
        request_id = await submit_with_retry(lambda: self.api.create_request(origin, line_id))
        self.pending = True
        logger.info("Boarding request %s submitted for line %s", request_id, line_id)
        return request_id

    def start(self) -> bool:
        """Enter ``Polling``; must be called from a running event loop.

        Returns:
            False when there is no pending request, in which case nothing is
            scheduled.

        Raises:
            InvalidInputError: If the stop location or line is unknown.
        """
        if self.state is SessionState.POLLING:
            return True
        if self.stop_location is None or not self.line_id:
            raise InvalidInputError("A stop location and a line are required to start polling")
        if not self.pending:
            logger.info("No pending request; polling not started")
            return False

        loop = asyncio.get_running_loop()
        self.state = SessionState.POLLING
        self.loading = True
        self._ticker = loop.create_task(self._tick())
        self._watchdog = loop.call_later(self.watchdog_s, self._clear_loading)
        logger.info("Polling started for line %s every %.1fs", self.line_id, self.interval_s)
        return True

    def stop(self) -> None:
        """Cancel the interval, the watchdog and any in-flight poll. Idempotent."""
        if self.state is not SessionState.POLLING:
            return
        self.state = SessionState.STOPPED
        current = _current_task()
        if self._ticker is not None and self._ticker is not current:
            self._ticker.cancel()
        self._ticker = None
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None
        for task in list(self._inflight):
            if task is not current:
                task.cancel()
        self._inflight.clear()
        self.loading = False
        logger.info("Polling stopped for line %s", self.line_id)

    async def confirm(self) -> dict[str, Any]:
        """Confirm boarding; on success stop polling and clear the session.

        Raises:
            NoActiveRequestError: If the server has no request to confirm.
            SessionInvalidError: If the credential was rejected.
        """
        if not self.line_id:
            raise InvalidInputError("line_id is required")
        try:
            result = await self.api.confirm(self.line_id)
        except UnauthenticatedError as exc:
            self._invalidate(exc)
            raise SessionInvalidError(str(exc), status_code=exc.status_code) from exc

        self.stop()
        self.state = SessionState.STOPPED
        self.pending = False
        self.stop_location = None
        self.line_id = None
        self.hysteresis.reset()
        return result

    async def _tick(self) -> None:
        while self.state is SessionState.POLLING:
            self._spawn_poll()
            await asyncio.sleep(self.interval_s)

    def _spawn_poll(self) -> None:
        seq = next(self._sequence)
        task = asyncio.get_running_loop().create_task(self._poll_once(seq))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _poll_once(self, seq: int) -> None:
        stop, line_id = self.stop_location, self.line_id
        if stop is None or line_id is None:
            return
        try:
            result = await self.api.nearby(
                stop.latitude, stop.longitude, self.radius_km, line=line_id
            )
        except UnauthenticatedError as exc:
            self._invalidate(exc)
            return
        except BoardwatchError as exc:
            logger.warning("Poll %d for line %s failed: %s", seq, line_id, exc)
            return
        self.apply(seq, result)

    def apply(self, seq: int, result: NearbyResult) -> TrackingUpdate | None:
        """Apply the result of poll ``seq`` unless a newer one was applied already."""
        if self.state is not SessionState.POLLING or self.line_id is None:
            return None
        if seq <= self._applied_seq:
            logger.debug("Dropping stale poll %d (applied %d)", seq, self._applied_seq)
            return None
        self._applied_seq = seq

        vehicles = _matching_vehicles(result.buses, self.line_id)
        nearest = vehicles[0] if vehicles else None
        eta = estimate(nearest["distance"], nearest.get("speed")) if nearest else None
        fired = self.hysteresis.update(eta)
        update = TrackingUpdate(
            vehicles=vehicles,
            nearest=nearest,
            eta=eta,
            last_update=result.last_update,
            alert_fired=fired,
        )
        self.last_update = update
        self._clear_loading()
        if self.on_update is not None:
            self._notify(self.on_update, update)
        if fired and self.alerts_enabled and self.on_alert is not None:
            self._notify(self.on_alert, update)
        return update

    def _notify(self, callback: Callable[[TrackingUpdate], None], update: TrackingUpdate) -> None:
        # Callback failures must not end the poll task; polling goes on.
        try:
            callback(update)
        except Exception:
            logger.exception("Tracking callback %r failed", callback)

    def _clear_loading(self) -> None:
        self.loading = False
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    def _invalidate(self, exc: UnauthenticatedError) -> None:
        logger.warning("Credential rejected (%s); ending tracking session", exc.status_code)
        self.stop()
        self.state = SessionState.STOPPED
        self.pending = False
        self.api.clear_token()
        if self.on_session_invalid is not None:
            self.on_session_invalid(
                SessionInvalidError("Session expired; sign in again", status_code=exc.status_code)
            )
