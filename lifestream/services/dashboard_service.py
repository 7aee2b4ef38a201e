"""
Dashboard Service.

Role-specific dashboard reads:

    admin      user count, donation total, request count
    volunteer  user count, donation total (stats route), request count
    donor      the most recent own requests

The reads are independent and idempotent, so they run concurrently on a
small thread pool and are joined.  The first failure cancels anything
still queued and fails the whole dashboard with one message; partial
numbers are never shown.
"""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable

from lifestream.auth import SessionManager
from lifestream.errors import AuthorizationError, LifeStreamError, ServerError
from lifestream.logger import StructuredLogger
from lifestream.models.enums import Role
from lifestream.models.service_models import DashboardStats, ServiceResult
from lifestream.models.user import Identity
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.base_service import BaseService

Read = Callable[[], Any]


class DashboardService(BaseService):
    """Fetches everything one role's dashboard shows, all or nothing.

    Parameters
    ----------
    session:
        Shared session holder; the role picks the dashboard.
    users, requests, funding:
        Repositories behind the individual reads.
    max_workers:
        Upper bound on concurrent reads.
    recent_limit:
        Number of recent requests on the donor dashboard.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        session: SessionManager,
        users: UserRepository,
        requests: DonationRequestRepository,
        funding: FundingRepository,
        max_workers: int,
        recent_limit: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._users = users
        self._requests = requests
        self._funding = funding
        self._max_workers = max_workers
        self._recent_limit = recent_limit

    def get_stats(self) -> ServiceResult[DashboardStats]:
        """Load the signed-in user's dashboard."""
        try:
            identity = self._session.get_identity()
            reads = self._reads_for(identity)
            values = self._gather(reads)
        except LifeStreamError as exc:
            return self._failure(exc, "dashboard_stats")

        recent = values.get("recent_requests")
        stats = DashboardStats(
            total_users=values.get("total_users"),
            total_funding=values.get("total_funding"),
            total_requests=values.get("total_requests"),
            recent_requests=list(recent[: self._recent_limit]) if recent else [],
        )
        self._logger.debug(
            "Dashboard loaded for role %s", identity.role,
            extra={"reads": ",".join(sorted(reads))},
        )
        return ServiceResult[DashboardStats].ok(stats)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _reads_for(self, identity: Identity) -> dict[str, Read]:
        if identity.role is Role.ADMIN:
            return {
                "total_users": self._users.count,
                "total_funding": self._funding.total_funding,
                "total_requests": self._requests.count,
            }
        if identity.role is Role.VOLUNTEER:
            return {
                "total_users": self._users.count,
                "total_funding": self._funding.funding_stats,
                "total_requests": self._requests.count,
            }
        if identity.role is Role.DONOR:
            return {"recent_requests": lambda: self._requests.list_recent(identity.id)}
        raise AuthorizationError("Your account has no dashboard.")

    def _gather(self, reads: dict[str, Read]) -> dict[str, Any]:
        """Run *reads* concurrently; raise the first failure in read order."""
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self._max_workers, len(reads))),
            thread_name_prefix="dashboard",
        )
        try:
            futures: dict[str, Future[Any]] = {
                key: executor.submit(read) for key, read in reads.items()
            }
            done, not_done = wait(futures.values(), return_when=FIRST_EXCEPTION)
            for future in not_done:
                future.cancel()

            for key, future in futures.items():
                if future in done and future.exception() is not None:
                    exc = future.exception()
                    if isinstance(exc, LifeStreamError):
                        raise exc
                    self._logger.error("Dashboard read '%s' crashed: %s", key, exc, exc_info=exc)
                    raise ServerError("The dashboard could not be loaded.") from exc

            return {key: future.result() for key, future in futures.items()}
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
