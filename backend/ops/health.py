"""
Health check endpoints for operations monitoring.

Provides health checks for:
- Database connectivity (all configured databases)
- Ledger balance drift (accounts whose stored balance no longer matches
  the signed sum of their active movements)

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we serve traffic?)
- /_health/full    - full health report (for debugging/dashboards)
"""
import logging
import time
from typing import Dict, Any

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round(duration_ms, 2),
            }
        except DatabaseError as e:
            duration_ms = (time.time() - start) * 1000
            logger.error("Database health check failed", extra={"alias": alias, "error": str(e)})
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        """Check all configured databases."""
        results = {}
        all_healthy = True

        for alias in settings.DATABASES.keys():
            result = HealthCheck.check_database(alias)
            results[alias] = result
            if result["status"] != "healthy":
                all_healthy = False

        return {
            "status": "healthy" if all_healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_balance_drift() -> Dict[str, Any]:
        """Count accounts whose cached balance disagrees with their movements."""
        from accounting.balances import find_balance_drift

        try:
            drift = find_balance_drift()
        except DatabaseError as e:
            return {
                "status": "error",
                "error": str(e),
            }

        return {
            "status": "healthy" if not drift else "degraded",
            "drifted_accounts": len(drift),
            "sample": [
                {"account_id": row["account_id"], "difference": str(row["difference"])}
                for row in drift[:10]
            ],
        }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "balance_drift": HealthCheck.check_balance_drift(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "production" if not settings.DEBUG else "development",
        }


class LivenessView(View):
    """
    Liveness probe.

    Returns 200 if the process is running; touches nothing external.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 if the default database answers.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({
                "status": "ready",
                "database": db_check,
            })
        return JsonResponse({
            "status": "not_ready",
            "database": db_check,
        }, status=503)


class FullHealthView(View):
    """
    Full health report for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
