"""
Health check utilities for the ReadZero services.
Reports database connectivity and which collaborator credentials are set.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import text

from shared.app_logging.logger import get_logger
from shared.config.settings import get_settings

logger = get_logger(__name__)


class HealthStatus(Enum):
    """Health status enumeration."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"
    UNKNOWN = "unknown"


@dataclass
class HealthCheck:
    """Individual health check result."""

    name: str
    status: HealthStatus
    message: str
    response_time_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class HealthChecker:
    """Runs registered checks and folds them into one status."""

    def __init__(self, service_name: str, critical: Optional[List[str]] = None):
        self.service_name = service_name
        self.logger = get_logger(f"{service_name}.health")
        self.checks: List[Callable[[], HealthCheck]] = []
        self.critical = critical or ["database"]
        self.settings = get_settings()

    def add_check(self, check_func: Callable[[], HealthCheck]):
        """Add a health check function."""
        self.checks.append(check_func)

    def check_database(self) -> HealthCheck:
        """Check database connectivity."""
        start_time = datetime.now()
        try:
            from shared.database.session import SessionLocal

            with SessionLocal() as session:
                session.execute(text("SELECT 1"))

            response_time = (datetime.now() - start_time).total_seconds() * 1000
            return HealthCheck(
                name="database",
                status=HealthStatus.HEALTHY,
                message="Database connection successful",
                response_time_ms=response_time,
            )
        except Exception as e:
            response_time = (datetime.now() - start_time).total_seconds() * 1000
            return HealthCheck(
                name="database",
                status=HealthStatus.UNHEALTHY,
                message=f"Database connection failed: {str(e)}",
                response_time_ms=response_time,
            )

    def check_credential(self, name: str, value: Optional[str], required: bool = False) -> HealthCheck:
        """Report whether a collaborator credential is configured.

        A missing optional credential only degrades the service.
        """
        if value:
            return HealthCheck(name=name, status=HealthStatus.HEALTHY, message=f"{name} credential configured")
        return HealthCheck(
            name=name,
            status=HealthStatus.UNHEALTHY if required else HealthStatus.DEGRADED,
            message=f"{name} credential not configured",
        )

    def run_all_checks(self) -> Dict[str, Any]:
        """Run all registered health checks."""
        results = []
        overall_status = HealthStatus.HEALTHY

        for check_func in self.checks:
            try:
                result = check_func()
            except Exception as e:
                self.logger.error(f"Health check {getattr(check_func, '__name__', check_func)} raised: {e}")
                result = HealthCheck(
                    name=getattr(check_func, "__name__", "check"),
                    status=HealthStatus.UNHEALTHY,
                    message=f"Health check failed with exception: {str(e)}",
                )
            results.append(result)

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "service": self.service_name,
            "status": overall_status.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": [
                {
                    "name": check.name,
                    "status": check.status.value,
                    "message": check.message,
                    "response_time_ms": check.response_time_ms,
                    "details": check.details,
                    "timestamp": check.timestamp.isoformat(),
                }
                for check in results
            ],
        }

    def readiness(self) -> Dict[str, Any]:
        """Ready when every critical check is healthy."""
        health_data = self.run_all_checks()
        critical_checks = [check for check in health_data["checks"] if check["name"] in self.critical]
        all_critical_healthy = all(check["status"] == "healthy" for check in critical_checks)

        return {
            "status": "ready" if all_critical_healthy else "not_ready",
            "service": self.service_name,
            "critical_dependencies": {check["name"]: check["status"] for check in critical_checks},
        }


def create_health_checker(service_name: str) -> HealthChecker:
    """Create a health checker for a service with common checks."""
    checker = HealthChecker(service_name)
    checker.add_check(checker.check_database)
    return checker


def create_extractor_health_checker() -> HealthChecker:
    checker = create_health_checker("extractor")
    settings = checker.settings
    checker.add_check(lambda: checker.check_credential("completion", settings.completion.api_key))
    checker.add_check(lambda: checker.check_credential("reader", settings.reader.api_key))
    checker.add_check(lambda: checker.check_credential("search", settings.search.api_key))
    checker.add_check(lambda: checker.check_credential("xai", settings.xai.api_key))
    return checker


def create_composer_health_checker() -> HealthChecker:
    checker = create_health_checker("composer")
    checker.add_check(lambda: checker.check_credential("completion", checker.settings.completion.api_key, required=True))
    checker.critical = ["database", "completion"]
    return checker
