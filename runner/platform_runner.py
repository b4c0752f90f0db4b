"""Platform runner entry point.

Connects to the configured document repository, lists every accessible
cabinet and tray with its document count, and logs off again.

Usage:
    python -m runner.platform_runner
"""

from services.repository.PlatformService import PlatformService
from shared.clients.dms.DMSClientManager import DMSClientManager
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import DialogConfigurationError, PlatformError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


def report_containers(service: PlatformService, session: PlatformSession) -> dict[str, int | None]:
    """Log the document count of every accessible container.

    Returns:
        dict[str, int | None]: Count per container name, None where the container has no default search dialog.
    """
    counts: dict[str, int | None] = {}
    for container in service.catalog.list_accessible(session):
        try:
            counts[container.name] = service.queries.count(session, container)
        except DialogConfigurationError as e:
            service.logging.warning("Skipping %s '%s': %s", container.kind.value.lower(), container.name, e)
            counts[container.name] = None
            continue
        service.logging.info("%s '%s': %d documents", container.kind.value, container.name, counts[container.name], color="cyan")
    return counts


def main() -> int:
    """Run the container report. Returns the process exit code."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    dms_client = DMSClientManager(helper_config=config).get_client()
    service = PlatformService(helper_config=config, dms_client=dms_client)

    try:
        session = dms_client.connect_from_config()
    except PlatformError as e:
        logger.error("Error connecting to %s: %s. Aborting.", dms_client.get_engine_name(), e)
        return 1

    try:
        dms_client.do_healthcheck(session)
        report_containers(service, session)
    except PlatformError as e:
        logger.error("Container report failed: %s", e)
        return 1
    finally:
        dms_client.close(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
