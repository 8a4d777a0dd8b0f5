import logging
import sys

def setup_logging():
    """
    Configure logging for the routing service.

    Everything goes to stdout with a timestamp, level and logger name so the
    output can be collected as-is by Docker or Kubernetes.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # httpx logs every request at INFO, which drowns the routing logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logging.getLogger("waypoint")


# Create global logger instance
logger = setup_logging()
