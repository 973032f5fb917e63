import logging

from .configs import get_settings
from .logging_setup import setup_logging
from .pipeline import PipelineOrchestrator

LOG = logging.getLogger("transmission_splitter")


def main() -> int:
    """Split the transmission named by the `ID` env var. Returns the process exit status."""
    setup_logging()
    try:
        settings = get_settings()
        PipelineOrchestrator.from_settings(settings).run(settings.job_id)
    except Exception:
        LOG.exception("Splitting transmission failed")
        return 1

    print(f"OK - Uploaded TransmissionChannels for {settings.job_id}")
    return 0

