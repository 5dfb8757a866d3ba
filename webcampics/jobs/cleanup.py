"""
Cleanup Job
===========

Scheduled retention purge. Run once a day from cron:

    0 3 * * * webcampics-cleanup

Deletes every stored image, thumbnail and leftover raw file older than the
configured retention period and appends one line to cleanup.log.
"""
import argparse
import logging
import sys
from typing import List, Optional

from webcampics.application.use_cases.images.purge_images import PurgeImagesUseCase
from webcampics.core.config import get_settings
from webcampics.core.logging_config import configure_logging
from webcampics.di.container import DIContainer
from webcampics.domain.exceptions import WebCamPicsError

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="webcampics-cleanup",
        description="Delete stored images older than the retention period.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Retention in days (default: image_retention_days from config.json)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, container: Optional[DIContainer] = None) -> int:
    args = parse_args(argv)

    if container is None:
        container = DIContainer(get_settings())
    configure_logging(container.settings)

    purge = container.get(PurgeImagesUseCase)
    try:
        report = purge.execute(args.days)
    except WebCamPicsError as e:
        print(f"Cleanup failed: {e.message}", file=sys.stderr)
        return 1

    print(f"Cleanup started at {report.started_at:{TIME_FORMAT}}")
    print(f"Retention: {report.retention_days} days")
    print(f"Deleting files older than {report.cutoff:{TIME_FORMAT}}")
    print(f"Deleted {report.deleted} files")
    print(f"Cleanup finished at {report.finished_at:{TIME_FORMAT}}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
