# flake8: noqa E501

import asyncio
import logging
import sys
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Request a risk estimate for one image point")


def command(subparser):
    subparser.add_argument("x", type=float)
    subparser.add_argument("y", type=float)
    subparser.add_argument("-c", "--case", dest="case", type=str, required=True)
    subparser.add_argument("-e", "--endpoint", dest="endpoint", type=str)
    subparser.add_argument("-t", "--timeout", dest="timeout", type=float)

    def handle(args):
        from probe_annotation.core.annotation import Point
        from probe_annotation.core.errors import ProbeAnnotationError
        from probe_annotation.core.risk import (
            MetadataRegistry,
            PredictionClient,
            RiskEstimator,
        )
        from probe_annotation.utils.config import load_config

        cfg = load_config()
        metadata = MetadataRegistry()
        metadata.add_image("cli", args.case)
        estimator = RiskEstimator(
            metadata,
            client=PredictionClient(
                args.endpoint or cfg.risk.endpoint,
                timeout=args.timeout
                if args.timeout is not None
                else (
                    float(cfg.risk.timeout)
                    if cfg.risk.timeout not in (None, "", "None")
                    else None
                ),
            ),
            model_name=cfg.risk.model_name,
        )
        try:
            result = asyncio.run(estimator.estimate("cli", Point(args.x, args.y)))
        except ProbeAnnotationError as e:
            logger.error(_("Risk estimation failed: {error}").format(error=e))
            sys.exit(1)
        print(result.description)

    return handle
