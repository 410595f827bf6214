import asyncio
import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)


class OfflineEstimator:
    """Estimator answering every request locally, used with --no-risk."""

    async def estimate(self, image_id, point):
        from probe_annotation.core.risk import RiskResult

        return RiskResult(description=_("offline"))


def handle(args):
    import cv2

    from probe_annotation.core.risk import MetadataRegistry
    from probe_annotation.interfaces import (
        CanvasSurface,
        OpenCVHost,
        OpenCVProbeAdapter,
        build_probe_tool,
    )
    from probe_annotation.utils.config import load_config

    assert args.image.exists(), _("Image file must exist")
    flags = cv2.IMREAD_GRAYSCALE if args.grayscale else cv2.IMREAD_COLOR
    pixels = cv2.imread(str(args.image), flags)
    assert pixels is not None, _("Could not read image {image}").format(
        image=args.image
    )

    cfg = load_config()
    if args.endpoint:
        cfg.risk.endpoint = args.endpoint

    image_id = str(args.image)
    metadata = MetadataRegistry()
    metadata.add_image(image_id, args.case or args.image.stem)

    host = OpenCVHost()
    tool = build_probe_tool(
        cfg,
        host=host,
        metadata=metadata,
        estimator=OfflineEstimator() if args.no_risk else None,
    )
    adapter = OpenCVProbeAdapter(tool, host)
    surface = CanvasSurface(image_id=image_id, pixels=pixels, scale=args.scale)

    async def run():
        marker = adapter.place(surface, args.x, args.y)
        if marker is None:
            return None
        await tool.controller.wait_for_pending()
        adapter.render(surface)
        return marker

    marker = asyncio.run(run())
    if marker is None:
        logger.error(_("Could not place a marker"))
        return

    stats = marker.stats.to_dict() if marker.stats is not None else {}
    if stats:
        print(
            _("Pixel ({x}, {y}): {pixels}").format(
                x=stats["x"], y=stats["y"], pixels=stats["stored_pixels"]
            )
        )
    else:
        print(_("Point is outside the image"))
    print(_("Cancer risk: {risk}").format(risk=marker.risk_label))

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        cv2.imwrite(str(args.output), surface.canvas)
        logger.info(_("Saved rendered image to {output}").format(output=args.output))
