"""
Generative block layout, the public entry point for placement.

Walks a lattice of candidate centers over the site and, at every
center, tries every enabled process type once: jitter the center,
build the rectangle, keep it only if it sits inside the site and inside
the site shrunk by half the placement margin.  Rejected placements are
not retried.  The walk stops at ``max_blocks``.

Output depends only on the arguments: the same site, types and config
always give the same blocks in the same order.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from shapely.prepared import prep

from .features import FeatureCollection, feature_collection, to_shape
from .geodesy import buffer_meters, destination
from .process_type import ProcessType
from .rectangles import build_rect
from .sampling import grid_centers
from .units import Mulberry32

logger = logging.getLogger(__name__)

# Candidate lattice never gets finer than this (meters)
MIN_CANDIDATE_STEP_M = 5.0


@dataclass
class GenerationConfig:
    """
    Placement parameters.

    placement_margin : float
        Aisle width in meters used as a soft margin: the lattice step
        grows by it and blocks keep ``placement_margin / 2`` off the
        site boundary.  Spacing between blocks is only checked later by
        the validator's ``min_aisle``.
    rotation : float
        Block rotation in degrees.
    seed : int
        PRNG seed for the jitter.
    jitter : float
        Maximum center displacement per axis is ``jitter / 2`` meters.
    max_blocks : int, optional
        Hard cap on accepted blocks; ``0`` or ``None`` means no cap.
    """

    placement_margin: float = 20.0
    rotation: float = 0.0
    seed: Optional[int] = 1
    jitter: float = 0.0
    max_blocks: Optional[int] = 800


class LayoutGenerator:
    """
    Place process blocks inside a site polygon.

    Typical workflow::

        gen = LayoutGenerator(site_feature, process_types)
        blocks = gen.generate(GenerationConfig(placement_margin=10, seed=3))
    """

    def __init__(self, site, process_types: Sequence[ProcessType]):
        """
        Parameters
        ----------
        site : dict or shapely Polygon
            Site boundary (GeoJSON Feature / geometry or shapely).
            ``None`` is allowed and generates nothing.
        process_types : sequence of ProcessType
            Types to place, in trial order.  Disabled types are skipped.
        """
        self.site = to_shape(site)
        self.process_types = [t for t in process_types if t.enabled]

    def candidate_step(self, placement_margin: float) -> float:
        """Lattice spacing: widest type plus margin, at least 5 m."""
        widest = max(t.width for t in self.process_types)
        return max(MIN_CANDIDATE_STEP_M, widest + placement_margin)

    def _inset(self, placement_margin: float):
        if placement_margin == 0:
            return self.site
        return buffer_meters(self.site, -placement_margin / 2.0)

    def generate(self, config: GenerationConfig) -> FeatureCollection:
        """Run one placement pass and return the blocks as a FeatureCollection."""
        if self.site is None or self.site.is_empty or not self.process_types:
            return feature_collection([])

        # The inset depends only on the site and margin: compute once per call
        inset = self._inset(config.placement_margin)
        if inset is None:
            logger.debug("Boundary inset collapsed; no block can be placed")
            return feature_collection([])

        step = self.candidate_step(config.placement_margin)
        centers = grid_centers(self.site, step)
        rng = Mulberry32(config.seed)
        cap = config.max_blocks or 0
        within_site = prep(self.site)
        within_inset = prep(inset)

        blocks: List[dict] = []
        for center in centers:
            for ptype in self.process_types:
                jw = (rng() - 0.5) * config.jitter
                jh = (rng() - 0.5) * config.jitter
                moved = destination(
                    center,
                    math.hypot(jw, jh),
                    math.degrees(math.atan2(jw, jh)),
                )
                rect = build_rect(moved, ptype.width, ptype.height, config.rotation,
                                  {"role": "block", "type": ptype.id})
                shape = to_shape(rect)
                if not within_site.contains(shape) or not within_inset.contains(shape):
                    continue
                blocks.append(rect)
                if cap and len(blocks) >= cap:
                    logger.info(f"Block cap of {cap} reached")
                    return feature_collection(blocks)

        logger.info(
            f"Generated {len(blocks)} blocks from {len(centers)} candidates "
            f"x {len(self.process_types)} types"
        )
        return feature_collection(blocks)


def generate_blocks(site, process_types: Sequence[ProcessType],
                    config: Optional[GenerationConfig] = None) -> FeatureCollection:
    """Functional wrapper around :class:`LayoutGenerator`."""
    return LayoutGenerator(site, process_types).generate(config or GenerationConfig())
