# frameslot/infrastructure/cv/region_scan.py
import logging
from typing import List, NamedTuple, Optional, Tuple

import cv2
import numpy as np

from frameslot.config.settings import Settings, settings
from frameslot.infrastructure.cv.image_process import marker_mask

logger = logging.getLogger(__name__)

class Box(NamedTuple):
    x: int
    y: int
    width: int
    height: int

class Region(NamedTuple):
    label: int
    box: Box

class DetectionResult(NamedTuple):
    boxes: List[Box]
    warnings: List[str]

def scan_regions(mask: np.ndarray) -> Tuple[np.ndarray, List[Region]]:
    """Label 4-connected marker regions and return their rough boxes in raster discovery order."""
    count, labels, stats, _ = cv2.connectedComponentsWithStats(mask.astype(np.uint8), connectivity=4)
    if count <= 1:
        return labels, []

    # Index of the first pixel of every label when walking the image row by row.
    found_labels, first_index = np.unique(labels.ravel(), return_index=True)
    first_pixel = dict(zip(found_labels.tolist(), first_index.tolist()))
    order = sorted(range(1, count), key=lambda label: first_pixel[label])

    regions = []
    for label in order:
        left, top, width, height = (int(v) for v in stats[label, :4])
        regions.append(Region(label, Box(left, top, width, height)))
    return labels, regions

def refine_box(mask: np.ndarray, rough: Box) -> Optional[Box]:
    """Rescan every pixel inside the rough box and return the exact marker extents."""
    crop = mask[rough.y:rough.y + rough.height, rough.x:rough.x + rough.width]
    rows = np.flatnonzero(crop.any(axis=1))
    cols = np.flatnonzero(crop.any(axis=0))
    if rows.size == 0:
        return None
    return Box(
        rough.x + int(cols[0]),
        rough.y + int(rows[0]),
        int(cols[-1] - cols[0]) + 1,
        int(rows[-1] - rows[0]) + 1,
    )

def split_compound_region(region: np.ndarray, rough: Box, config: Settings = settings) -> List[Box]:
    """
    Split a large region into independent rectangles.

    `region` is the boolean pixel map of this region cropped to `rough`. Thin
    bridges are severed with a morphological opening, the result is sampled on a
    coarse grid and every sample that lands on a not-yet-seen piece starts a new
    sub-hole. Returns an empty list when fewer than two sub-holes of minimum size
    are found, meaning the refined box should be kept as a single hole.
    """
    if rough.width < config.SPLIT_MIN_EXTENT or rough.height < config.SPLIT_MIN_EXTENT:
        return []

    pad = config.SPLIT_BRIDGE_WIDTH
    padded = np.pad(region.astype(np.uint8), pad)
    kernel = np.ones((config.SPLIT_BRIDGE_WIDTH, config.SPLIT_BRIDGE_WIDTH), np.uint8)
    opened = cv2.morphologyEx(padded, cv2.MORPH_OPEN, kernel)
    count, pieces, stats, _ = cv2.connectedComponentsWithStats(opened, connectivity=4)
    if count <= 2:
        return []

    stride = config.SPLIT_SAMPLE_STRIDE
    ys = np.arange(0, rough.height, stride) + pad
    xs = np.arange(0, rough.width, stride) + pad
    samples = pieces[ys[:, None], xs[None, :]].ravel()

    found: List[Box] = []
    visited = set()
    for label in samples:
        label = int(label)
        if label == 0 or label in visited:
            continue
        visited.add(label)
        left, top, width, height = (int(v) for v in stats[label, :4])
        if width >= config.MIN_HOLE_SIZE and height >= config.MIN_HOLE_SIZE:
            found.append(Box(rough.x + left - pad, rough.y + top - pad, width, height))

    return found if len(found) > 1 else []

def detect_holes(pixels: np.ndarray, config: Settings = settings) -> DetectionResult:
    mask = marker_mask(pixels, config.MARKER_COLORS, config.COLOR_TOLERANCE, config.MIN_ALPHA)
    labels, regions = scan_regions(mask)
    logger.debug(f"{len(regions)} marker regions found on {mask.shape[1]}x{mask.shape[0]} template")

    boxes: List[Box] = []
    warnings: List[str] = []
    for label, rough in regions:
        refined = refine_box(mask, rough)
        if refined is None or refined.width < config.NOISE_FLOOR or refined.height < config.NOISE_FLOOR:
            continue

        if rough.width >= config.SPLIT_MIN_EXTENT and rough.height >= config.SPLIT_MIN_EXTENT:
            region = labels[rough.y:rough.y + rough.height, rough.x:rough.x + rough.width] == label
            pieces = split_compound_region(region, rough, config)
            if pieces:
                logger.info(f"Region at ({rough.x},{rough.y}) {rough.width}x{rough.height} split into {len(pieces)} holes")
                boxes.extend(pieces)
                continue

            fill = float(region.sum()) / (rough.width * rough.height)
            if fill < config.IRREGULAR_FILL_RATIO:
                message = (
                    f"Region at ({refined.x},{refined.y}) size {refined.width}x{refined.height}px is irregular "
                    f"(fill {fill:.0%}); kept as a single hole."
                )
                logger.warning(message)
                warnings.append(message)

        boxes.append(refined)

    return DetectionResult(boxes, warnings)
