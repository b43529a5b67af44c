# frameslot/domain/template_service.py
import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

import numpy as np
import psutil
from pydantic import BaseModel

from frameslot.config.settings import Settings, settings
from frameslot.domain.definition_builder import build_definition, order_holes
from frameslot.domain.models import PrintSize, TemplateDefinition
from frameslot.domain.registry import DefinitionCache
from frameslot.domain.validator import ValidationReport, validate_holes
from frameslot.infrastructure.cv.image_process import decode_template
from frameslot.infrastructure.cv.region_scan import detect_holes

# --- PENGATURAN LOGGER ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False # Mencegah log ganda ke root logger

class TemplateAnalysis(BaseModel):
    definition: Optional[TemplateDefinition] = None
    report: ValidationReport = ValidationReport()
    cached: bool = False

    @property
    def is_valid(self) -> bool:
        return self.definition is not None and self.report.is_valid

def _memory_mb() -> Optional[float]:
    try:
        return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    except psutil.Error as mem_error:
        logger.warning(f"Could not get memory info: {mem_error}")
        return None

class TemplateService:
    def __init__(self, cache: DefinitionCache, executor: ThreadPoolExecutor, config: Settings = settings):
        self.cache = cache
        self.executor = executor
        self.config = config

    def analyze_pixels(
        self,
        pixels: np.ndarray,
        template_id: str,
        filename: Optional[str] = None,
        print_size: PrintSize = PrintSize.R4,
    ) -> TemplateAnalysis:
        start_time = time.perf_counter()
        height, width = pixels.shape[:2]

        detection = detect_holes(pixels, self.config)
        holes = order_holes(detection.boxes, self.config.ROW_BAND)
        logger.info(f"[{template_id}] Deteksi selesai: {len(holes)} hole pada {width}x{height} ({time.perf_counter() - start_time:.2f}s).")

        report = validate_holes(holes, self.config, detection.warnings)
        if not report.is_valid:
            logger.warning(f"[{template_id}] Template validation failed: {report.messages}")
            return TemplateAnalysis(report=report)

        definition = build_definition(template_id, holes, (width, height), filename, print_size, self.config)
        logger.info(
            f"[{template_id}] Template '{definition.name}' siap: {definition.hole_count} holes, "
            f"type={definition.template_type.value}"
        )
        return TemplateAnalysis(definition=definition, report=report)

    def analyze_bytes(
        self,
        image_bytes: bytes,
        template_id: str,
        filename: Optional[str] = None,
        print_size: PrintSize = PrintSize.R4,
    ) -> TemplateAnalysis:
        pixels = decode_template(image_bytes)
        return self.analyze_pixels(pixels, template_id, filename, print_size)

    async def analyze(
        self,
        image_bytes: bytes,
        template_id: str,
        filename: Optional[str] = None,
        print_size: PrintSize = PrintSize.R4,
        source_id: Optional[str] = None,
        last_modified: Optional[datetime] = None,
    ) -> TemplateAnalysis:
        cacheable = source_id is not None and last_modified is not None
        if cacheable:
            cached = self.cache.lookup(source_id, last_modified)
            if cached is not None:
                # Only the detected geometry is reused; id, name, type and print size follow this request.
                logger.info(f"[{template_id}] Menggunakan template dari cache ({source_id}).")
                definition = build_definition(
                    template_id,
                    cached.holes,
                    (cached.dimensions.width, cached.dimensions.height),
                    filename,
                    print_size,
                    self.config,
                )
                return TemplateAnalysis(definition=definition, cached=True)

        memory_mb = _memory_mb()
        if memory_mb is not None:
            logger.info(f"Memory usage before detection: {memory_mb:.1f}MB for template {template_id}")

        loop = asyncio.get_running_loop()
        analysis = await loop.run_in_executor(
            self.executor,
            self.analyze_bytes,
            image_bytes,
            template_id,
            filename,
            print_size,
        )

        if cacheable and analysis.is_valid:
            self.cache.store(source_id, last_modified, analysis.definition)
        return analysis
