#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Batch Processor Module

Runs text insertion over every image under the images directory.
Supports:
- Pairing each image with the workbooks of its mirrored text subfolder
- Fixed-size batches of concurrently processed images
- Per text block / per image failure isolation with a final summary
"""

import asyncio
import logging
import os
import traceback
from pathlib import Path
from typing import Dict, List, Optional

from inserter.cache import ImageCache
from inserter.config import (
    IMAGE_EXTENSIONS,
    WORKBOOK_EXTENSIONS,
    build_batch_config,
    build_layout_config,
    build_output_config,
    build_region_config,
    build_render_config,
)
from inserter.discovery import has_files, iter_files, output_path_for, text_dir_for_image
from inserter.errors import BatchError, InserterError, SetupError
from inserter.insert import insert_text_into_regions
from inserter.progress import ProgressBar
from inserter.regions.finder import Region, find_empty_regions
from inserter.render.surface import RasterSurface
from inserter.richtext.model import TextBlock
from inserter.richtext.workbook import read_text_blocks_cached


def _has_file_handler(logger: logging.Logger, log_file: str) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def setup_batch_logger(log_file: Optional[str] = None):
    """Setup logging for the insertion pipeline."""
    logger = logging.getLogger('inserter')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_format = logging.Formatter('[INSERT] %(message)s')
        console_handler.setFormatter(console_format)
        logger.addHandler(console_handler)

    # The console handler may already exist when a log file is configured later.
    if log_file and not _has_file_handler(logger, log_file):
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_format = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class BatchProcessor:
    """Owns one insertion run: configuration, read cache and batch loop."""

    def __init__(self, config: dict, root: Optional[Path] = None, surface: Optional[RasterSurface] = None):
        log_cfg = config.get('logging', {}) if isinstance(config, dict) else {}
        self.logger = setup_batch_logger(log_cfg.get('file') if isinstance(log_cfg, dict) else None)

        self.batch_cfg = build_batch_config(config, root=root)
        self.region_cfg = build_region_config(config)
        self.layout_cfg = build_layout_config(config)
        self.render_cfg = build_render_config(config)
        self.output_cfg = build_output_config(config)

        self.images_dir = self.batch_cfg.images_dir
        self.text_dir = self.batch_cfg.text_dir
        self.result_dir = self.batch_cfg.result_dir
        self.batch_size = self.batch_cfg.batch_size

        self.surface = surface or RasterSurface()
        self.cache = ImageCache(self.batch_cfg.cache_max_bytes)
        self.text_cache: Dict[str, List[TextBlock]] = {}

        self.logger.debug("BatchProcessor initialized:")
        self.logger.debug(f"  - Images dir: {self.images_dir}")
        self.logger.debug(f"  - Text dir: {self.text_dir}")
        self.logger.debug(f"  - Result dir: {self.result_dir}")
        self.logger.debug(f"  - Batch size: {self.batch_size}")
        self.logger.debug(f"  - Output: {self.output_cfg.format}")

    def check_required_directories(self) -> None:
        """
        Create missing input/output folders and make sure there is work to do.
        Raises SetupError otherwise.
        """
        created = []
        for name, path in (('result', self.result_dir), ('images', self.images_dir), ('text', self.text_dir)):
            if path.is_dir():
                self.logger.info(f"Checking {name} directory... Found")
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise SetupError(f"Failed to create {name} directory {path}: {e}") from e
            created.append(name)
            self.logger.info(f"Checking {name} directory... Created")

        if created:
            self.logger.warning(f"Note: Please add required files to: {', '.join(created)}")

        missing = []
        if not has_files(self.images_dir, IMAGE_EXTENSIONS):
            missing.append("No images found in images directory or its subfolders")
        if not has_files(self.text_dir, WORKBOOK_EXTENSIONS):
            missing.append("No Excel files found in text directory or its subfolders")
        if missing:
            raise SetupError("; ".join(missing))

    def find_images(self) -> List[Path]:
        images = list(iter_files(self.images_dir, IMAGE_EXTENSIONS))
        self.logger.debug(f"Found {len(images)} images")
        return images

    def text_blocks_for(self, image_path: Path) -> List[TextBlock]:
        text_dir = text_dir_for_image(image_path, self.images_dir, self.text_dir)
        return read_text_blocks_cached(text_dir, self.text_cache)

    async def read_image(self, image_path: Path) -> bytes:
        data = self.cache.get(str(image_path))
        if data is None:
            data = await asyncio.to_thread(Path(image_path).read_bytes)
            self.cache.put(str(image_path), data)
        return data

    async def process_text_block(
        self,
        image_path: Path,
        image_bytes: bytes,
        block: TextBlock,
        index: int,
        regions: List[Region],
    ) -> bool:
        out_path = output_path_for(self.result_dir, image_path, self.images_dir, index, self.output_cfg.extension)
        try:
            result = insert_text_into_regions(
                image_bytes,
                block,
                regions,
                surface=self.surface,
                region_cfg=self.region_cfg,
                layout=self.layout_cfg,
                render=self.render_cfg,
            )
            await asyncio.sleep(0)
            encoded = self.surface.encode(result, self.output_cfg)
            await asyncio.to_thread(_write_bytes, out_path, encoded)
            return True
        except (InserterError, OSError) as e:
            self.logger.warning(f"Failed processing text {index + 1} for {image_path.name}: {e}")
            return False

    async def process_image(self, image_path: Path) -> bool:
        """Returns True if at least one text block was written for this image."""
        rel = image_path.relative_to(self.images_dir)
        try:
            blocks = self.text_blocks_for(image_path)
            if not blocks:
                self.logger.warning(f"No text files available for image: {rel}")
                return False

            image_bytes = await self.read_image(image_path)
            raster = self.surface.decode_to_grayscale_raw(image_bytes)
            regions = find_empty_regions(raster, config=self.region_cfg)
            await asyncio.sleep(0)

            results = await asyncio.gather(*[
                self.process_text_block(image_path, image_bytes, block, i, regions)
                for i, block in enumerate(blocks)
            ])
            return any(results)
        except Exception as e:
            self.logger.error(f"Failed to process {rel}: {e}")
            self.logger.debug(traceback.format_exc())
            return False

    async def run(self) -> dict:
        """
        Main batch processing loop.

        Returns:
            dict with processing statistics
        """
        self.check_required_directories()
        images = self.find_images()

        stats = {
            'total': len(images),
            'processed': 0,
            'failed': 0,
            'failed_images': [],
        }
        if not images:
            self.logger.warning("No images found in the images directory")
            return stats

        self.logger.info(f"Processing {len(images)} images (batch size: {self.batch_size})")
        progress = ProgressBar(len(images), "Progress")
        progress.update(0)

        completed = 0
        try:
            for start in range(0, len(images), self.batch_size):
                batch = images[start:start + self.batch_size]
                results = await asyncio.gather(*[self.process_image(p) for p in batch])
                for image_path, ok in zip(batch, results):
                    if ok:
                        stats['processed'] += 1
                    else:
                        stats['failed'] += 1
                        stats['failed_images'].append(str(image_path.relative_to(self.images_dir)))
                completed += len(batch)
                progress.update(completed)
        except Exception as e:
            raise BatchError(f"Batch processing aborted after {completed}/{len(images)} images: {e}") from e
        finally:
            self.cache.clear()

        progress.complete()

        pct = stats['processed'] / float(stats['total']) * 100.0
        self.logger.info(f"Complete: {stats['processed']}/{stats['total']} successful ({pct:.1f}%)")
        if stats['failed_images']:
            self.logger.info(f"  Failed images: {stats['failed_images']}")

        return stats

    def run_sync(self) -> dict:
        return asyncio.run(self.run())
