"""Crop and volume detection."""

from reencode.detection.detector import CropDetector, VolumeDetector
from reencode.detection.parsers import (
    CropMeasurement,
    CropSample,
    consolidate_crop,
    parse_crop_samples,
    parse_max_volume,
)
from reencode.detection.window import crop_detect_filter, crop_detect_window

__all__ = [
    "CropDetector",
    "CropMeasurement",
    "CropSample",
    "VolumeDetector",
    "consolidate_crop",
    "crop_detect_filter",
    "crop_detect_window",
    "parse_crop_samples",
    "parse_max_volume",
]
