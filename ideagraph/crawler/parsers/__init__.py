from .pin import convert_timestamp, parse_pin, raw_annotations

__all__ = ["convert_timestamp", "parse_pin", "raw_annotations"]
