from .data_loader import MongoDataLoader
from .preprocess import normalize_text, normalize_tag, normalize_tags, normalize_url

__all__ = ["MongoDataLoader", "normalize_text", "normalize_tag", "normalize_tags", "normalize_url"]
