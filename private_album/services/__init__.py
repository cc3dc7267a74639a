"""
Business logic services for private albums.
"""

from private_album.services.item_loader import ItemLoader
from private_album.services.manifest_store import ManifestStore
from private_album.services.upload_pipeline import UploadPipeline

__all__ = [
    "ItemLoader",
    "ManifestStore",
    "UploadPipeline",
]
