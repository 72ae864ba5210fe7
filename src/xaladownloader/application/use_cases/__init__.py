from .catalog_browse import CatalogBrowseUseCase
from .catalog_search import CatalogSearchUseCase
from .download import DownloadUseCase
from .playback_locate import PlaybackLocator

__all__ = [
    "CatalogBrowseUseCase",
    "CatalogSearchUseCase",
    "DownloadUseCase",
    "PlaybackLocator",
]
