"""
producify - build a deployable static site from a folder of HTML files
"""

from .builder import SiteBuilder, build
from .errors import (AssetNotFound, BuildError, FolderNotFound, IncludeCycleDetected,
                     IncludeNotFound, IOFailure, OptionError, OverwriteDeclined)
from .options import AssetKind, BuildOptions, BuildRequest, ExitState

__version__ = '1.0.0'
