"""mhook: fetch and publish build artifacts stored in the MUFL layout.

The MUFL ("mhook ultimate freshness layout")::

    s3://$bucket/$project/$branch/HEAD       <- id of the latest commit
    s3://$bucket/$project/$branch/latest/*   <- latest artifacts
    s3://$bucket/$project/$branch/$commit/*  <- artifacts at commit id

Downloads are skipped when the local file already matches the stored
object, land atomically, and stop at the first failed object.
"""

__version__ = "0.5.0"
__description__ = "Resolve, fetch and publish versioned build artifacts in S3"

from mhook.core.client import Mhook
from mhook.models.coordinates import ArtifactCoordinate

__all__ = ["Mhook", "ArtifactCoordinate", "__version__"]
