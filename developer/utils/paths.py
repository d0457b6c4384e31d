"""Resolution of user-supplied paths."""

import os
from pathlib import Path
from typing import Callable, Optional

from developer.errors import InvalidPath
from developer.host import HostPlatform


class PathResolver:
    """Expands user paths and rejects anything that is not absolute."""

    def __init__(
        self,
        platform: Optional[HostPlatform] = None,
        cwd: Optional[Callable[[], str]] = None,
    ):
        """Initialize the resolver.

        Args:
            platform: Platform capabilities (detected when omitted)
            cwd: Callable returning the directory used for suggestions
        """
        self.platform = platform or HostPlatform.detect()
        self._cwd = cwd or os.getcwd

    def resolve(self, raw: str) -> Path:
        """Resolve a raw path string.

        Args:
            raw: Path as given by the caller

        Returns:
            The expanded absolute path (not checked for existence)

        Raises:
            InvalidPath: If the expanded path is not absolute
        """
        expanded = self.platform.expand_path(raw)

        if not self.platform.is_absolute(expanded):
            suggestion = self.platform.join(self._cwd(), expanded)
            raise InvalidPath(
                f"The path {raw} is not an absolute path, did you possibly mean {suggestion}?",
                {"path": raw, "suggestion": suggestion},
            )

        return Path(expanded)
