"""Version information for prometheus-push.

Single source of truth for version number.
Follows PEP 440 and semantic versioning principles.
"""

__version__ = "0.5.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 0.5.0 - Async pusher, pydantic-settings configuration, strict grouping names
# 0.4.0 - Pluggable encoders and transports
# 0.1.0 - Initial release (blocking push with httpx)
