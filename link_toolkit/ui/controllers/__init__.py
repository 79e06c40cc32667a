"""UI controllers package.

Controllers mediate between an injected presentation surface and the core
services.
"""

from .link_controller import LinkController  # noqa: F401

__all__: list[str] = ["LinkController"]
