"""Object store factory."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING

from inkpost.lib.storage.local import LocalObjectStore

if TYPE_CHECKING:
    from inkpost.config import MediaConfig
    from inkpost.lib.storage.base import ObjectStore


def create_object_store(config: MediaConfig) -> ObjectStore:
    """Instantiate the object store named by ``config.backend``."""
    backend_type = config.backend

    if backend_type == "local":
        return LocalObjectStore(
            base_path=Path(config.local.path),
            public_base_url=config.local.public_base_url,
        )

    if backend_type == "cloudinary":
        from inkpost.lib.storage.cloudinary import CloudinaryObjectStore

        return CloudinaryObjectStore(config.cloudinary, timeout=config.timeout)

    # Dynamic import: "module:ClassName"
    if ":" in backend_type:
        parts = backend_type.split(":")
        if len(parts) != 2:
            raise ValueError(
                f"Invalid backend spec '{backend_type}': must contain exactly one colon"
            )
        module_path, class_name = parts
        module = importlib.import_module(module_path)
        cls = getattr(module, class_name)
        return cls(config)

    raise ValueError(
        f"Unknown media backend '{backend_type}'. "
        "Use 'cloudinary', 'local', or 'module:ClassName'."
    )
