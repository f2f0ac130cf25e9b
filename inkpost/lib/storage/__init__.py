"""Pluggable remote object stores for uploaded media."""

from inkpost.lib.storage.base import ObjectStore, UploadResult
from inkpost.lib.storage.local import LocalObjectStore
from inkpost.lib.storage.manager import create_object_store

__all__ = ["LocalObjectStore", "ObjectStore", "UploadResult", "create_object_store"]
