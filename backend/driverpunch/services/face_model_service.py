# Overview: Process-wide face-api.js model handle; loads the weight manifests once.

"""
Face Model Service

The browser loads three face-api.js networks from /models. This service
owns that directory: the first caller validates every manifest and its
weight shards, later callers reuse the cached result. A failed load is
not cached so the next request can retry.
"""

from __future__ import annotations

import json
import os
import threading

from flask import current_app

# face-api.js networks used for detect -> landmarks -> descriptor
REQUIRED_MODELS = (
    "tiny_face_detector_model",
    "face_landmark_68_model",
    "face_recognition_model",
)


class FaceModelError(Exception):
    """Raised when the model files are missing or unreadable."""
    pass


def manifest_name(model: str) -> str:
    return f"{model}-weights_manifest.json"


def _read_manifest(model_dir: str, model: str) -> list[str]:
    path = os.path.join(model_dir, manifest_name(model))
    try:
        with open(path, "r", encoding="utf-8") as fh:
            groups = json.load(fh)
    except FileNotFoundError:
        raise FaceModelError(f"Missing model manifest: {manifest_name(model)}")
    except (OSError, json.JSONDecodeError) as exc:
        raise FaceModelError(f"Unreadable model manifest {manifest_name(model)}: {exc}")

    if not isinstance(groups, list):
        raise FaceModelError(f"Malformed model manifest: {manifest_name(model)}")

    shards = []
    for group in groups:
        for shard in group.get("paths", []) if isinstance(group, dict) else []:
            if not os.path.isfile(os.path.join(model_dir, shard)):
                raise FaceModelError(f"Missing weight shard {shard} for {model}")
            shards.append(shard)
    return shards


class FaceModelRegistry:
    """Init-once handle. ensure_loaded() is idempotent and thread-safe."""

    def __init__(self):
        self._lock = threading.Lock()
        self._model_dir: str | None = None
        self._files: dict[str, list[str]] = {}

    @property
    def is_loaded(self) -> bool:
        return self._model_dir is not None

    @property
    def model_dir(self) -> str | None:
        return self._model_dir

    def ensure_loaded(self, model_dir: str) -> dict:
        if self._model_dir is None:
            with self._lock:
                if self._model_dir is None:
                    if not model_dir or not os.path.isdir(model_dir):
                        raise FaceModelError(f"Model directory not found: {model_dir}")
                    files = {model: _read_manifest(model_dir, model) for model in REQUIRED_MODELS}
                    self._files = files
                    self._model_dir = model_dir
        return self.status()

    def is_served_file(self, filename: str) -> bool:
        if not self.is_loaded:
            return False
        for model, shards in self._files.items():
            if filename == manifest_name(model) or filename in shards:
                return True
        return False

    def status(self) -> dict:
        return {
            "loaded": self.is_loaded,
            "models": sorted(self._files) if self.is_loaded else [],
        }


registry = FaceModelRegistry()


def configured_model_dir() -> str:
    return current_app.config.get("FACE_MODEL_DIR") or os.path.join(current_app.instance_path, "models")


def ensure_models_loaded() -> dict:
    """Load the app's face models on first use; log and re-raise failures."""
    try:
        return registry.ensure_loaded(configured_model_dir())
    except FaceModelError:
        current_app.logger.exception("Failed to load face recognition models")
        raise
