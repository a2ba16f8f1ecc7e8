"""
Model Allowlist

Accepted upstream models; anything else falls back to the first entry.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from claude2openai.common.errors import ConfigurationError
from claude2openai.config import Settings


class ModelAllowlist:
    """
    Immutable, ordered set of model identifiers.

    Built once at startup and shared by reference across requests.
    """

    __slots__ = ("_models",)

    def __init__(self, models: Iterable[str]):
        unique: list[str] = []
        for model in models:
            model = model.strip()
            if model and model not in unique:
                unique.append(model)
        if not unique:
            raise ConfigurationError("Model allowlist must contain at least one model")
        object.__setattr__(self, "_models", tuple(unique))

    def __setattr__(self, name, value):
        raise AttributeError("ModelAllowlist is immutable")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelAllowlist":
        return cls(settings.ALLOWED_MODELS.split(","))

    @property
    def models(self) -> tuple[str, ...]:
        return self._models

    @property
    def default(self) -> str:
        return self._models[0]

    def resolve(self, model: str | None) -> str:
        """Return the model if it is allowed, otherwise the default"""
        if model in self._models:
            return model
        return self.default

    def __contains__(self, model: object) -> bool:
        return model in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)
