"""Upload a markdown note's local images and send it to Buttondown as a draft."""

from .models import PipelineResult, ResizeConfig, ResizeMode, RunStatus
from .pipeline import run_pipeline
from .resolver import AssetResolver, VaultAssetResolver
from .settings import Settings, load_settings, save_settings

__all__ = [
    "AssetResolver",
    "PipelineResult",
    "ResizeConfig",
    "ResizeMode",
    "RunStatus",
    "Settings",
    "VaultAssetResolver",
    "load_settings",
    "run_pipeline",
    "save_settings",
]
